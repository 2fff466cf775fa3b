from typing import Any

from models.page_models import Page
from processing.html_to_text import HtmlToTextFilter
from utils.logging_utils import setup_logging

logger = setup_logging(__name__)

SCALAR_TYPES = (str, int, float, bool)


class PageProcessor:
    """Flattens a CMS page into the field mapping stored in the index."""

    def __init__(self, html_to_text: HtmlToTextFilter | None = None):
        self.html_to_text = html_to_text or HtmlToTextFilter()

    def process_page(self, page: Page) -> dict[str, Any]:
        fields: dict[str, Any] = {}

        # Custom properties first so the core fields below always win
        for name, value in page.properties.items():
            if isinstance(value, SCALAR_TYPES):
                fields[name] = value
            elif isinstance(value, list) and all(
                isinstance(v, SCALAR_TYPES) for v in value
            ):
                fields[name] = list(value)
            else:
                logger.debug(f"Skipping nested property '{name}' of page {page.id}")

        fields.update(
            {
                "id": page.id,
                "path": page.path,
                "title": page.title or "",
                "content": self.html_to_text.convert(page.content),
                "published": page.published,
                "modification_date": page.modification_date,
            }
        )
        return fields
