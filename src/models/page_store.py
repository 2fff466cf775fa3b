"""File-backed page store.

Loads CMS pages exported as JSON and serves them by id. Supported layouts:
  - Direct list of pages: [{...}, {...}, ...]
  - Wrapped in 'pages' key: {"pages": [...]}
  - Wrapped in 'documents' key: {"documents": [...]}
"""

import json
from pathlib import Path
from typing import Any

from models.page_models import Page
from utils.logging_utils import setup_logging

logger = setup_logging(__name__)


class JsonPageStore:
    def __init__(self, pages: list[Page] | None = None):
        self._pages: dict[int, Page] = {p.id: p for p in pages or []}

    @classmethod
    def from_file(cls, path: str | Path) -> "JsonPageStore":
        """
        Load pages from a JSON file.

        Raises:
            FileNotFoundError: If file does not exist
            json.JSONDecodeError: If file is not valid JSON
            pydantic.ValidationError: If a page entry is malformed
        """
        path = Path(path)
        with path.open("r", encoding="utf-8") as f:
            data: Any = json.load(f)
        if not isinstance(data, list):
            # fall back if wrapped
            data = data.get("pages") or data.get("documents") or []
        pages = [Page.model_validate(item) for item in data]
        logger.info(f"Loaded {len(pages)} pages from {path}")
        return cls(pages)

    def get_by_id(self, page_id: int) -> Page | None:
        return self._pages.get(page_id)

    def all(self) -> list[Page]:
        return list(self._pages.values())

    def __len__(self) -> int:
        return len(self._pages)
