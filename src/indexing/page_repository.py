"""Keeps CMS pages in sync with the search index and queries it."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from clients.search_client import ElasticsearchClient, SearchClient
from errors.errors import ConfigurationError
from models.page_models import Document, PageLookup
from models.page_store import JsonPageStore
from models.queries import Match, Query, Terms, to_clause
from processing.html_to_text import HtmlToTextFilter
from processing.input_filter import InputFilter, SanitizingInputFilter
from processing.page_processor import PageProcessor
from utils.config import SearchSettings
from utils.logging_utils import setup_logging

logger = setup_logging(__name__)

Clause = Query | Mapping[str, Any]

REQUIRED_KEYS = ("index", "type")


def check_configuration(configuration: Mapping[str, Any]) -> None:
    for key in REQUIRED_KEYS:
        if configuration.get(key) is None:
            raise ConfigurationError(key)


class PageRepository:
    """
    Translates page lifecycle events and search requests into search client
    calls, and search hits back into pages.

    ``save`` and ``delete`` check existence before writing. The check and the
    write are two separate requests, so a concurrent change in between can make
    ``save`` create where it meant to update (or the reverse).
    """

    def __init__(
        self,
        configuration: Mapping[str, Any],
        client: SearchClient,
        html_to_text_filter: HtmlToTextFilter,
        processor: PageProcessor,
        input_filter: InputFilter,
        lookup: PageLookup,
    ):
        """
        Initialize the repository.

        Args:
            configuration: Mapping with required ``index`` and ``type`` keys and
                an optional ``aggregate_field`` for full-text queries
            client: Search client used for every remote call
            html_to_text_filter: Rich content to plain text converter
            processor: Page to field mapping processor
            input_filter: Sanitizer applied to filter terms
            lookup: Resolves hit ids back into pages

        Raises:
            ConfigurationError: If ``index`` or ``type`` is missing
        """
        check_configuration(configuration)

        self.index = str(configuration["index"])
        self.type = str(configuration["type"])
        self.aggregate_field = str(configuration.get("aggregate_field") or "_all")
        self.client = client
        self.html_to_text_filter = html_to_text_filter
        self.processor = processor
        self.input_filter = input_filter
        self.lookup = lookup

    def _location(self, document: Document) -> dict[str, Any]:
        return {"id": document.id, "index": self.index, "type": self.type}

    def exists(self, document: Document) -> bool:
        logger.debug(f"Checking page {document.id} in {self.index}/{self.type}")
        return bool(self.client.exists(self._location(document)))

    def delete(self, document: Document) -> Any:
        """Delete a page from the index; returns False if it was not indexed."""
        params = self._location(document)

        if not self.exists(document):
            return False

        logger.debug(f"Deleting page {document.id} from {self.index}/{self.type}")
        return self.client.delete(params)

    def clear(self) -> None:
        """Clears all entries from this index/type."""
        logger.info(f"Clearing {self.index}/{self.type}")
        self.client.indices.delete_mapping({"index": self.index, "type": self.type})

    def save(self, document: Document) -> None:
        params = self.page_to_params(document)

        if self.exists(document):
            logger.debug(f"Updating page {document.id}")
            self.client.update(params)
        else:
            logger.debug(f"Creating page {document.id}")
            self.client.create(params)

    def find_by(
        self,
        must: Sequence[Clause] | None = None,
        should: Sequence[Clause] | None = None,
        must_not: Sequence[Clause] | None = None,
        offset: int | None = None,
        limit: int | None = None,
    ) -> list[Document]:
        """
        Executes a "bool" query.

        Args:
            must: Clauses that all have to match
            should: Clauses that add to the score
            must_not: Clauses that must not match
            offset: Number of hits to skip, omitted when None
            limit: Maximum number of hits, omitted when None

        Returns:
            Pages resolved from the hits, in hit order. Hits that no longer
            resolve to a page are dropped.
        """
        body: dict[str, Any] = {
            "query": {
                "bool": {
                    "must": [to_clause(c) for c in must or []],
                    "should": [to_clause(c) for c in should or []],
                    "must_not": [to_clause(c) for c in must_not or []],
                }
            }
        }
        if offset is not None:
            body["offset"] = offset
        if limit is not None:
            body["limit"] = limit

        result = self.client.search(
            {"index": self.index, "type": self.type, "body": body}
        )

        hits = (result or {}).get("hits") or {}
        if "hits" not in hits:
            return []

        documents: list[Document] = []
        dropped: list[Any] = []
        for hit in hits["hits"]:
            document = self._resolve(hit.get("_id"))
            if document is None:
                dropped.append(hit.get("_id"))
            else:
                documents.append(document)

        if dropped:
            logger.debug(f"Dropped {len(dropped)} unresolvable hits: {dropped}")
        return documents

    def _resolve(self, hit_id: Any) -> Document | None:
        try:
            page_id = int(hit_id)
        except (TypeError, ValueError):
            return None
        return self.lookup.get_by_id(page_id)

    def query(
        self,
        text: str | None,
        filters: Mapping[str, Any] | None = None,
        offset: int | None = None,
        limit: int | None = None,
    ) -> list[Document]:
        """
        Finds pages by text.

        Every filter becomes its own required ``terms`` clause on the
        sanitized value.
        """
        must: list[Clause] = []

        if text:
            must.append(Match(str(text), field=self.aggregate_field))

        for name, term in (filters or {}).items():
            must.append(
                Terms(name, [self.input_filter.filter(term)], minimum_should_match=1)
            )

        return self.find_by(must, [], [], offset, limit)

    def page_to_params(self, document: Document) -> dict[str, Any]:
        return {
            "id": document.id,
            "body": {"doc": self.processor.process_page(document)},
            "index": self.index,
            "type": self.type,
            "timestamp": document.modification_date,
        }


def create_page_repository(
    settings: SearchSettings | None = None,
    client: SearchClient | None = None,
    lookup: PageLookup | None = None,
) -> PageRepository:
    """
    Factory function to create a PageRepository with default collaborators.

    Args:
        settings: Optional search settings
        client: Optional search client; an ElasticsearchClient otherwise
        lookup: Optional page lookup; the JSON page store otherwise

    Returns:
        Configured PageRepository instance
    """
    settings = settings or SearchSettings()
    configuration = settings.repository_config()
    check_configuration(configuration)

    if lookup is None:
        lookup = JsonPageStore.from_file(settings.pages_file)
    if client is None:
        client = ElasticsearchClient(settings)
    html_to_text = HtmlToTextFilter()
    return PageRepository(
        configuration,
        client,
        html_to_text,
        PageProcessor(html_to_text),
        SanitizingInputFilter(),
        lookup,
    )
