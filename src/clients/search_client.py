"""Params-dict wrapper around the **Elasticsearch** Python client.

The repository speaks in ``{"id", "index", "type", "body"}`` mappings; this
module translates them to the keyword API of ``elasticsearch.Elasticsearch``.
An ``(index, type)`` pair is stored in its own physical index named
``"<index>-<type>"``.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Protocol

from elasticsearch import Elasticsearch

from utils.config import SearchSettings
from utils.logging_utils import setup_logging

logger = setup_logging(__name__)

ALL_FIELD = "_all"
BOOL_OCCURRENCES = ("must", "should", "must_not", "filter")


class IndicesAdmin(Protocol):
    def delete_mapping(self, params: Mapping[str, Any]) -> Any: ...


class SearchClient(Protocol):
    """What ``PageRepository`` needs from a search backend."""

    indices: IndicesAdmin

    def exists(self, params: Mapping[str, Any]) -> bool: ...

    def delete(self, params: Mapping[str, Any]) -> Any: ...

    def update(self, params: Mapping[str, Any]) -> Any: ...

    def create(self, params: Mapping[str, Any]) -> Any: ...

    def search(self, params: Mapping[str, Any]) -> Mapping[str, Any]: ...


def index_name(params: Mapping[str, Any]) -> str:
    return f"{params['index']}-{params['type']}"


def _body(response: Any) -> Any:
    # ObjectApiResponse -> plain dict
    return getattr(response, "body", response)


def translate_query(clause: Any) -> Any:
    """
    Rewrite legacy clauses into ones current Elasticsearch accepts.

    - ``terms`` drops ``minimum_should_match``; a single listed value has
      to match either way.
    - ``match`` on ``_all`` becomes a lenient ``multi_match`` over every field.
    """
    if isinstance(clause, list):
        return [translate_query(c) for c in clause]
    if not isinstance(clause, Mapping):
        return clause

    translated: dict[str, Any] = {}
    for kind, value in clause.items():
        if kind == "terms" and isinstance(value, Mapping):
            translated[kind] = {
                k: v for k, v in value.items() if k != "minimum_should_match"
            }
        elif kind == "match" and isinstance(value, Mapping) and ALL_FIELD in value:
            options = value[ALL_FIELD]
            if not isinstance(options, Mapping):
                options = {"query": options}
            translated["multi_match"] = {**options, "fields": ["*"], "lenient": True}
        elif kind == "bool" or kind in BOOL_OCCURRENCES:
            translated[kind] = translate_query(value)
        else:
            translated[kind] = value
    return translated


class ElasticsearchIndices:
    def __init__(self, es: Elasticsearch):
        self._es = es

    def delete_mapping(self, params: Mapping[str, Any]) -> Any:
        name = index_name(params)
        logger.info(f"Deleting index '{name}'")
        return _body(self._es.indices.delete(index=name, ignore_unavailable=True))


class ElasticsearchClient:
    """Synchronous search client; retries and timeouts are left to the transport."""

    def __init__(
        self,
        settings: SearchSettings | None = None,
        es: Elasticsearch | None = None,
    ) -> None:
        self.settings = settings or SearchSettings()
        if es is not None:
            self._es = es
        else:
            self._es = Elasticsearch(
                self.settings.host_list(),
                api_key=self.settings.api_key,
                request_timeout=self.settings.request_timeout,
                verify_certs=self.settings.verify_certs,
            )
        self.indices = ElasticsearchIndices(self._es)

    # ------------------------------ Documents ------------------------------
    def exists(self, params: Mapping[str, Any]) -> bool:
        return bool(self._es.exists(index=index_name(params), id=str(params["id"])))

    def delete(self, params: Mapping[str, Any]) -> Any:
        return _body(self._es.delete(index=index_name(params), id=str(params["id"])))

    def update(self, params: Mapping[str, Any]) -> Any:
        return _body(
            self._es.update(
                index=index_name(params),
                id=str(params["id"]),
                doc=self._source(params),
            )
        )

    def create(self, params: Mapping[str, Any]) -> Any:
        return _body(
            self._es.create(
                index=index_name(params),
                id=str(params["id"]),
                document=self._source(params),
            )
        )

    def _source(self, params: Mapping[str, Any]) -> dict[str, Any]:
        source = dict(params["body"]["doc"])
        timestamp = params.get("timestamp")
        if timestamp is not None:
            source[self.settings.timestamp_field] = timestamp
        return source

    # -------------------------------- Search --------------------------------
    def search(self, params: Mapping[str, Any]) -> Mapping[str, Any]:
        body = params.get("body") or {}
        return _body(
            self._es.search(
                index=index_name(params),
                query=translate_query(body.get("query")),
                from_=body.get("offset"),
                size=body.get("limit"),
            )
        )

    def close(self) -> None:
        self._es.close()

    def __enter__(self) -> ElasticsearchClient:
        return self

    def __exit__(self, *exc) -> None:
        self.close()
