"""Query value objects for the Elasticsearch query DSL.

Each query kind is a tagged ``msgspec.Struct`` variant; the tag is fixed per
class and doubles as the query-type discriminator.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import msgspec


class Query(msgspec.Struct):
    """Abstract base for the query variants; only subclasses are instantiated."""

    def __post_init__(self):
        if type(self) is Query:
            raise TypeError("Query is abstract; use Filter, Bool, Match or Terms")

    @property
    def query_type(self) -> str:
        return type(self).__struct_config__.tag

    def to_dict(self) -> dict[str, Any]:
        raise NotImplementedError


class Filter(Query, tag="filter"):
    """Encapsulates "filter" data: an optional inner query."""

    query: Query | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"filter": self.query.to_dict() if self.query is not None else {}}


class Bool(Query, tag="bool"):
    must: list[Any] = msgspec.field(default_factory=list)
    should: list[Any] = msgspec.field(default_factory=list)
    must_not: list[Any] = msgspec.field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "bool": {
                "must": [to_clause(c) for c in self.must],
                "should": [to_clause(c) for c in self.should],
                "must_not": [to_clause(c) for c in self.must_not],
            }
        }


class Match(Query, tag="match"):
    """Full-text match against a single (usually aggregate) field."""

    query: str
    field: str = "_all"

    def to_dict(self) -> dict[str, Any]:
        return {"match": {self.field: {"query": self.query}}}


class Terms(Query, tag="terms"):
    field: str
    values: list[Any]
    minimum_should_match: int = 1

    def to_dict(self) -> dict[str, Any]:
        return {
            "terms": {
                self.field: list(self.values),
                "minimum_should_match": self.minimum_should_match,
            }
        }


def to_clause(clause: Query | Mapping[str, Any]) -> dict[str, Any]:
    """Render a query variant; plain mappings pass through as dicts."""
    if isinstance(clause, Query):
        return clause.to_dict()
    return dict(clause)
