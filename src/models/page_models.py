from typing import Any, Protocol, runtime_checkable

from pydantic import BaseModel, Field


@runtime_checkable
class Document(Protocol):
    """What the repository reads from a CMS document."""

    id: int
    modification_date: int


class PageLookup(Protocol):
    def get_by_id(self, page_id: int) -> Document | None: ...


class Page(BaseModel):
    """A CMS page document."""

    id: int
    path: str = "/"
    title: str | None = None
    content: str = ""  # rich HTML content
    published: bool = True
    modification_date: int = Field(description="Unix timestamp of the last change")
    properties: dict[str, Any] = Field(default_factory=dict)
