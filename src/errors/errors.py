class CMSSearchError(Exception):
    """
    Base class for all errors raised by this project.

    Attributes
    ----------
    message  : str
        Human-readable explanation.
    index    : str | None
        Index name involved, if known.
    doc_type : str | None
        Type name involved, if known.
    """

    def __init__(
        self,
        message: str,
        *,
        index: str | None = None,
        doc_type: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.index = index
        self.doc_type = doc_type

    # Nice string representation for logging
    def __str__(self) -> str:  # pragma: no cover
        parts: list[str] = [self.message]
        if self.index:
            parts.append(f"index={self.index}")
        if self.doc_type:
            parts.append(f"type={self.doc_type}")
        return " | ".join(parts)


# -------------------------------------------------------------------------
# Concrete error classes
# -------------------------------------------------------------------------
class ConfigurationError(CMSSearchError):
    """A required configuration setting is missing."""

    def __init__(self, key: str) -> None:
        super().__init__(f"Missing configuration setting: {key}")
        self.key = key


class PageNotFoundError(CMSSearchError):
    """A page id could not be resolved by the page store."""

    def __init__(self, page_id: int) -> None:
        super().__init__(f"Page not found: {page_id}")
        self.page_id = page_id
