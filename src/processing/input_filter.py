import html
import re
from typing import Any, Protocol

TAG_RE = re.compile(r"<[^>]+>")
WHITESPACE_RE = re.compile(r"\s+")


class InputFilter(Protocol):
    def filter(self, value: Any) -> str: ...


class SanitizingInputFilter:
    """
    Normalizes a term value before it is embedded in a query.

    Steps:
    1. Stringify non-string values
    2. Unescape HTML entities (&amp; -> &)
    3. Strip HTML tags
    4. Collapse whitespace and trim
    5. Optionally lowercase
    """

    def __init__(self, lowercase: bool = False):
        self.lowercase = lowercase

    def filter(self, value: Any) -> str:
        if value is None:
            return ""
        text = value if isinstance(value, str) else str(value)
        text = html.unescape(text)
        text = TAG_RE.sub("", text)
        text = WHITESPACE_RE.sub(" ", text).strip()
        return text.lower() if self.lowercase else text
