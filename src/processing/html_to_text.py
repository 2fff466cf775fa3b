import html
import re

from bs4 import BeautifulSoup


BLOCK_TAGS = ["p", "div", "br", "li", "h1", "h2", "h3", "h4", "h5", "h6", "tr"]
DROPPED_TAGS = ["script", "style", "noscript", "template"]
MULTIPLE_SPACES = re.compile(r"[ \t\r\f\v]+")
MULTIPLE_NEWLINES = re.compile(r"\n\s*\n+")


class HtmlToTextFilter:
    """Converts rich HTML content to plain text before indexing."""

    def __init__(self, parser: str = "lxml"):
        self.parser = parser

    def convert(self, content: str | None) -> str:
        if not content:
            return ""

        soup = BeautifulSoup(content, self.parser)
        for element in soup(DROPPED_TAGS):
            element.decompose()
        hidden = soup.find_all(
            style=lambda s: s and "display:none" in s.replace(" ", "").lower()
        )
        for element in hidden:
            element.decompose()

        # Keep paragraph boundaries
        for element in soup.find_all(BLOCK_TAGS):
            element.insert_after("\n")

        text = html.unescape(soup.get_text())
        text = MULTIPLE_SPACES.sub(" ", text)
        text = MULTIPLE_NEWLINES.sub("\n\n", text)
        lines = [line.strip() for line in text.split("\n")]
        return "\n".join(lines).strip()
