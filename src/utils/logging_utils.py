import logging
import os

DEFAULT_LEVEL = os.getenv("CMS_SEARCH_LOG_LEVEL", "INFO").upper()


def setup_logging(name: str | None = None, level: int | str = DEFAULT_LEVEL) -> logging.Logger:
    """Set up basic logging and return a named logger."""
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    return logging.getLogger(name)
