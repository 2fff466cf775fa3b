import os
from pathlib import Path
from typing import Any

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings

from utils.logging_utils import setup_logging

logger = setup_logging(__name__)

REQUIRED_ENV_VARS = (
    "SEARCH_INDEX",
    "SEARCH_TYPE",
)


def load_env_file() -> None:
    if not all(var in os.environ for var in REQUIRED_ENV_VARS):
        env_path = Path(__file__).resolve().parents[2] / ".env"
        logger.debug(f"Loading environment variables from {env_path}")
        if env_path.exists():
            load_dotenv(env_path)

        missing = [var for var in REQUIRED_ENV_VARS if var not in os.environ]
        if missing:
            logger.warning(
                "The following required environment variables are still missing: "
                + ", ".join(missing)
            )
    else:
        logger.debug("All required environment variables are already present.")


class SearchSettings(BaseSettings):
    """Settings for the Elasticsearch connection and the page index."""

    # Connection settings
    hosts: str = Field(
        "http://localhost:9200", description="Comma-separated Elasticsearch hosts"
    )
    api_key: str | None = Field(default=None, description="Elasticsearch API key")
    request_timeout: int = Field(10, description="Request timeout in seconds")
    verify_certs: bool = Field(True, description="Verify TLS certificates")

    # Index location; left unset so the repository reports what is missing
    index: str | None = Field(default=None, description="Index name")
    type: str | None = Field(default=None, description="Type name within the index")

    # Query and write settings
    aggregate_field: str = Field(
        "_all", description="Field used for full-text matching"
    )
    timestamp_field: str = Field(
        "timestamp", description="Source field receiving the modification timestamp"
    )

    # CLI page store
    pages_file: str = Field("data/pages.json", description="JSON file with CMS pages")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "env_prefix": "SEARCH_",
        "extra": "ignore",
    }

    def host_list(self) -> list[str]:
        return [h.strip() for h in self.hosts.split(",") if h.strip()]

    def repository_config(self) -> dict[str, Any]:
        """Configuration mapping for ``PageRepository``; unset keys are omitted."""
        config = {
            "index": self.index,
            "type": self.type,
            "aggregate_field": self.aggregate_field,
        }
        return {k: v for k, v in config.items() if v is not None}
