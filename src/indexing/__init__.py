"""Search index synchronization for CMS pages."""

from .page_repository import PageRepository, create_page_repository

__all__ = ["PageRepository", "create_page_repository"]
