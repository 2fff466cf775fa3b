"""CLI tool for keeping the page index in sync."""

import argparse
import sys
from collections.abc import Callable, Iterator
from contextlib import contextmanager

from errors.errors import PageNotFoundError
from indexing.page_repository import PageRepository, create_page_repository
from models.page_models import Page
from models.page_store import JsonPageStore
from utils.config import SearchSettings, load_env_file
from utils.logging_utils import setup_logging

logger = setup_logging(__name__)


@contextmanager
def open_repository(
    settings: SearchSettings | None = None,
) -> Iterator[tuple[PageRepository, JsonPageStore]]:
    repository = create_page_repository(settings or SearchSettings())
    try:
        yield repository, repository.lookup
    finally:
        repository.client.close()


def _get_page(store: JsonPageStore, page_id: int) -> Page:
    page = store.get_by_id(page_id)
    if page is None:
        raise PageNotFoundError(page_id)
    return page


def sync_pages():
    """Save every page from the page store."""
    with open_repository() as (repository, store):
        pages = store.all()
        logger.info(f"Syncing {len(pages)} pages...")
        for page in pages:
            repository.save(page)
        logger.info(f"✅ Synced {len(pages)} pages")


def save_page(page_id: int):
    with open_repository() as (repository, store):
        repository.save(_get_page(store, page_id))
        logger.info(f"✅ Saved page {page_id}")


def delete_page(page_id: int):
    with open_repository() as (repository, store):
        if repository.delete(_get_page(store, page_id)) is False:
            logger.info(f"Page {page_id} is not indexed; nothing to delete")
        else:
            logger.info(f"✅ Deleted page {page_id}")


def page_exists(page_id: int):
    with open_repository() as (repository, store):
        found = repository.exists(_get_page(store, page_id))
        print(f"Page {page_id} indexed: {'yes' if found else 'no'}")


def parse_filters(values: list[str] | None) -> dict[str, str]:
    """Parse ``name=value`` pairs."""
    filters: dict[str, str] = {}
    for item in values or []:
        name, sep, value = item.partition("=")
        if not sep or not name:
            raise ValueError(f"Invalid filter '{item}', expected name=value")
        filters[name.strip()] = value
    return filters


def search_pages(
    text: str | None,
    filters: dict[str, str],
    offset: int | None = None,
    limit: int | None = None,
):
    logger.info(f"Searching for: {text!r} filters={filters}")
    with open_repository() as (repository, _):
        pages = repository.query(text, filters, offset, limit)

    print(f"\n🔍 Search Results ({len(pages)} found):")
    for i, page in enumerate(pages, 1):
        print(f"{i:>3}. [{page.id}] {page.title or 'N/A'} ({page.path})")


def clear_index(assume_yes: bool = False, prompt: Callable[[str], str] = input):
    """Delete every page of the configured index/type."""
    if not assume_yes:
        confirmation = prompt(
            "⚠️  This will delete all pages from the search index. Continue? (y/N): "
        )
        if confirmation.lower() != "y":
            print("Operation cancelled.")
            return

    with open_repository() as (repository, _):
        repository.clear()
    logger.info("✅ Search index cleared")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="CMS page search index CLI")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("sync", help="Save every page from the page store")

    for name, help_text in (
        ("save", "Index or re-index a single page"),
        ("delete", "Remove a single page from the index"),
        ("exists", "Check whether a page is indexed"),
    ):
        command_parser = subparsers.add_parser(name, help=help_text)
        command_parser.add_argument("page_id", type=int, help="Page id")

    search_parser = subparsers.add_parser("search", help="Search indexed pages")
    search_parser.add_argument("text", nargs="?", default="", help="Full-text query")
    search_parser.add_argument(
        "--filter",
        "-f",
        action="append",
        dest="filters",
        metavar="NAME=VALUE",
        help="Required term filter (repeatable)",
    )
    search_parser.add_argument("--offset", type=int, default=None)
    search_parser.add_argument("--limit", "-k", type=int, default=None)

    clear_parser = subparsers.add_parser("clear", help="Clear the search index")
    clear_parser.add_argument(
        "--yes", "-y", action="store_true", help="Do not ask for confirmation"
    )
    return parser


def main(argv: list[str] | None = None):
    load_env_file()
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    try:
        if args.command == "sync":
            sync_pages()
        elif args.command == "save":
            save_page(args.page_id)
        elif args.command == "delete":
            delete_page(args.page_id)
        elif args.command == "exists":
            page_exists(args.page_id)
        elif args.command == "search":
            search_pages(
                args.text, parse_filters(args.filters), args.offset, args.limit
            )
        elif args.command == "clear":
            clear_index(args.yes)
    except Exception as e:
        logger.error(f"Error: {str(e)}")
        sys.exit(1)


if __name__ == "__main__":
    main()
