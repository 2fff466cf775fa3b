from contextlib import contextmanager

import pytest

from indexing import cli
from models.page_models import Page
from models.page_store import JsonPageStore


class RecordingRepository:
    def __init__(self, exists=False):
        self.calls = []
        self._exists = exists

    def save(self, page):
        self.calls.append(("save", page.id))

    def delete(self, page):
        self.calls.append(("delete", page.id))
        return {"result": "deleted"} if self._exists else False

    def exists(self, page):
        self.calls.append(("exists", page.id))
        return self._exists

    def clear(self):
        self.calls.append(("clear", None))

    def query(self, text, filters, offset, limit):
        self.calls.append(("query", (text, filters, offset, limit)))
        return [Page(id=1, title="Home", modification_date=1)]


@pytest.fixture
def repository(monkeypatch):
    repo = RecordingRepository()
    store = JsonPageStore(
        [Page(id=1, modification_date=1), Page(id=2, modification_date=2)]
    )

    @contextmanager
    def _open(settings=None):
        yield repo, store

    monkeypatch.setattr(cli, "open_repository", _open)
    monkeypatch.setattr(cli, "load_env_file", lambda: None)
    return repo


def test_sync_saves_every_page(repository):
    cli.main(["sync"])

    assert repository.calls == [("save", 1), ("save", 2)]


def test_delete_page(repository):
    cli.main(["delete", "2"])

    assert repository.calls == [("delete", 2)]


def test_unknown_page_exits_with_error(repository):
    with pytest.raises(SystemExit) as exc_info:
        cli.main(["save", "99"])

    assert exc_info.value.code == 1
    assert repository.calls == []


def test_exists_prints_status(repository, capsys):
    cli.main(["exists", "1"])

    assert "Page 1 indexed: no" in capsys.readouterr().out


def test_search_passes_filters_and_paging(repository, capsys):
    cli.main(["search", "hello", "-f", "category=news", "--offset", "5", "-k", "3"])

    assert repository.calls == [("query", ("hello", {"category": "news"}, 5, 3))]
    assert "[1] Home" in capsys.readouterr().out


def test_search_rejects_malformed_filter(repository):
    with pytest.raises(SystemExit):
        cli.main(["search", "hello", "-f", "category"])

    assert repository.calls == []


def test_clear_requires_confirmation(repository, capsys):
    cli.clear_index(prompt=lambda message: "n")

    assert repository.calls == []
    assert "cancelled" in capsys.readouterr().out


def test_clear_with_yes_flag(repository):
    cli.main(["clear", "--yes"])

    assert repository.calls == [("clear", None)]


def test_no_command_prints_help():
    with pytest.raises(SystemExit) as exc_info:
        cli.main([])

    assert exc_info.value.code == 1


def test_parse_filters():
    assert cli.parse_filters(["a=1", "b = x=y"]) == {"a": "1", "b": " x=y"}
    assert cli.parse_filters(None) == {}
