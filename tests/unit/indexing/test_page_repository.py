import pytest

from errors.errors import ConfigurationError
from indexing.page_repository import PageRepository
from models.page_models import Page
from models.page_store import JsonPageStore
from models.queries import Match, Terms
from processing.html_to_text import HtmlToTextFilter
from processing.input_filter import SanitizingInputFilter


class FakeIndices:
    def __init__(self, calls):
        self.calls = calls

    def delete_mapping(self, params):
        self.calls.append(("delete_mapping", params))
        return {"acknowledged": True}


class FakeSearchClient:
    def __init__(self, existing=(), hits=None):
        self.existing = set(existing)
        self.hits = hits
        self.calls = []
        self.indices = FakeIndices(self.calls)

    def exists(self, params):
        self.calls.append(("exists", params))
        return params["id"] in self.existing

    def delete(self, params):
        self.calls.append(("delete", params))
        return {"result": "deleted"}

    def update(self, params):
        self.calls.append(("update", params))
        return {"result": "updated"}

    def create(self, params):
        self.calls.append(("create", params))
        return {"result": "created"}

    def search(self, params):
        self.calls.append(("search", params))
        if self.hits is None:
            return {"hits": {"hits": []}}
        return {"hits": {"hits": [{"_id": str(h)} for h in self.hits]}}

    def names(self):
        return [name for name, _ in self.calls]


class FakeProcessor:
    def process_page(self, page):
        return {"title": page.title, "content": "plain"}


class ExplodingCollaborator:
    def __getattr__(self, name):
        raise AssertionError(f"collaborator used: {name}")


CONFIG = {"index": "cms", "type": "page"}


@pytest.fixture
def page():
    return Page(id=7, title="News", content="<p>Hi</p>", modification_date=1700000000)


@pytest.fixture
def store(page):
    return JsonPageStore([page, Page(id=9, title="Other", modification_date=1)])


def make_repository(client, store, config=CONFIG):
    return PageRepository(
        config,
        client,
        HtmlToTextFilter(),
        FakeProcessor(),
        SanitizingInputFilter(lowercase=True),
        store,
    )


@pytest.mark.parametrize("missing", ["index", "type"])
def test_missing_configuration_key_fails_before_collaborators(missing):
    config = {k: v for k, v in CONFIG.items() if k != missing}
    spy = ExplodingCollaborator()

    with pytest.raises(ConfigurationError) as exc_info:
        PageRepository(config, spy, spy, spy, spy, spy)

    assert exc_info.value.key == missing
    assert str(missing) in exc_info.value.message


def test_none_configuration_value_counts_as_missing():
    with pytest.raises(ConfigurationError):
        make_repository(FakeSearchClient(), JsonPageStore(), {"index": "cms", "type": None})


def test_exists_sends_location(store, page):
    client = FakeSearchClient(existing={7})
    repository = make_repository(client, store)

    assert repository.exists(page) is True
    assert client.calls == [("exists", {"id": 7, "index": "cms", "type": "page"})]


def test_delete_skips_missing_document(store, page):
    client = FakeSearchClient()
    repository = make_repository(client, store)

    assert repository.delete(page) is False
    assert client.names() == ["exists"]


def test_delete_existing_document_returns_raw_response(store, page):
    client = FakeSearchClient(existing={7})
    repository = make_repository(client, store)

    assert repository.delete(page) == {"result": "deleted"}
    assert client.calls[-1] == ("delete", {"id": 7, "index": "cms", "type": "page"})


def test_save_creates_when_absent(store, page):
    client = FakeSearchClient()
    repository = make_repository(client, store)

    repository.save(page)

    assert client.names() == ["exists", "create"]
    assert client.calls[-1][1] == {
        "id": 7,
        "body": {"doc": {"title": "News", "content": "plain"}},
        "index": "cms",
        "type": "page",
        "timestamp": 1700000000,
    }


def test_save_updates_when_present(store, page):
    client = FakeSearchClient(existing={7})
    repository = make_repository(client, store)

    repository.save(page)

    assert client.names() == ["exists", "update"]
    assert client.calls[-1][1]["body"] == {"doc": {"title": "News", "content": "plain"}}


def test_clear_deletes_only_configured_mapping(store):
    client = FakeSearchClient()
    repository = make_repository(client, store)

    assert repository.clear() is None
    assert client.calls == [("delete_mapping", {"index": "cms", "type": "page"})]


def test_find_by_empty_criteria_body(store):
    client = FakeSearchClient()
    repository = make_repository(client, store)

    assert repository.find_by([], [], [], None, None) == []
    assert client.calls == [
        (
            "search",
            {
                "index": "cms",
                "type": "page",
                "body": {"query": {"bool": {"must": [], "should": [], "must_not": []}}},
            },
        )
    ]


def test_find_by_adds_offset_and_limit(store):
    client = FakeSearchClient()
    repository = make_repository(client, store)

    repository.find_by(offset=20, limit=10)

    body = client.calls[0][1]["body"]
    assert body["offset"] == 20
    assert body["limit"] == 10
    assert set(body) == {"query", "offset", "limit"}


def test_find_by_keeps_zero_offset(store):
    client = FakeSearchClient()
    repository = make_repository(client, store)

    repository.find_by(offset=0)

    body = client.calls[0][1]["body"]
    assert body["offset"] == 0
    assert "limit" not in body


def test_find_by_drops_unresolvable_hits_and_keeps_order(store):
    client = FakeSearchClient(hits=[9, 404, "not-a-number", 7])
    repository = make_repository(client, store)

    pages = repository.find_by()

    assert [p.id for p in pages] == [9, 7]


def test_find_by_without_hits_section_returns_empty(store):
    client = FakeSearchClient()
    client.search = lambda params: {"timed_out": False}
    repository = make_repository(client, store)

    assert repository.find_by() == []


def test_find_by_renders_query_objects(store):
    client = FakeSearchClient()
    repository = make_repository(client, store)

    repository.find_by(
        must=[Match("hello")], must_not=[{"term": {"published": False}}]
    )

    bool_query = client.calls[0][1]["body"]["query"]["bool"]
    assert bool_query["must"] == [{"match": {"_all": {"query": "hello"}}}]
    assert bool_query["must_not"] == [{"term": {"published": False}}]


def test_query_builds_match_and_sanitized_terms(store):
    client = FakeSearchClient()
    repository = make_repository(client, store)

    repository.query("hello", {"category": " <b>News</b> "})

    body = client.calls[0][1]["body"]
    assert body["query"]["bool"]["must"] == [
        {"match": {"_all": {"query": "hello"}}},
        {"terms": {"category": ["news"], "minimum_should_match": 1}},
    ]
    assert body["query"]["bool"]["should"] == []
    assert body["query"]["bool"]["must_not"] == []
    assert "offset" not in body and "limit" not in body


def test_query_without_text_omits_match(store):
    client = FakeSearchClient()
    repository = make_repository(client, store)

    repository.query("", {"category": "news"}, 5, 10)

    body = client.calls[0][1]["body"]
    assert body["query"]["bool"]["must"] == [
        {"terms": {"category": ["news"], "minimum_should_match": 1}}
    ]
    assert body["offset"] == 5
    assert body["limit"] == 10


def test_query_uses_configured_aggregate_field(store):
    client = FakeSearchClient(hits=[7])
    repository = make_repository(
        client, store, {**CONFIG, "aggregate_field": "search_text"}
    )

    pages = repository.query("hello")

    assert [p.id for p in pages] == [7]
    assert client.calls[0][1]["body"]["query"]["bool"]["must"] == [
        {"match": {"search_text": {"query": "hello"}}}
    ]


def test_query_each_filter_is_its_own_clause(store):
    client = FakeSearchClient()
    repository = make_repository(client, store)

    repository.query(None, {"category": "news", "lang": "EN"})

    must = client.calls[0][1]["body"]["query"]["bool"]["must"]
    assert must == [
        Terms("category", ["news"]).to_dict(),
        Terms("lang", ["en"]).to_dict(),
    ]
