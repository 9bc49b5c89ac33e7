import json

from snippet_organizer.snippet.model import Snippet
from snippet_organizer.storage.kv import InMemoryKeyValueStore, RedisKeyValueStore, create_store
from snippet_organizer.storage.preferences import Preferences, SessionCache
from snippet_organizer.storage.snippet_store import SNIPPETS_KEY, SnippetStore


class _StubRedis:
    def __init__(self):
        self.data = {}
        self.set_calls = []

    def get(self, key):
        value = self.data.get(key)
        return value.encode("utf-8") if value is not None else None

    def set(self, key, value, **kwargs):
        self.set_calls.append(key)
        self.data[key] = value
        return True

    def delete(self, key):
        self.data.pop(key, None)

    def scan_iter(self, match=None):
        prefix = match.rstrip("*") if match else ""
        for key in list(self.data):
            if key.startswith(prefix):
                yield key.encode("utf-8")


def _record(snippet_id="1", **overrides):
    record = {
        "id": snippet_id,
        "title": "Hi",
        "description": "",
        "language": "python",
        "tags": ["demo"],
        "code": "print(1)",
        "isFavorite": False,
        "createdAt": "2024-03-01T10:00:00.000Z",
        "updatedAt": "2024-03-01T10:00:00.000Z",
        "deletedAt": None,
        "versions": [],
    }
    record.update(overrides)
    return record


def test_load_returns_empty_list_when_nothing_stored():
    assert SnippetStore(InMemoryKeyValueStore()).load() == []


def test_load_degrades_to_empty_on_unparsable_content():
    for raw in ("{broken", json.dumps({"not": "a list"}), json.dumps([{"title": "no id"}])):
        store = SnippetStore(InMemoryKeyValueStore({SNIPPETS_KEY: raw}))
        assert store.load() == []


def test_load_parses_original_record_format():
    raw = json.dumps(
        [
            _record(
                versions=[
                    {
                        "title": "Old",
                        "description": "",
                        "language": "python",
                        "tags": [],
                        "code": "print(0)",
                        "savedAt": "2024-02-01T09:00:00.000Z",
                    }
                ]
            )
        ]
    )

    snippets = SnippetStore(InMemoryKeyValueStore({SNIPPETS_KEY: raw})).load()

    assert len(snippets) == 1
    snippet = snippets[0]
    assert isinstance(snippet, Snippet)
    assert snippet.created_at.year == 2024
    assert snippet.versions[0].code == "print(0)"
    assert snippet.to_record()["createdAt"] == "2024-03-01T10:00:00.000Z"


def test_save_writes_whole_collection_in_one_set():
    redis_client = _StubRedis()
    kv = RedisKeyValueStore(redis_client, namespace="test:")
    store = SnippetStore(kv)
    snippets = [Snippet.model_validate(_record("1")), Snippet.model_validate(_record("2"))]

    assert store.save(snippets) is True

    assert redis_client.set_calls == ["test:snippets"]
    assert [s.id for s in store.load()] == ["1", "2"]


def test_redis_store_strips_namespace_from_keys():
    kv = RedisKeyValueStore(_StubRedis(), namespace="ns:")
    kv.set("snippet-draft-new", "{}")
    kv.set("snippet-draft-42", "{}")
    kv.set("token", "abc")

    assert kv.keys("snippet-draft-") == ["snippet-draft-42", "snippet-draft-new"]
    assert kv.get("token") == "abc"
    kv.delete("token")
    assert kv.get("token") is None


def test_create_store_selects_memory_backend():
    assert isinstance(create_store("memory://"), InMemoryKeyValueStore)
    assert isinstance(create_store(None), InMemoryKeyValueStore)


def test_preferences_persist_dark_mode_as_text():
    kv = InMemoryKeyValueStore()
    preferences = Preferences(kv)

    assert preferences.dark_mode is False
    assert preferences.toggle_dark_mode() is True
    assert kv.get("darkMode") == "true"


def test_session_cache_round_trip_and_clear():
    kv = InMemoryKeyValueStore()
    sessions = SessionCache(kv)

    sessions.remember("tok", "alice")
    assert sessions.get().username == "alice"
    assert kv.get("token") == "tok"

    sessions.clear()
    assert sessions.get() is None
    assert sessions.username is None
