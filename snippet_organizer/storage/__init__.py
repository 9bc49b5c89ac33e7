"""Local persistence: key-value backends and the slots stored in them."""

from .drafts import DraftCache, draft_key
from .kv import InMemoryKeyValueStore, KeyValueStore, RedisKeyValueStore, create_store
from .preferences import CachedSession, Preferences, SessionCache
from .snippet_store import SnippetStore

__all__ = [
    "CachedSession",
    "DraftCache",
    "InMemoryKeyValueStore",
    "KeyValueStore",
    "Preferences",
    "RedisKeyValueStore",
    "SessionCache",
    "SnippetStore",
    "create_store",
    "draft_key",
]
