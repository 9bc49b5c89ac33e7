"""Personal code-snippet manager: local snippet storage plus an auth service."""

from .snippet import Draft, Snippet, SnippetFields, SnippetQuery, SnippetVersion, filter_snippets
from .storage import DraftCache, InMemoryKeyValueStore, RedisKeyValueStore, SnippetStore
from .snippet.repository import SnippetRepository
from .snippet.editor import EditSession

__all__ = [
    "Draft",
    "DraftCache",
    "EditSession",
    "InMemoryKeyValueStore",
    "RedisKeyValueStore",
    "Snippet",
    "SnippetFields",
    "SnippetQuery",
    "SnippetRepository",
    "SnippetStore",
    "SnippetVersion",
    "filter_snippets",
]
