"""Key-value backends standing in for the per-profile local storage."""

from __future__ import annotations

import logging
from typing import Dict, List, Protocol

import redis

logger = logging.getLogger("snippet_organizer")


class KeyValueStore(Protocol):
    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def delete(self, key: str) -> None: ...

    def keys(self, prefix: str = "") -> List[str]: ...


class InMemoryKeyValueStore:
    """Dict-backed store used by tests and throwaway sessions."""

    def __init__(self, initial: Dict[str, str] | None = None) -> None:
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self, prefix: str = "") -> List[str]:
        return sorted(key for key in self._data if key.startswith(prefix))


class RedisKeyValueStore:
    """Store values in Redis under an optional namespace prefix."""

    def __init__(self, redis_client: redis.Redis, *, namespace: str = "snippet-organizer:") -> None:
        self.redis = redis_client
        self.namespace = namespace

    @classmethod
    def from_url(cls, url: str, *, namespace: str = "snippet-organizer:") -> "RedisKeyValueStore":
        return cls(redis.Redis.from_url(url), namespace=namespace)

    def get(self, key: str) -> str | None:
        raw = self.redis.get(self._key(key))
        if raw is None:
            return None
        if isinstance(raw, bytes):
            raw = raw.decode("utf-8")
        return str(raw)

    def set(self, key: str, value: str) -> None:
        self.redis.set(self._key(key), value)

    def delete(self, key: str) -> None:
        self.redis.delete(self._key(key))

    def keys(self, prefix: str = "") -> List[str]:
        found: List[str] = []
        for raw in self.redis.scan_iter(match=f"{self._key(prefix)}*"):
            name = raw.decode("utf-8") if isinstance(raw, bytes) else str(raw)
            found.append(name[len(self.namespace):])
        return sorted(found)

    def _key(self, key: str) -> str:
        return f"{self.namespace}{key}"


def create_store(url: str | None) -> KeyValueStore:
    """Build a store from a URL; ``memory://`` or an empty URL selects the dict backend."""
    if not url or url.startswith("memory://"):
        logger.debug("Using in-memory key-value store")
        return InMemoryKeyValueStore()
    return RedisKeyValueStore.from_url(url)


__all__ = [
    "InMemoryKeyValueStore",
    "KeyValueStore",
    "RedisKeyValueStore",
    "create_store",
]
