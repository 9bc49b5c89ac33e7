from __future__ import annotations

import json
import logging

from pydantic import ValidationError

from ..snippet.model import Draft
from .kv import KeyValueStore

logger = logging.getLogger("snippet_organizer")

DRAFT_KEY_PREFIX = "snippet-draft-"
NEW_SNIPPET_SESSION = "new"


def draft_key(snippet_id: str | None = None) -> str:
    """Storage key of the edit session for ``snippet_id`` (or a new snippet)."""
    return f"{DRAFT_KEY_PREFIX}{snippet_id or NEW_SNIPPET_SESSION}"


class DraftCache:
    """Autosaved edit-form state, kept apart from the committed collection."""

    def __init__(self, store: KeyValueStore) -> None:
        self.store = store

    def save(self, key: str, draft: Draft) -> None:
        self.store.set(key, draft.model_dump_json(by_alias=True))

    def load(self, key: str) -> Draft | None:
        raw = self.store.get(key)
        if not raw:
            return None
        try:
            return Draft.model_validate(json.loads(raw))
        except (TypeError, json.JSONDecodeError, ValidationError):
            logger.warning("Ignoring unreadable draft under %s", key)
            return None

    def has(self, key: str) -> bool:
        return self.load(key) is not None

    def discard(self, key: str) -> None:
        self.store.delete(key)

    def sessions(self) -> list[str]:
        return self.store.keys(DRAFT_KEY_PREFIX)


__all__ = ["DRAFT_KEY_PREFIX", "DraftCache", "NEW_SNIPPET_SESSION", "draft_key"]
