"""Whole-collection persistence of snippets under a single key."""

from __future__ import annotations

import json
import logging
from typing import Any, List, Sequence

from pydantic import ValidationError

from ..errors import MalformedImport
from ..snippet.model import Snippet
from .kv import KeyValueStore

logger = logging.getLogger("snippet_organizer")

SNIPPETS_KEY = "snippets"


def parse_snippet_records(payload: Any) -> List[Snippet]:
    """Validate a decoded JSON payload as a list of snippet records."""
    if not isinstance(payload, list):
        raise MalformedImport("Invalid format")
    snippets: List[Snippet] = []
    seen: set[str] = set()
    for index, record in enumerate(payload):
        if not isinstance(record, dict):
            raise MalformedImport(f"Invalid format: item {index} is not an object")
        try:
            snippets.append(Snippet.model_validate(record))
        except ValidationError as exc:
            raise MalformedImport(f"Invalid format: item {index}: {exc.errors()[0]['msg']}") from exc
        if snippets[-1].id in seen:
            raise MalformedImport(f"Invalid format: duplicate id {snippets[-1].id}")
        seen.add(snippets[-1].id)
    return snippets


def dump_snippets(snippets: Sequence[Snippet], *, indent: int | None = None) -> str:
    records = [snippet.to_record() for snippet in snippets]
    if indent is None:
        return json.dumps(records, separators=(",", ":"))
    return json.dumps(records, indent=indent)


class SnippetStore:
    """Read and overwrite the entire snippet collection.

    Every mutation is read-all, modify in memory, write-all. Two writers
    sharing a backend are not coordinated and the last ``save`` wins.
    """

    def __init__(self, store: KeyValueStore, *, key: str = SNIPPETS_KEY) -> None:
        self.store = store
        self.key = key

    def load(self) -> List[Snippet]:
        raw = self.store.get(self.key)
        if not raw:
            return []
        try:
            payload = json.loads(raw)
            return parse_snippet_records(payload)
        except (TypeError, json.JSONDecodeError, MalformedImport) as exc:
            logger.warning("Stored snippet collection is unreadable, treating as empty: %s", exc)
            return []

    def save(self, snippets: Sequence[Snippet]) -> bool:
        self.store.set(self.key, dump_snippets(snippets))
        logger.debug("Saved %d snippets under %s", len(snippets), self.key)
        return True


__all__ = ["SNIPPETS_KEY", "SnippetStore", "dump_snippets", "parse_snippet_records"]
