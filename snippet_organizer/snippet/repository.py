"""Snippet commands with read-modify-write and version bookkeeping."""

from __future__ import annotations

import json
import logging
import time
from datetime import datetime
from typing import Callable, List, Sequence

from ..errors import MalformedImport, SnippetNotFound, ValidationFailure, VersionNotFound
from ..storage.snippet_store import SnippetStore, dump_snippets, parse_snippet_records
from .filtering import SnippetQuery, filter_snippets, trash_view
from .model import Snippet, SnippetFields, utc_now

logger = logging.getLogger("snippet_organizer")


def validate_fields(fields: SnippetFields) -> SnippetFields:
    """Return trimmed fields ready to persist, or raise ``ValidationFailure``."""
    if not fields.title.strip():
        raise ValidationFailure("Title is required")
    if not fields.code.strip():
        raise ValidationFailure("Code cannot be empty")
    return SnippetFields(
        title=fields.title.strip(),
        description=fields.description.strip(),
        language=fields.language,
        tags=list(fields.tags),
        code=fields.code,
    )


def _timestamp_id() -> str:
    return str(int(time.time() * 1000))


class SnippetRepository:
    """Commands over the stored snippet collection.

    Each command loads the whole collection, applies one change and writes the
    whole collection back before returning.
    """

    def __init__(
        self,
        store: SnippetStore,
        *,
        id_factory: Callable[[], str] = _timestamp_id,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.store = store
        self._id_factory = id_factory
        self._clock = clock

    # Queries -----------------------------------------------------------------

    def all(self) -> List[Snippet]:
        return self.store.load()

    def get(self, snippet_id: str) -> Snippet:
        for snippet in self.store.load():
            if snippet.id == snippet_id:
                return snippet
        raise SnippetNotFound(snippet_id)

    def list(self, query: SnippetQuery | None = None) -> List[Snippet]:
        return filter_snippets(self.store.load(), query)

    def trash(self) -> List[Snippet]:
        return trash_view(self.store.load())

    # Commands ----------------------------------------------------------------

    def create(self, fields: SnippetFields) -> Snippet:
        cleaned = validate_fields(fields)
        snippets = self.store.load()
        now = self._clock()
        snippet = Snippet(
            id=self._new_id(snippets),
            **cleaned.model_dump(),
            created_at=now,
            updated_at=now,
            is_favorite=False,
            deleted_at=None,
            versions=[],
        )
        self.store.save([snippet, *snippets])
        logger.info("Created snippet %s (%s)", snippet.id, snippet.title)
        return snippet

    def edit(self, snippet_id: str, fields: SnippetFields) -> Snippet:
        cleaned = validate_fields(fields)

        def _edit(snippet: Snippet) -> None:
            snippet.versions.insert(0, snippet.snapshot())
            snippet.apply(cleaned)
            snippet.updated_at = self._clock()

        snippet = self._mutate(snippet_id, _edit)
        logger.info("Edited snippet %s, %d versions kept", snippet_id, len(snippet.versions))
        return snippet

    def toggle_favorite(self, snippet_id: str) -> Snippet:
        def _toggle(snippet: Snippet) -> None:
            snippet.is_favorite = not snippet.is_favorite

        return self._mutate(snippet_id, _toggle)

    def soft_delete(self, snippet_id: str) -> Snippet:
        def _trash(snippet: Snippet) -> None:
            snippet.deleted_at = self._clock()

        snippet = self._mutate(snippet_id, _trash)
        logger.info("Moved snippet %s to trash", snippet_id)
        return snippet

    def restore(self, snippet_id: str) -> Snippet:
        def _restore(snippet: Snippet) -> None:
            snippet.deleted_at = None

        snippet = self._mutate(snippet_id, _restore)
        logger.info("Restored snippet %s from trash", snippet_id)
        return snippet

    def permanent_delete(self, snippet_id: str) -> None:
        snippets = self.store.load()
        remaining = [snippet for snippet in snippets if snippet.id != snippet_id]
        if len(remaining) == len(snippets):
            raise SnippetNotFound(snippet_id)
        self.store.save(remaining)
        logger.info("Permanently deleted snippet %s", snippet_id)

    def restore_version(self, snippet_id: str, index: int) -> Snippet:
        """Make ``versions[index]`` live again and archive the current state."""

        def _restore_version(snippet: Snippet) -> None:
            if index < 0 or index >= len(snippet.versions):
                raise VersionNotFound(
                    f"Snippet {snippet_id} has no version {index} ({len(snippet.versions)} stored)"
                )
            chosen = snippet.versions.pop(index)
            snippet.versions.insert(0, snippet.snapshot())
            snippet.apply(chosen)
            snippet.updated_at = self._clock()

        snippet = self._mutate(snippet_id, _restore_version)
        logger.info("Restored version %d of snippet %s", index, snippet_id)
        return snippet

    # Import / export ---------------------------------------------------------

    def export_json(self) -> str:
        return dump_snippets(self.store.load(), indent=2)

    def import_json(self, text: str | bytes) -> List[Snippet]:
        """Replace the whole collection with the snippets in ``text``."""
        if isinstance(text, bytes):
            try:
                text = text.decode("utf-8-sig")
            except UnicodeDecodeError as exc:
                raise MalformedImport(f"Invalid format: not UTF-8 text ({exc.reason})") from exc
        try:
            payload = json.loads(text)
        except (TypeError, json.JSONDecodeError) as exc:
            raise MalformedImport(f"Invalid JSON: {exc}") from exc
        snippets = parse_snippet_records(payload)
        self.replace_all(snippets)
        logger.info("Imported %d snippets", len(snippets))
        return snippets

    def replace_all(self, snippets: Sequence[Snippet]) -> None:
        self.store.save(list(snippets))

    # Helpers -----------------------------------------------------------------

    def _mutate(self, snippet_id: str, change: Callable[[Snippet], None]) -> Snippet:
        snippets = self.store.load()
        for snippet in snippets:
            if snippet.id == snippet_id:
                change(snippet)
                self.store.save(snippets)
                return snippet
        raise SnippetNotFound(snippet_id)

    def _new_id(self, snippets: Sequence[Snippet]) -> str:
        existing = {snippet.id for snippet in snippets}
        candidate = self._id_factory()
        suffix = 1
        unique = candidate
        while unique in existing:
            unique = f"{candidate}-{suffix}"
            suffix += 1
        return unique


__all__ = ["SnippetRepository", "validate_fields"]
