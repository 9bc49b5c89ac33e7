"""Edit-form sessions backed by the draft cache."""

from __future__ import annotations

import logging
from typing import Any

from ..storage.drafts import DraftCache, draft_key
from .model import DEFAULT_LANGUAGE, Draft, Snippet
from .repository import SnippetRepository

logger = logging.getLogger("snippet_organizer")


class EditSession:
    """Form state for adding a new snippet or editing an existing one.

    Every ``update`` autosaves the whole form under the session's draft key.
    A draft left behind by an earlier session is never applied on its own:
    when one exists ``pending_draft`` is set and the caller must choose
    ``restore_draft`` or ``discard_draft``.
    """

    def __init__(
        self,
        repository: SnippetRepository,
        drafts: DraftCache,
        *,
        snippet: Snippet | None = None,
    ) -> None:
        self.repository = repository
        self.drafts = drafts
        self.snippet = snippet
        self.key = draft_key(snippet.id if snippet else None)
        self.form = self._committed_form()
        self.pending_draft: Draft | None = drafts.load(self.key)

    @classmethod
    def open(
        cls,
        repository: SnippetRepository,
        drafts: DraftCache,
        snippet_id: str | None = None,
    ) -> "EditSession":
        snippet = repository.get(snippet_id) if snippet_id else None
        return cls(repository, drafts, snippet=snippet)

    @property
    def is_new(self) -> bool:
        return self.snippet is None

    @property
    def has_pending_draft(self) -> bool:
        return self.pending_draft is not None

    def restore_draft(self) -> Draft:
        draft = self.pending_draft or self.drafts.load(self.key)
        if draft is None:
            return self.form
        self.form = draft.model_copy(deep=True)
        self.pending_draft = None
        logger.debug("Restored draft %s", self.key)
        return self.form

    def discard_draft(self) -> Draft:
        self.drafts.discard(self.key)
        self.pending_draft = None
        self.form = self._committed_form()
        return self.form

    def update(self, **changes: Any) -> Draft:
        values = self.form.model_dump()
        for name, value in changes.items():
            if name not in values:
                raise TypeError(f"Unknown snippet field: {name}")
            values[name] = value
        self.form = Draft(**values)
        self.drafts.save(self.key, self.form)
        return self.form

    def save(self) -> Snippet:
        """Commit the form; the draft is removed only once the commit succeeds."""
        if self.snippet is None:
            saved = self.repository.create(self.form)
        else:
            saved = self.repository.edit(self.snippet.id, self.form)
        self.drafts.discard(self.key)
        self.pending_draft = None
        self.snippet = saved
        self.key = draft_key(saved.id)
        return saved

    def cancel(self) -> None:
        self.drafts.discard(self.key)
        self.pending_draft = None

    def _committed_form(self) -> Draft:
        if self.snippet is None:
            return Draft(language=DEFAULT_LANGUAGE)
        return Draft(**self.snippet.fields().model_dump())


__all__ = ["EditSession"]
