import pytest

from snippet_organizer.errors import ValidationFailure
from snippet_organizer.snippet.editor import EditSession
from snippet_organizer.snippet.model import Draft, SnippetFields
from snippet_organizer.snippet.repository import SnippetRepository
from snippet_organizer.storage.drafts import DraftCache, draft_key
from snippet_organizer.storage.kv import InMemoryKeyValueStore
from snippet_organizer.storage.snippet_store import SnippetStore


def _make_components():
    kv = InMemoryKeyValueStore()
    return SnippetRepository(SnippetStore(kv)), DraftCache(kv), kv


def test_new_session_autosaves_every_update():
    repository, drafts, kv = _make_components()
    session = EditSession.open(repository, drafts)

    session.update(title="Work in progress")
    session.update(code="console.log(1)")

    stored = drafts.load("snippet-draft-new")
    assert stored is not None
    assert stored.title == "Work in progress"
    assert stored.code == "console.log(1)"
    assert stored.language == "javascript"


def test_saving_commits_and_removes_draft():
    repository, drafts, _ = _make_components()
    session = EditSession.open(repository, drafts)
    session.update(title="Hello", code="print('hi')", language="python", tags=["demo", "demo"])

    saved = session.save()

    assert saved.tags == ["demo"]
    assert [s.id for s in repository.all()] == [saved.id]
    assert drafts.load(draft_key()) is None


def test_failed_save_keeps_draft_for_later():
    repository, drafts, _ = _make_components()
    session = EditSession.open(repository, drafts)
    session.update(title="No code yet")

    with pytest.raises(ValidationFailure):
        session.save()

    assert drafts.load(draft_key()).title == "No code yet"
    assert repository.all() == []


def test_reopening_surfaces_draft_without_applying_it():
    repository, drafts, _ = _make_components()
    EditSession.open(repository, drafts).update(title="Interrupted", code="x")

    session = EditSession.open(repository, drafts)

    assert session.has_pending_draft
    assert session.form.title == ""

    restored = session.restore_draft()
    assert restored.title == "Interrupted"
    assert not session.has_pending_draft


def test_discarding_draft_resets_to_committed_values():
    repository, drafts, _ = _make_components()
    snippet = repository.create(SnippetFields(title="Committed", code="a = 1", language="python"))
    EditSession.open(repository, drafts, snippet.id).update(title="Unsaved rename")

    session = EditSession.open(repository, drafts, snippet.id)
    assert session.key == f"snippet-draft-{snippet.id}"
    assert session.pending_draft.title == "Unsaved rename"
    assert session.form.title == "Committed"

    session.discard_draft()

    assert session.form.title == "Committed"
    assert drafts.load(session.key) is None


def test_edit_session_save_records_version():
    repository, drafts, _ = _make_components()
    snippet = repository.create(SnippetFields(title="Before", code="a = 1"))

    session = EditSession.open(repository, drafts, snippet.id)
    session.update(title="After")
    saved = session.save()

    assert saved.title == "After"
    assert saved.versions[0].title == "Before"


def test_cancel_discards_draft():
    repository, drafts, _ = _make_components()
    session = EditSession.open(repository, drafts)
    session.update(title="Temporary")

    session.cancel()

    assert drafts.load(draft_key()) is None


def test_drafts_are_keyed_per_session():
    repository, drafts, _ = _make_components()
    drafts.save(draft_key("123"), Draft(title="for 123"))

    assert drafts.load(draft_key()) is None
    assert drafts.sessions() == ["snippet-draft-123"]


def test_unknown_form_field_is_rejected():
    repository, drafts, _ = _make_components()
    session = EditSession.open(repository, drafts)

    with pytest.raises(TypeError):
        session.update(favorite=True)


def test_unreadable_draft_is_ignored():
    repository, drafts, kv = _make_components()
    kv.set(draft_key(), "{not json")

    session = EditSession.open(repository, drafts)

    assert not session.has_pending_draft


def test_edits_after_first_save_autosave_under_the_snippet_key():
    repository, drafts, _ = _make_components()
    session = EditSession.open(repository, drafts)
    session.update(title="t", code="c")
    saved = session.save()

    session.update(code="c2")

    assert session.key == draft_key(saved.id)
    assert not drafts.has(draft_key())
    assert drafts.load(draft_key(saved.id)).code == "c2"
    assert not EditSession.open(repository, drafts).has_pending_draft


def test_draft_cache_has_reports_only_readable_drafts():
    _, drafts, kv = _make_components()
    drafts.save(draft_key("7"), Draft(title="kept"))
    kv.set(draft_key("8"), "{not json")

    assert drafts.has(draft_key("7"))
    assert not drafts.has(draft_key("8"))
    assert not drafts.has(draft_key())

    drafts.discard(draft_key("7"))
    assert not drafts.has(draft_key("7"))
