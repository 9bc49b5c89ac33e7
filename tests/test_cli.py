import json

import httpx
import pytest

from snippet_organizer.auth.client import AuthGateway
from snippet_organizer.cli import AppContext, main
from snippet_organizer.config import ClientSettings
from snippet_organizer.exception_handler import ErrorHandler
from snippet_organizer.storage.kv import InMemoryKeyValueStore
from snippet_organizer.storage.preferences import SessionCache


def _auth_service(request: httpx.Request) -> httpx.Response:
    body = json.loads(request.content or b"{}")
    if request.url.path == "/api/auth/signin" and body.get("password") == "demo123":
        return httpx.Response(200, json={"token": "tok", "username": body["username"]})
    return httpx.Response(401, json={"error": "Invalid credentials"})


@pytest.fixture
def context():
    kv = InMemoryKeyValueStore()
    auth = AuthGateway(
        "http://auth.test",
        SessionCache(kv),
        transport=httpx.MockTransport(_auth_service),
    )
    return AppContext.build(
        ClientSettings(api_url="http://auth.test", store_url="memory://"),
        store=kv,
        auth=auth,
        errors=ErrorHandler(log_level="WARNING"),
    )


def _signed_in(context):
    assert main(["signin", "demo", "--password", "demo123"], context=context) == 0
    return context


def _only_snippet_id(context):
    snippets = context.repository.all()
    assert len(snippets) == 1
    return snippets[0].id


def test_wrong_password_keeps_user_signed_out(context, capsys):
    code = main(["signin", "demo", "--password", "nope"], context=context)

    assert code == 1
    assert "Invalid credentials" in capsys.readouterr().err
    assert context.sessions.get() is None


def test_snippet_commands_require_sign_in(context, capsys):
    code = main(["list"], context=context)

    assert code == 1
    assert "Please sign in first" in capsys.readouterr().err


def test_add_list_and_search(context, capsys):
    _signed_in(context)

    assert main(
        ["add", "--title", "Hi", "--code", "print(1)", "--language", "python", "--tag", "demo"],
        context=context,
    ) == 0
    capsys.readouterr()

    assert main(["list", "--search", "PRINT"], context=context) == 0
    out = capsys.readouterr().out
    assert "Your Snippets (1 item)" in out
    assert "Hi (python) [demo]" in out

    assert main(["list", "--tag", "missing"], context=context) == 0
    assert "Try adjusting your search or filters" in capsys.readouterr().out


def test_empty_collection_invites_first_snippet(context, capsys):
    _signed_in(context)
    capsys.readouterr()

    main(["list"], context=context)

    assert "Create your first snippet" in capsys.readouterr().out


def test_failed_add_leaves_draft_that_must_be_resolved(context, capsys):
    _signed_in(context)

    assert main(["add", "--title", "Only a title"], context=context) == 1
    assert "Code cannot be empty" in capsys.readouterr().err

    assert main(["add", "--code", "x = 1"], context=context) == 1
    assert "--restore-draft" in capsys.readouterr().err

    assert main(["add", "--restore-draft", "--code", "x = 1"], context=context) == 0
    snippet = context.repository.all()[0]
    assert snippet.title == "Only a title"
    assert snippet.code == "x = 1"
    assert context.drafts.sessions() == []


def test_edit_history_and_restore_version(context, capsys):
    _signed_in(context)
    main(["add", "--title", "Hi", "--code", "print(1)"], context=context)
    snippet_id = _only_snippet_id(context)

    assert main(["edit", snippet_id, "--code", "print(2)"], context=context) == 0
    capsys.readouterr()

    assert main(["history", snippet_id], context=context) == 0
    assert "0. Hi (javascript)" in capsys.readouterr().out

    assert main(["restore-version", snippet_id, "0"], context=context) == 0
    assert context.repository.get(snippet_id).code == "print(1)"

    assert main(["restore-version", snippet_id, "7"], context=context) == 1


def test_trash_restore_and_purge(context, capsys):
    _signed_in(context)
    main(["add", "--title", "Hi", "--code", "print(1)"], context=context)
    snippet_id = _only_snippet_id(context)

    main(["delete", snippet_id], context=context)
    capsys.readouterr()
    main(["trash"], context=context)
    assert "Trash Bin (1 item)" in capsys.readouterr().out

    main(["restore", snippet_id], context=context)
    assert context.repository.trash() == []

    main(["delete", snippet_id], context=context)
    assert main(["purge", snippet_id, "--yes"], context=context) == 0
    assert context.repository.all() == []


def test_export_then_import_round_trip(context, tmp_path):
    _signed_in(context)
    main(["add", "--title", "Keep me", "--code", "x"], context=context)
    target = tmp_path / "backup.json"

    assert main(["export", "--output", str(target)], context=context) == 0
    main(["add", "--title", "Extra", "--code", "y"], context=context)

    assert main(["import", str(target)], context=context) == 0
    assert [s.title for s in context.repository.all()] == ["Keep me"]


def test_import_of_object_reports_error_and_changes_nothing(context, tmp_path, capsys):
    _signed_in(context)
    main(["add", "--title", "Keep me", "--code", "x"], context=context)
    bad = tmp_path / "bad.json"
    bad.write_text('{"snippets": []}', encoding="utf-8")
    capsys.readouterr()

    assert main(["import", str(bad)], context=context) == 1
    assert "Invalid format" in capsys.readouterr().err
    assert [s.title for s in context.repository.all()] == ["Keep me"]


def test_dark_mode_and_logout(context, capsys):
    assert main(["dark-mode", "toggle"], context=context) == 0
    assert capsys.readouterr().out.strip() == "on"

    _signed_in(context)
    main(["logout"], context=context)
    assert context.sessions.get() is None


def test_import_of_binary_file_reports_invalid_format(context, tmp_path, capsys):
    _signed_in(context)
    main(["add", "--title", "Keep me", "--code", "x"], context=context)
    bad = tmp_path / "bad.json"
    bad.write_bytes(b"\xff\xfe\x00garbage")
    capsys.readouterr()

    assert main(["import", str(bad)], context=context) == 1
    err = capsys.readouterr().err
    assert "Invalid format" in err
    assert "Unexpected error" not in err
    assert [s.title for s in context.repository.all()] == ["Keep me"]
