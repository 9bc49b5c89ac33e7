"""Command-line front end for the snippet organizer."""

from __future__ import annotations

import argparse
import getpass
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, List, Sequence

from .auth.client import AuthGateway
from .config import ClientSettings
from .errors import InvalidCredentials, SnippetOrganizerError
from .exception_handler import ErrorHandler, Notification
from .snippet.editor import EditSession
from .snippet.filtering import (
    EMPTY_NO_MATCHES,
    SORT_KEYS,
    SnippetQuery,
    empty_state,
    facets,
    highlight,
    suggest_tags,
)
from .snippet.model import SUPPORTED_LANGUAGES, Snippet, format_timestamp
from .snippet.repository import SnippetRepository
from .storage.drafts import DraftCache
from .storage.kv import KeyValueStore, create_store
from .storage.preferences import Preferences, SessionCache
from .storage.snippet_store import SnippetStore


DEFAULT_EXPORT_FILE = "snippets_backup.json"


@dataclass(slots=True)
class AppContext:
    """Everything a command needs, built over one key-value store."""

    store: KeyValueStore
    repository: SnippetRepository
    drafts: DraftCache
    preferences: Preferences
    sessions: SessionCache
    auth: AuthGateway
    errors: ErrorHandler

    @classmethod
    def build(
        cls,
        settings: ClientSettings,
        *,
        store: KeyValueStore | None = None,
        auth: AuthGateway | None = None,
        errors: ErrorHandler | None = None,
    ) -> "AppContext":
        kv = store if store is not None else create_store(settings.store_url)
        sessions = SessionCache(kv)
        return cls(
            store=kv,
            repository=SnippetRepository(SnippetStore(kv)),
            drafts=DraftCache(kv),
            preferences=Preferences(kv),
            sessions=sessions,
            auth=auth or AuthGateway(settings.api_url, sessions),
            errors=errors or ErrorHandler(),
        )

    def require_user(self) -> str:
        username = self.sessions.username
        if not username:
            raise InvalidCredentials("Please sign in first")
        return username


# Formatting -----------------------------------------------------------------


def format_snippet_line(snippet: Snippet) -> str:
    star = "★" if snippet.is_favorite else " "
    tags = f" [{', '.join(snippet.tags)}]" if snippet.tags else ""
    return f"{star} {snippet.id}  {snippet.title} ({snippet.language}){tags}"


def format_snippet_list(snippets: Sequence[Snippet], *, sort_by: str) -> str:
    label = {"date": "Date", "language": "Language", "favorites": "Favorites"}[sort_by]
    noun = "item" if len(snippets) == 1 else "items"
    lines = [f"Your Snippets ({len(snippets)} {noun}) - Sorted by: {label}"]
    lines.extend(format_snippet_line(snippet) for snippet in snippets)
    return "\n".join(lines)


def mark_matches(text: str, search: str) -> str:
    return "".join(f"[[{segment}]]" if matched else segment for segment, matched in highlight(text, search))


def format_snippet_detail(snippet: Snippet, *, search: str = "") -> str:
    lines = [
        f"{snippet.title}{' ★' if snippet.is_favorite else ''}",
        f"ID: {snippet.id}",
        f"Language: {snippet.language}",
    ]
    if snippet.description:
        lines.append(f"Description: {mark_matches(snippet.description, search)}")
    if snippet.tags:
        lines.append(f"Tags: {', '.join(snippet.tags)}")
    lines.append(f"Created: {format_timestamp(snippet.created_at)}")
    if snippet.updated_at is not None:
        lines.append(f"Updated: {format_timestamp(snippet.updated_at)}")
    if snippet.deleted_at is not None:
        lines.append(f"Deleted: {format_timestamp(snippet.deleted_at)}")
    lines.append(f"Versions: {len(snippet.versions)}")
    lines.append("Code:")
    lines.append("```")
    lines.extend(mark_matches(snippet.code, search).splitlines() or [""])
    lines.append("```")
    return "\n".join(lines)


def _emit(notification: Notification) -> None:
    if notification.level == "error":
        print(f"❌ {notification.message}", file=sys.stderr)
    else:
        print(f"✅ {notification.message}")


# Commands -------------------------------------------------------------------


def _read_password(args: argparse.Namespace) -> str:
    return args.password if args.password is not None else getpass.getpass("Password: ")


def cmd_signup(ctx: AppContext, args: argparse.Namespace) -> int:
    user = ctx.auth.signup(args.username, _read_password(args))
    _emit(ctx.errors.success(f"Account created for {user['username']}, you can sign in now"))
    return 0


def cmd_signin(ctx: AppContext, args: argparse.Namespace) -> int:
    session = ctx.auth.signin(args.username, _read_password(args))
    _emit(ctx.errors.success(f"Signed in as {session.username}"))
    return 0


def cmd_logout(ctx: AppContext, args: argparse.Namespace) -> int:
    ctx.auth.logout()
    _emit(ctx.errors.success("Signed out"))
    return 0


def cmd_whoami(ctx: AppContext, args: argparse.Namespace) -> int:
    username = ctx.require_user()
    if args.check:
        print(ctx.auth.protected()["message"])
    else:
        print(username)
    return 0


def _collect_changes(args: argparse.Namespace) -> Dict[str, object]:
    changes: Dict[str, object] = {}
    for name in ("title", "description", "language"):
        value = getattr(args, name, None)
        if value is not None:
            changes[name] = value
    if args.tags is not None:
        changes["tags"] = args.tags
    if args.code is not None:
        changes["code"] = args.code
    elif args.code_file is not None:
        if args.code_file == "-":
            changes["code"] = sys.stdin.read()
        else:
            changes["code"] = Path(args.code_file).read_text(encoding="utf-8")
    return changes


def _run_edit_session(ctx: AppContext, args: argparse.Namespace, snippet_id: str | None) -> int:
    session = EditSession.open(ctx.repository, ctx.drafts, snippet_id)
    if session.has_pending_draft:
        if args.restore_draft:
            session.restore_draft()
            _emit(ctx.errors.success("Draft restored"))
        elif args.discard_draft:
            session.discard_draft()
        else:
            print(
                "An unsaved draft exists for this snippet. "
                "Rerun with --restore-draft or --discard-draft.",
                file=sys.stderr,
            )
            return 1

    changes = _collect_changes(args)
    if changes:
        session.update(**changes)

    is_new = session.is_new
    snippet = session.save()
    _emit(ctx.errors.success(f"Snippet {'added' if is_new else 'updated'}: {snippet.id}"))
    return 0


def cmd_add(ctx: AppContext, args: argparse.Namespace) -> int:
    ctx.require_user()
    return _run_edit_session(ctx, args, None)


def cmd_edit(ctx: AppContext, args: argparse.Namespace) -> int:
    ctx.require_user()
    return _run_edit_session(ctx, args, args.id)


def cmd_list(ctx: AppContext, args: argparse.Namespace) -> int:
    ctx.require_user()
    query = SnippetQuery(
        search=args.search or "",
        tag=args.tag,
        language=args.language,
        sort_by=args.sort,
    )
    everything = ctx.repository.all()
    results = ctx.repository.list(query)
    state = empty_state(everything, query, results)
    if state is None:
        print(format_snippet_list(results, sort_by=query.sort_by))
    elif state == EMPTY_NO_MATCHES:
        print("No snippets found. Try adjusting your search or filters.")
    else:
        print("No snippets found. Create your first snippet to get started.")
    return 0


def cmd_show(ctx: AppContext, args: argparse.Namespace) -> int:
    ctx.require_user()
    print(format_snippet_detail(ctx.repository.get(args.id), search=args.search or ""))
    return 0


def cmd_trash(ctx: AppContext, args: argparse.Namespace) -> int:
    ctx.require_user()
    trashed = ctx.repository.trash()
    if not trashed:
        print("Trash is empty.")
        return 0
    noun = "item" if len(trashed) == 1 else "items"
    print(f"Trash Bin ({len(trashed)} {noun})")
    for snippet in trashed:
        deleted = format_timestamp(snippet.deleted_at) if snippet.deleted_at else ""
        print(f"{format_snippet_line(snippet)}  deleted {deleted}")
    return 0


def cmd_delete(ctx: AppContext, args: argparse.Namespace) -> int:
    ctx.require_user()
    ctx.repository.soft_delete(args.id)
    _emit(ctx.errors.success("Snippet moved to Trash"))
    return 0


def cmd_restore(ctx: AppContext, args: argparse.Namespace) -> int:
    ctx.require_user()
    ctx.repository.restore(args.id)
    _emit(ctx.errors.success("Snippet restored successfully"))
    return 0


def cmd_purge(ctx: AppContext, args: argparse.Namespace) -> int:
    ctx.require_user()
    if not args.yes:
        answer = input("Permanently delete this snippet? This action cannot be undone. [y/N] ")
        if answer.strip().lower() not in {"y", "yes"}:
            print("Cancelled.")
            return 0
    ctx.repository.permanent_delete(args.id)
    _emit(ctx.errors.success("Snippet permanently deleted"))
    return 0


def cmd_favorite(ctx: AppContext, args: argparse.Namespace) -> int:
    ctx.require_user()
    snippet = ctx.repository.toggle_favorite(args.id)
    _emit(ctx.errors.success("Added to favorites" if snippet.is_favorite else "Removed from favorites"))
    return 0


def cmd_history(ctx: AppContext, args: argparse.Namespace) -> int:
    ctx.require_user()
    snippet = ctx.repository.get(args.id)
    if not snippet.versions:
        print("No previous versions.")
        return 0
    for index, version in enumerate(snippet.versions):
        saved = format_timestamp(version.saved_at) if version.saved_at else "Unknown"
        first_line = version.code.splitlines()[0] if version.code else ""
        print(f"{index}. {version.title} ({version.language}) saved {saved}: {first_line}")
    return 0


def cmd_restore_version(ctx: AppContext, args: argparse.Namespace) -> int:
    ctx.require_user()
    ctx.repository.restore_version(args.id, args.index)
    _emit(ctx.errors.success("Version restored!"))
    return 0


def cmd_export(ctx: AppContext, args: argparse.Namespace) -> int:
    ctx.require_user()
    payload = ctx.repository.export_json()
    if args.output == "-":
        print(payload)
        return 0
    Path(args.output).write_text(payload, encoding="utf-8")
    _emit(ctx.errors.success(f"Snippets exported to {args.output}"))
    return 0


def cmd_import(ctx: AppContext, args: argparse.Namespace) -> int:
    ctx.require_user()
    data = sys.stdin.buffer.read() if args.file == "-" else Path(args.file).read_bytes()
    imported = ctx.repository.import_json(data)
    _emit(ctx.errors.success(f"Snippets imported successfully! ({len(imported)})"))
    return 0


def cmd_tags(ctx: AppContext, args: argparse.Namespace) -> int:
    ctx.require_user()
    snippets = ctx.repository.all()
    if args.suggest is not None:
        for tag in suggest_tags(snippets, args.suggest, args.selected or ()):
            print(tag)
        return 0
    found = facets(snippets)
    print("Tags: " + (", ".join(found.tags) or "-"))
    print("Languages: " + (", ".join(found.languages) or "-"))
    return 0


def cmd_dark_mode(ctx: AppContext, args: argparse.Namespace) -> int:
    if args.mode == "on":
        ctx.preferences.dark_mode = True
    elif args.mode == "off":
        ctx.preferences.dark_mode = False
    elif args.mode == "toggle":
        ctx.preferences.toggle_dark_mode()
    print("on" if ctx.preferences.dark_mode else "off")
    return 0


def cmd_serve(ctx: AppContext, args: argparse.Namespace) -> int:
    import uvicorn

    from .api.server import create_app

    uvicorn.run(create_app(), host=args.host, port=args.port)
    return 0


# Parser ---------------------------------------------------------------------


def _add_form_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--title", help="Snippet title (required to save)")
    parser.add_argument("--description", help="What the snippet does")
    parser.add_argument(
        "--language",
        help=f"Language name, e.g. {', '.join(SUPPORTED_LANGUAGES[:5])} (default: javascript)",
    )
    parser.add_argument(
        "--tag",
        dest="tags",
        action="append",
        help="Tag to attach (repeatable; replaces the current tags)",
    )
    code = parser.add_mutually_exclusive_group()
    code.add_argument("--code", help="Snippet code")
    code.add_argument("--code-file", help="Read code from a file ('-' for stdin)")
    draft = parser.add_mutually_exclusive_group()
    draft.add_argument("--restore-draft", action="store_true", help="Resume the unsaved draft")
    draft.add_argument("--discard-draft", action="store_true", help="Throw away the unsaved draft")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="snippets",
        description="Organize, search and version personal code snippets",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        help="Logging level for the snippet_organizer logger (default: WARNING)",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    def command(name: str, handler: Callable[[AppContext, argparse.Namespace], int], help_text: str):
        sub = commands.add_parser(name, help=help_text)
        sub.set_defaults(handler=handler)
        return sub

    for name, handler, help_text in (
        ("signup", cmd_signup, "Create an account"),
        ("signin", cmd_signin, "Sign in and cache the session token"),
    ):
        sub = command(name, handler, help_text)
        sub.add_argument("username")
        sub.add_argument("--password", help="Password (prompted when omitted)")

    command("logout", cmd_logout, "Forget the cached session")
    whoami = command("whoami", cmd_whoami, "Show the signed-in user")
    whoami.add_argument("--check", action="store_true", help="Verify the token with the server")

    _add_form_arguments(command("add", cmd_add, "Add a snippet"))
    edit = command("edit", cmd_edit, "Edit a snippet")
    edit.add_argument("id")
    _add_form_arguments(edit)

    listing = command("list", cmd_list, "List active snippets")
    listing.add_argument("--search", help="Case-insensitive text in title, description or code")
    listing.add_argument("--tag", help="Only snippets carrying this tag")
    listing.add_argument("--language", help="Only snippets in this language")
    listing.add_argument("--sort", choices=SORT_KEYS, default="date", help="Sort order (default: date)")

    show = command("show", cmd_show, "Show one snippet")
    show.add_argument("id")
    show.add_argument("--search", help="Mark occurrences of this text")

    command("trash", cmd_trash, "List trashed snippets")
    for name, handler, help_text in (
        ("delete", cmd_delete, "Move a snippet to the trash"),
        ("restore", cmd_restore, "Restore a snippet from the trash"),
        ("favorite", cmd_favorite, "Toggle the favorite flag"),
        ("history", cmd_history, "List previous versions"),
    ):
        command(name, handler, help_text).add_argument("id")

    purge = command("purge", cmd_purge, "Permanently delete a trashed snippet")
    purge.add_argument("id")
    purge.add_argument("--yes", action="store_true", help="Skip the confirmation prompt")

    restore_version = command("restore-version", cmd_restore_version, "Restore a previous version")
    restore_version.add_argument("id")
    restore_version.add_argument("index", type=int, help="Version number as listed by 'history'")

    export = command("export", cmd_export, "Export all snippets as JSON")
    export.add_argument(
        "--output",
        "-o",
        default=DEFAULT_EXPORT_FILE,
        help=f"Output file, '-' for stdout (default: {DEFAULT_EXPORT_FILE})",
    )
    importer = command("import", cmd_import, "Replace all snippets with a JSON export")
    importer.add_argument("file", help="JSON file to import ('-' for stdin)")

    tags = command("tags", cmd_tags, "List tags and languages")
    tags.add_argument("--suggest", help="Suggest known tags containing this text")
    tags.add_argument("--selected", action="append", help="Tag already chosen (repeatable)")

    dark_mode = command("dark-mode", cmd_dark_mode, "Show or change the dark-mode preference")
    dark_mode.add_argument("mode", nargs="?", choices=("on", "off", "toggle"))

    serve = command("serve", cmd_serve, "Run the authentication API")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=4000)

    return parser


def main(argv: List[str] | None = None, *, context: AppContext | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    ctx = context or AppContext.build(ClientSettings.from_env())
    ctx.errors.set_level(args.log_level)

    try:
        return args.handler(ctx, args)
    except KeyboardInterrupt:
        print("\n⚠️ Operation interrupted", file=sys.stderr)
        return 1
    except SnippetOrganizerError as exc:
        _emit(ctx.errors.handle_error(exc, {"command": args.command}))
        return 1
    except OSError as exc:
        reason = SnippetOrganizerError(f"{exc.strerror or exc}: {exc.filename}" if exc.filename else str(exc))
        _emit(ctx.errors.handle_error(reason, {"command": args.command}))
        return 1
    except Exception as exc:
        _emit(ctx.errors.handle_error(exc, {"command": args.command}))
        return 1


__all__ = ["AppContext", "build_parser", "main"]
