from snippet_organizer.errors import MalformedImport, NetworkFailure, ValidationFailure
from snippet_organizer.exception_handler import ErrorHandler


def test_taxonomy_errors_become_error_notifications():
    handler = ErrorHandler(log_level="WARNING")

    notification = handler.handle_error(ValidationFailure("Title is required"), {"command": "add"})

    assert notification.level == "error"
    assert notification.message == "Title is required"
    assert str(notification) == "Title is required"


def test_default_messages_are_user_facing():
    handler = ErrorHandler(log_level="WARNING")

    assert handler.handle_error(NetworkFailure()).message == "Network error"
    assert handler.handle_error(MalformedImport()).message == "Invalid format"


def test_unexpected_errors_get_generic_message():
    handler = ErrorHandler(log_level="CRITICAL")

    notification = handler.handle_error(RuntimeError("boom"))

    assert "boom" not in notification.message
    assert notification.level == "error"


def test_drain_returns_pending_notifications_once():
    handler = ErrorHandler(log_level="WARNING")
    handler.success("Snippet added")
    handler.handle_error(ValidationFailure("Code cannot be empty"))

    drained = handler.drain()

    assert [n.level for n in drained] == ["success", "error"]
    assert handler.drain() == []
