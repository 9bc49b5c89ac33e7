import logging
import traceback
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List

from .errors import SnippetOrganizerError


@dataclass(frozen=True, slots=True)
class Notification:
    """Transient message shown to the user after an action."""

    level: str
    message: str
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __str__(self) -> str:
        return self.message


class ErrorHandler:
    """Recover snippet and auth errors at the UI boundary as notifications."""

    def __init__(self, log_level: str = "INFO"):
        self.logger = self._setup_logging(log_level)
        self.notifications: List[Notification] = []

    def _setup_logging(self, level: str) -> logging.Logger:
        """Configure structured logging."""
        logger = logging.getLogger("snippet_organizer")
        logger.setLevel(getattr(logging, level.upper(), logging.INFO))

        if not logger.handlers:
            handler = logging.StreamHandler()
            formatter = logging.Formatter(
                '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
            )
            handler.setFormatter(formatter)
            logger.addHandler(handler)

        return logger

    def set_level(self, level: str) -> None:
        self.logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    def success(self, message: str) -> Notification:
        return self._push(Notification(level="success", message=message))

    def handle_error(self, error: Exception, context: Dict[str, Any] | None = None) -> Notification:
        """Log ``error`` with context and turn it into an error notification.

        Errors outside the snippet taxonomy are logged with a traceback and
        reported with a generic message.
        """
        context = context or {}
        if isinstance(error, SnippetOrganizerError):
            self.logger.info("%s: %s | Context: %s", type(error).__name__, error, context)
            message = error.message
        else:
            self.logger.error(
                "%s: %s | Context: %s\n%s",
                type(error).__name__,
                error,
                context,
                traceback.format_exc(),
            )
            message = "Unexpected error, see log for details"
        return self._push(Notification(level="error", message=message))

    def drain(self) -> List[Notification]:
        """Return pending notifications and forget them."""
        pending = list(self.notifications)
        self.notifications.clear()
        return pending

    def _push(self, notification: Notification) -> Notification:
        self.notifications.append(notification)
        return notification


__all__ = ["ErrorHandler", "Notification"]
