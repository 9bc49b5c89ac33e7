from __future__ import annotations

import logging
import os
from dataclasses import dataclass

logger = logging.getLogger("snippet_organizer")

DEFAULT_API_URL = "http://localhost:4000"
DEFAULT_STORE_URL = "redis://127.0.0.1:6379/1"


def int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning("Invalid integer for %s: %s", name, raw)
        return default


def bool_env(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if not raw:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


@dataclass(slots=True)
class ClientSettings:
    """Where the client finds the auth service and its local profile store."""

    api_url: str = DEFAULT_API_URL
    store_url: str = DEFAULT_STORE_URL

    @classmethod
    def from_env(cls) -> "ClientSettings":
        return cls(
            api_url=os.getenv("SNIPPETS_API_URL", DEFAULT_API_URL).rstrip("/"),
            store_url=os.getenv("SNIPPETS_STORE_URL", DEFAULT_STORE_URL),
        )


__all__ = ["ClientSettings", "bool_env", "int_env"]
