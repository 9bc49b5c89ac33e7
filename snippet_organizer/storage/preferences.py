"""Small single-value slots: display preference and cached login."""

from __future__ import annotations

from dataclasses import dataclass

from .kv import KeyValueStore

DARK_MODE_KEY = "darkMode"
TOKEN_KEY = "token"
USERNAME_KEY = "username"


class Preferences:
    def __init__(self, store: KeyValueStore) -> None:
        self.store = store

    @property
    def dark_mode(self) -> bool:
        return self.store.get(DARK_MODE_KEY) == "true"

    @dark_mode.setter
    def dark_mode(self, enabled: bool) -> None:
        self.store.set(DARK_MODE_KEY, "true" if enabled else "false")

    def toggle_dark_mode(self) -> bool:
        self.dark_mode = not self.dark_mode
        return self.dark_mode


@dataclass(frozen=True, slots=True)
class CachedSession:
    token: str
    username: str


class SessionCache:
    """Cached bearer token and username from the last successful sign-in."""

    def __init__(self, store: KeyValueStore) -> None:
        self.store = store

    def get(self) -> CachedSession | None:
        token = self.store.get(TOKEN_KEY)
        username = self.store.get(USERNAME_KEY)
        if not token or not username:
            return None
        return CachedSession(token=token, username=username)

    @property
    def username(self) -> str | None:
        return self.store.get(USERNAME_KEY) or None

    def remember(self, token: str, username: str) -> CachedSession:
        self.store.set(TOKEN_KEY, token)
        self.store.set(USERNAME_KEY, username)
        return CachedSession(token=token, username=username)

    def clear(self) -> None:
        self.store.delete(TOKEN_KEY)
        self.store.delete(USERNAME_KEY)


__all__ = [
    "CachedSession",
    "DARK_MODE_KEY",
    "Preferences",
    "SessionCache",
    "TOKEN_KEY",
    "USERNAME_KEY",
]
