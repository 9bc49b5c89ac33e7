"""User account records for the authentication service."""

from __future__ import annotations

import json
import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Protocol

import redis

from ..errors import DuplicateUsername

logger = logging.getLogger("snippet_organizer")


@dataclass(slots=True)
class UserRecord:
    """Stored account: username plus a one-way password hash."""

    username: str
    password_hash: str
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "username": self.username,
            "password_hash": self.password_hash,
            "created_at": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "UserRecord":
        return cls(
            id=str(data["id"]),
            username=str(data["username"]),
            password_hash=str(data["password_hash"]),
            created_at=cls._parse_datetime(data.get("created_at")),
        )

    @staticmethod
    def _parse_datetime(value: Any) -> datetime:
        if isinstance(value, str):
            try:
                return datetime.fromisoformat(value).astimezone(timezone.utc)
            except ValueError:
                pass
        return datetime.now(timezone.utc)


class UserStore(Protocol):
    def get(self, username: str) -> UserRecord | None: ...

    def create(self, record: UserRecord) -> UserRecord: ...


class InMemoryUserStore:
    def __init__(self) -> None:
        self._users: Dict[str, UserRecord] = {}

    def get(self, username: str) -> UserRecord | None:
        return self._users.get(username)

    def create(self, record: UserRecord) -> UserRecord:
        if record.username in self._users:
            raise DuplicateUsername()
        self._users[record.username] = record
        return record


class RedisUserStore:
    """Persist users in Redis, one JSON value per username."""

    KEY_PREFIX = "user:record:"

    def __init__(self, redis_client: redis.Redis) -> None:
        self.redis = redis_client

    def get(self, username: str) -> UserRecord | None:
        raw = self.redis.get(self._record_key(username))
        if raw is None:
            return None
        if isinstance(raw, bytes):
            raw = raw.decode("utf-8")
        try:
            return UserRecord.from_dict(json.loads(raw))
        except (TypeError, KeyError, json.JSONDecodeError):
            logger.warning("Unreadable user record for %s", username)
            return None

    def create(self, record: UserRecord) -> UserRecord:
        payload = json.dumps(record.to_dict(), separators=(",", ":"))
        # SET NX keeps two concurrent signups for one name from both succeeding.
        created = self.redis.set(self._record_key(record.username), payload, nx=True)
        if not created:
            raise DuplicateUsername()
        return record

    def _record_key(self, username: str) -> str:
        return f"{self.KEY_PREFIX}{username}"


__all__ = ["InMemoryUserStore", "RedisUserStore", "UserRecord", "UserStore"]
