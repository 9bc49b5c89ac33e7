"""Password hashing and bearer token helpers."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any

from jose import JWTError, jwt
from passlib.context import CryptContext

DEFAULT_BCRYPT_ROUNDS = 10
DEFAULT_TOKEN_TTL = timedelta(hours=2)


def create_password_context(rounds: int = DEFAULT_BCRYPT_ROUNDS) -> CryptContext:
    return CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=rounds)


pwd_context = create_password_context()


def get_password_hash(password: str, context: CryptContext | None = None) -> str:
    """Generate password hash."""
    return (context or pwd_context).hash(password)


def verify_password(plain_password: str, hashed_password: str, context: CryptContext | None = None) -> bool:
    """Verify a password against its hash."""
    try:
        return (context or pwd_context).verify(plain_password, hashed_password)
    except ValueError:
        # Unrecognised or corrupt stored hash.
        return False


def create_access_token(
    data: dict[str, Any],
    *,
    secret: str,
    algorithm: str = "HS256",
    expires_delta: timedelta | None = None,
) -> str:
    """Sign ``data`` into a token that expires after ``expires_delta``."""
    to_encode = data.copy()
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta if expires_delta is not None else DEFAULT_TOKEN_TTL)
    to_encode.update(
        {
            "exp": int(expire.timestamp()),
            "iat": int(now.timestamp()),
        }
    )
    return jwt.encode(to_encode, secret, algorithm=algorithm)


def decode_access_token(token: str, *, secret: str, algorithm: str = "HS256") -> dict[str, Any] | None:
    """Return the token claims, or None when the signature or expiry check fails."""
    try:
        payload = jwt.decode(token, secret, algorithms=[algorithm])
    except JWTError:
        return None
    if not payload.get("username"):
        return None
    return payload


__all__ = [
    "DEFAULT_BCRYPT_ROUNDS",
    "DEFAULT_TOKEN_TTL",
    "create_access_token",
    "create_password_context",
    "decode_access_token",
    "get_password_hash",
    "pwd_context",
    "verify_password",
]
