"""Authentication: password hashing, tokens, user records and the client gateway."""

from .client import AuthGateway
from .security import create_access_token, decode_access_token, get_password_hash, verify_password
from .users import InMemoryUserStore, RedisUserStore, UserRecord

__all__ = [
    "AuthGateway",
    "InMemoryUserStore",
    "RedisUserStore",
    "UserRecord",
    "create_access_token",
    "decode_access_token",
    "get_password_hash",
    "verify_password",
]
