"""Service-layer helpers for account signup, signin and token checks."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from datetime import timedelta

from passlib.context import CryptContext

from ..auth.security import (
    DEFAULT_BCRYPT_ROUNDS,
    create_access_token,
    decode_access_token,
    get_password_hash,
    verify_password,
)
from ..auth.users import UserRecord, UserStore
from ..config import bool_env, int_env
from ..errors import DuplicateUsername, InvalidCredentials
from .model import ProtectedResponse, SigninResponse, SignupResponse, UserSummary

logger = logging.getLogger("snippet_organizer")

DEV_JWT_SECRET = "dev-secret-change-me"
DEMO_USERNAME = "demo"
DEMO_PASSWORD = "demo123"


@dataclass(slots=True)
class ApiSettings:
    """Runtime configuration for the API server."""

    redis_url: str = "redis://127.0.0.1:6379/0"
    user_store: str = "redis"
    jwt_secret: str = DEV_JWT_SECRET
    jwt_algorithm: str = "HS256"
    token_ttl_minutes: int = 120
    bcrypt_rounds: int = DEFAULT_BCRYPT_ROUNDS
    seed_demo_user: bool = True

    @property
    def token_ttl(self) -> timedelta:
        return timedelta(minutes=self.token_ttl_minutes)

    @classmethod
    def from_env(cls) -> "ApiSettings":
        jwt_secret = os.getenv("JWT_SECRET")
        if not jwt_secret:
            logger.warning("JWT_SECRET is not set; using the development secret")
            jwt_secret = DEV_JWT_SECRET

        return cls(
            redis_url=os.getenv("REDIS_URL", "redis://127.0.0.1:6379/0"),
            user_store=os.getenv("USER_STORE", "redis").strip().lower(),
            jwt_secret=jwt_secret,
            jwt_algorithm=os.getenv("JWT_ALGORITHM", "HS256"),
            token_ttl_minutes=int_env("TOKEN_TTL_MINUTES", 120),
            bcrypt_rounds=int_env("BCRYPT_ROUNDS", DEFAULT_BCRYPT_ROUNDS),
            seed_demo_user=bool_env("SEED_DEMO_USER", True),
        )


def signup_service(
    username: str,
    password: str,
    user_store: UserStore,
    password_context: CryptContext,
) -> SignupResponse:
    record = UserRecord(
        username=username,
        password_hash=get_password_hash(password, password_context),
    )
    user_store.create(record)
    logger.info("Created user %s", username)
    return SignupResponse(message="User created", user=UserSummary(username=record.username))


def signin_service(
    username: str,
    password: str,
    user_store: UserStore,
    password_context: CryptContext,
    settings: ApiSettings,
) -> SigninResponse:
    record = user_store.get(username)
    if record is None or not verify_password(password, record.password_hash, password_context):
        logger.info("Rejected sign-in for %s", username)
        raise InvalidCredentials()

    token = create_access_token(
        {"userId": record.id, "username": record.username},
        secret=settings.jwt_secret,
        algorithm=settings.jwt_algorithm,
        expires_delta=settings.token_ttl,
    )
    return SigninResponse(token=token, username=record.username)


def authenticate_token(token: str, settings: ApiSettings) -> dict:
    claims = decode_access_token(
        token,
        secret=settings.jwt_secret,
        algorithm=settings.jwt_algorithm,
    )
    if claims is None:
        raise InvalidCredentials("Invalid or expired token")
    return claims


def protected_service(claims: dict) -> ProtectedResponse:
    return ProtectedResponse(message=f"Hello, {claims['username']}")


def seed_demo_user(user_store: UserStore, password_context: CryptContext) -> bool:
    """Create the demo account when it does not exist yet."""
    if user_store.get(DEMO_USERNAME) is not None:
        return False
    try:
        signup_service(DEMO_USERNAME, DEMO_PASSWORD, user_store, password_context)
    except DuplicateUsername:
        return False
    logger.info("Demo user created: %s / %s", DEMO_USERNAME, DEMO_PASSWORD)
    return True


__all__ = [
    "ApiSettings",
    "DEMO_PASSWORD",
    "DEMO_USERNAME",
    "authenticate_token",
    "protected_service",
    "seed_demo_user",
    "signin_service",
    "signup_service",
]
