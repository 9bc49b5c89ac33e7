"""FastAPI routes for account signup, signin and the protected check."""

from __future__ import annotations

import redis
from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from passlib.context import CryptContext

from ..auth.security import create_password_context
from ..auth.users import InMemoryUserStore, RedisUserStore, UserStore
from ..errors import InvalidCredentials
from .model import (
    CredentialsRequest,
    ErrorResponse,
    ProtectedResponse,
    SigninResponse,
    SignupResponse,
)
from .service import (
    ApiSettings,
    authenticate_token,
    protected_service,
    signin_service,
    signup_service,
)

bearer_scheme = HTTPBearer(auto_error=False)


def get_settings(request: Request) -> ApiSettings:
    settings = getattr(request.app.state, "settings", None)
    if not isinstance(settings, ApiSettings):
        raise RuntimeError("API settings have not been initialised")
    return settings


def build_user_store(settings: ApiSettings) -> UserStore:
    if settings.user_store == "memory":
        return InMemoryUserStore()
    return RedisUserStore(redis.Redis.from_url(settings.redis_url))


def get_user_store(
    request: Request,
    settings: ApiSettings = Depends(get_settings),
) -> UserStore:
    user_store = getattr(request.app.state, "user_store", None)
    if user_store is None:
        user_store = build_user_store(settings)
        request.app.state.user_store = user_store
    return user_store


def get_password_context(
    request: Request,
    settings: ApiSettings = Depends(get_settings),
) -> CryptContext:
    context = getattr(request.app.state, "password_context", None)
    if context is None:
        context = create_password_context(settings.bcrypt_rounds)
        request.app.state.password_context = context
    return context


def get_current_claims(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    settings: ApiSettings = Depends(get_settings),
) -> dict:
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="No token provided",
            headers={"WWW-Authenticate": "Bearer"},
        )
    try:
        return authenticate_token(credentials.credentials, settings)
    except InvalidCredentials as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=exc.message,
            headers={"WWW-Authenticate": "Bearer"},
        ) from exc


router = APIRouter()


@router.post(
    "/api/auth/signup",
    response_model=SignupResponse,
    responses={400: {"model": ErrorResponse}},
)
async def signup(
    payload: CredentialsRequest,
    user_store: UserStore = Depends(get_user_store),
    password_context: CryptContext = Depends(get_password_context),
) -> SignupResponse:
    return signup_service(payload.username, payload.password, user_store, password_context)


@router.post(
    "/api/auth/signin",
    response_model=SigninResponse,
    responses={401: {"model": ErrorResponse}},
)
async def signin(
    payload: CredentialsRequest,
    user_store: UserStore = Depends(get_user_store),
    password_context: CryptContext = Depends(get_password_context),
    settings: ApiSettings = Depends(get_settings),
) -> SigninResponse:
    return signin_service(payload.username, payload.password, user_store, password_context, settings)


@router.get(
    "/api/protected",
    response_model=ProtectedResponse,
    responses={401: {"model": ErrorResponse}},
)
async def protected(claims: dict = Depends(get_current_claims)) -> ProtectedResponse:
    return protected_service(claims)


__all__ = ["router", "get_settings", "get_user_store", "get_password_context", "build_user_store"]
