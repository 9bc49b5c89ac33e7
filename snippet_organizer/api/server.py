"""FastAPI application factory for the authentication service."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from ..auth.security import create_password_context
from ..auth.users import UserStore
from ..errors import DuplicateUsername, InvalidCredentials
from .route import build_user_store, router
from .service import ApiSettings, seed_demo_user

logger = logging.getLogger("snippet_organizer")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    settings: ApiSettings = app.state.settings
    if settings.seed_demo_user:
        try:
            seed_demo_user(app.state.user_store, app.state.password_context)
        except Exception:
            logger.exception("Failed to seed the demo user")
    yield


def _error_response(status_code: int, message: str, headers: dict | None = None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message}, headers=headers)


async def _duplicate_username_handler(_request: Request, exc: DuplicateUsername) -> JSONResponse:
    return _error_response(status.HTTP_400_BAD_REQUEST, exc.message)


async def _invalid_credentials_handler(_request: Request, exc: InvalidCredentials) -> JSONResponse:
    return _error_response(status.HTTP_401_UNAUTHORIZED, exc.message)


async def _validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.info("Rejected request to %s: %s", request.url.path, exc.errors())
    if request.url.path.endswith("/signin"):
        return _error_response(status.HTTP_401_UNAUTHORIZED, InvalidCredentials.default_message)
    return _error_response(status.HTTP_400_BAD_REQUEST, "Username and password are required")


async def _http_exception_handler(_request: Request, exc: StarletteHTTPException) -> JSONResponse:
    detail = exc.detail if isinstance(exc.detail, str) else "Request failed"
    return _error_response(exc.status_code, detail, getattr(exc, "headers", None))


def create_app(
    settings: ApiSettings | None = None,
    *,
    user_store: UserStore | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application."""

    settings = settings or ApiSettings.from_env()
    app = FastAPI(
        title="Snippet Organizer Auth API",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.user_store = user_store or build_user_store(settings)
    app.state.password_context = create_password_context(settings.bcrypt_rounds)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(DuplicateUsername, _duplicate_username_handler)
    app.add_exception_handler(InvalidCredentials, _invalid_credentials_handler)
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(RequestValidationError, _validation_error_handler)
    app.include_router(router)

    return app


__all__ = ["create_app", "lifespan"]
