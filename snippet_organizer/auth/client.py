"""Client for the authentication service, caching the signed-in identity."""

from __future__ import annotations

import logging
from typing import Any, Dict

import httpx

from ..errors import DuplicateUsername, InvalidCredentials, NetworkFailure, SnippetOrganizerError
from ..storage.preferences import CachedSession, SessionCache

logger = logging.getLogger("snippet_organizer")


class AuthGateway:
    """Exchange credentials for a bearer token against the auth service.

    No retries and no timeout beyond httpx's default.
    """

    def __init__(
        self,
        base_url: str,
        session_cache: SessionCache,
        *,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.session_cache = session_cache
        self._transport = transport

    def signup(self, username: str, password: str) -> Dict[str, Any]:
        response = self._post("/api/auth/signup", {"username": username, "password": password})
        if response.status_code == 400:
            raise DuplicateUsername(_error_message(response, DuplicateUsername.default_message))
        data = self._json_or_fail(response)
        user = data.get("user") or {}
        return {"username": user.get("username", username)}

    def signin(self, username: str, password: str) -> CachedSession:
        response = self._post("/api/auth/signin", {"username": username, "password": password})
        if response.status_code == 401:
            raise InvalidCredentials(_error_message(response, InvalidCredentials.default_message))
        data = self._json_or_fail(response)
        token = data.get("token")
        if not token:
            raise SnippetOrganizerError("Sign-in response did not include a token")
        session = self.session_cache.remember(str(token), str(data.get("username") or username))
        logger.info("Signed in as %s", session.username)
        return session

    def protected(self) -> Dict[str, Any]:
        """Call the protected endpoint with the cached token."""
        session = self.session_cache.get()
        if session is None:
            raise InvalidCredentials("Not signed in")
        try:
            with self._client() as client:
                response = client.get(
                    "/api/protected",
                    headers={"Authorization": f"Bearer {session.token}"},
                )
        except httpx.HTTPError as exc:
            logger.warning("Protected request failed: %s", exc)
            raise NetworkFailure() from exc
        if response.status_code == 401:
            raise InvalidCredentials(_error_message(response, "Session expired"))
        return self._json_or_fail(response)

    def logout(self) -> None:
        self.session_cache.clear()

    def current_user(self) -> str | None:
        session = self.session_cache.get()
        return session.username if session else None

    def _post(self, path: str, payload: Dict[str, Any]) -> httpx.Response:
        try:
            with self._client() as client:
                return client.post(path, json=payload)
        except httpx.HTTPError as exc:
            logger.warning("Request to %s failed: %s", path, exc)
            raise NetworkFailure() from exc

    def _client(self) -> httpx.Client:
        kwargs: Dict[str, Any] = {"base_url": self.base_url}
        if self._transport is not None:
            kwargs["transport"] = self._transport
        return httpx.Client(**kwargs)

    @staticmethod
    def _json_or_fail(response: httpx.Response) -> Dict[str, Any]:
        if response.is_success:
            try:
                data = response.json()
            except ValueError as exc:
                raise NetworkFailure() from exc
            if isinstance(data, dict):
                return data
        raise SnippetOrganizerError(_error_message(response, f"Unexpected response ({response.status_code})"))


def _error_message(response: httpx.Response, default: str) -> str:
    try:
        data = response.json()
    except ValueError:
        return default
    if isinstance(data, dict) and isinstance(data.get("error"), str):
        return data["error"]
    return default


__all__ = ["AuthGateway"]
