import json

import httpx
import pytest

from snippet_organizer.auth.client import AuthGateway
from snippet_organizer.errors import DuplicateUsername, InvalidCredentials, NetworkFailure
from snippet_organizer.storage.kv import InMemoryKeyValueStore
from snippet_organizer.storage.preferences import SessionCache


def _make_gateway(handler):
    kv = InMemoryKeyValueStore()
    gateway = AuthGateway(
        "http://auth.test",
        SessionCache(kv),
        transport=httpx.MockTransport(handler),
    )
    return gateway, kv


def _fake_service(request: httpx.Request) -> httpx.Response:
    body = json.loads(request.content or b"{}")
    if request.url.path == "/api/auth/signup":
        if body["username"] == "taken":
            return httpx.Response(400, json={"error": "Username already exists"})
        return httpx.Response(200, json={"message": "User created", "user": {"username": body["username"]}})
    if request.url.path == "/api/auth/signin":
        if body == {"username": "demo", "password": "demo123"}:
            return httpx.Response(200, json={"token": "signed-token", "username": "demo"})
        return httpx.Response(401, json={"error": "Invalid credentials"})
    if request.url.path == "/api/protected":
        if request.headers.get("Authorization") == "Bearer signed-token":
            return httpx.Response(200, json={"message": "Hello, demo"})
        return httpx.Response(401, json={"error": "Invalid or expired token"})
    return httpx.Response(404)


def test_signin_caches_token_and_username():
    gateway, kv = _make_gateway(_fake_service)

    session = gateway.signin("demo", "demo123")

    assert session.token == "signed-token"
    assert kv.get("token") == "signed-token"
    assert kv.get("username") == "demo"
    assert gateway.current_user() == "demo"


def test_wrong_password_raises_and_caches_nothing():
    gateway, kv = _make_gateway(_fake_service)

    with pytest.raises(InvalidCredentials, match="Invalid credentials"):
        gateway.signin("demo", "nope")

    assert kv.get("token") is None
    assert gateway.current_user() is None


def test_signup_reports_duplicate_username():
    gateway, _ = _make_gateway(_fake_service)

    assert gateway.signup("fresh", "pw") == {"username": "fresh"}
    with pytest.raises(DuplicateUsername):
        gateway.signup("taken", "pw")


def test_transport_errors_become_network_failure():
    def _offline(request):
        raise httpx.ConnectError("connection refused", request=request)

    gateway, kv = _make_gateway(_offline)

    with pytest.raises(NetworkFailure, match="Network error"):
        gateway.signin("demo", "demo123")
    assert kv.get("token") is None


def test_protected_uses_cached_bearer_token():
    gateway, _ = _make_gateway(_fake_service)
    gateway.signin("demo", "demo123")

    assert gateway.protected() == {"message": "Hello, demo"}


def test_logout_discards_cached_session():
    gateway, kv = _make_gateway(_fake_service)
    gateway.signin("demo", "demo123")

    gateway.logout()

    assert kv.get("token") is None
    with pytest.raises(InvalidCredentials):
        gateway.protected()
