"""
tests/conftest.py -- Shared test fixtures for FieldBook.

This module provides:
  - unit fixtures: in-memory UserStore / FarmStore, a recording emitter, and
    AuthService / FarmService wired to them
  - _make_test_stores(): isolated named shared-memory DBs for API tests
  - _patch_lifespan(): wires test stores into app.state, bypassing real startup
  - api_client: (TestClient, outbox) for API integration tests
  - verified_user: factory that registers, verifies and logs in an account
    through the HTTP API and returns its Bearer headers

Design: Named shared-memory SQLite URIs (not plain :memory:) are required
for the API fixtures because TestClient runs sync route handlers in a thread
pool. Plain :memory: DBs are per-connection and would present a blank schema
to each worker thread.

DEBUG and RATE_LIMIT_ENABLED must be set before any app import: DEBUG so
get_settings() auto-generates SECRET_KEY, RATE_LIMIT_ENABLED so the login
limit does not throttle a test module that logs in many times.
"""

from __future__ import annotations

import os
from collections.abc import Callable, Generator
from contextlib import asynccontextmanager

# CRITICAL: Set before any auth/core/api import.
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")

import pytest
from fastapi.testclient import TestClient

from api.main import app
from auth.service import AuthService
from auth.store import UserStore
from core.events import NOTIFICATION_EVENTS, EventEmitter
from farm.service import FarmService
from farm.store import FarmStore

Outbox = list[tuple[str, dict]]


def _recording_emitter(outbox: Outbox) -> EventEmitter:
    """Emitter whose only listener appends (event, payload) to outbox."""
    emitter = EventEmitter()
    for name in NOTIFICATION_EVENTS:
        emitter.on(name, lambda payload, name=name: outbox.append((name, payload)))
    return emitter


def last_code(outbox: Outbox, event: str, email: str) -> str:
    """Return the most recent one-time code sent to email for event."""
    for name, payload in reversed(outbox):
        if name == event and payload["to"] == email:
            return payload["data"]["token"]
    raise AssertionError(f"no {event} sent to {email}")


# ---------------------------------------------------------------------------
# Unit fixtures -- one fresh in-memory DB per test
# ---------------------------------------------------------------------------


@pytest.fixture
def user_store() -> Generator[UserStore, None, None]:
    store = UserStore("sqlite:///:memory:")
    yield store
    store.close()


@pytest.fixture
def farm_store() -> Generator[FarmStore, None, None]:
    store = FarmStore("sqlite:///:memory:")
    yield store
    store.close()


@pytest.fixture
def outbox() -> Outbox:
    return []


@pytest.fixture
def auth_service(user_store: UserStore, outbox: Outbox) -> AuthService:
    return AuthService(user_store, _recording_emitter(outbox))


@pytest.fixture
def farm_service(farm_store: FarmStore, user_store: UserStore) -> FarmService:
    return FarmService(farm_store, user_store)


# ---------------------------------------------------------------------------
# API fixtures
# ---------------------------------------------------------------------------


def _make_test_stores(db_suffix: str) -> tuple[UserStore, FarmStore]:
    """Create isolated named shared-memory SQLite stores for one test module.

    Args:
        db_suffix: Unique string appended to the DB name so test modules
                   don't share state.
    """
    url = f"sqlite:///file:test_fieldbook_{db_suffix}?mode=memory&cache=shared&uri=true"
    return UserStore(db_url=url), FarmStore(db_url=url)


def _patch_lifespan(user_store: UserStore, farm_store: FarmStore, outbox: Outbox):
    """Return an async context manager that replaces the real lifespan."""

    @asynccontextmanager
    async def test_lifespan(app):
        app.state.user_store = user_store
        app.state.farm_store = farm_store
        app.state.emitter = _recording_emitter(outbox)
        app.state.auth_service = AuthService(user_store, app.state.emitter)
        app.state.farm_service = FarmService(farm_store, user_store)
        yield

    return test_lifespan


@pytest.fixture(scope="module")
def api_client(request) -> Generator[tuple[TestClient, Outbox], None, None]:
    """Yield (client, outbox) for API integration tests.

    The TestClient uses the real FastAPI app with a patched lifespan, so
    tests hit real route handlers but use isolated in-memory stores. Every
    notification the app emits lands in outbox.
    """
    user_store, farm_store = _make_test_stores(request.module.__name__.replace(".", "_"))
    outbox: Outbox = []

    app.router.lifespan_context = _patch_lifespan(user_store, farm_store, outbox)

    with TestClient(app, raise_server_exceptions=True) as client:
        yield client, outbox

    farm_store.close()
    user_store.close()


@pytest.fixture(scope="module")
def verified_user(api_client) -> Callable[[str, str], dict]:
    """Return a factory: (email, username) -> Authorization headers.

    Registers the account, triggers and submits the verification code, then
    logs in again for a session token.
    """
    client, outbox = api_client

    def _make(email: str, username: str, password: str = "correct-horse") -> dict:
        resp = client.post(
            "/api/v1/auth/register",
            json={
                "email": email,
                "username": username,
                "firstname": username.title(),
                "lastname": "Tester",
                "password": password,
            },
        )
        assert resp.status_code == 201, resp.text
        client.post("/api/v1/auth/login", json={"email": email, "password": password})
        code = last_code(outbox, "send-verification", email)
        assert client.post("/api/v1/auth/verify", json={"email": email, "token": code}).status_code == 200
        token = client.post("/api/v1/auth/login", json={"email": email, "password": password}).json()["access_token"]
        return {"Authorization": f"Bearer {token}"}

    return _make


@pytest.fixture
def read_code() -> Callable[[Outbox, str, str], str]:
    """Expose last_code() to test modules: read_code(outbox, event, email)."""
    return last_code
