"""
tests/conftest.py -- Shared test fixtures for authsvc.

This module provides:
  - verifier / store / issuer / sessions / service: unit-level auth objects
    over a private in-memory SQLite database
  - api_client: TestClient for the real FastAPI app with a patched lifespan

Design: the API fixture uses named shared-memory SQLite URIs (not plain
:memory:) because TestClient runs sync route handlers in a thread pool. Plain
:memory: DBs are per-connection and would present a blank schema to each
worker thread. Each api_client gets a uniquely named DB so tests never see
each other's users. The pool is StaticPool, passed explicitly: one
connection shared by every thread keeps the in-memory DB alive for the
whole test.

bcrypt runs at 4 rounds (its minimum) to keep the suite fast.

The DEBUG env var must be set before any api/ or core/ import so
get_settings() auto-generates SECRET_KEY instead of raising ValueError.
"""

from __future__ import annotations

import os
import uuid
from collections.abc import Generator
from contextlib import asynccontextmanager

# CRITICAL: Set DEBUG before any api/core import.
os.environ.setdefault("DEBUG", "true")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool

from api.main import app, wire_auth
from auth.cookies import CookiePolicy
from auth.passwords import PasswordVerifier
from auth.service import AuthService
from auth.sessions import SessionRegistry
from auth.store import UserStore
from auth.tokens import TokenIssuer

TEST_SECRET = "test-secret-key-for-authsvc-0123456789abcdef"


# ---------------------------------------------------------------------------
# Unit fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def verifier() -> PasswordVerifier:
    return PasswordVerifier(rounds=4)


@pytest.fixture
def store(verifier: PasswordVerifier) -> Generator[UserStore, None, None]:
    s = UserStore("sqlite:///:memory:", verifier)
    yield s
    s.close()


@pytest.fixture
def issuer() -> TokenIssuer:
    return TokenIssuer(TEST_SECRET, access_expire_seconds=900, refresh_expire_seconds=864000)


@pytest.fixture
def sessions(store: UserStore, issuer: TokenIssuer) -> SessionRegistry:
    return SessionRegistry(store, issuer)


@pytest.fixture
def service(store: UserStore, sessions: SessionRegistry) -> AuthService:
    return AuthService(store, sessions)


# ---------------------------------------------------------------------------
# API fixture
# ---------------------------------------------------------------------------


def _patch_lifespan(store: UserStore, issuer: TokenIssuer, cookie_policy: CookiePolicy):
    """Return a lifespan that wires pre-built test objects into app.state."""

    @asynccontextmanager
    async def test_lifespan(app):
        wire_auth(app, store, issuer, cookie_policy)
        yield

    return test_lifespan


@pytest.fixture
def api_client() -> Generator[tuple[TestClient, UserStore], None, None]:
    """Yield (client, store) for API integration tests.

    The TestClient uses the real FastAPI app with a patched lifespan so tests
    hit real route handlers against an isolated in-memory store. The client
    keeps cookies between requests, like a browser would.
    """
    db_url = f"sqlite:///file:test_auth_{uuid.uuid4().hex}?mode=memory&cache=shared&uri=true"
    user_store = UserStore(db_url, PasswordVerifier(rounds=4), poolclass=StaticPool)
    issuer = TokenIssuer(TEST_SECRET)

    app.router.lifespan_context = _patch_lifespan(user_store, issuer, CookiePolicy(secure=False))

    with TestClient(app, raise_server_exceptions=True) as client:
        yield client, user_store

    user_store.close()
