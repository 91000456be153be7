"""
tests/conftest.py -- Shared test fixtures for adboard.

This module provides:
  - fast_bcrypt (autouse): drops the bcrypt work factor so hashing is quick
  - user_store / ad_store: in-memory stores for unit tests
  - auth_service / ad_service: services wired to those stores
  - _patch_lifespan(): wires test stores into app.state, bypassing real startup
  - api_client: TestClient plus a registered user and bearer token

Design: Named shared-memory SQLite URIs (not plain :memory:) are required for
the API fixture because TestClient runs route handlers in a thread pool.
Plain :memory: DBs are per-connection and would present a blank schema to
each worker thread. The named URI format
(file:name?mode=memory&cache=shared&uri=true) shares one in-memory instance
across all connections in the same process.

Environment variables must be set before api.main is imported: the app reads
get_settings() at import time to configure TrustedHostMiddleware.
"""

from __future__ import annotations

import os
from collections.abc import Generator
from contextlib import asynccontextmanager

# CRITICAL: set before any core/api import so get_settings() sees them.
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("ALLOWED_HOSTS", '["testserver", "localhost"]')
os.environ.setdefault("LOGIN_RATE_LIMIT", "1000/minute")

import pytest
from fastapi.testclient import TestClient

import auth.passwords
from ads.service import AdService
from ads.store import AdStore
from api.main import app
from auth.service import AuthService
from auth.store import UserStore

TEST_SECRET_KEY = "test-secret-key-that-is-at-least-32-chars"
TEST_LOGIN = "testuser"
TEST_PASSWORD = "Testpass1!"


# ---------------------------------------------------------------------------
# Autouse
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def fast_bcrypt(monkeypatch):
    """bcrypt's minimum work factor keeps registration tests fast."""
    monkeypatch.setattr(auth.passwords, "BCRYPT_ROUNDS", 4)


# ---------------------------------------------------------------------------
# Unit-test stores and services
# ---------------------------------------------------------------------------


@pytest.fixture
def user_store() -> Generator[UserStore, None, None]:
    store = UserStore("sqlite:///:memory:")
    yield store
    store.close()


@pytest.fixture
def ad_store() -> Generator[AdStore, None, None]:
    store = AdStore("sqlite:///:memory:")
    yield store
    store.close()


@pytest.fixture
def auth_service(user_store: UserStore) -> AuthService:
    return AuthService(user_store, secret_key=TEST_SECRET_KEY, token_ttl_seconds=3600)


@pytest.fixture
def ad_service(ad_store: AdStore) -> AdService:
    return AdService(ad_store)


# ---------------------------------------------------------------------------
# API integration
# ---------------------------------------------------------------------------


def _make_test_stores(db_suffix: str) -> tuple[UserStore, AdStore]:
    """Create named shared-memory SQLite stores for one test module.

    Args:
        db_suffix: Unique string appended to the DB name so test modules
                   don't share state (e.g. 'api', 'health').
    """
    db_url = f"sqlite:///file:test_adboard_{db_suffix}?mode=memory&cache=shared&uri=true"
    return UserStore(db_url), AdStore(db_url)


def _patch_lifespan(user_store: UserStore, ad_store: AdStore):
    """Return an async context manager that replaces the real lifespan.

    Wires pre-created test stores and services into app.state so TestClient
    routes see isolated test DBs and a fixed secret key.
    """

    @asynccontextmanager
    async def test_lifespan(app):
        app.state.user_store = user_store
        app.state.ad_store = ad_store
        app.state.auth_service = AuthService(user_store, secret_key=TEST_SECRET_KEY, token_ttl_seconds=3600)
        app.state.ad_service = AdService(ad_store)
        yield

    return test_lifespan


@pytest.fixture(scope="module")
def api_client(request) -> Generator[tuple[TestClient, str, str], None, None]:
    """Yield (client, token, user_id) for API integration tests.

    The TestClient uses the real FastAPI app with a patched lifespan so
    tests hit real route handlers but use isolated in-memory stores.
    TEST_LOGIN is registered before the client starts and a bearer token
    is issued for it.
    """
    user_store, ad_store = _make_test_stores(request.module.__name__.rsplit(".", 1)[-1])

    # Module scope runs outside the function-scoped fast_bcrypt fixture.
    with pytest.MonkeyPatch.context() as mp:
        mp.setattr(auth.passwords, "BCRYPT_ROUNDS", 4)
        service = AuthService(user_store, secret_key=TEST_SECRET_KEY, token_ttl_seconds=3600)
        user = service.register(TEST_LOGIN, TEST_PASSWORD)
        token = service.authenticate(TEST_LOGIN, TEST_PASSWORD)

    app.router.lifespan_context = _patch_lifespan(user_store, ad_store)

    with TestClient(app, raise_server_exceptions=True) as client:
        yield client, token, user.id

    ad_store.close()
    user_store.close()
