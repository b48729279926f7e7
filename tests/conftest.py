"""
tests/conftest.py -- Shared test fixtures for the SSO service.

This module provides:
  - storage: isolated in-memory Storage per test
  - test_app: a registered client application in that storage
  - service: AuthService wired to that storage with a cheap bcrypt cost
  - api_client: TestClient over the real FastAPI app with a patched lifespan

Environment variables are set before any project import so get_settings()
picks up the in-memory database and the low bcrypt cost.
"""

from __future__ import annotations

import asyncio
import os
from collections.abc import Generator
from contextlib import asynccontextmanager
from datetime import timedelta

# Set before any core/auth import so get_settings() sees test values.
os.environ.setdefault("ENV", "local")
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("BCRYPT_ROUNDS", "4")

import pytest
from fastapi.testclient import TestClient

from api.main import app
from auth.models import App
from auth.service import AuthService
from storage.sqlite import Storage

TEST_ROUNDS = 4
TOKEN_TTL = timedelta(hours=1)
APP_SECRET = "test-secret-0123456789abcdef0123456789abcdef"


def _seed_app(storage: Storage, name: str = "test-app", secret: str = APP_SECRET) -> App:
    app_id = asyncio.run(storage.save_app(name, secret))
    return App(id=app_id, name=name, secret=secret)


def _make_service(storage: Storage) -> AuthService:
    return AuthService(
        user_saver=storage,
        user_provider=storage,
        app_provider=storage,
        token_ttl=TOKEN_TTL,
        bcrypt_rounds=TEST_ROUNDS,
    )


# ---------------------------------------------------------------------------
# Function-scoped fixtures -- fresh database per test
# ---------------------------------------------------------------------------


@pytest.fixture
def storage() -> Generator[Storage, None, None]:
    s = Storage("sqlite:///:memory:")
    yield s
    s.close()


@pytest.fixture
def test_app(storage: Storage) -> App:
    return _seed_app(storage)


@pytest.fixture
def service(storage: Storage) -> AuthService:
    return _make_service(storage)


# ---------------------------------------------------------------------------
# Module-scoped HTTP client -- one TestClient per test module for speed
# ---------------------------------------------------------------------------


def _patch_lifespan(storage: Storage):
    """Return a lifespan that wires the test storage into app.state."""

    @asynccontextmanager
    async def test_lifespan(app):
        app.state.storage = storage
        app.state.auth_service = _make_service(storage)
        yield

    return test_lifespan


@pytest.fixture(scope="module")
def api_client() -> Generator[tuple[TestClient, App], None, None]:
    """Yield (client, registered_app) for API integration tests.

    The TestClient uses the real FastAPI app with a patched lifespan so tests
    hit real route handlers but an isolated in-memory store. Emails must be
    unique per test because the store is shared across the module.
    """
    storage = Storage("sqlite:///:memory:")
    registered = _seed_app(storage)

    app.router.lifespan_context = _patch_lifespan(storage)

    with TestClient(app, raise_server_exceptions=True) as client:
        yield client, registered

    storage.close()
