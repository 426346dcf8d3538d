"""
tests/conftest.py -- Shared test fixtures for TeamGate.

This module provides:
  - _make_test_stores(): isolated in-memory DB shared by the user and team stores
  - _patch_lifespan(): wires test stores into app.state, bypassing real startup
  - stores / client: fresh stores and a TestClient per test
  - admin_token / user_token: bearer tokens for a pre-created admin and regular user

Design: Named shared-memory SQLite URIs (not plain :memory:) are required
because TestClient runs sync route handlers in a thread pool. Plain :memory:
DBs are per-connection and would present a blank schema to each worker thread.
Every test gets its own DB name, so ids start at 1 in every test.

DEBUG and LOGIN_RATE_LIMIT must be set before any auth/api import: get_settings()
is cached on first use and auth.tokens reads the secret key at import time.
"""

from __future__ import annotations

import os
import uuid
from collections.abc import Generator
from contextlib import asynccontextmanager

# CRITICAL: set before any auth/core/api import.
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("LOGIN_RATE_LIMIT", "1000/minute")

import pytest
from fastapi.testclient import TestClient

from api.main import app
from auth.models import User
from auth.store import UserStore
from auth.tokens import create_access_token, hash_password
from teams.store import TeamStore

# ---------------------------------------------------------------------------
# Store helpers
# ---------------------------------------------------------------------------


def _make_test_stores(db_suffix: str) -> tuple[UserStore, TeamStore]:
    """Create both stores on one named shared-memory SQLite database."""
    url = f"sqlite:///file:test_teamgate_{db_suffix}?mode=memory&cache=shared&uri=true"
    return UserStore(db_url=url), TeamStore(db_url=url)


def _patch_lifespan(user_store: UserStore, team_store: TeamStore):
    """Return an async context manager that replaces the real lifespan."""

    @asynccontextmanager
    async def test_lifespan(app):
        app.state.user_store = user_store
        app.state.team_store = team_store
        yield

    return test_lifespan


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def stores() -> Generator[tuple[UserStore, TeamStore], None, None]:
    user_store, team_store = _make_test_stores(uuid.uuid4().hex)
    yield user_store, team_store
    user_store.close()
    team_store.close()


@pytest.fixture
def user_store(stores) -> UserStore:
    return stores[0]


@pytest.fixture
def team_store(stores) -> TeamStore:
    return stores[1]


@pytest.fixture
def client(stores) -> Generator[TestClient, None, None]:
    """TestClient on the real app with the lifespan swapped for the test stores."""
    user_store, team_store = stores
    app.router.lifespan_context = _patch_lifespan(user_store, team_store)
    with TestClient(app, raise_server_exceptions=True) as c:
        yield c


@pytest.fixture
def admin_user(user_store: UserStore) -> User:
    admin = User(username="root", hashed_password=hash_password("rootpass"), role="admin")
    user_store.create_user(admin)
    return admin


@pytest.fixture
def admin_token(admin_user: User) -> str:
    return create_access_token(admin_user.id, admin_user.username, admin_user.role)


@pytest.fixture
def regular_user(user_store: UserStore) -> User:
    user = User(username="bob", hashed_password=hash_password("bobpass"))
    user_store.create_user(user)
    return user


@pytest.fixture
def user_token(regular_user: User) -> str:
    return create_access_token(regular_user.id, regular_user.username, regular_user.role)
