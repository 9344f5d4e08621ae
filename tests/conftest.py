"""
tests/conftest.py -- Shared test fixtures for AuthGate.

This module provides:
  - make_store(): an isolated SQLite-file UserStore with the schema created
  - seed_users(): alice/hunter2, dave/correct-horse, frank/open-sesame, and a record with no hash
  - store: function-scoped seeded store for unit tests
  - api_client: TestClient against the real app with a patched lifespan

Design: each store gets its own SQLite file under pytest's tmp_path so tests
never share state and TestClient's threadpool workers all see the same DB.

DEBUG, ADMIN_CODE, and BCRYPT_ROUNDS must be set before any auth/core import:
get_settings() is cached, DEBUG lets it auto-generate JWT_SECRET, and 4 rounds
keeps bcrypt fast.
"""

from __future__ import annotations

import os
from collections.abc import Generator
from contextlib import asynccontextmanager
from pathlib import Path

# Set before any auth/core import -- get_settings() is cached on first call.
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("ADMIN_CODE", "667")
os.environ.setdefault("BCRYPT_ROUNDS", "4")

import pytest
from fastapi.testclient import TestClient

from api.main import app
from auth.models import User
from auth.store import UserStore
from auth.tokens import hash_password
from core.config import get_settings
from core.database import Database

ADMIN_CODE = "667"


# ---------------------------------------------------------------------------
# Store helpers
# ---------------------------------------------------------------------------


def make_store(db_path: Path) -> UserStore:
    """Build a UserStore on a fresh SQLite file and create the users table."""
    settings = get_settings().model_copy(update={"database_url": f"sqlite:///{db_path}"})
    store = UserStore(Database(settings))
    store.ensure_schema()
    return store


def seed_users(store: UserStore) -> None:
    store.create_user(User(username="alice", password_hash=hash_password("hunter2")))
    store.create_user(User(username="dave", password_hash=hash_password("correct-horse")))
    store.create_user(User(username="frank", password_hash=hash_password("open-sesame")))
    store.create_user(User(username="nohash", password_hash=None))


def _patch_lifespan(user_store: UserStore):
    """Return an async context manager that replaces the real lifespan.

    Wires the pre-created test store into app.state so routes see the
    isolated test DB rather than DATABASE_URL.
    """

    @asynccontextmanager
    async def test_lifespan(app):
        app.state.user_store = user_store
        yield

    return test_lifespan


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def store(tmp_path: Path) -> Generator[UserStore, None, None]:
    user_store = make_store(tmp_path / "auth.db")
    seed_users(user_store)
    yield user_store
    user_store.close()


@pytest.fixture(scope="module")
def api_client(tmp_path_factory) -> Generator[tuple[TestClient, UserStore], None, None]:
    """Yield (client, store) for API integration tests.

    One TestClient per test module. Tests that change a password use their
    own user so they don't disturb the seeded alice record.
    """
    user_store = make_store(tmp_path_factory.mktemp("api") / "auth.db")
    seed_users(user_store)

    app.router.lifespan_context = _patch_lifespan(user_store)

    with TestClient(app, raise_server_exceptions=True) as client:
        yield client, user_store

    user_store.close()
