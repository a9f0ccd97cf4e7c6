"""
tests/conftest.py -- Shared test fixtures for Gatehouse integration tests.

This module provides:
  - make_test_store(): creates an isolated in-memory user store
  - _patch_lifespan(): wires test collaborators into app.state, bypassing real startup
  - api_client: TestClient over the real app, with a seeded account and a mock mailer

Design: Named shared-memory SQLite URIs (not plain :memory:) are required
because TestClient runs sync route handlers in a thread pool. Plain :memory:
DBs are per-connection and would present a blank schema to each worker thread.

Environment must be set before any auth/core import: DEBUG lets get_settings()
auto-generate SECRET_KEY, ALLOWED_HOSTS admits TestClient's "testserver" host,
and the rate limits are raised so the suite never trips them by accident.
"""

from __future__ import annotations

import os
import uuid
from collections.abc import Generator
from contextlib import asynccontextmanager
from dataclasses import dataclass
from unittest.mock import MagicMock

os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("ALLOWED_HOSTS", '["testserver", "localhost"]')
os.environ.setdefault("LOGIN_RATE_LIMIT", "1000/minute")
os.environ.setdefault("FORGOT_PASSWORD_RATE_LIMIT", "1000/minute")

import pytest
from fastapi.testclient import TestClient

from api.main import app
from auth.models import User
from auth.store import UserStore
from auth.tokens import hash_password
from core.mailer import Mailer

SEED_EMAIL = "ada@example.com"
SEED_USER_NAME = "ada"
SEED_PASSWORD = "correct-horse-1"


@dataclass
class ApiHarness:
    client: TestClient
    user_store: UserStore
    mailer: MagicMock
    seed_user_id: int
    seed_email: str = SEED_EMAIL
    seed_user_name: str = SEED_USER_NAME
    seed_password: str = SEED_PASSWORD


# ---------------------------------------------------------------------------
# Store helpers
# ---------------------------------------------------------------------------


def make_test_store(db_suffix: str) -> UserStore:
    """Create an isolated named shared-memory SQLite store.

    Args:
        db_suffix: Unique string appended to the DB name so test modules
                   don't share state.
    """
    return UserStore(db_url=f"sqlite:///file:test_users_{db_suffix}?mode=memory&cache=shared&uri=true")


def _patch_lifespan(user_store: UserStore, mailer: MagicMock):
    """Return an async context manager that replaces the real lifespan."""

    @asynccontextmanager
    async def test_lifespan(app):
        app.state.user_store = user_store
        app.state.mailer = mailer
        yield

    return test_lifespan


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def store() -> Generator[UserStore, None, None]:
    """Fresh empty store per test."""
    s = make_test_store(f"unit_{uuid.uuid4().hex}")
    yield s
    s.close()


@pytest.fixture(scope="module")
def api(request) -> Generator[ApiHarness, None, None]:
    """Yield an ApiHarness with one seeded account (ada@example.com).

    One TestClient per test module for speed. The mailer is a MagicMock with
    Mailer's interface so tests can assert on the reset email without SMTP.
    Tests that need a pristine account should register their own.
    """
    user_store = make_test_store(request.module.__name__.replace(".", "_"))
    seed_id = user_store.create_user(
        User(
            first_name="Ada",
            last_name="Lovelace",
            user_name=SEED_USER_NAME,
            email=SEED_EMAIL,
            hashed_password=hash_password(SEED_PASSWORD),
        )
    )
    mailer = MagicMock(spec=Mailer)
    mailer.send_forgot_password_mail.return_value = True

    app.router.lifespan_context = _patch_lifespan(user_store, mailer)

    with TestClient(app, raise_server_exceptions=True) as client:
        yield ApiHarness(client=client, user_store=user_store, mailer=mailer, seed_user_id=seed_id)

    user_store.close()
