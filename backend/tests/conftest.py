"""Pytest fixtures: a fresh app and in-memory SQLite database per test.

Each test gets its own application instance. Flask-SQLAlchemy binds
``sqlite:///:memory:`` through a static pool, so every app owns a private
database that disappears with it.
"""

from __future__ import annotations

from collections.abc import Generator
from datetime import timedelta
from typing import Any

import pytest
from flask import Flask

from accounts.core.config import TestingConfig
from accounts.core.extensions import db as _db
from accounts.factory import create_app
from accounts.infra.jwt.token_codec import JWTTokenCodec
from accounts.infra.security.password_hasher import WerkzeugPasswordHasher
from accounts.services._shared.ports import InMemoryCredentialStore
from accounts.services.sessions import SessionConfig, SessionManager
from tests.factories import SQLAlchemySession
from tests.helpers.utils import TEST_PASSWORD, FakeClock


@pytest.fixture()
def app() -> Generator[Flask, None, None]:
    """Create the application with :class:`TestingConfig` and its schema."""
    application = create_app(TestingConfig)
    with application.app_context():
        _db.create_all()
        yield application
        _db.session.remove()
        _db.drop_all()


@pytest.fixture()
def session(app: Flask) -> Any:
    """Flask-scoped SQLAlchemy session, also wired into Factory Boy."""
    SQLAlchemySession.set(_db.session)
    yield _db.session
    SQLAlchemySession.set(None)


@pytest.fixture()
def client(app: Flask) -> Any:
    """Test client without a cookie jar; tests send cookies explicitly."""
    return app.test_client(use_cookies=False)


@pytest.fixture()
def hasher() -> WerkzeugPasswordHasher:
    return WerkzeugPasswordHasher(method=TestingConfig.PASSWORD_HASH_METHOD)


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def session_cfg() -> SessionConfig:
    return SessionConfig(
        secret=TestingConfig.JWT_SECRET_KEY,
        access_ttl=timedelta(minutes=15),
        refresh_ttl=timedelta(days=10),
    )


@pytest.fixture()
def codec(session_cfg: SessionConfig, clock: FakeClock) -> JWTTokenCodec:
    return JWTTokenCodec(session_cfg, clock=clock)


@pytest.fixture()
def store() -> InMemoryCredentialStore:
    return InMemoryCredentialStore()


@pytest.fixture()
def manager(
    session_cfg: SessionConfig,
    codec: JWTTokenCodec,
    store: InMemoryCredentialStore,
    hasher: WerkzeugPasswordHasher,
) -> SessionManager:
    """Session manager wired to the in-memory store and a fake clock."""
    return SessionManager(cfg=session_cfg, codec=codec, store=store, hasher=hasher)


@pytest.fixture()
def stored_account(store: InMemoryCredentialStore, hasher: WerkzeugPasswordHasher):
    """Account ``u1`` with password :data:`TEST_PASSWORD` and no session."""
    return store.add(
        username="u1",
        email="u1@example.com",
        password_hash=hasher.hash(TEST_PASSWORD),
    )
