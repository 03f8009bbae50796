"""Shared pytest fixtures for Desire tests.

Services run against a throwaway SQLite file per test (aiosqlite), so
concurrent sessions and SAVEPOINTs behave like they do on PostgreSQL.
"""
from __future__ import annotations

import os
import uuid
from collections.abc import AsyncIterator, Awaitable, Callable

# Settings are read when app.database is first imported.
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("SERIALIZE_PAIR_ACTIONS", "true")

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

import app.models  # noqa: F401  (registers every table on Base.metadata)
from app.api.deps import get_pair_lock
from app.database import Base, get_session_factory
from app.models.user import User
from app.security import create_access_token
from app.services.conversation_service import ConversationService
from app.services.favorite_service import FavoriteService
from app.services.matching_service import MatchingService
from app.services.notification_service import NotificationOutbox
from app.services.pair_lock import LocalPairLock
from app.services.profile_service import ProfileService


@pytest_asyncio.fixture
async def session_factory(tmp_path) -> AsyncIterator[async_sessionmaker[AsyncSession]]:
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'desire.db'}")

    # pysqlite's own transaction handling breaks SAVEPOINT; emit BEGIN ourselves.
    @event.listens_for(engine.sync_engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()


MakeUser = Callable[..., Awaitable[User]]


@pytest_asyncio.fixture
async def make_user(session_factory) -> MakeUser:
    """Insert a user; keyword arguments override the defaults."""
    counter = {"n": 0}

    async def _make(**overrides) -> User:
        counter["n"] += 1
        n = counter["n"]
        data = {
            "email": f"user{n}@example.com",
            "username": f"user{n}",
            "first_name": f"First{n}",
            "last_name": f"Last{n}",
            "age": 30,
            "gender": "female",
            "looking_for": "male",
            "photos": [],
            "interests": [],
        }
        data.update(overrides)
        user = User(**data)
        async with session_factory.begin() as session:
            session.add(user)
        return user

    return _make


@pytest.fixture
def pair_lock():
    return LocalPairLock(wait_seconds=5.0)


@pytest.fixture
def outbox(session_factory):
    return NotificationOutbox(session_factory)


@pytest.fixture
def matching_service(session_factory, outbox, pair_lock):
    return MatchingService(session_factory, outbox, pair_lock)


@pytest.fixture
def conversation_service(session_factory, outbox, pair_lock):
    return ConversationService(session_factory, outbox, pair_lock)


@pytest.fixture
def profile_service(session_factory):
    return ProfileService(session_factory)


@pytest.fixture
def favorite_service(session_factory):
    return FavoriteService(session_factory)


@pytest_asyncio.fixture
async def api_client(session_factory, pair_lock) -> AsyncIterator[AsyncClient]:
    from app.main import app

    app.dependency_overrides[get_session_factory] = lambda: session_factory
    app.dependency_overrides[get_pair_lock] = lambda: pair_lock
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
def auth():
    """Build a bearer header for a user id."""

    def _auth(user_id: uuid.UUID) -> dict[str, str]:
        return {"Authorization": f"Bearer {create_access_token(user_id)}"}

    return _auth
