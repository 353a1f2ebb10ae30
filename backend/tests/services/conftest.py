"""Service test fixtures — async DB, FastAPI test client, seeded artists.

Invariants:
    - Every test gets a fresh in-memory SQLite database
    - get_db dependency overridden to use test DB session
    - db_manager patched so the readiness probe sees the test engine
    - concurrent_factory gives each coroutine its own connection to one file DB

Design Decisions:
    - SQLite in-memory: fast, no external dependency, sufficient for route tests
    - Concurrency tests use a file DB with BEGIN IMMEDIATE: SQLite ignores
      FOR UPDATE / FOR SHARE, so write transactions are serialized at BEGIN
      instead, the same guarantee the row locks give on PostgreSQL
"""

from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest
from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)
from sqlalchemy.pool import NullPool
from httpx import ASGITransport, AsyncClient

from tunely.db.base import Base
from tunely.db.session import create_session_factory
from tunely.infrastructure.database import get_db, DatabaseSessionManager
from tunely.models.artist import Artist
import tunely.infrastructure.database as db_module
from tunely.main import app


class FakeClock:
    """Deterministic clock: every call is one second after the previous one."""

    def __init__(self, start: datetime | None = None):
        self.now = start or datetime(2026, 9, 1, 20, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        self.now += timedelta(seconds=1)
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine):
    return async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False,
    )


@pytest.fixture
async def test_db(test_session_factory):
    async with test_session_factory() as session:
        yield session


@pytest.fixture
async def client(test_engine, test_session_factory):
    """FastAPI test client with DB dependency overridden."""
    async def override_get_db():
        async with test_session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db

    original_manager = db_module.db_manager
    fake_manager = DatabaseSessionManager.__new__(DatabaseSessionManager)
    fake_manager.engine = test_engine
    fake_manager._session_factory = test_session_factory
    db_module.db_manager = fake_manager

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
    db_module.db_manager = original_manager


async def _add_artist(db: AsyncSession, handle: str) -> Artist:
    artist = Artist(id=uuid4(), handle=handle, display_name=handle.title())
    db.add(artist)
    await db.commit()
    return artist


@pytest.fixture
async def seed_artist(test_db):
    """Insert one artist directly into the test DB."""
    return await _add_artist(test_db, "mina")


@pytest.fixture
async def other_artist(test_db):
    return await _add_artist(test_db, "rafa")


@pytest.fixture
async def concurrent_factory(tmp_path):
    """Session factory over a file DB where every connection is independent."""
    engine, factory = create_session_factory(
        f"sqlite+aiosqlite:///{tmp_path / 'concurrency.db'}",
        poolclass=NullPool,
        connect_args={"timeout": 30},
    )

    @event.listens_for(engine.sync_engine, "connect")
    def _autocommit_driver(dbapi_connection, connection_record):
        # Let SQLAlchemy emit BEGIN itself
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _begin_immediate(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield factory
    await engine.dispose()
