"""Async Session Factory — provides async DB sessions for direct usage outside FastAPI.

Invariants:
    - expire_on_commit=False, same as DatabaseSessionManager
    - Meant for scripts, migrations, and test fixtures

Design Decisions:
    - engine_options passed through so callers can pick the pool (NullPool for
      file-backed SQLite with many concurrent connections)
"""

from typing import Any

from sqlalchemy.ext.asyncio import (
    AsyncEngine, AsyncSession, create_async_engine, async_sessionmaker,
)


def create_session_factory(
    database_url: str, **engine_options: Any,
) -> tuple[AsyncEngine, async_sessionmaker[AsyncSession]]:
    """Create an engine and an async session factory bound to it."""
    engine = create_async_engine(database_url, echo=False, **engine_options)
    factory = async_sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False,
    )
    return engine, factory
