"""Database Session Manager — engine, per-request sessions, driver error mapping.

Invariants:
    - A session that raises is rolled back before the error leaves the context
    - SQLAlchemy errors leave as DatabaseError (503); domain errors pass through
    - Pool sizing applies to server databases only; SQLite keeps its own pool

Design Decisions:
    - Services that expect an IntegrityError (start-session race, handle taken)
      catch it inside the session, so it never reaches the mapping below
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator

from sqlalchemy import text
from sqlalchemy.exc import (
    DBAPIError, IntegrityError, OperationalError, SQLAlchemyError,
)
from sqlalchemy.ext.asyncio import AsyncSession

from tunely.core.errors import DatabaseError
from tunely.db.session import create_session_factory

logger = logging.getLogger(__name__)

# Most specific first: IntegrityError and OperationalError are DBAPIErrors
_ERROR_MAP: tuple[tuple[type[SQLAlchemyError], str, str], ...] = (
    (IntegrityError, "commit", "Integrity constraint violated"),
    (OperationalError, "execute", "Database unavailable or busy"),
    (DBAPIError, "query", "Database driver error"),
    (SQLAlchemyError, "unknown", "Database operation failed"),
)


def to_database_error(error: SQLAlchemyError) -> DatabaseError:
    for error_type, operation, message in _ERROR_MAP:
        if isinstance(error, error_type):
            return DatabaseError(message, operation)
    return DatabaseError("Database operation failed", "unknown")


def engine_options(database_url: str, pool_size: int, max_overflow: int) -> dict[str, Any]:
    options: dict[str, Any] = {"pool_pre_ping": True}
    if not database_url.startswith("sqlite"):
        options.update(
            pool_size=pool_size, max_overflow=max_overflow, pool_recycle=3600,
        )
    return options


class DatabaseSessionManager:
    """Owns the engine and hands out sessions that roll back on failure."""

    def __init__(
        self, database_url: str, pool_size: int = 20, max_overflow: int = 10,
    ):
        self.engine, self._session_factory = create_session_factory(
            database_url, **engine_options(database_url, pool_size, max_overflow),
        )

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        async with self._session_factory() as session:
            try:
                yield session
            except SQLAlchemyError as e:
                await session.rollback()
                mapped = to_database_error(e)
                logger.error(
                    f"{mapped.message} ({type(e).__name__})",
                    extra={"error_code": mapped.code},
                )
                raise mapped from e
            except Exception:
                await session.rollback()
                raise

    async def health_check(self) -> bool:
        try:
            async with self.session() as db:
                await db.execute(text("SELECT 1"))
        except DatabaseError:
            return False
        return True

    async def dispose(self) -> None:
        await self.engine.dispose()


# Created by the app lifespan
db_manager: DatabaseSessionManager | None = None


def init_db(database_url: str, **kwargs) -> DatabaseSessionManager:
    global db_manager
    db_manager = DatabaseSessionManager(database_url, **kwargs)
    return db_manager


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency: one session per request."""
    if not db_manager:
        raise RuntimeError("Database not initialized")
    async with db_manager.session() as session:
        yield session
