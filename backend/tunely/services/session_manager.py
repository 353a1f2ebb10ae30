"""Session Manager — Active -> Ended state machine with per-artist serialization.

Invariants:
    - At most one active session per artist at any instant
    - Starting a session force-ends the artist's current one in the same transaction
    - Ending stamps end_time and finalizes earnings over ALL items ever admitted
    - A session ends exactly once; the second attempt raises SessionNotActiveError

Design Decisions:
    - The artist lock is taken before the first query so no transaction is
      open while waiting for it
    - A unique-index violation means another process won the race: rolled
      back and reported as ConflictError, never retried here
"""

import logging
from collections.abc import Callable
from datetime import datetime, timezone

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from tunely.core.domain_types import ArtistId, SessionId
from tunely.core.enforce_session import check_can_end, check_owner
from tunely.core.errors import ConflictError, ErrorContext, ResourceNotFoundError
from tunely.core.repository_protocols import (
    ArtistRepository, QueueItemRepository, SessionLike, SessionRepository,
)
from tunely.core.session_earnings import finalize_earnings
from tunely.infrastructure.artist_locks import ArtistLocks, artist_locks
from tunely.infrastructure.repositories import (
    SqlArtistRepository, SqlQueueItemRepository, SqlSessionRepository,
)

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class SessionManager:
    """Start, end, and look up performer sessions."""

    def __init__(
        self,
        db: AsyncSession,
        locks: ArtistLocks = artist_locks,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.db = db
        self.artists: ArtistRepository = SqlArtistRepository(db)
        self.sessions: SessionRepository = SqlSessionRepository(db)
        self.items: QueueItemRepository = SqlQueueItemRepository(db)
        self._locks = locks
        self._clock = clock

    async def start_session(self, artist_id: ArtistId) -> SessionLike:
        """Open a new session, ending the artist's active one first."""
        async with self._locks.hold(artist_id):
            if await self.artists.get(artist_id) is None:
                raise ResourceNotFoundError("Artist", str(artist_id))

            now = self._clock()
            try:
                previous = await self.sessions.get_active_for_artist(
                    artist_id, lock="update",
                )
                if previous is not None:
                    await self._finalize(previous, now)
                    logger.info(
                        "Force-ended previous session on restart",
                        extra={"artist_id": artist_id, "session_id": previous.id},
                    )
                session = await self.sessions.create(artist_id, started_at=now)
                await self.db.commit()
            except IntegrityError:
                await self.db.rollback()
                logger.warning(
                    "Concurrent session start rejected",
                    extra={"artist_id": artist_id, "error_code": "CONFLICT"},
                )
                raise ConflictError(
                    "Another session was started for this artist at the same time",
                    ErrorContext(artist_id=str(artist_id)),
                )

        logger.info(
            "Session started",
            extra={"artist_id": artist_id, "session_id": session.id},
        )
        return session

    async def end_session(
        self, session_id: SessionId, artist_id: ArtistId | None = None,
    ) -> SessionLike:
        """End an active session and stamp its final earnings."""
        session = await self.sessions.get(session_id)
        if session is None:
            raise ResourceNotFoundError("Session", str(session_id))
        check_owner(session, artist_id)

        async with self._locks.hold(session.artist_id):
            session = await self.sessions.get(session_id, lock="update")
            check_can_end(session)
            await self._finalize(session, self._clock())
            await self.db.commit()

        logger.info(
            f"Session ended with earnings {session.total_earnings}",
            extra={"artist_id": session.artist_id, "session_id": session.id},
        )
        return session

    async def get_active_session(self, artist_id: ArtistId) -> SessionLike | None:
        return await self.sessions.get_active_for_artist(artist_id)

    async def get_session(self, session_id: SessionId) -> SessionLike:
        session = await self.sessions.get(session_id)
        if session is None:
            raise ResourceNotFoundError("Session", str(session_id))
        return session

    async def _finalize(self, session: SessionLike, ended_at: datetime) -> None:
        amounts = await self.items.list_tip_amounts(session.id)
        await self.sessions.mark_ended(
            session, ended_at, finalize_earnings(amounts),
        )
