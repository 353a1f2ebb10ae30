"""Queue Engine — admission, ordered snapshot, completion, and live value per session.

Invariants:
    - Admission only into an active session; checked under a shared row lock so
      EndSession cannot finalize earnings between the check and the insert
    - Snapshot never contains a completed item and is ordered by priority_key
    - Completion is a conditional update: exactly one caller flips an item
    - Items are never deleted or moved to another session
"""

import logging
from collections.abc import Callable
from datetime import datetime
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from tunely.core.domain_types import ArtistId, Money, QueueItemId, SessionId
from tunely.core.enforce_admission import validate_request
from tunely.core.enforce_session import check_accepting, check_owner, validate_limit
from tunely.core.errors import ErrorContext, ResourceNotFoundError
from tunely.core.queue_ordering import order_queue, queue_value
from tunely.core.repository_protocols import (
    QueueItemLike, QueueItemRepository, SessionRepository,
)
from tunely.infrastructure.repositories import (
    SqlQueueItemRepository, SqlSessionRepository,
)
from tunely.services.session_manager import utc_now

logger = logging.getLogger(__name__)


class QueueEngine:
    """Tip-priority request queue backed by the entity store."""

    def __init__(
        self, db: AsyncSession, clock: Callable[[], datetime] = utc_now,
    ):
        self.db = db
        self.sessions: SessionRepository = SqlSessionRepository(db)
        self.items: QueueItemRepository = SqlQueueItemRepository(db)
        self._clock = clock

    async def admit(
        self,
        session_id: SessionId,
        song_title: str,
        tip_amount: Decimal | int | str,
        requester_name: str | None = None,
    ) -> QueueItemLike:
        """Accept a paid request into an open session."""
        session = await self.sessions.get(session_id, lock="share")
        check_accepting(session, session_id)
        request = validate_request(song_title, tip_amount, requester_name)

        item = await self.items.create(
            session_id,
            request.song_title,
            request.tip_amount,
            request.requester_name,
            created_at=self._clock(),
        )
        await self.db.commit()
        logger.info(
            f"Request admitted with tip {request.tip_amount}",
            extra={"session_id": session_id, "item_id": item.id},
        )
        return item

    async def snapshot(
        self, session_id: SessionId, limit: int | None = None,
    ) -> list[QueueItemLike]:
        """Current live queue, highest tip first."""
        validate_limit(limit)
        check_accepting(await self.sessions.get(session_id), session_id)
        items = await self.items.list_live(session_id, limit)
        return order_queue(items, limit)

    async def complete(
        self, item_id: QueueItemId, artist_id: ArtistId | None = None,
    ) -> QueueItemLike:
        """Mark an item played. Irreversible."""
        item = await self.items.get(item_id)
        if item is None or item.completed:
            raise ResourceNotFoundError(
                "QueueItem", str(item_id), detail="not found or already completed",
            )
        session = check_accepting(
            await self.sessions.get(item.session_id), item.session_id,
        )
        check_owner(session, artist_id)

        if not await self.items.mark_completed(item_id, self._clock()):
            await self.db.rollback()
            raise ResourceNotFoundError(
                "QueueItem", str(item_id),
                ErrorContext(item_id=str(item_id)),
                detail="not found or already completed",
            )
        await self.db.commit()
        await self.db.refresh(item)
        logger.info(
            "Request completed",
            extra={"session_id": item.session_id, "item_id": item.id},
        )
        return item

    async def total_value(self, session_id: SessionId) -> Money:
        """Sum of tips still waiting in the live queue."""
        check_accepting(await self.sessions.get(session_id), session_id)
        return queue_value(await self.items.list_live(session_id))
