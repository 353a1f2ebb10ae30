"""SQL Repositories — SQLAlchemy implementations of core/repository_protocols.py.

Invariants:
    - Repositories flush but never commit; the calling service owns the transaction
    - lock="update" -> SELECT ... FOR UPDATE, lock="share" -> FOR SHARE
      (ignored by SQLite, which serializes writers itself)
    - Locked reads refresh already-loaded rows (populate_existing)
    - list_live orders by tip_amount desc, created_at asc, id asc
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import Select, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from tunely.core.domain_types import ArtistId, SessionId, QueueItemId
from tunely.models.artist import Artist
from tunely.models.queue_item import QueueItem
from tunely.models.session import Session as SessionModel


def _with_lock(query: Select, lock: str | None) -> Select:
    if lock is None:
        return query
    if lock not in ("update", "share"):
        raise ValueError(f"unknown lock mode: {lock}")
    return query.with_for_update(read=lock == "share").execution_options(
        populate_existing=True,
    )


class SqlArtistRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, artist_id: ArtistId) -> Artist | None:
        return await self.db.get(Artist, artist_id)

    async def get_by_handle(self, handle: str) -> Artist | None:
        result = await self.db.execute(
            select(Artist).where(Artist.handle == handle),
        )
        return result.scalar_one_or_none()

    async def create(
        self, artist_id: ArtistId, handle: str, display_name: str,
    ) -> Artist:
        artist = Artist(id=artist_id, handle=handle, display_name=display_name)
        self.db.add(artist)
        await self.db.flush()
        return artist

    async def set_subscribed(
        self, artist_id: ArtistId, subscribed: bool,
    ) -> Artist | None:
        artist = await self.get(artist_id)
        if artist is None:
            return None
        artist.subscribed = subscribed
        await self.db.flush()
        return artist


class SqlSessionRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(
        self, session_id: SessionId, *, lock: str | None = None,
    ) -> SessionModel | None:
        query = select(SessionModel).where(SessionModel.id == session_id)
        result = await self.db.execute(_with_lock(query, lock))
        return result.scalar_one_or_none()

    async def get_active_for_artist(
        self, artist_id: ArtistId, *, lock: str | None = None,
    ) -> SessionModel | None:
        query = (
            select(SessionModel)
            .where(SessionModel.artist_id == artist_id)
            .where(SessionModel.active.is_(True))
        )
        result = await self.db.execute(_with_lock(query, lock))
        return result.scalar_one_or_none()

    async def create(
        self, artist_id: ArtistId, started_at: datetime,
    ) -> SessionModel:
        session = SessionModel(
            artist_id=artist_id,
            active=True,
            start_time=started_at,
            total_earnings=Decimal("0.00"),
        )
        self.db.add(session)
        await self.db.flush()
        return session

    async def mark_ended(
        self, session: SessionModel, ended_at: datetime, earnings: Decimal,
    ) -> None:
        session.active = False
        session.end_time = ended_at
        session.total_earnings = earnings
        # The new active row of a restart must not hit the partial index first
        await self.db.flush()


class SqlQueueItemRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, item_id: QueueItemId) -> QueueItem | None:
        return await self.db.get(QueueItem, item_id)

    async def create(
        self,
        session_id: SessionId,
        song_title: str,
        tip_amount: Decimal,
        requester_name: str | None,
        created_at: datetime,
    ) -> QueueItem:
        item = QueueItem(
            session_id=session_id,
            song_title=song_title,
            tip_amount=tip_amount,
            requester_name=requester_name,
            completed=False,
            created_at=created_at,
        )
        self.db.add(item)
        await self.db.flush()
        return item

    async def list_live(
        self, session_id: SessionId, limit: int | None = None,
    ) -> list[QueueItem]:
        query = (
            select(QueueItem)
            .where(QueueItem.session_id == session_id)
            .where(QueueItem.completed.is_(False))
            .order_by(
                QueueItem.tip_amount.desc(),
                QueueItem.created_at.asc(),
                QueueItem.id.asc(),
            )
        )
        if limit is not None:
            query = query.limit(limit)
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def list_tip_amounts(self, session_id: SessionId) -> list[Decimal]:
        result = await self.db.execute(
            select(QueueItem.tip_amount).where(QueueItem.session_id == session_id),
        )
        return list(result.scalars().all())

    async def mark_completed(
        self, item_id: QueueItemId, completed_at: datetime,
    ) -> bool:
        """Conditional update: True only for the call that flipped the flag."""
        result = await self.db.execute(
            update(QueueItem)
            .where(QueueItem.id == item_id)
            .where(QueueItem.completed.is_(False))
            .values(completed=True, completed_at=completed_at)
            .execution_options(synchronize_session=False),
        )
        return result.rowcount == 1
