"""Boundary Protocols — contracts between core and shell.

Invariants:
    - Core NEVER imports from shell; dependency arrows point inward only
    - The store is reached only through these Protocols; no query dialect leaks into services
    - Implementations provided by infrastructure/repositories.py

Design Decisions:
    - Protocol over ABC: structural subtyping, ORM models satisfy *Like types as-is
    - Async in Protocol: boundary methods do IO; the core rules that consume
      their results stay synchronous
"""

from datetime import datetime
from decimal import Decimal
from typing import Protocol
from uuid import UUID

from tunely.core.domain_types import ArtistId, SessionId, QueueItemId


class ArtistLike(Protocol):
    """Structural contract for Artist rows read by services and routes."""
    id: UUID
    handle: str
    display_name: str
    subscribed: bool


class SessionLike(Protocol):
    """Structural contract for Session rows passed to core rules."""
    id: UUID
    artist_id: UUID
    active: bool
    start_time: datetime
    end_time: datetime | None
    total_earnings: Decimal


class QueueItemLike(Protocol):
    """Structural contract for queue items ordered by the core."""
    id: UUID
    session_id: UUID
    song_title: str
    tip_amount: Decimal
    requester_name: str | None
    completed: bool
    created_at: datetime


class ArtistRepository(Protocol):
    """Contract for artist persistence, implemented by shell."""
    async def get(self, artist_id: ArtistId) -> ArtistLike | None: ...
    async def get_by_handle(self, handle: str) -> ArtistLike | None: ...
    async def create(
        self, artist_id: ArtistId, handle: str, display_name: str,
    ) -> ArtistLike: ...
    async def set_subscribed(
        self, artist_id: ArtistId, subscribed: bool,
    ) -> ArtistLike | None: ...


class SessionRepository(Protocol):
    """Contract for session persistence, implemented by shell."""
    async def get(
        self, session_id: SessionId, *, lock: str | None = None,
    ) -> SessionLike | None: ...
    async def get_active_for_artist(
        self, artist_id: ArtistId, *, lock: str | None = None,
    ) -> SessionLike | None: ...
    async def create(
        self, artist_id: ArtistId, started_at: datetime,
    ) -> SessionLike: ...
    async def mark_ended(
        self, session: SessionLike, ended_at: datetime, earnings: Decimal,
    ) -> None: ...


class QueueItemRepository(Protocol):
    """Contract for queue item persistence, implemented by shell."""
    async def get(self, item_id: QueueItemId) -> QueueItemLike | None: ...
    async def create(
        self,
        session_id: SessionId,
        song_title: str,
        tip_amount: Decimal,
        requester_name: str | None,
        created_at: datetime,
    ) -> QueueItemLike: ...
    async def list_live(
        self, session_id: SessionId, limit: int | None = None,
    ) -> list[QueueItemLike]: ...
    async def list_tip_amounts(self, session_id: SessionId) -> list[Decimal]: ...
    async def mark_completed(
        self, item_id: QueueItemId, completed_at: datetime,
    ) -> bool: ...
