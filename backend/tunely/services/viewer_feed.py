"""Viewer Feed — one stateless poll for the dashboard, requester, or display view.

Invariants:
    - Every call re-derives artist, active session, and snapshot from the store
    - A session that ends between lookup and snapshot yields the terminal view
    - The dashboard view is only served to the artist who owns it
"""

import logging
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from tunely.core.domain_types import ArtistId, ViewerRole
from tunely.core.errors import (
    ErrorContext, ForbiddenError, SessionClosedError, UnauthenticatedError,
)
from tunely.core.view_sync import ViewPolicy, next_poll_ms
from tunely.services.artist_directory import ArtistDirectory
from tunely.services.queue_engine import QueueEngine
from tunely.services.session_manager import SessionManager

logger = logging.getLogger(__name__)


class ViewerFeed:
    def __init__(self, db: AsyncSession, policies: dict[ViewerRole, ViewPolicy]):
        self.directory = ArtistDirectory(db)
        self.sessions = SessionManager(db)
        self.queue = QueueEngine(db)
        self.policies = policies

    async def poll(
        self, handle: str, role: ViewerRole, viewer_id: ArtistId | None = None,
    ) -> dict:
        policy = self.policies[role]
        artist = await self.directory.get_by_handle(handle)
        if policy.requires_owner:
            _check_viewer_owns(artist.id, viewer_id)

        session = await self.sessions.get_active_session(artist.id)
        items: list = []
        value = None
        if session is not None:
            try:
                items = await self.queue.snapshot(session.id, policy.queue_limit)
                if policy.shows_queue_value:
                    value = await self.queue.total_value(session.id)
            except SessionClosedError:
                logger.info(
                    "Session closed during poll",
                    extra={"session_id": session.id, "role": role.value},
                )
                session, items, value = None, [], None

        accepting = session is not None
        return {
            "role": role,
            "artist": artist,
            "accepting_requests": accepting,
            "session_id": session.id if accepting else None,
            "items": items,
            "queue_value": value,
            "poll_after_ms": next_poll_ms(policy, accepting),
        }


def _check_viewer_owns(artist_id: UUID, viewer_id: UUID | None) -> None:
    if viewer_id is None:
        raise UnauthenticatedError()
    if viewer_id != artist_id:
        raise ForbiddenError(
            "Dashboard belongs to another artist",
            ErrorContext(artist_id=str(viewer_id)),
        )
