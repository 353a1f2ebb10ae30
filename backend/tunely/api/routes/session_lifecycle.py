"""Session Lifecycle — start/end sessions, submit requests, read the ordered queue.

Invariants:
    - Start and end require the performer's identity; end checks ownership
    - Submissions and queue reads are open to the audience
    - Every route opens one DB session; services own the commits
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from tunely.api.dependencies import get_artist_id
from tunely.core.domain_types import ArtistId, SessionId
from tunely.infrastructure.database import get_db
from tunely.schemas.queue import (
    QueueItemResponse, QueueRequestCreate, QueueSnapshotResponse,
)
from tunely.schemas.session import SessionResponse
from tunely.services.queue_engine import QueueEngine
from tunely.services.session_manager import SessionManager

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/sessions", tags=["sessions"])


@router.post(
    "", response_model=SessionResponse, status_code=status.HTTP_201_CREATED,
)
async def start_session(
    artist_id: ArtistId = Depends(get_artist_id),
    db: AsyncSession = Depends(get_db),
):
    """Go live. Any session the artist already had open is ended first."""
    session = await SessionManager(db).start_session(artist_id)
    return SessionResponse.from_model(session)


@router.get("/{session_id}", response_model=SessionResponse)
async def get_session(session_id: UUID, db: AsyncSession = Depends(get_db)):
    session = await SessionManager(db).get_session(SessionId(session_id))
    return SessionResponse.from_model(session)


@router.post("/{session_id}/end", response_model=SessionResponse)
async def end_session(
    session_id: UUID,
    artist_id: ArtistId = Depends(get_artist_id),
    db: AsyncSession = Depends(get_db),
):
    session = await SessionManager(db).end_session(SessionId(session_id), artist_id)
    return SessionResponse.from_model(session)


@router.get("/{session_id}/queue", response_model=QueueSnapshotResponse)
async def get_queue(
    session_id: UUID,
    limit: int | None = Query(None, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
):
    """Ordered live queue: highest tip first, then first come first served."""
    engine = QueueEngine(db)
    items = await engine.snapshot(SessionId(session_id), limit)
    total = await engine.total_value(SessionId(session_id))
    return QueueSnapshotResponse(
        session_id=session_id,
        items=[QueueItemResponse.model_validate(i) for i in items],
        count=len(items),
        total_value=total,
    )


@router.post(
    "/{session_id}/queue",
    response_model=QueueItemResponse,
    status_code=status.HTTP_201_CREATED,
)
async def submit_request(
    session_id: UUID,
    body: QueueRequestCreate,
    db: AsyncSession = Depends(get_db),
):
    item = await QueueEngine(db).admit(
        SessionId(session_id), body.song_title, body.tip_amount, body.requester_name,
    )
    return QueueItemResponse.model_validate(item)
