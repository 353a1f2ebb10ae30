"""Viewer Polls — the stateless endpoint every dashboard, requester page, and display polls.

Invariants:
    - No cursor or subscription is kept between polls
    - poll_after_ms tells the viewer when to come back; null means stop polling
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from tunely.api.dependencies import get_optional_artist_id, get_view_policies
from tunely.core.domain_types import ArtistId, ViewerRole
from tunely.core.view_sync import ViewPolicy
from tunely.infrastructure.database import get_db
from tunely.schemas.view import ViewResponse
from tunely.services.viewer_feed import ViewerFeed

router = APIRouter(prefix="/api/v1/views", tags=["views"])


@router.get("/{handle}/{role}", response_model=ViewResponse)
async def poll_view(
    handle: str,
    role: ViewerRole,
    viewer_id: ArtistId | None = Depends(get_optional_artist_id),
    policies: dict[ViewerRole, ViewPolicy] = Depends(get_view_policies),
    db: AsyncSession = Depends(get_db),
):
    view = await ViewerFeed(db, policies).poll(handle, role, viewer_id)
    return ViewResponse.from_view(view)
