"""Queue Item Routes — performer marks a request as played."""

from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from tunely.api.dependencies import get_artist_id
from tunely.core.domain_types import ArtistId, QueueItemId
from tunely.infrastructure.database import get_db
from tunely.schemas.queue import QueueItemResponse
from tunely.services.queue_engine import QueueEngine

router = APIRouter(prefix="/api/v1/queue-items", tags=["queue"])


@router.post("/{item_id}/complete", response_model=QueueItemResponse)
async def complete_item(
    item_id: UUID,
    artist_id: ArtistId = Depends(get_artist_id),
    db: AsyncSession = Depends(get_db),
):
    item = await QueueEngine(db).complete(QueueItemId(item_id), artist_id)
    return QueueItemResponse.model_validate(item)
