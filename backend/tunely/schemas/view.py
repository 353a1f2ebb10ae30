"""View Schemas — payload of one viewer poll."""

from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel

from tunely.core.domain_types import ViewerRole
from tunely.schemas.artist import ArtistSummary
from tunely.schemas.queue import QueueItemResponse


class ViewResponse(BaseModel):
    role: ViewerRole
    artist: ArtistSummary
    accepting_requests: bool
    session_id: UUID | None = None
    items: list[QueueItemResponse]
    queue_value: Decimal | None = None
    poll_after_ms: int | None = None

    @classmethod
    def from_view(cls, view: dict) -> "ViewResponse":
        artist = view["artist"]
        return cls(
            role=view["role"],
            artist=ArtistSummary(
                handle=artist.handle, display_name=artist.display_name,
            ),
            accepting_requests=view["accepting_requests"],
            session_id=view["session_id"],
            items=[QueueItemResponse.model_validate(i) for i in view["items"]],
            queue_value=view["queue_value"],
            poll_after_ms=view["poll_after_ms"],
        )
