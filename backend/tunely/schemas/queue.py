"""Queue Schemas — song request submission and queue snapshots.

Invariants:
    - QueueRequestCreate bounds sizes only; positivity and emptiness are
      enforced by core/enforce_admission.py
"""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from tunely.core.enforce_admission import MAX_NAME_LENGTH, MAX_TITLE_LENGTH


class QueueRequestCreate(BaseModel):
    song_title: str = Field(max_length=MAX_TITLE_LENGTH)
    tip_amount: Decimal = Field(allow_inf_nan=True)
    requester_name: str | None = Field(None, max_length=MAX_NAME_LENGTH)


class QueueItemResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    session_id: UUID
    song_title: str
    tip_amount: Decimal
    requester_name: str | None = None
    completed: bool
    created_at: datetime


class QueueSnapshotResponse(BaseModel):
    session_id: UUID
    items: list[QueueItemResponse]
    count: int
    total_value: Decimal
