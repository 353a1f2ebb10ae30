"""QueueItem ORM — one paid song request attached to a session.

Invariants:
    - session_id never changes after insert
    - tip_amount > 0 (check constraint)
    - completed flips false -> true once; rows are never deleted

Design Decisions:
    - Composite index (session_id, completed) serves the live-queue query
"""

import uuid
from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    Boolean, CheckConstraint, DateTime, ForeignKey, Index, Numeric, String,
)
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from tunely.db.base import Base


class QueueItem(Base):
    __tablename__ = "queue_items"
    __table_args__ = (
        CheckConstraint("tip_amount > 0", name="tip_amount_positive"),
        Index("ix_queue_items_session_live", "session_id", "completed"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    session_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("sessions.id"), nullable=False,
    )
    song_title: Mapped[str] = mapped_column(String(200), nullable=False)
    tip_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    requester_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    completed: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False,
    )
    completed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False,
    )
