"""Session ORM — one performer-initiated window during which requests are accepted.

Invariants:
    - At most one row per artist has active = true (partial unique index)
    - end_time is null exactly while active
    - total_earnings is authoritative only once the session has ended

Design Decisions:
    - Partial index declared for both PostgreSQL and SQLite so tests enforce
      the same constraint production does
    - start_time stamped by SessionManager, not by the DB, so one clock drives
      both the ended and the new session of a restart
"""

import uuid
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Numeric, text
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from tunely.db.base import Base


class Session(Base):
    """Live session; owns its queue items for earnings aggregation."""
    __tablename__ = "sessions"
    __table_args__ = (
        Index(
            "uq_sessions_one_active_per_artist",
            "artist_id",
            unique=True,
            postgresql_where=text("active"),
            sqlite_where=text("active = 1"),
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    artist_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("artists.id"), nullable=False, index=True,
    )
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    start_time: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False,
    )
    end_time: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
    total_earnings: Mapped[Decimal] = mapped_column(
        Numeric(10, 2), nullable=False, default=Decimal("0.00"),
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
