"""Artist ORM — performer profile keyed by the identity provider's id.

Invariants:
    - id is supplied by the identity provider (no server default)
    - handle is unique and stored lower-case
    - Only `subscribed` changes after creation; artists are never deleted
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import String, Boolean, DateTime
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from tunely.db.base import Base


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Artist(Base):
    __tablename__ = "artists"

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True)
    handle: Mapped[str] = mapped_column(
        String(40), nullable=False, unique=True, index=True,
    )
    display_name: Mapped[str] = mapped_column(String(100), nullable=False)
    subscribed: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utc_now,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False,
        default=_utc_now, onupdate=_utc_now,
    )
