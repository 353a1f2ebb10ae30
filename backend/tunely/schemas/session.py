"""Session Schemas — public-facing session data."""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel

from tunely.core.domain_types import SessionStatus
from tunely.core.enforce_session import session_status
from tunely.core.repository_protocols import SessionLike


class SessionResponse(BaseModel):
    id: UUID
    artist_id: UUID
    status: SessionStatus
    active: bool
    start_time: datetime
    end_time: datetime | None = None
    total_earnings: Decimal

    @classmethod
    def from_model(cls, session: SessionLike) -> "SessionResponse":
        return cls(
            id=session.id,
            artist_id=session.artist_id,
            status=session_status(session),
            active=session.active,
            start_time=session.start_time,
            end_time=session.end_time,
            total_earnings=session.total_earnings,
        )


class ActiveSessionResponse(BaseModel):
    """GetActiveSession result; session is None when the artist is not live."""
    session: SessionResponse | None = None
