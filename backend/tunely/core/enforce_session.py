"""Session Lifecycle Rules — the Active -> Ended state machine as pure checks.

Invariants:
    - Only an active session accepts admissions, snapshots, and completions
    - Ending is allowed once; a second end raises SessionNotActiveError
    - Ownership is checked only when the caller supplies an artist id
"""

from uuid import UUID

from tunely.core.domain_types import SessionStatus
from tunely.core.errors import (
    ErrorContext, ForbiddenError, InvalidInputError,
    SessionClosedError, SessionNotActiveError,
)
from tunely.core.repository_protocols import SessionLike


def session_status(session: SessionLike) -> SessionStatus:
    return SessionStatus.ACTIVE if session.active else SessionStatus.ENDED


def check_accepting(session: SessionLike | None, session_id: UUID) -> SessionLike:
    """Unknown and ended sessions are both closed to the audience."""
    if session is None or not session.active:
        raise SessionClosedError(str(session_id))
    return session


def check_can_end(session: SessionLike) -> None:
    if not session.active:
        raise SessionNotActiveError(str(session.id))


def check_owner(session: SessionLike, artist_id: UUID | None) -> None:
    if artist_id is not None and session.artist_id != artist_id:
        raise ForbiddenError(
            "Session belongs to another artist",
            ErrorContext(artist_id=str(artist_id), session_id=str(session.id)),
        )


def validate_limit(limit: int | None) -> int | None:
    if limit is not None and limit < 1:
        raise InvalidInputError("limit must be at least 1", "limit")
    return limit
