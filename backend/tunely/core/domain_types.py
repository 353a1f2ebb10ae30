"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - ArtistId, SessionId, QueueItemId wrap UUIDs; domain logic never takes a bare UUID
    - Money is a Decimal quantized to cents
    - All valid states encoded as Enums, never raw strings

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON without custom encoders
"""

from decimal import Decimal
from enum import Enum
from typing import NewType
from uuid import UUID


# ─── Identity Types ──────────────────────────────────────────────

ArtistId = NewType("ArtistId", UUID)
SessionId = NewType("SessionId", UUID)
QueueItemId = NewType("QueueItemId", UUID)


# ─── Value Types ─────────────────────────────────────────────────

Money = NewType("Money", Decimal)   # >= 0.00, two decimal places

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def to_money(value: Decimal | int | float | str) -> Money:
    """Quantize any numeric input to cents. Floats go through str() first."""
    if isinstance(value, float):
        value = str(value)
    return Money(Decimal(value).quantize(CENT))


# ─── Enums ───────────────────────────────────────────────────────

class SessionStatus(str, Enum):
    """Session lifecycle states, derived from the `active` column."""
    ACTIVE = "active"
    ENDED = "ended"


class ViewerRole(str, Enum):
    """Read-only clients that poll a session's ordered snapshot."""
    DASHBOARD = "dashboard"
    REQUESTER = "requester"
    DISPLAY = "display"
