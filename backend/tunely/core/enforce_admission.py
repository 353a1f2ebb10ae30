"""Admission Enforcement — validates a song request before it touches the store.

Invariants:
    - validate_request is PURE: returns a normalized AdmissionRequest or raises
    - song_title is trimmed and non-empty; requester_name blank -> None
    - tip_amount > 0, finite, whole cents, and fits Numeric(10, 2)

Design Decisions:
    - Positivity checked here rather than in the Pydantic schema so the caller
      gets INVALID_AMOUNT instead of a generic VALIDATION_ERROR
"""

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation

from tunely.core.domain_types import Money, to_money
from tunely.core.errors import InvalidAmountError, InvalidInputError


MAX_TITLE_LENGTH: int = 200
MAX_NAME_LENGTH: int = 100
MAX_TIP_AMOUNT: Decimal = Decimal("99999999.99")


@dataclass(frozen=True)
class AdmissionRequest:
    """A request that passed every admission rule."""
    song_title: str
    tip_amount: Money
    requester_name: str | None


def validate_request(
    song_title: str | None,
    tip_amount: object,
    requester_name: str | None = None,
) -> AdmissionRequest:
    """Normalize and validate a song request. Pure: raises on the first violation."""
    title = (song_title or "").strip()
    if not title:
        raise InvalidInputError("Song title is required", "song_title")
    if len(title) > MAX_TITLE_LENGTH:
        raise InvalidInputError(
            f"Song title must be at most {MAX_TITLE_LENGTH} characters",
            "song_title",
        )

    name = (requester_name or "").strip() or None
    if name is not None and len(name) > MAX_NAME_LENGTH:
        raise InvalidInputError(
            f"Requester name must be at most {MAX_NAME_LENGTH} characters",
            "requester_name",
        )

    return AdmissionRequest(
        song_title=title,
        tip_amount=parse_tip_amount(tip_amount),
        requester_name=name,
    )


def parse_tip_amount(value: object) -> Money:
    """Coerce a tip to Money or raise InvalidAmountError."""
    # bool is an int subclass
    if value is None or isinstance(value, bool):
        raise InvalidAmountError(value)
    try:
        amount = Decimal(str(value)) if isinstance(value, float) else Decimal(value)
    except (InvalidOperation, TypeError, ValueError):
        raise InvalidAmountError(value)

    if not amount.is_finite() or amount <= 0 or amount > MAX_TIP_AMOUNT:
        raise InvalidAmountError(value)
    if amount != amount.quantize(Decimal("0.01")):
        raise InvalidAmountError(value)
    return to_money(amount)
