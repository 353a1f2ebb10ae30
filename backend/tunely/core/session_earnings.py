"""Session Earnings — audit-complete earnings finalization.

Invariants:
    - Finalized earnings = sum of tip_amount over EVERY item ever admitted to the
      session, completed or not
    - Result is Money (Decimal, cents); empty session -> 0.00
"""

from collections.abc import Iterable
from decimal import Decimal

from tunely.core.domain_types import ZERO, Money, to_money


def sum_tips(amounts: Iterable[Decimal]) -> Money:
    return to_money(sum((to_money(a) for a in amounts), ZERO))


def finalize_earnings(all_tip_amounts: Iterable[Decimal]) -> Money:
    """Earnings stamped on a session when it ends."""
    return sum_tips(all_tip_amounts)
