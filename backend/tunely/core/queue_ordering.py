"""Tip-Priority Ordering — the total order over a session's live requests.

Invariants:
    - Completed items never appear in an ordered view
    - Order: tip_amount desc, created_at asc, id asc
    - Same inputs always produce the same order (the id key breaks exact ties)

Design Decisions:
    - priority_key is the single comparator; the SQL repository mirrors it in
      ORDER BY and QueueEngine re-applies it so the order never depends on how a
      backend compares Numeric or timestamp values
"""

from collections.abc import Iterable

from tunely.core.domain_types import Money
from tunely.core.repository_protocols import QueueItemLike
from tunely.core.session_earnings import sum_tips


def priority_key(item: QueueItemLike) -> tuple:
    """Sort key: higher tips first, then first-come-first-served."""
    return (-item.tip_amount, item.created_at, item.id)


def order_queue(
    items: Iterable[QueueItemLike], limit: int | None = None,
) -> list[QueueItemLike]:
    """Drop completed items, sort by priority, truncate to limit."""
    live = sorted(
        (item for item in items if not item.completed), key=priority_key,
    )
    return live if limit is None else live[:limit]


def queue_value(items: Iterable[QueueItemLike]) -> Money:
    """Live "earnings so far": tips of the items still waiting to be played."""
    return sum_tips(item.tip_amount for item in items if not item.completed)
