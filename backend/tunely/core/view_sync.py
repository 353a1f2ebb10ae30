"""View Synchronization — polling rules shared by the poll endpoint and ViewPoller.

Invariants:
    - Every poll is stateless: the server keeps no cursor between polls
    - An active session yields poll_after_ms = the role's period
    - No active session yields the terminal view (poll_after_ms None, no items)
    - The display role polls faster than dashboard and requester

Design Decisions:
    - Policies built from Settings values, not read from Settings here (core has no IO)
    - Fingerprint covers id, tip, and completion: a viewer re-renders only when
      the ordered content changed
"""

from dataclasses import dataclass

from tunely.core.domain_types import ViewerRole


@dataclass(frozen=True)
class ViewPolicy:
    """How one viewer role polls and what it is shown."""
    role: ViewerRole
    poll_interval_seconds: float
    queue_limit: int | None
    shows_queue_value: bool = False
    requires_owner: bool = False


def build_view_policies(
    *,
    dashboard_poll_seconds: float,
    requester_poll_seconds: float,
    display_poll_seconds: float,
    requester_queue_limit: int,
    display_queue_limit: int,
) -> dict[ViewerRole, ViewPolicy]:
    return {
        ViewerRole.DASHBOARD: ViewPolicy(
            ViewerRole.DASHBOARD, dashboard_poll_seconds, None,
            shows_queue_value=True, requires_owner=True,
        ),
        ViewerRole.REQUESTER: ViewPolicy(
            ViewerRole.REQUESTER, requester_poll_seconds, requester_queue_limit,
        ),
        ViewerRole.DISPLAY: ViewPolicy(
            ViewerRole.DISPLAY, display_poll_seconds, display_queue_limit,
        ),
    }


def next_poll_ms(policy: ViewPolicy, accepting_requests: bool) -> int | None:
    """Delay before the viewer's next poll; None tells it to stop."""
    if not accepting_requests:
        return None
    return int(policy.poll_interval_seconds * 1000)


def is_terminal(view: dict) -> bool:
    return not view.get("accepting_requests") or view.get("poll_after_ms") is None


def snapshot_fingerprint(view: dict) -> tuple:
    """Identity of the ordered content a viewer renders."""
    return (
        view.get("session_id"),
        bool(view.get("accepting_requests")),
        tuple(
            (item.get("id"), str(item.get("tip_amount")), bool(item.get("completed")))
            for item in view.get("items") or []
        ),
    )
