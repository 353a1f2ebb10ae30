"""View Poller — verifies the client side of the polling protocol.

Invariants:
    - on_change fires only when the ordered content changes
    - Sleeps poll_after_ms between polls and stops on the terminal view
    - 5xx and transport errors back off, then raise ViewSyncError
    - 404 raises ResourceNotFoundError, other 4xx raise ViewSyncError at once

Design Decisions:
    - httpx.MockTransport scripts the server; sleep is injected so no test waits
"""

from uuid import uuid4

import httpx
import pytest

from tunely.config import Settings
from tunely.core.domain_types import ViewerRole
from tunely.core.errors import ResourceNotFoundError, ViewSyncError
from tunely.infrastructure.view_poller import ViewPoller


def _view(*tips, accepting=True, poll_after_ms=3000):
    return {
        "role": "display",
        "artist": {"handle": "mina", "display_name": "Mina"},
        "accepting_requests": accepting,
        "session_id": "s-1" if accepting else None,
        "items": [
            {"id": f"item-{tip}", "tip_amount": tip, "completed": False}
            for tip in tips
        ],
        "queue_value": None,
        "poll_after_ms": poll_after_ms if accepting else None,
    }


def _scripted(*steps):
    """Mock server replaying one step per request: a view, a status code, (status, headers), or an exception."""
    remaining = list(steps)
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        step = remaining.pop(0)
        if isinstance(step, Exception):
            raise step
        if isinstance(step, int):
            return httpx.Response(step, json={"error": {"code": "X"}})
        if isinstance(step, tuple):
            code, headers = step
            return httpx.Response(code, headers=headers, json={"error": {"code": "X"}})
        return httpx.Response(200, json=step)

    client = httpx.AsyncClient(
        transport=httpx.MockTransport(handler), base_url="http://test",
    )
    return client, seen


class _Sleeps:
    def __init__(self):
        self.calls = []

    async def __call__(self, seconds):
        self.calls.append(seconds)


async def test_polls_until_terminal_and_reports_changes_only():
    client, seen = _scripted(
        _view("5.00"), _view("5.00"), _view("9.00", "5.00"), _view(accepting=False),
    )
    sleeps = _Sleeps()
    changes = []

    async with client:
        poller = ViewPoller(client, "mina", ViewerRole.DISPLAY, sleep=sleeps)
        last = await poller.run(changes.append)

    assert len(seen) == 4
    assert seen[0].url.path == "/api/v1/views/mina/display"
    assert len(changes) == 3
    assert last["accepting_requests"] is False
    assert sleeps.calls == [3.0, 3.0, 3.0]


async def test_async_callback_is_awaited():
    client, _ = _scripted(_view("1.00"), _view(accepting=False))
    received = []

    async def on_change(view):
        received.append(view["accepting_requests"])

    async with client:
        await ViewPoller(client, "mina", ViewerRole.DISPLAY, sleep=_Sleeps()).run(on_change)

    assert received == [True, False]


async def test_transport_error_is_retried_with_backoff():
    client, seen = _scripted(
        httpx.ConnectError("connection refused"), _view(accepting=False),
    )
    sleeps = _Sleeps()

    async with client:
        poller = ViewPoller(
            client, "mina", ViewerRole.REQUESTER, base_delay_ms=1000, sleep=sleeps,
        )
        last = await poller.run(lambda view: None)

    assert len(seen) == 2
    assert last["accepting_requests"] is False
    assert len(sleeps.calls) == 1
    assert 0.75 <= sleeps.calls[0] <= 1.25


async def test_backoff_grows_exponentially():
    poller = ViewPoller(
        httpx.AsyncClient(), "mina", ViewerRole.DISPLAY,
        base_delay_ms=1000, max_delay_ms=4000,
    )

    assert 750 <= poller._backoff_ms(1) <= 1250
    assert 1500 <= poller._backoff_ms(2) <= 2500
    assert 3000 <= poller._backoff_ms(3) <= 5000
    assert 3000 <= poller._backoff_ms(10) <= 5000


async def test_gives_up_after_max_failures():
    client, seen = _scripted(503, 503, 503)
    sleeps = _Sleeps()

    async with client:
        poller = ViewPoller(
            client, "mina", ViewerRole.DISPLAY, max_failures=2, sleep=sleeps,
        )
        with pytest.raises(ViewSyncError) as exc_info:
            await poller.run(lambda view: None)

    assert exc_info.value.attempts == 3
    assert len(seen) == 3
    assert len(sleeps.calls) == 2


async def test_server_retry_after_overrides_backoff():
    client, _ = _scripted((503, {"Retry-After": "2"}), _view(accepting=False))
    sleeps = _Sleeps()

    async with client:
        poller = ViewPoller(client, "mina", ViewerRole.DISPLAY, sleep=sleeps)
        await poller.run(lambda view: None)

    assert sleeps.calls == [2.0]


async def test_unknown_handle_raises_not_found():
    client, _ = _scripted(404)

    async with client:
        with pytest.raises(ResourceNotFoundError):
            await ViewPoller(client, "ghost", ViewerRole.DISPLAY).run(lambda v: None)


async def test_client_error_is_not_retried():
    client, seen = _scripted(403)
    sleeps = _Sleeps()

    async with client:
        poller = ViewPoller(client, "mina", ViewerRole.DASHBOARD, sleep=sleeps)
        with pytest.raises(ViewSyncError):
            await poller.run(lambda view: None)

    assert len(seen) == 1
    assert sleeps.calls == []


async def test_sends_artist_identity_for_dashboard():
    artist_id = uuid4()
    client, seen = _scripted(_view(accepting=False))

    async with client:
        await ViewPoller(
            client, "mina", ViewerRole.DASHBOARD, artist_id=artist_id,
        ).run(lambda view: None)

    assert seen[0].headers["X-Artist-Id"] == str(artist_id)


async def test_max_polls_returns_last_view():
    client, seen = _scripted(_view("2.00"), _view("3.00"))

    async with client:
        poller = ViewPoller(client, "mina", ViewerRole.DISPLAY, sleep=_Sleeps())
        last = await poller.run(lambda view: None, max_polls=2)

    assert len(seen) == 2
    assert last["items"][0]["tip_amount"] == "3.00"


async def test_follows_live_session_until_it_ends(client, seed_artist):
    """End to end against the app: the display stops once the artist ends the set."""
    headers = {"X-Artist-Id": str(seed_artist.id)}
    session_id = (await client.post("/api/v1/sessions", headers=headers)).json()["id"]
    await client.post(
        f"/api/v1/sessions/{session_id}/queue",
        json={"song_title": "Closing song", "tip_amount": "15.00"},
    )
    views = []

    async def on_change(view):
        views.append(view)
        if view["accepting_requests"]:
            await client.post(f"/api/v1/sessions/{session_id}/end", headers=headers)

    poller = ViewPoller(client, "mina", ViewerRole.DISPLAY, sleep=_Sleeps())
    last = await poller.run(on_change)

    assert [v["accepting_requests"] for v in views] == [True, False]
    assert views[0]["items"][0]["song_title"] == "Closing song"
    assert last["poll_after_ms"] is None


def test_from_settings_uses_configured_retry_policy():
    settings = Settings(
        view_poll_max_failures=2, view_poll_base_delay_ms=250, view_poll_max_delay_ms=900,
    )

    poller = ViewPoller.from_settings(
        httpx.AsyncClient(), "mina", ViewerRole.DISPLAY, settings,
    )

    assert (poller.max_failures, poller.base_delay_ms, poller.max_delay_ms) == (2, 250, 900)
