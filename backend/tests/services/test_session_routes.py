"""Session Lifecycle Routes — start, submit, read queue, complete, end over HTTP.

Invariants:
    - Domain errors surface with their codes: INVALID_AMOUNT, SESSION_CLOSED,
      SESSION_NOT_ACTIVE, FORBIDDEN, RESOURCE_NOT_FOUND
    - Schema violations surface as 400 VALIDATION_ERROR
    - Money is serialized as a decimal string
"""

from decimal import Decimal
from uuid import uuid4

import pytest


@pytest.fixture
async def live(client, seed_artist):
    """A started session: (session_id, performer headers)."""
    headers = {"X-Artist-Id": str(seed_artist.id)}
    res = await client.post("/api/v1/sessions", headers=headers)
    assert res.status_code == 201
    return res.json()["id"], headers


async def _submit(client, session_id, title, tip, name=None):
    return await client.post(
        f"/api/v1/sessions/{session_id}/queue",
        json={"song_title": title, "tip_amount": tip, "requester_name": name},
    )


async def test_start_session_requires_identity(client):
    res = await client.post("/api/v1/sessions")

    assert res.status_code == 401


async def test_start_session_for_unregistered_artist_is_404(client):
    res = await client.post(
        "/api/v1/sessions", headers={"X-Artist-Id": str(uuid4())},
    )

    assert res.status_code == 404


async def test_submit_and_read_ordered_queue(client, live):
    session_id, _ = live
    await _submit(client, session_id, "A", "5.00", "Ana")
    await _submit(client, session_id, "B", "10.00")
    await _submit(client, session_id, "C", "5.00")

    res = await client.get(f"/api/v1/sessions/{session_id}/queue")

    assert res.status_code == 200
    body = res.json()
    assert [i["song_title"] for i in body["items"]] == ["B", "A", "C"]
    assert body["count"] == 3
    assert Decimal(body["total_value"]) == Decimal("20.00")
    assert body["items"][1]["requester_name"] == "Ana"


async def test_queue_limit(client, live):
    session_id, _ = live
    for tip in ("1", "2", "3"):
        await _submit(client, session_id, f"Song {tip}", tip)

    res = await client.get(f"/api/v1/sessions/{session_id}/queue?limit=2")

    assert [i["song_title"] for i in res.json()["items"]] == ["Song 3", "Song 2"]


async def test_queue_limit_zero_is_validation_error(client, live):
    session_id, _ = live

    res = await client.get(f"/api/v1/sessions/{session_id}/queue?limit=0")

    assert res.status_code == 400
    assert res.json()["error"]["code"] == "VALIDATION_ERROR"


@pytest.mark.parametrize("tip", ["0", "-3", "0.001"])
async def test_submit_invalid_amount_is_400(client, live, tip):
    session_id, _ = live

    res = await _submit(client, session_id, "Song", tip)

    assert res.status_code == 400
    assert res.json()["error"]["code"] == "INVALID_AMOUNT"


async def test_submit_empty_title_is_400(client, live):
    session_id, _ = live

    res = await _submit(client, session_id, "  ", "5")

    assert res.status_code == 400
    assert res.json()["error"]["code"] == "INVALID_INPUT"


async def test_submit_non_numeric_amount_is_validation_error(client, live):
    session_id, _ = live

    res = await _submit(client, session_id, "Song", "five dollars")

    assert res.status_code == 400
    assert res.json()["error"]["code"] == "VALIDATION_ERROR"


async def test_complete_removes_item_from_queue(client, live):
    session_id, headers = live
    item = (await _submit(client, session_id, "Play me", "8")).json()

    res = await client.post(
        f"/api/v1/queue-items/{item['id']}/complete", headers=headers,
    )
    assert res.status_code == 200
    assert res.json()["completed"] is True

    queue = (await client.get(f"/api/v1/sessions/{session_id}/queue")).json()
    assert queue["items"] == []

    again = await client.post(
        f"/api/v1/queue-items/{item['id']}/complete", headers=headers,
    )
    assert again.status_code == 404


async def test_complete_by_other_artist_is_403(client, live, other_artist):
    session_id, _ = live
    item = (await _submit(client, session_id, "Not yours", "8")).json()

    res = await client.post(
        f"/api/v1/queue-items/{item['id']}/complete",
        headers={"X-Artist-Id": str(other_artist.id)},
    )

    assert res.status_code == 403
    assert res.json()["error"]["code"] == "FORBIDDEN"


async def test_end_session_stamps_earnings_and_closes_queue(client, live):
    session_id, headers = live
    played = (await _submit(client, session_id, "Played", "5.00")).json()
    await _submit(client, session_id, "Pending", "10.00")
    await client.post(f"/api/v1/queue-items/{played['id']}/complete", headers=headers)

    res = await client.post(f"/api/v1/sessions/{session_id}/end", headers=headers)

    assert res.status_code == 200
    body = res.json()
    assert body["status"] == "ended"
    assert body["end_time"] is not None
    assert Decimal(body["total_earnings"]) == Decimal("15.00")

    closed = await client.get(f"/api/v1/sessions/{session_id}/queue")
    assert closed.status_code == 409
    assert closed.json()["error"]["code"] == "SESSION_CLOSED"

    late = await _submit(client, session_id, "Too late", "50")
    assert late.status_code == 409
    assert late.json()["error"]["code"] == "SESSION_CLOSED"


async def test_end_session_twice_is_409(client, live):
    session_id, headers = live
    await client.post(f"/api/v1/sessions/{session_id}/end", headers=headers)

    res = await client.post(f"/api/v1/sessions/{session_id}/end", headers=headers)

    assert res.status_code == 409
    assert res.json()["error"]["code"] == "SESSION_NOT_ACTIVE"


async def test_end_session_of_other_artist_is_403(client, live, other_artist):
    session_id, _ = live

    res = await client.post(
        f"/api/v1/sessions/{session_id}/end",
        headers={"X-Artist-Id": str(other_artist.id)},
    )

    assert res.status_code == 403


async def test_restart_ends_previous_session(client, live):
    first_id, headers = live

    second = (await client.post("/api/v1/sessions", headers=headers)).json()
    first = (await client.get(f"/api/v1/sessions/{first_id}")).json()

    assert second["id"] != first_id
    assert first["status"] == "ended"
    assert second["status"] == "active"


async def test_get_unknown_session_is_404(client):
    res = await client.get(f"/api/v1/sessions/{uuid4()}")

    assert res.status_code == 404
