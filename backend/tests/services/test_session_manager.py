"""Session Manager — verifies the Active -> Ended lifecycle against a real DB.

Invariants:
    - start_session leaves exactly one active session per artist
    - Restart force-ends the previous session with its earnings stamped
    - Earnings count every admitted item, completed or not
    - Ending twice raises SessionNotActiveError; unknown ids raise ResourceNotFoundError
    - The partial unique index rejects a second active row even without the lock
"""

from decimal import Decimal
from uuid import uuid4

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from tunely.core.errors import (
    ConflictError, ForbiddenError, ResourceNotFoundError,
    SessionClosedError, SessionNotActiveError,
)
from tunely.infrastructure.artist_locks import ArtistLocks
from tunely.models.session import Session as SessionModel
from tunely.services.queue_engine import QueueEngine
from tunely.services.session_manager import SessionManager


async def _active_count(db, artist_id) -> int:
    result = await db.execute(
        select(func.count())
        .select_from(SessionModel)
        .where(SessionModel.artist_id == artist_id)
        .where(SessionModel.active.is_(True)),
    )
    return result.scalar_one()


async def test_start_session_creates_active_session(test_db, seed_artist, clock):
    session = await SessionManager(test_db, clock=clock).start_session(seed_artist.id)

    assert session.active is True
    assert session.end_time is None
    assert session.total_earnings == Decimal("0.00")
    assert session.artist_id == seed_artist.id


async def test_start_session_unknown_artist_raises_not_found(test_db):
    with pytest.raises(ResourceNotFoundError):
        await SessionManager(test_db).start_session(uuid4())


async def test_restart_force_ends_previous_session(test_db, seed_artist, clock):
    manager = SessionManager(test_db, clock=clock)
    first = await manager.start_session(seed_artist.id)
    await QueueEngine(test_db, clock=clock).admit(first.id, "Jolene", Decimal("7.50"))

    second = await manager.start_session(seed_artist.id)

    assert second.id != first.id
    assert first.active is False
    assert first.end_time is not None
    assert first.total_earnings == Decimal("7.50")
    assert await _active_count(test_db, seed_artist.id) == 1


async def test_admission_into_force_ended_session_is_rejected(test_db, seed_artist, clock):
    manager = SessionManager(test_db, clock=clock)
    first = await manager.start_session(seed_artist.id)
    await manager.start_session(seed_artist.id)

    with pytest.raises(SessionClosedError):
        await QueueEngine(test_db).admit(first.id, "Late request", 5)


async def test_end_session_counts_completed_and_pending_items(test_db, seed_artist, clock):
    session = await SessionManager(test_db, clock=clock).start_session(seed_artist.id)
    engine = QueueEngine(test_db, clock=clock)
    played = await engine.admit(session.id, "Wonderwall", Decimal("5.00"))
    await engine.admit(session.id, "Hallelujah", Decimal("10.00"))
    await engine.complete(played.id)

    ended = await SessionManager(test_db, clock=clock).end_session(session.id)

    assert ended.active is False
    assert ended.end_time is not None
    assert ended.total_earnings == Decimal("15.00")


async def test_end_session_with_no_items_has_zero_earnings(test_db, seed_artist):
    manager = SessionManager(test_db)
    session = await manager.start_session(seed_artist.id)

    ended = await manager.end_session(session.id)

    assert ended.total_earnings == Decimal("0.00")


async def test_end_session_twice_raises_not_active(test_db, seed_artist):
    manager = SessionManager(test_db)
    session = await manager.start_session(seed_artist.id)
    await manager.end_session(session.id)

    with pytest.raises(SessionNotActiveError):
        await manager.end_session(session.id)


async def test_end_unknown_session_raises_not_found(test_db):
    with pytest.raises(ResourceNotFoundError):
        await SessionManager(test_db).end_session(uuid4())


async def test_end_session_of_another_artist_is_forbidden(
    test_db, seed_artist, other_artist,
):
    manager = SessionManager(test_db)
    session = await manager.start_session(seed_artist.id)

    with pytest.raises(ForbiddenError):
        await manager.end_session(session.id, artist_id=other_artist.id)
    assert session.active is True


async def test_snapshot_after_end_raises_session_closed(test_db, seed_artist):
    manager = SessionManager(test_db)
    session = await manager.start_session(seed_artist.id)
    await manager.end_session(session.id)

    with pytest.raises(SessionClosedError):
        await QueueEngine(test_db).snapshot(session.id)


async def test_get_active_session(test_db, seed_artist):
    manager = SessionManager(test_db)
    assert await manager.get_active_session(seed_artist.id) is None

    session = await manager.start_session(seed_artist.id)
    assert (await manager.get_active_session(seed_artist.id)).id == session.id

    await manager.end_session(session.id)
    assert await manager.get_active_session(seed_artist.id) is None


async def test_get_session_returns_ended_sessions(test_db, seed_artist):
    manager = SessionManager(test_db)
    session = await manager.start_session(seed_artist.id)
    await manager.end_session(session.id)

    found = await manager.get_session(session.id)

    assert found.id == session.id
    assert found.active is False


async def test_artists_have_independent_sessions(test_db, seed_artist, other_artist):
    manager = SessionManager(test_db)
    mine = await manager.start_session(seed_artist.id)
    theirs = await manager.start_session(other_artist.id)

    assert mine.active is True
    assert theirs.active is True


async def test_partial_index_rejects_second_active_session(test_db, seed_artist, clock):
    test_db.add(SessionModel(artist_id=seed_artist.id, active=True, start_time=clock()))
    await test_db.commit()

    test_db.add(SessionModel(artist_id=seed_artist.id, active=True, start_time=clock()))
    with pytest.raises(IntegrityError):
        await test_db.commit()
    await test_db.rollback()


async def test_lost_start_race_reported_as_conflict(test_db, seed_artist, monkeypatch):
    """A writer that missed the other process's active row hits the index."""
    artist_id = seed_artist.id
    manager = SessionManager(test_db, locks=ArtistLocks())
    await manager.start_session(artist_id)

    async def _stale_read(artist_id, *, lock=None):
        return None

    monkeypatch.setattr(manager.sessions, "get_active_for_artist", _stale_read)

    with pytest.raises(ConflictError):
        await manager.start_session(artist_id)
    assert await _active_count(test_db, artist_id) == 1


async def test_lock_released_after_start(test_db, seed_artist):
    locks = ArtistLocks()
    await SessionManager(test_db, locks=locks).start_session(seed_artist.id)

    assert locks.is_held(seed_artist.id) is False
