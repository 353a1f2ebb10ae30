"""Per-Artist Serialization — one in-process lock per artist id.

Invariants:
    - Start/end transitions for one artist never interleave inside this process
    - Different artists never wait on each other
    - A lock lives only while some coroutine holds or awaits it

Design Decisions:
    - WeakValueDictionary: idle artists leave no entry behind
    - Cross-process races are caught by the partial unique index on
      sessions(artist_id) WHERE active, surfaced as ConflictError
"""

import asyncio
import weakref
from contextlib import asynccontextmanager
from typing import AsyncIterator
from uuid import UUID


class ArtistLocks:
    """Registry of asyncio locks keyed by artist id."""

    def __init__(self) -> None:
        self._locks: weakref.WeakValueDictionary[UUID, asyncio.Lock] = (
            weakref.WeakValueDictionary()
        )

    def _lock_for(self, artist_id: UUID) -> asyncio.Lock:
        lock = self._locks.get(artist_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[artist_id] = lock
        return lock

    @asynccontextmanager
    async def hold(self, artist_id: UUID) -> AsyncIterator[None]:
        lock = self._lock_for(artist_id)
        async with lock:
            yield

    def is_held(self, artist_id: UUID) -> bool:
        lock = self._locks.get(artist_id)
        return lock is not None and lock.locked()


artist_locks = ArtistLocks()
