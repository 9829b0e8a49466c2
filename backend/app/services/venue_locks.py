"""
Per-venue mutation locks: writes to one venue are serialized, different venues run in parallel.

VenueLocks is the ledger's own guarantee and works from any thread. VenueGates is its
event-loop twin for request handlers: a request waiting on a busy venue awaits the gate on the
loop instead of parking a threadpool worker on the threading lock. Entries exist only while
someone holds or waits for them.
"""
import asyncio
import threading
from contextlib import asynccontextmanager, contextmanager
from typing import AsyncIterator, Iterator


class _Entry:
    __slots__ = ("lock", "users")

    def __init__(self, lock) -> None:
        self.lock = lock
        self.users = 0


class VenueLocks:
    """threading.Lock per venue id. The guard lock is held only to look an entry up or drop it."""

    def __init__(self) -> None:
        self._entries: dict[str, _Entry] = {}
        self._guard = threading.Lock()

    def _acquire_entry(self, venue_id: str) -> _Entry:
        with self._guard:
            entry = self._entries.get(venue_id)
            if entry is None:
                entry = self._entries[venue_id] = _Entry(threading.Lock())
            entry.users += 1
            return entry

    def _release_entry(self, venue_id: str, entry: _Entry) -> None:
        with self._guard:
            entry.users -= 1
            if entry.users == 0 and self._entries.get(venue_id) is entry:
                del self._entries[venue_id]

    @contextmanager
    def hold(self, venue_id: str) -> Iterator[None]:
        entry = self._acquire_entry(venue_id)
        try:
            with entry.lock:
                yield
        finally:
            self._release_entry(venue_id, entry)

    def __len__(self) -> int:
        with self._guard:
            return len(self._entries)


class VenueGates:
    """asyncio.Lock per venue id. Only touched from the event loop thread, so no guard lock."""

    def __init__(self) -> None:
        self._entries: dict[str, _Entry] = {}

    @asynccontextmanager
    async def hold(self, venue_id: str) -> AsyncIterator[None]:
        entry = self._entries.get(venue_id)
        if entry is None:
            entry = self._entries[venue_id] = _Entry(asyncio.Lock())
        entry.users += 1
        try:
            async with entry.lock:
                yield
        finally:
            entry.users -= 1
            if entry.users == 0 and self._entries.get(venue_id) is entry:
                del self._entries[venue_id]

    def pending(self, venue_id: str) -> int:
        """Requests holding or queued on venue_id's gate."""
        entry = self._entries.get(venue_id)
        return entry.users if entry else 0

    def __len__(self) -> int:
        return len(self._entries)


# One table per process; attendance and chatter writes for a venue share it
venue_locks = VenueLocks()
venue_gates = VenueGates()
