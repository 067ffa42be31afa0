"""
Venue_POS.services.sync_queue

Ordered log of change records waiting to go to the server.

The store appends; only the sync worker removes, and only entries the
server acknowledged. Pruning is by correlation timestamp, so entries that
arrive while a push is in flight are never touched.
"""

from __future__ import annotations

from typing import Callable, Iterable, List

from Venue_POS.domain.sync_changes import SyncChange, SyncQueueEntry


class SyncQueue:
    """
    Wraps the dataset's queue list (shared by reference, so it is persisted
    with the rest of the snapshot).
    """

    def __init__(self, entries: List[SyncQueueEntry], clock: Callable[[], int]) -> None:
        self._entries = entries
        self._clock = clock

    def __len__(self) -> int:
        return len(self._entries)

    def rebind(self, entries: List[SyncQueueEntry]) -> None:
        self._entries = entries

    def append(self, change: SyncChange) -> SyncQueueEntry:
        """
        Queue a change. ts is forced strictly increasing so it stays a
        unique key even for two mutations in the same millisecond.
        """
        ts = int(self._clock())
        if self._entries:
            ts = max(ts, self._entries[-1].ts + 1)
        entry = SyncQueueEntry(change=change, ts=ts)
        self._entries.append(entry)
        return entry

    def snapshot(self) -> List[SyncQueueEntry]:
        """Copy for transmission; later appends don't affect it."""
        return list(self._entries)

    def acknowledge(self, sent: Iterable[SyncQueueEntry]) -> int:
        """
        Drop every live entry whose ts was in the transmitted batch.
        Returns how many were removed.
        """
        sent_ts = {e.ts for e in sent}
        before = len(self._entries)
        self._entries[:] = [e for e in self._entries if e.ts not in sent_ts]
        return before - len(self._entries)

    def entries(self) -> List[SyncQueueEntry]:
        return list(self._entries)
