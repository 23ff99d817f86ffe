"""
Snapshot Cache

Holds the single current Snapshot of the leads table and decides when to
refetch it.

States:
- EMPTY: nothing fetched yet
- FRESH: fetched less than `ttl` seconds ago and not invalidated
- STALE: too old, or invalidated after a write / by the refresher

A read while not FRESH starts a fetch. Concurrent readers share that one
in-flight fetch and all receive the same Snapshot (or the same error).
A failed fetch leaves the previous snapshot in place and the state STALE,
so the next read retries.

Every successful replacement of an existing snapshot is diffed and the
resulting change events are published before the read returns.
"""

import asyncio
import dataclasses
import logging
import time
from enum import Enum
from typing import Callable, Optional

from leadpulse.events import EventBroadcaster, detect_changes
from leadpulse.models import Snapshot

logger = logging.getLogger(__name__)


class CacheState(str, Enum):
    EMPTY = "empty"
    FRESH = "fresh"
    STALE = "stale"


class SnapshotCache:
    """Single-writer, time-windowed cache of the lead table."""

    def __init__(
        self,
        fetcher,
        ttl: float = 20.0,
        broadcaster: Optional[EventBroadcaster] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Args:
            fetcher: Object with `async fetch() -> Snapshot`
            ttl: Seconds a snapshot stays fresh
            broadcaster: Receives change events after each refresh
            clock: Monotonic time source (overridable in tests)
        """
        self._fetcher = fetcher
        self.ttl = ttl
        self._broadcaster = broadcaster
        self._clock = clock

        self._snapshot: Optional[Snapshot] = None
        self._invalidated = False
        self._generation = 0
        self._inflight: Optional[asyncio.Task] = None

        self.fetch_count = 0
        self.failure_count = 0

    @property
    def current(self) -> Optional[Snapshot]:
        """The held snapshot, without triggering a fetch."""
        return self._snapshot

    @property
    def state(self) -> CacheState:
        if self._snapshot is None:
            return CacheState.EMPTY
        if self._invalidated or self._clock() - self._snapshot.captured_at >= self.ttl:
            return CacheState.STALE
        return CacheState.FRESH

    @property
    def refreshing(self) -> bool:
        return self._inflight is not None

    def invalidate(self) -> None:
        """Force the next get() to refetch regardless of age."""
        self._invalidated = True
        self._generation += 1

    async def get(self) -> Snapshot:
        """
        Current snapshot, refetching first if it is not fresh.

        Raises:
            UpstreamError: If the refetch fails
        """
        if self.state is CacheState.FRESH:
            return self._snapshot

        if self._inflight is None:
            self._inflight = asyncio.ensure_future(self._refresh())
            self._inflight.add_done_callback(self._clear_inflight)

        # shield: one cancelled reader must not cancel the shared fetch
        return await asyncio.shield(self._inflight)

    async def _refresh(self) -> Snapshot:
        generation = self._generation
        started_at = self._clock()
        self.fetch_count += 1

        try:
            snapshot = await self._fetcher.fetch()
        except Exception:
            self.failure_count += 1
            raise

        snapshot = dataclasses.replace(snapshot, captured_at=started_at)
        previous = self._snapshot
        self._snapshot = snapshot
        # a write that landed mid-fetch may not be reflected in this data
        self._invalidated = self._generation != generation

        if previous is not None and self._broadcaster is not None:
            events = detect_changes(previous, snapshot)
            if events:
                logger.info(f"Detected {len(events)} changes, broadcasting")
            self._broadcaster.publish_all(events)

        return snapshot

    def _clear_inflight(self, task: asyncio.Task) -> None:
        if self._inflight is task:
            self._inflight = None
        if not task.cancelled():
            # mark the exception retrieved; readers already re-raised it
            task.exception()
