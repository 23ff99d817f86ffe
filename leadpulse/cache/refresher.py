"""
Background Refresher

Periodically invalidates the snapshot cache and re-reads it, so change
events keep flowing even when no dashboard is requesting data. Failures
are logged and the loop keeps running; the next tick is the retry.
"""

import asyncio
import logging
from typing import Optional

from leadpulse.cache.snapshot import SnapshotCache

logger = logging.getLogger(__name__)


class BackgroundRefresher:
    """Fixed-period invalidate + get loop over a SnapshotCache."""

    def __init__(self, cache: SnapshotCache, interval_seconds: float = 30.0):
        self._cache = cache
        self.interval = interval_seconds
        self._running = False
        self._task: Optional[asyncio.Task] = None
        self.tick_count = 0

    @property
    def running(self) -> bool:
        return self._running

    async def run_once(self) -> bool:
        """
        One refresh tick.

        Returns:
            True if the cache was refreshed, False if the fetch failed
        """
        self.tick_count += 1
        self._cache.invalidate()
        try:
            await self._cache.get()
            return True
        except Exception as e:
            logger.error(f"Background poll error: {e}")
            return False

    async def start(self):
        """Start the background loop. Calling twice is a no-op."""
        if self._running:
            logger.warning("Background refresher already running")
            return

        self._running = True

        async def refresh_loop():
            while self._running:
                await asyncio.sleep(self.interval)
                await self.run_once()

        self._task = asyncio.create_task(refresh_loop())
        logger.info(f"Background refresher started (interval: {self.interval}s)")

    async def stop(self):
        """Stop the background loop."""
        self._running = False
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        logger.info("Background refresher stopped")
