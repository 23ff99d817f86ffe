"""
Service wiring.

Everything with process lifetime (HTTP clients, the snapshot cache, the
broadcaster, the refresher) is built once here and handed to request
handlers through `app.state`, instead of living in module globals.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import timezone, tzinfo
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import httpx

from leadpulse.analyzer.narrative import NarrativeService
from leadpulse.cache import BackgroundRefresher, DurationProbeCache, SnapshotCache
from leadpulse.collector import SnapshotFetcher, UpstreamClient
from leadpulse.events import EventBroadcaster
from leadpulse.gateway import MutationGateway
from leadpulse.utils.config import Settings

logger = logging.getLogger(__name__)


def resolve_timezone(name: str) -> tzinfo:
    if not name or name.upper() == "UTC":
        return timezone.utc
    try:
        return ZoneInfo(name)
    except ZoneInfoNotFoundError:
        logger.warning(f"Unknown DISPLAY_TIMEZONE {name!r}, using UTC")
        return timezone.utc


@dataclass
class AppServices:
    """Process-wide services shared by all request handlers."""
    settings: Settings
    upstream: UpstreamClient
    prober: DurationProbeCache
    fetcher: SnapshotFetcher
    broadcaster: EventBroadcaster
    cache: SnapshotCache
    refresher: BackgroundRefresher
    gateway: MutationGateway
    narrative: NarrativeService
    downloads: httpx.AsyncClient
    display_tz: tzinfo = timezone.utc
    _warmup: Optional[asyncio.Task] = field(default=None, repr=False)

    @classmethod
    def build(
        cls,
        settings: Settings,
        upstream: Optional[UpstreamClient] = None,
        prober: Optional[DurationProbeCache] = None,
        narrative: Optional[NarrativeService] = None,
        downloads: Optional[httpx.AsyncClient] = None,
    ) -> "AppServices":
        """Wire the default object graph; any collaborator can be overridden."""
        upstream = upstream or UpstreamClient(
            table_url=settings.table_url,
            token=settings.AIRTABLE_TOKEN,
            page_size=settings.UPSTREAM_PAGE_SIZE,
            timeout=settings.UPSTREAM_TIMEOUT,
        )
        prober = prober or DurationProbeCache(timeout=settings.PROBE_TIMEOUT_SECONDS)
        fetcher = SnapshotFetcher(upstream, prober)
        broadcaster = EventBroadcaster()
        cache = SnapshotCache(fetcher, ttl=settings.CACHE_TTL_SECONDS, broadcaster=broadcaster)

        return cls(
            settings=settings,
            upstream=upstream,
            prober=prober,
            fetcher=fetcher,
            broadcaster=broadcaster,
            cache=cache,
            refresher=BackgroundRefresher(cache, interval_seconds=settings.REFRESH_INTERVAL_SECONDS),
            gateway=MutationGateway(upstream, cache),
            narrative=narrative or NarrativeService(
                api_key=settings.ANTHROPIC_API_KEY,
                model=settings.CLAUDE_MODEL,
                max_tokens=settings.NARRATIVE_MAX_TOKENS,
            ),
            downloads=downloads or httpx.AsyncClient(follow_redirects=True, timeout=httpx.Timeout(60.0)),
            display_tz=resolve_timezone(settings.DISPLAY_TIMEZONE),
        )

    async def start(self, warm: bool = True, refresh: bool = True):
        """Warm the cache in the background and start the refresher."""
        if warm:
            self._warmup = asyncio.create_task(self._warm())
        if refresh:
            await self.refresher.start()

    async def _warm(self):
        try:
            await self.cache.get()
        except Exception as e:
            logger.error(f"Warm-up failed: {e}")

    async def close(self):
        await self.refresher.stop()
        if self._warmup and not self._warmup.done():
            self._warmup.cancel()
            try:
                await self._warmup
            except asyncio.CancelledError:
                pass
        await self.prober.close()
        await self.upstream.close()
        await self.downloads.aclose()
        logger.info("Services closed")
