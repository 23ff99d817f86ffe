"""
Recording Duration Probe Cache

Infers a call's length from the byte size of its WAV recording when the
record has no explicit duration. Only a HEAD request is made; the body is
never downloaded.

Recordings are 24kHz mono 16-bit PCM behind a 44-byte header, so
seconds = (content_length - 44) / 48000.

Results (including failures, cached as 0) are kept for the life of the
process. There is no eviction: the cache is bounded by the number of
distinct recordings seen.
"""

import asyncio
import logging
from typing import Dict, Optional

import httpx

from leadpulse.utils.numbers import round_half_up

logger = logging.getLogger(__name__)

WAV_HEADER_BYTES = 44
WAV_BYTES_PER_SECOND = 24_000 * 1 * 2


class ProbeFailure(Exception):
    """A duration could not be inferred. Never leaves this module."""


def duration_from_length(content_length: int) -> int:
    """Seconds of audio for a WAV payload of the given byte length."""
    if content_length <= WAV_HEADER_BYTES:
        return 0
    return round_half_up((content_length - WAV_HEADER_BYTES) / WAV_BYTES_PER_SECOND)


class DurationProbeCache:
    """
    Memoizing HEAD-request prober keyed by recording URL.

    Concurrent probes for the same URL share one request.
    """

    def __init__(
        self,
        timeout: float = 5.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self._client = client or httpx.AsyncClient(timeout=httpx.Timeout(timeout), follow_redirects=True)
        self._owns_client = client is None
        self._timeout = timeout
        self._durations: Dict[str, int] = {}
        self._pending: Dict[str, asyncio.Task] = {}
        self.request_count = 0

    @property
    def size(self) -> int:
        return len(self._durations)

    def cached(self, url: str) -> Optional[int]:
        """Cached seconds for a URL, or None if never probed."""
        if not url:
            return 0
        return self._durations.get(url)

    async def probe(self, url: str) -> int:
        """
        Duration in seconds for a recording URL.

        Empty URLs and cache hits return without I/O. Any failure yields 0,
        which is cached like a real result.
        """
        if not url:
            return 0
        if url in self._durations:
            return self._durations[url]

        task = self._pending.get(url)
        if task is None:
            task = asyncio.ensure_future(self._probe_and_store(url))
            self._pending[url] = task
        return await asyncio.shield(task)

    async def _probe_and_store(self, url: str) -> int:
        try:
            try:
                seconds = await self._head_duration(url)
            except ProbeFailure as e:
                logger.debug(f"Duration probe failed for {url}: {e}")
                seconds = 0
            self._durations[url] = seconds
            return seconds
        finally:
            self._pending.pop(url, None)

    async def _head_duration(self, url: str) -> int:
        self.request_count += 1
        try:
            response = await self._client.head(url, timeout=self._timeout)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise ProbeFailure(str(e)) from e

        if not response.is_success:
            raise ProbeFailure(f"HEAD returned {response.status_code}")

        try:
            length = int(response.headers.get("content-length") or 0)
        except ValueError as e:
            raise ProbeFailure(f"bad content-length: {e}") from e

        return duration_from_length(length)

    async def probe_many(self, urls) -> Dict[str, int]:
        """Probe distinct URLs concurrently, returning url -> seconds."""
        distinct = [url for url in dict.fromkeys(urls) if url]
        if not distinct:
            return {}
        missing = [url for url in distinct if url not in self._durations]
        if missing:
            logger.info(f"Probing {len(missing)} recording durations...")
        results = await asyncio.gather(*(self.probe(url) for url in distinct))
        if missing:
            logger.info(f"Probed {len(missing)} durations, cache size: {self.size}")
        return dict(zip(distinct, results))

    async def close(self):
        if self._owns_client:
            await self._client.aclose()
