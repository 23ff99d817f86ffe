"""
Snapshot Fetcher

Reads the whole leads table page by page, normalizes every row and fills
in probed durations. Either every page is retrieved or the call fails with
UpstreamError; a partial snapshot is never returned.
"""

import dataclasses
import logging
import time
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List

from leadpulse.cache.probe import DurationProbeCache
from leadpulse.collector.client import UpstreamClient
from leadpulse.collector.normalize import normalize_record
from leadpulse.models import Record, Snapshot

logger = logging.getLogger(__name__)


class SnapshotFetcher:
    """Builds a fully materialized Snapshot from the upstream table."""

    def __init__(
        self,
        client: UpstreamClient,
        prober: DurationProbeCache,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.client = client
        self.prober = prober
        self._clock = clock

    async def fetch_raw(self) -> List[Dict[str, Any]]:
        """All raw records in upstream order, following the offset cursor."""
        raw_records: List[Dict[str, Any]] = []
        offset = None
        pages = 0

        while True:
            logger.info("Fetching from Airtable...")
            page = await self.client.list_page(offset=offset)
            raw_records.extend(page.get("records") or [])
            pages += 1
            offset = page.get("offset")
            if not offset:
                break

        logger.debug(f"Fetched {len(raw_records)} raw records in {pages} pages")
        return raw_records

    async def fetch(self) -> Snapshot:
        """
        Fetch, normalize and probe the whole table.

        Returns:
            Snapshot with every record's probed_duration resolved

        Raises:
            UpstreamError: If any page request fails
        """
        raw_records = await self.fetch_raw()
        records = [normalize_record(raw) for raw in raw_records]
        records = await self._attach_durations(records)

        logger.info(f"Cached {len(records)} records")
        return Snapshot(
            records=tuple(records),
            raw=tuple(raw_records),
            captured_at=self._clock(),
            fetched_at=datetime.now(timezone.utc),
        )

    async def _attach_durations(self, records: List[Record]) -> List[Record]:
        to_probe = [record for record in records if record.needs_probe]
        if not to_probe:
            return records

        durations = await self.prober.probe_many(record.recording_url for record in to_probe)
        return [
            dataclasses.replace(record, probed_duration=durations.get(record.recording_url, 0))
            if record.needs_probe else record
            for record in records
        ]
