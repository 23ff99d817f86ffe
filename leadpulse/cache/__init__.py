"""
LeadPulse Caching Layer

- DurationProbeCache: memoized recording-length inference (HEAD requests)
- SnapshotCache: TTL-bounded, fetch-coalescing cache of the lead table
- BackgroundRefresher: periodic invalidate + refetch

Usage:
    cache = SnapshotCache(fetcher, ttl=20, broadcaster=broadcaster)
    snapshot = await cache.get()

    # After a write upstream
    cache.invalidate()
"""

from leadpulse.cache.probe import DurationProbeCache, ProbeFailure, duration_from_length
from leadpulse.cache.snapshot import SnapshotCache, CacheState
from leadpulse.cache.refresher import BackgroundRefresher

__all__ = [
    "DurationProbeCache",
    "ProbeFailure",
    "duration_from_length",
    "SnapshotCache",
    "CacheState",
    "BackgroundRefresher",
]
