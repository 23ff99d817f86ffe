"""Upstream record store access: HTTP client, normalization, snapshot fetching."""

from .client import UpstreamClient, UpstreamError
from .normalize import AGENT_NAMES, normalize_record, resolve_agent_name
from .fetcher import SnapshotFetcher

__all__ = [
    "UpstreamClient",
    "UpstreamError",
    "AGENT_NAMES",
    "normalize_record",
    "resolve_agent_name",
    "SnapshotFetcher",
]
