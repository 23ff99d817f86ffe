"""
Pytest Configuration and Shared Fixtures

Provides record/snapshot factories, a controllable fetcher and clock, and
an in-memory Airtable served through httpx.MockTransport.
"""

import asyncio
import json
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import httpx
import pytest

from leadpulse.cache import DurationProbeCache
from leadpulse.collector import UpstreamClient
from leadpulse.models import Record, Snapshot


TABLE_URL = "https://airtable.test/v0/appTest/Leads"


# ============================================================================
# Record / Snapshot Factories
# ============================================================================

def build_record(record_id: str = "rec1", **overrides) -> Record:
    """Record with sensible defaults; any attribute can be overridden."""
    values: Dict[str, Any] = {
        "first_name": "Jane",
        "last_name": "Doe",
        "status": "Ready to Call",
    }
    values.update(overrides)
    return Record(id=record_id, **values)


def build_snapshot(*records: Record, captured_at: float = 0.0) -> Snapshot:
    return Snapshot(
        records=tuple(records),
        captured_at=captured_at,
        fetched_at=datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc),
    )


def raw_lead(record_id: str, **fields) -> Dict[str, Any]:
    """Raw upstream record as the list endpoint returns it."""
    return {"id": record_id, "createdTime": "2025-06-01T00:00:00.000Z", "fields": fields}


@pytest.fixture
def make_record():
    return build_record


@pytest.fixture
def make_snapshot():
    return build_snapshot


# ============================================================================
# Fetcher / Clock Doubles
# ============================================================================

class FakeFetcher:
    """
    Returns queued results in order; the last one repeats.

    Exceptions in the queue are raised instead of returned. When `gate` is
    set, every fetch waits on it, which lets tests hold a fetch in flight.
    """

    def __init__(self, *results):
        self.results = list(results)
        self.calls = 0
        self.gate: Optional[asyncio.Event] = None

    async def fetch(self) -> Snapshot:
        self.calls += 1
        if self.gate is not None:
            await self.gate.wait()
        index = min(self.calls, len(self.results)) - 1
        result = self.results[index]
        if isinstance(result, Exception):
            raise result
        return result


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def fake_fetcher():
    return FakeFetcher


# ============================================================================
# In-memory Airtable
# ============================================================================

class FakeAirtable:
    """
    Minimal Airtable table behind httpx.MockTransport.

    Supports offset pagination on list, and get / create / patch / delete
    by id. Set `fail_with` to a status code to make every request fail.
    """

    def __init__(self, records: Optional[List[Dict[str, Any]]] = None):
        self.records: List[Dict[str, Any]] = list(records or [])
        self.requests: List[httpx.Request] = []
        self.fail_with: Optional[int] = None
        self._next_id = 1

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    def client(self, page_size: int = 100) -> UpstreamClient:
        return UpstreamClient(TABLE_URL, token="test-token", page_size=page_size, transport=self.transport)

    def requests_for(self, method: str) -> List[httpx.Request]:
        return [r for r in self.requests if r.method == method]

    def _find(self, record_id: str) -> Optional[Dict[str, Any]]:
        for record in self.records:
            if record["id"] == record_id:
                return record
        return None

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.fail_with is not None:
            return httpx.Response(self.fail_with, json={"error": {"type": "TEST_FAILURE"}})

        parts = request.url.path.strip("/").split("/")
        record_id = parts[3] if len(parts) > 3 else None

        if record_id is None:
            if request.method == "GET":
                return self._list(request)
            if request.method == "POST":
                body = json.loads(request.content)
                record = raw_lead(f"recNew{self._next_id}", **body["fields"])
                self._next_id += 1
                self.records.append(record)
                return httpx.Response(200, json=record)
            return httpx.Response(405)

        record = self._find(record_id)
        if record is None:
            return httpx.Response(404, json={"error": "NOT_FOUND"})
        if request.method == "GET":
            return httpx.Response(200, json=record)
        if request.method == "PATCH":
            record["fields"].update(json.loads(request.content)["fields"])
            return httpx.Response(200, json=record)
        if request.method == "DELETE":
            self.records.remove(record)
            return httpx.Response(200, json={"id": record_id, "deleted": True})
        return httpx.Response(405)

    def _list(self, request: httpx.Request) -> httpx.Response:
        page_size = int(request.url.params.get("pageSize", "100"))
        start = int(request.url.params.get("offset", "0"))
        page = self.records[start:start + page_size]
        payload: Dict[str, Any] = {"records": page}
        if start + page_size < len(self.records):
            payload["offset"] = str(start + page_size)
        return httpx.Response(200, json=payload)


def recording_transport(lengths: Dict[str, Any], calls: Optional[List[str]] = None) -> httpx.MockTransport:
    """
    HEAD responder for recording URLs.

    `lengths` maps URL -> content length, or to ("status", code) to
    simulate a failing host. Unknown URLs answer 404.
    """
    def handle(request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        if calls is not None:
            calls.append(url)
        value = lengths.get(url)
        if value is None:
            return httpx.Response(404)
        if isinstance(value, tuple):
            return httpx.Response(value[1])
        return httpx.Response(200, headers={"content-length": str(value)})

    return httpx.MockTransport(handle)


@pytest.fixture
def airtable() -> FakeAirtable:
    return FakeAirtable()


@pytest.fixture
def make_raw():
    return raw_lead


@pytest.fixture
def make_prober():
    """Factory for a DurationProbeCache whose HEAD requests hit `lengths`."""
    def factory(lengths: Dict[str, Any], calls: Optional[List[str]] = None) -> DurationProbeCache:
        client = httpx.AsyncClient(transport=recording_transport(lengths, calls))
        return DurationProbeCache(timeout=1.0, client=client)

    return factory
