"""
Leads View Engine

Turns a snapshot plus a LeadQuery into the table page the dashboard
renders: filter -> sort -> paginate, alongside whole-table stats and the
option lists for the filter dropdowns. Pure; no I/O.
"""

import math
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, FrozenSet, List, Optional, Sequence, Tuple

from leadpulse.models import FIELD_ALIASES, Record, Snapshot, UNKNOWN_AGENT
from leadpulse.views.stats import compute_stats

DEFAULT_SORT = "lastCallDate"
DEFAULT_LIMIT = 20
MAX_LIMIT = 100

NUMERIC_SORT_FIELDS = {"call_duration", "attempt_count", "probed_duration"}


def split_csv_param(value: Optional[str]) -> FrozenSet[str]:
    """Comma-delimited multi-select value -> set of non-empty entries."""
    if not value:
        return frozenset()
    return frozenset(part for part in value.split(",") if part)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _to_int(value: Any, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


@dataclass
class LeadQuery:
    """Request-scoped filter / sort / paging options."""
    search: str = ""
    statuses: FrozenSet[str] = field(default_factory=frozenset)
    outcomes: FrozenSet[str] = field(default_factory=frozenset)
    agents: FrozenSet[str] = field(default_factory=frozenset)
    date_from: str = ""
    date_to: str = ""
    min_duration: Optional[int] = None
    sort: str = DEFAULT_SORT
    direction: str = "desc"
    page: int = 1
    limit: int = DEFAULT_LIMIT

    @classmethod
    def from_params(
        cls,
        search: Optional[str] = None,
        status: Optional[str] = None,
        outcome: Optional[str] = None,
        agent: Optional[str] = None,
        date_from: Optional[str] = None,
        date_to: Optional[str] = None,
        min_duration: Optional[str] = None,
        page: Any = 1,
        limit: Any = DEFAULT_LIMIT,
        sort: Optional[str] = None,
        direction: Optional[str] = None,
    ) -> "LeadQuery":
        """Build from raw query-string values, clamping page and limit."""
        return cls(
            search=search or "",
            statuses=split_csv_param(status),
            outcomes=split_csv_param(outcome),
            agents=split_csv_param(agent),
            date_from=date_from or "",
            date_to=date_to or "",
            min_duration=_to_int(min_duration, None) if min_duration not in (None, "") else None,
            sort=sort or DEFAULT_SORT,
            direction="asc" if direction == "asc" else "desc",
            page=max(1, _to_int(page, 1)),
            limit=max(1, min(MAX_LIMIT, _to_int(limit, DEFAULT_LIMIT))),
        )


def matches(record: Record, query: LeadQuery) -> bool:
    """True if the record passes every filter in the query."""
    if query.search:
        needle = query.search.lower()
        haystacks = (record.full_name, record.phone, record.address, record.email)
        if not any(needle in text.lower() for text in haystacks):
            return False
    if query.statuses and record.status not in query.statuses:
        return False
    if query.outcomes and record.call_outcome not in query.outcomes:
        return False
    if query.agents and record.agent_id not in query.agents and record.agent_name not in query.agents:
        return False
    if query.date_from and record.last_call_date < query.date_from:
        return False
    if query.date_to and record.last_call_date > query.date_to + "T23:59:59":
        return False
    if query.min_duration is not None and record.probed_duration < query.min_duration:
        return False
    return True


def filter_records(records: Sequence[Record], query: LeadQuery) -> List[Record]:
    return [record for record in records if matches(record, query)]


def sort_records(records: Sequence[Record], sort: str, direction: str) -> List[Record]:
    """
    Stable sort by a camelCase field name.

    Values that are numbers compare as numbers, everything else as
    case-sensitive strings. Numbers and strings sit in separate tiers so a
    column mixing both still has a total order. Unknown field names keep
    the input order.
    """
    attr = FIELD_ALIASES.get(sort)
    if attr is None:
        return list(records)

    def key(record: Record) -> Tuple[int, Any]:
        value = getattr(record, attr)
        if _is_number(value):
            return (0, value)
        if attr in NUMERIC_SORT_FIELDS:
            return (0, 0)
        return (1, "" if value is None else str(value))

    return sorted(records, key=key, reverse=direction != "asc")


def paginate(records: Sequence[Record], page: int, limit: int) -> Dict[str, Any]:
    total = len(records)
    start = (page - 1) * limit
    return {
        "items": list(records[start:start + limit]),
        "pagination": {
            "page": page,
            "limit": limit,
            "total": total,
            "pages": math.ceil(total / limit),
        },
    }


def filter_options(records: Sequence[Record]) -> Dict[str, List[str]]:
    """Distinct values present in the data, for populating filter controls."""
    return {
        "statuses": sorted({r.status for r in records if r.status}),
        "outcomes": sorted({r.call_outcome for r in records if r.call_outcome}),
        "agents": sorted({r.agent_name for r in records if r.agent_name and r.agent_name != UNKNOWN_AGENT}),
    }


def build_lead_view(
    snapshot: Snapshot,
    query: LeadQuery,
    today: Optional[date] = None,
) -> Dict[str, Any]:
    """
    Full response for the leads table.

    Args:
        snapshot: Current cached table
        query: Filters, sort and paging
        today: Reference day for today/yesterday stats (defaults to UTC today)

    Returns:
        {"records", "pagination", "stats", "filters", "fetchedAt"}
    """
    records = snapshot.records
    filtered = filter_records(records, query)
    ordered = sort_records(filtered, query.sort, query.direction)
    page = paginate(ordered, query.page, query.limit)

    return {
        "stats": compute_stats(records, today),
        "records": [record.to_dict() for record in page["items"]],
        "pagination": page["pagination"],
        "filters": filter_options(records),
        "fetchedAt": snapshot.fetched_at.isoformat(),
    }


def find_record(snapshot: Snapshot, record_id: str) -> Optional[Record]:
    return snapshot.get(record_id)
