"""
Headline statistics for the leads view.

Always computed over the whole snapshot, never the filtered page, so the
KPI tiles do not move when the user filters the table.
"""

from datetime import date, datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Sequence

from leadpulse.models import (
    Record,
    STATUS_BOOKED,
    STATUS_CALLBACK,
    STATUS_CALLING,
    STATUS_READY,
    STATUS_RETRY,
)
from leadpulse.utils.numbers import mean_rounded, percent

NO_ATTEMPTS_SENTINEL = "—"
TREND_DAYS = 7


def utc_today() -> date:
    return datetime.now(timezone.utc).date()


def call_day(record: Record) -> str:
    """Calendar date part (YYYY-MM-DD) of the last call timestamp."""
    return record.last_call_date.split("T")[0] if record.last_call_date else ""


def daily_series(records: Sequence[Record], today: date, days: int) -> List[Dict[str, Any]]:
    """
    Calls and bookings per day for the trailing `days` days, oldest first.

    Records whose call date falls outside the window are ignored.
    """
    window = {
        (today - timedelta(days=offset)).isoformat(): {"callCount": 0, "bookedCount": 0}
        for offset in range(days - 1, -1, -1)
    }
    for record in records:
        bucket = window.get(call_day(record))
        if bucket is None:
            continue
        bucket["callCount"] += 1
        if record.status == STATUS_BOOKED:
            bucket["bookedCount"] += 1

    return [{"date": day, **counts} for day, counts in sorted(window.items())]


def compute_stats(records: Sequence[Record], today: Optional[date] = None) -> Dict[str, Any]:
    """KPI block for the leads endpoint."""
    today = today or utc_today()
    today_prefix = today.isoformat()
    yesterday_prefix = (today - timedelta(days=1)).isoformat()

    def count(predicate) -> int:
        return sum(1 for record in records if predicate(record))

    def called_on(record: Record, prefix: str) -> bool:
        return bool(record.last_call_date) and record.last_call_date.startswith(prefix)

    total_contacted = count(lambda r: bool(r.last_call_date))
    total_booked = count(lambda r: r.status == STATUS_BOOKED)

    booked_with_attempts = [
        r.attempt_count for r in records
        if r.status == STATUS_BOOKED and r.attempt_count and r.attempt_count > 0
    ]
    if booked_with_attempts:
        avg_attempts = f"{sum(booked_with_attempts) / len(booked_with_attempts):.1f}"
    else:
        avg_attempts = NO_ATTEMPTS_SENTINEL

    return {
        "bookedToday": count(lambda r: r.status == STATUS_BOOKED and called_on(r, today_prefix)),
        "bookedYesterday": count(lambda r: r.status == STATUS_BOOKED and called_on(r, yesterday_prefix)),
        "readyToCall": count(lambda r: r.status == STATUS_READY),
        "needsRetry": count(lambda r: r.status == STATUS_RETRY),
        "callbacksScheduled": count(lambda r: r.status == STATUS_CALLBACK),
        "currentlyCalling": count(lambda r: r.status == STATUS_CALLING),
        "totalCallsToday": count(lambda r: called_on(r, today_prefix)),
        "totalCallsYesterday": count(lambda r: called_on(r, yesterday_prefix)),
        "conversionRate": percent(total_booked, total_contacted),
        "totalBooked": total_booked,
        "totalContacted": total_contacted,
        "avgDuration": mean_rounded(r.probed_duration for r in records if r.probed_duration > 0),
        "avgAttemptsToBook": avg_attempts,
        "trend": daily_series(records, today, TREND_DAYS),
    }
