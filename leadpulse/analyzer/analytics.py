"""
Analytics Engine

Whole-table aggregates for the analytics tab:
- Outcome histogram
- Hour-of-day call histogram (in the display time zone)
- Duration buckets
- 30-day calls/bookings series
- Status counts
- Per-agent funnel (contact rate, book rate, average duration)

Pure functions over a sequence of Records.
"""

from collections import Counter
from datetime import date, datetime, timezone, tzinfo
from typing import Any, Dict, List, Optional, Sequence, Tuple

from leadpulse.models import Record, UNKNOWN_AGENT
from leadpulse.utils.numbers import mean_rounded, percent
from leadpulse.views.stats import daily_series, utc_today

NO_OUTCOME = "No Outcome"
UNKNOWN_STATUS = "Unknown"
DAILY_WINDOW_DAYS = 30

# (label, inclusive upper bound in seconds); None is the open-ended bucket
DURATION_BUCKETS: List[Tuple[str, Optional[int]]] = [
    ("0-30s", 30),
    ("30-60s", 60),
    ("1-2m", 120),
    ("2-5m", 300),
    ("5-10m", 600),
    ("10m+", None),
]

# Call outcome -> per-agent counter name
AGENT_OUTCOME_COUNTERS: Dict[str, str] = {
    "BOOKED": "booked",
    "NOT_INTERESTED": "notInterested",
    "HUNG_UP": "hungUp",
    "VOICEMAIL": "voicemail",
    "CALLBACK_REQUESTED": "callback",
    "NO_ANSWER": "noAnswer",
    "RENTER": "renter",
}


def parse_timestamp(value: str, tz: tzinfo = timezone.utc) -> Optional[datetime]:
    """
    Parse an upstream ISO timestamp into `tz`.

    Naive values are taken as UTC. Returns None for empty or unparseable input.
    """
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(tz)


def duration_bucket(seconds: float) -> str:
    for label, upper in DURATION_BUCKETS:
        if upper is None or seconds <= upper:
            return label
    return DURATION_BUCKETS[-1][0]


def hourly_histogram(records: Sequence[Record], tz: tzinfo = timezone.utc) -> List[int]:
    hourly = [0] * 24
    for record in records:
        parsed = parse_timestamp(record.last_call_date, tz)
        if parsed is not None:
            hourly[parsed.hour] += 1
    return hourly


def busiest_hour(hourly: Sequence[int]) -> int:
    """First hour with the highest count (lowest hour wins ties)."""
    best = 0
    for hour in range(1, len(hourly)):
        if hourly[hour] > hourly[best]:
            best = hour
    return best


def agent_breakdown(records: Sequence[Record]) -> Dict[str, Dict[str, Any]]:
    """Per-agent call funnel keyed by agent display name."""
    agents: Dict[str, Dict[str, Any]] = {}
    durations: Dict[str, List[float]] = {}

    for record in records:
        name = record.agent_name or UNKNOWN_AGENT
        if name not in agents:
            agents[name] = {"calls": 0, **{counter: 0 for counter in AGENT_OUTCOME_COUNTERS.values()}}
            durations[name] = []

        stats = agents[name]
        stats["calls"] += 1
        counter = AGENT_OUTCOME_COUNTERS.get(record.call_outcome)
        if counter:
            stats[counter] += 1
        if record.probed_duration > 0:
            durations[name].append(record.probed_duration)

    for name, stats in agents.items():
        contacted = stats["calls"] - stats["voicemail"] - stats["noAnswer"]
        stats["contactRate"] = percent(contacted, stats["calls"])
        stats["bookRate"] = percent(stats["booked"], contacted)
        stats["avgDuration"] = mean_rounded(durations[name])

    return agents


def analyze(
    records: Sequence[Record],
    today: Optional[date] = None,
    tz: tzinfo = timezone.utc,
) -> Dict[str, Any]:
    """
    Aggregate breakdowns over the whole table.

    Args:
        records: Snapshot records
        today: Last day of the 30-day series (defaults to UTC today)
        tz: Time zone the hourly histogram is reported in

    Returns:
        JSON-ready analytics payload
    """
    today = today or utc_today()

    outcome_counts: Counter = Counter(record.call_outcome or NO_OUTCOME for record in records)
    status_counts: Counter = Counter(record.status or UNKNOWN_STATUS for record in records)

    buckets = {label: 0 for label, _ in DURATION_BUCKETS}
    positive_durations = [r.probed_duration for r in records if r.probed_duration > 0]
    for seconds in positive_durations:
        buckets[duration_bucket(seconds)] += 1

    hourly = hourly_histogram(records, tz)
    daily = {
        entry["date"]: {"calls": entry["callCount"], "booked": entry["bookedCount"]}
        for entry in daily_series(records, today, DAILY_WINDOW_DAYS)
    }

    return {
        "outcomeCounts": dict(outcome_counts),
        "hourly": hourly,
        "daily": daily,
        "statusCounts": dict(status_counts),
        "durationBuckets": buckets,
        "bestHour": busiest_hour(hourly),
        "totalRecords": len(records),
        "avgDuration": mean_rounded(positive_durations),
        "agentBreakdown": agent_breakdown(records),
    }
