"""
Day-scoped call analysis.

Metrics for the calls placed on one calendar day, a keyword-based
objection tally over their transcripts, and the transcript sample handed
to the narrative analysis model.
"""

import re
from collections import Counter
from typing import Any, Dict, List, Optional, Pattern, Sequence, Tuple

from leadpulse.models import Record
from leadpulse.utils.numbers import mean_rounded, percent

OUTCOME_BOOKED = "BOOKED"
UNKNOWN_OUTCOME = "UNKNOWN"
NOT_REACHED_OUTCOMES = frozenset({"NO_ANSWER", "VOICEMAIL"})

MIN_CLASSIFIABLE_TRANSCRIPT = 50
MIN_SAMPLE_TRANSCRIPT = 100
MIN_SAMPLE_DURATION = 30
SAMPLE_PER_OUTCOME = 5
SAMPLE_LIMIT = 50
TOP_OBJECTIONS = 10

# Checked in order against the lowercased transcript
OBJECTION_RULES: List[Tuple[Pattern, str]] = [
    (re.compile(r"not interested"), "Not interested"),
    (re.compile(r"already have solar|got solar"), "Already has solar"),
    (re.compile(r"too busy|bad time"), "Too busy"),
    (re.compile(r"think about it|need to think"), "Need to think"),
    (re.compile(r"can.t afford|too expensive"), "Cost concern"),
    (re.compile(r"rent|tenant|landlord"), "Renter"),
    (re.compile(r"scam|fraud|fake"), "Scam concern"),
    (re.compile(r"do not call|stop calling"), "DNC request"),
    (re.compile(r"husband|wife|spouse"), "Need spouse input"),
    (re.compile(r"credit.*(bad|low|poor)"), "Credit concerns"),
    (re.compile(r"roof.*(old|bad|replac)"), "Roof issues"),
]


def records_for_day(records: Sequence[Record], target_date: str) -> List[Record]:
    """Records whose last call happened on `target_date` (YYYY-MM-DD)."""
    return [r for r in records if r.last_call_date and r.last_call_date.startswith(target_date)]


def call_seconds(record: Record) -> float:
    return record.probed_duration or record.call_duration or 0


def was_contacted(record: Record) -> bool:
    return bool(record.call_outcome) and record.call_outcome not in NOT_REACHED_OUTCOMES


def classify_objections(transcript: str) -> List[str]:
    """Labels of every objection rule matching the transcript, in rule order."""
    text = transcript.lower()
    return [label for pattern, label in OBJECTION_RULES if pattern.search(text)]


def analyze_day(records: Sequence[Record], target_date: str) -> Optional[Dict[str, Any]]:
    """
    Conversion metrics and objection tally for one day.

    Returns:
        Metrics dict, or None when no calls were placed that day
    """
    day = records_for_day(records, target_date)
    if not day:
        return None

    outcomes: Counter = Counter(r.call_outcome or UNKNOWN_OUTCOME for r in day)
    objections: Counter = Counter()
    with_transcripts = 0

    for record in day:
        if len(record.transcript) > MIN_CLASSIFIABLE_TRANSCRIPT:
            with_transcripts += 1
            objections.update(classify_objections(record.transcript))

    total = len(day)
    contacted = sum(1 for r in day if was_contacted(r))
    booked = outcomes.get(OUTCOME_BOOKED, 0)

    return {
        "total": total,
        "contacted": contacted,
        "contactRate": percent(contacted, total),
        "booked": booked,
        "bookRate": percent(booked, contacted),
        "avgDuration": mean_rounded(s for s in (call_seconds(r) for r in day) if s > 0),
        "outcomes": dict(outcomes),
        "withTranscripts": with_transcripts,
        "objections": [[label, count] for label, count in objections.most_common(TOP_OBJECTIONS)],
    }


def substantial_calls(records: Sequence[Record], target_date: str) -> List[Record]:
    """Calls on the day with a long transcript that lasted at least 30s."""
    return [
        r for r in records_for_day(records, target_date)
        if len(r.transcript) > MIN_SAMPLE_TRANSCRIPT and call_seconds(r) >= MIN_SAMPLE_DURATION
    ]


def select_narrative_sample(records: Sequence[Record], target_date: str) -> List[Record]:
    """
    Transcripts to send for narrative analysis.

    Only substantial calls qualify. Every booked call is kept, then up to 5
    per other outcome in first-seen order, capped at 50 overall.
    """
    candidates = substantial_calls(records, target_date)

    by_outcome: Dict[str, List[Record]] = {}
    for record in candidates:
        by_outcome.setdefault(record.call_outcome or UNKNOWN_OUTCOME, []).append(record)

    sample = list(by_outcome.get(OUTCOME_BOOKED, []))
    for outcome, group in by_outcome.items():
        if outcome != OUTCOME_BOOKED:
            sample.extend(group[:SAMPLE_PER_OUTCOME])
    return sample[:SAMPLE_LIMIT]
