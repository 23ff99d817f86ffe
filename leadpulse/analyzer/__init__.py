"""
Analytics over cached snapshots.

- analytics: whole-table aggregates (outcomes, hours, durations, agents)
- calls: one day's metrics, objection tally, narrative sample
- narrative: Claude-written coaching report for a day
"""

from .analytics import analyze, agent_breakdown, busiest_hour, parse_timestamp, DURATION_BUCKETS
from .calls import (
    OBJECTION_RULES,
    analyze_day,
    classify_objections,
    records_for_day,
    select_narrative_sample,
    substantial_calls,
)
from .narrative import NarrativeService, NarrativeServiceError, friendly_error
from .prompts import build_prompt

__all__ = [
    "analyze",
    "agent_breakdown",
    "busiest_hour",
    "parse_timestamp",
    "DURATION_BUCKETS",
    "OBJECTION_RULES",
    "analyze_day",
    "classify_objections",
    "records_for_day",
    "select_narrative_sample",
    "substantial_calls",
    "NarrativeService",
    "NarrativeServiceError",
    "friendly_error",
    "build_prompt",
]
