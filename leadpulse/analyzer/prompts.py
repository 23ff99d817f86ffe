"""Prompt template for the narrative call analysis."""

import json
from typing import Any, Dict, Sequence

from leadpulse.analyzer.calls import call_seconds
from leadpulse.models import Record
from leadpulse.utils.numbers import round_half_up

TRANSCRIPT_CHARS = 1500

ANALYSIS_PROMPT = """You are an expert solar sales call analyst. These are AI-powered outbound appointment-setting calls for solar energy consultations. Analyze them and provide specific, actionable insights.

# PERFORMANCE ({date})
- Total Calls: {total} | Contact Rate: {contact_rate}% | Booked: {booked} ({book_rate}%)
- Outcomes: {outcomes}

# TRANSCRIPTS ({sample_size} sampled)
{transcripts}

Analyze in these sections. Quote exact phrases from the transcripts.

## Conversion Killers
Top 3 things killing conversions:
- Quote the problematic phrase
- Why it hurts
- Exact replacement wording

## What's Working
2-3 effective techniques from successful calls:
- Quote the effective phrases
- Why they work

## Objection Handling
Objections not handled well with specific rebuttals for each.

## Script Fixes
Top 5 exact changes. For each:

**Fix: [section]**
- Current: "exact wording"
- Change to: "new wording"
- Why: reason

## Agent Performance
- Script adherence
- Natural conversation vs robotic
- Objection persistence (trying 3+ times?)
- Information collection quality
- Closing technique

## Action Items
Top 3-5 priorities before next session.

Be direct and specific. No generic advice."""


def format_transcripts(sample: Sequence[Record]) -> str:
    blocks = []
    for record in sample:
        name = " ".join(part for part in (record.first_name, record.last_name) if part) or "Unknown"
        header = (
            f"### {record.call_outcome or 'UNKNOWN'} - {name} "
            f"[{record.agent_name or 'Unknown Agent'}] ({round_half_up(call_seconds(record))}s)"
        )
        blocks.append(f"\n{header}\n{record.transcript[:TRANSCRIPT_CHARS]}\n")
    return "".join(blocks)


def build_prompt(target_date: str, metrics: Dict[str, Any], sample: Sequence[Record]) -> str:
    """
    Render the analyst prompt.

    Args:
        target_date: Day being analyzed (YYYY-MM-DD)
        metrics: Output of analyze_day() for the same day
        sample: Output of select_narrative_sample()
    """
    return ANALYSIS_PROMPT.format(
        date=target_date,
        total=metrics["total"],
        contact_rate=metrics["contactRate"],
        booked=metrics["booked"],
        book_rate=metrics["bookRate"],
        outcomes=json.dumps(metrics["outcomes"]),
        sample_size=len(sample),
        transcripts=format_transcripts(sample),
    )
