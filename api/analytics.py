"""
Analytics API

Endpoints:
- Whole-table aggregates for the analytics tab
- One day's call metrics and objection tally
- Claude-written coaching report for a day (memoized per day)
"""

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from leadpulse.analyzer import NarrativeServiceError, analyze, analyze_day
from leadpulse.models import Snapshot
from leadpulse.services import AppServices
from leadpulse.views.stats import utc_today

from api.dependencies import get_services, get_snapshot, load_snapshot

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api", tags=["Analytics"])


class NarrativeRequest(BaseModel):
    """Request a narrative report for one day."""
    date: Optional[str] = None
    force: bool = False


@router.get("/analytics")
async def get_analytics(
    snapshot: Snapshot = Depends(get_snapshot),
    services: AppServices = Depends(get_services),
) -> Dict[str, Any]:
    return analyze(snapshot.records, tz=services.display_tz)


@router.get("/call-analysis")
async def get_call_analysis(
    date: Optional[str] = None,
    services: AppServices = Depends(get_services),
    snapshot: Snapshot = Depends(get_snapshot),
) -> Dict[str, Any]:
    """Metrics for one day plus any report already generated for it."""
    target_date = date or utc_today().isoformat()
    return {
        "date": target_date,
        "metrics": analyze_day(snapshot.records, target_date),
        "aiAnalysis": services.narrative.cached(target_date),
        "hasAIKey": services.narrative.configured,
    }


@router.post("/call-analysis/ai")
async def generate_call_analysis(
    request: NarrativeRequest,
    services: AppServices = Depends(get_services),
) -> Dict[str, Any]:
    """
    Generate (or return the memoized) narrative report for a day.

    The cached report is returned without touching the snapshot unless
    `force` is set.
    """
    target_date = request.date or utc_today().isoformat()

    if not request.force and services.narrative.cached(target_date) is not None:
        return {"analysis": services.narrative.cached(target_date), "cached": True}

    snapshot = await load_snapshot(services)
    try:
        return await services.narrative.analyze_day(target_date, snapshot.records, force=request.force)
    except NarrativeServiceError as e:
        raise HTTPException(status_code=e.status_code, detail={"error": str(e)}) from e
