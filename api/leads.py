"""
Leads API

Endpoints:
- List with search / multi-select filters / sort / paging, plus KPI stats
- Single lead lookup from the cached snapshot
- Create, patch and delete forwarded to Airtable
- Clearing a lead's recording reference
"""

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field

from leadpulse.collector import UpstreamError
from leadpulse.gateway import ValidationError
from leadpulse.models import Snapshot
from leadpulse.services import AppServices
from leadpulse.views import LeadQuery, build_lead_view, find_record

from api.dependencies import get_services, get_snapshot, upstream_http_error

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/leads", tags=["Leads"])


# =============================================================================
# REQUEST MODELS
# =============================================================================

class LeadFieldsRequest(BaseModel):
    """Raw Airtable field map for a create or patch."""
    fields: Optional[Dict[str, Any]] = Field(default=None, description="Airtable column -> value")


# =============================================================================
# ENDPOINTS
# =============================================================================

@router.get("")
async def list_leads(
    search: Optional[str] = None,
    status: Optional[str] = Query(default=None, description="Comma-separated statuses"),
    outcome: Optional[str] = Query(default=None, description="Comma-separated call outcomes"),
    agent: Optional[str] = Query(default=None, description="Comma-separated agent ids or names"),
    date_from: Optional[str] = Query(default=None, alias="dateFrom"),
    date_to: Optional[str] = Query(default=None, alias="dateTo"),
    min_duration: Optional[str] = Query(default=None, alias="minDuration"),
    page: str = "1",
    limit: str = "20",
    sort: str = "lastCallDate",
    dir: str = "desc",
    snapshot: Snapshot = Depends(get_snapshot),
) -> Dict[str, Any]:
    """Filtered, sorted page of leads with whole-table stats."""
    query = LeadQuery.from_params(
        search=search,
        status=status,
        outcome=outcome,
        agent=agent,
        date_from=date_from,
        date_to=date_to,
        min_duration=min_duration,
        page=page,
        limit=limit,
        sort=sort,
        direction=dir,
    )
    return build_lead_view(snapshot, query)


@router.get("/{record_id}")
async def get_lead(record_id: str, snapshot: Snapshot = Depends(get_snapshot)) -> Dict[str, Any]:
    record = find_record(snapshot, record_id)
    if record is None:
        raise HTTPException(status_code=404, detail="Lead not found")
    return record.to_dict()


@router.post("")
async def create_lead(
    request: LeadFieldsRequest,
    services: AppServices = Depends(get_services),
) -> Dict[str, Any]:
    try:
        record = await services.gateway.create(request.fields)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    except UpstreamError as e:
        raise upstream_http_error(e, "create") from e
    return {"success": True, "record": record}


@router.patch("/{record_id}")
async def update_lead(
    record_id: str,
    request: LeadFieldsRequest,
    services: AppServices = Depends(get_services),
) -> Dict[str, Any]:
    try:
        record = await services.gateway.update(record_id, request.fields)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    except UpstreamError as e:
        raise upstream_http_error(e, "update") from e
    return {"success": True, "record": record}


@router.delete("/{record_id}")
async def delete_lead(record_id: str, services: AppServices = Depends(get_services)) -> Dict[str, Any]:
    try:
        await services.gateway.delete(record_id)
    except UpstreamError as e:
        raise upstream_http_error(e, "delete") from e
    return {"success": True}


@router.delete("/{record_id}/recording")
async def delete_recording(record_id: str, services: AppServices = Depends(get_services)) -> Dict[str, Any]:
    try:
        await services.gateway.clear_recording(record_id)
    except UpstreamError as e:
        raise upstream_http_error(e, "update") from e
    return {"success": True}
