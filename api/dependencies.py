"""
FastAPI dependencies shared by the routers.

Handlers reach the process-wide services through `app.state.services`;
`get_snapshot` additionally turns an upstream failure into a 502 for that
one request while the cache keeps its previous snapshot.
"""

import logging

from fastapi import Depends, HTTPException, Request

from leadpulse.collector import UpstreamError
from leadpulse.models import Snapshot
from leadpulse.services import AppServices

logger = logging.getLogger(__name__)


def get_services(request: Request) -> AppServices:
    services = getattr(request.app.state, "services", None)
    if services is None:
        raise HTTPException(status_code=503, detail="Service not started")
    return services


async def load_snapshot(services: AppServices) -> Snapshot:
    """Read through the cache, mapping upstream failures to HTTP 502."""
    try:
        return await services.cache.get()
    except UpstreamError as e:
        logger.error(f"Snapshot fetch failed: {e}")
        raise HTTPException(
            status_code=502,
            detail={"error": "Upstream fetch failed", "details": str(e)},
        ) from e


async def get_snapshot(services: AppServices = Depends(get_services)) -> Snapshot:
    return await load_snapshot(services)


def upstream_http_error(error: UpstreamError, action: str) -> HTTPException:
    """HTTPException carrying the upstream status and body of a failed write."""
    logger.error(f"Airtable {action} failed: {error.status_code} {error.body or error}")
    return HTTPException(
        status_code=error.status_code or 500,
        detail={"error": f"Airtable {action} failed", "details": error.body or str(error)},
    )
