"""
LeadPulse API

FastAPI application serving the outbound-calling dashboard:
1. Lead table views and KPI stats from the cached snapshot
2. Analytics and daily call analysis
3. Live change events over server-sent events
4. Lead edits forwarded to Airtable
5. CSV export and recording downloads

Run with:
    uvicorn api.app:app --port 3000
"""

import logging
import sys
from typing import Any, Dict, Optional

from fastapi import Depends, FastAPI

from leadpulse import __version__
from leadpulse.services import AppServices
from leadpulse.utils.config import Settings, get_settings

from api import analytics, events, export, leads
from api.dependencies import get_services

# Configure logging to stdout
logging.basicConfig(
    level=get_settings().LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    stream=sys.stdout,
    force=True,
)
logger = logging.getLogger(__name__)

# Quiet down chatty loggers
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)


def create_app(
    settings: Optional[Settings] = None,
    services: Optional[AppServices] = None,
    background: bool = True,
) -> FastAPI:
    """
    Build the FastAPI app.

    Args:
        settings: Configuration (defaults to environment settings)
        services: Pre-built services (tests inject stubbed clients here)
        background: Start the cache warm-up and the periodic refresher
    """
    app = FastAPI(
        title="LeadPulse",
        description="Cached lead dashboard API with live change events",
        version=__version__,
    )

    @app.on_event("startup")
    async def startup_event():
        """Build services, warm the cache and start polling."""
        nonlocal services
        if services is None:
            services = AppServices.build(settings or get_settings())
        app.state.services = services
        await services.start(warm=background, refresh=background)
        logger.info("LeadPulse started")

    @app.on_event("shutdown")
    async def shutdown_event():
        await app.state.services.close()

    @app.get("/health")
    async def health(services: AppServices = Depends(get_services)) -> Dict[str, Any]:
        snapshot = services.cache.current
        return {
            "status": "ok",
            "cache_state": services.cache.state.value,
            "records": len(snapshot) if snapshot is not None else 0,
            "fetched_at": snapshot.fetched_at.isoformat() if snapshot is not None else None,
            "subscribers": services.broadcaster.subscriber_count,
            "probed_recordings": services.prober.size,
            "refresher_running": services.refresher.running,
            "narrative_configured": services.narrative.configured,
        }

    app.include_router(leads.router)
    app.include_router(analytics.router)
    app.include_router(events.router)
    app.include_router(export.router)

    return app


app = create_app()
