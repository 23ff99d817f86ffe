"""
Export API

- CSV download of the cached lead table
- Recording download passthrough (lets mobile browsers save the WAV)
"""

import logging
from typing import Optional

import httpx
from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import Response, StreamingResponse
from starlette.background import BackgroundTask

from leadpulse.models import Snapshot
from leadpulse.services import AppServices
from leadpulse.views import export_filename, render_csv

from api.dependencies import get_services, get_snapshot

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api", tags=["Export"])

DEFAULT_RECORDING_NAME = "recording.wav"


def safe_filename(name: Optional[str]) -> str:
    """Filename usable inside a quoted Content-Disposition value."""
    cleaned = "".join(ch for ch in (name or "") if ch not in '"\r\n\\')
    return cleaned or DEFAULT_RECORDING_NAME


@router.get("/export/csv")
async def export_csv(snapshot: Snapshot = Depends(get_snapshot)) -> Response:
    return Response(
        content=render_csv(snapshot.records),
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename={export_filename()}"},
    )


@router.get("/download")
async def download_recording(
    url: Optional[str] = None,
    name: Optional[str] = None,
    services: AppServices = Depends(get_services),
):
    """Stream an https-hosted recording back as an attachment."""
    if not url or not url.startswith("https://"):
        raise HTTPException(status_code=400, detail="Invalid URL")

    try:
        request = services.downloads.build_request("GET", url)
    except httpx.InvalidURL as e:
        raise HTTPException(status_code=400, detail="Invalid URL") from e

    try:
        upstream = await services.downloads.send(request, stream=True)
    except httpx.HTTPError as e:
        logger.error(f"Download proxy error: {e}")
        raise HTTPException(status_code=500, detail="Download failed") from e

    if not upstream.is_success:
        await upstream.aclose()
        raise HTTPException(status_code=upstream.status_code, detail="Download failed")

    headers = {"Content-Disposition": f'attachment; filename="{safe_filename(name)}"'}
    # Body is decoded; an encoded upstream length does not describe it
    content_length = upstream.headers.get("content-length")
    if content_length and "content-encoding" not in upstream.headers:
        headers["Content-Length"] = content_length

    return StreamingResponse(
        upstream.aiter_bytes(),
        media_type="audio/wav",
        headers=headers,
        background=BackgroundTask(upstream.aclose),
    )
