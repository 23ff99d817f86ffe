"""
Live Events API

Server-sent-events stream of lead changes. Each connection gets its own
QueueChannel subscribed to the broadcaster; it is unsubscribed as soon as
the client goes away.
"""

import logging
from typing import AsyncIterator, Awaitable, Callable

from fastapi import APIRouter, Depends, Request
from fastapi.responses import StreamingResponse

from leadpulse.events import EventBroadcaster, QueueChannel
from leadpulse.services import AppServices

from api.dependencies import get_services

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api", tags=["Live Events"])

KEEPALIVE_SECONDS = 15.0
KEEPALIVE_FRAME = ": keep-alive\n\n"


async def event_stream(
    channel: QueueChannel,
    broadcaster: EventBroadcaster,
    is_disconnected: Callable[[], Awaitable[bool]],
    keepalive: float = KEEPALIVE_SECONDS,
) -> AsyncIterator[str]:
    """Yield frames written to `channel` until the client disconnects."""
    try:
        while not channel.closed:
            frame = await channel.read(timeout=keepalive)
            if await is_disconnected():
                break
            yield frame if frame is not None else KEEPALIVE_FRAME
    finally:
        channel.close()
        broadcaster.unsubscribe(channel)


@router.get("/events")
async def live_events(request: Request, services: AppServices = Depends(get_services)):
    channel = QueueChannel()
    services.broadcaster.subscribe(channel)

    return StreamingResponse(
        event_stream(channel, services.broadcaster, request.is_disconnected),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",
        },
    )
