"""
Event Broadcaster

Fans change events out to every open live-update channel. Delivery is
best-effort: no buffering for late joiners, no replay, and a channel whose
write fails is dropped without affecting the others.

A channel is anything with a synchronous `write(frame: str)` method.
QueueChannel adapts one onto an asyncio.Queue so a streaming HTTP response
can drain it.
"""

import asyncio
import json
import logging
from typing import Any, Dict, Iterable, Optional, Protocol

from leadpulse.models import ChangeEvent

logger = logging.getLogger(__name__)

CONNECTED_EVENT: Dict[str, Any] = {"type": "connected"}


class Channel(Protocol):
    def write(self, frame: str) -> None: ...


class ChannelClosed(Exception):
    """Raised by a channel that can no longer accept frames."""


def encode_frame(payload: Dict[str, Any]) -> str:
    """Server-sent-events text frame for a JSON payload."""
    return f"data: {json.dumps(payload)}\n\n"


class QueueChannel:
    """In-process channel backed by a bounded asyncio.Queue."""

    def __init__(self, maxsize: int = 100):
        self._queue: asyncio.Queue = asyncio.Queue(maxsize=maxsize)
        self.closed = False

    def write(self, frame: str) -> None:
        if self.closed:
            raise ChannelClosed("channel closed")
        try:
            self._queue.put_nowait(frame)
        except asyncio.QueueFull as e:
            # the broadcaster drops us next; end the stream so the client reconnects
            self.closed = True
            raise ChannelClosed("subscriber is not draining its queue") from e

    async def read(self, timeout: Optional[float] = None) -> Optional[str]:
        """Next frame, or None when `timeout` elapses first."""
        try:
            return await asyncio.wait_for(self._queue.get(), timeout)
        except asyncio.TimeoutError:
            return None

    def close(self) -> None:
        self.closed = True


class EventBroadcaster:
    """Set of live channels with fire-and-forget publish."""

    def __init__(self):
        # dict keeps insertion order and gives set semantics
        self._channels: Dict[Channel, None] = {}
        self.published_count = 0

    @property
    def subscriber_count(self) -> int:
        return len(self._channels)

    def __contains__(self, channel: Channel) -> bool:
        return channel in self._channels

    def subscribe(self, channel: Channel) -> None:
        """Add a channel and greet it with the connected sentinel."""
        if channel in self._channels:
            return
        self._channels[channel] = None
        if self._deliver(channel, encode_frame(CONNECTED_EVENT)):
            logger.info(f"Live channel subscribed ({self.subscriber_count} open)")

    def unsubscribe(self, channel: Channel) -> None:
        if channel in self._channels:
            del self._channels[channel]
            logger.info(f"Live channel closed ({self.subscriber_count} open)")

    def publish(self, event: ChangeEvent) -> int:
        """
        Write one event to every channel.

        Returns:
            Number of channels the frame was delivered to
        """
        frame = encode_frame(event.to_dict())
        delivered = 0
        for channel in list(self._channels):
            if self._deliver(channel, frame):
                delivered += 1
        self.published_count += 1
        return delivered

    def publish_all(self, events: Iterable[ChangeEvent]) -> None:
        for event in events:
            self.publish(event)

    def _deliver(self, channel: Channel, frame: str) -> bool:
        try:
            channel.write(frame)
            return True
        except Exception as e:
            logger.warning(f"Dropping live channel after write failure: {e}")
            self._channels.pop(channel, None)
            return False
