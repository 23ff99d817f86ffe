"""Change detection between snapshots and live fan-out to dashboards."""

from .changes import detect_changes
from .broadcaster import (
    EventBroadcaster,
    QueueChannel,
    ChannelClosed,
    CONNECTED_EVENT,
    encode_frame,
)

__all__ = [
    "detect_changes",
    "EventBroadcaster",
    "QueueChannel",
    "ChannelClosed",
    "CONNECTED_EVENT",
    "encode_frame",
]
