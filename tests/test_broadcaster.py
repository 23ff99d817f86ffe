"""
Tests for live event fan-out.

These tests verify:
- New channels are greeted with the connected frame
- Every open channel receives each published event
- A failing channel is dropped without affecting the rest
- QueueChannel buffering, timeout and overflow
"""

import json

import pytest

from leadpulse.events import (
    ChannelClosed,
    EventBroadcaster,
    QueueChannel,
    encode_frame,
)
from leadpulse.models import ChangeEvent, ChangeType


class ListChannel:
    def __init__(self):
        self.frames = []

    def write(self, frame: str) -> None:
        self.frames.append(frame)


class BrokenChannel:
    def __init__(self, fail_after: int = 0):
        self.writes = 0
        self.fail_after = fail_after

    def write(self, frame: str) -> None:
        self.writes += 1
        if self.writes > self.fail_after:
            raise ConnectionResetError("client went away")


def decode(frame: str):
    assert frame.startswith("data: ") and frame.endswith("\n\n")
    return json.loads(frame[len("data: "):])


EVENT = ChangeEvent(ChangeType.NEW_LEAD, {"name": "Jane Doe"})


# =============================================================================
# FRAMING TESTS
# =============================================================================

class TestFraming:
    """Test the server-sent-events text format."""

    def test_encode_frame(self):
        assert encode_frame({"type": "connected"}) == 'data: {"type": "connected"}\n\n'


# =============================================================================
# BROADCASTER TESTS
# =============================================================================

class TestEventBroadcaster:
    """Test subscribe / publish / drop semantics."""

    def test_subscribe_sends_connected_frame(self):
        broadcaster = EventBroadcaster()
        channel = ListChannel()

        broadcaster.subscribe(channel)

        assert [decode(f) for f in channel.frames] == [{"type": "connected"}]
        assert channel in broadcaster
        assert broadcaster.subscriber_count == 1

    def test_subscribe_twice_is_idempotent(self):
        broadcaster = EventBroadcaster()
        channel = ListChannel()

        broadcaster.subscribe(channel)
        broadcaster.subscribe(channel)

        assert broadcaster.subscriber_count == 1
        assert len(channel.frames) == 1

    def test_publish_reaches_every_channel(self):
        broadcaster = EventBroadcaster()
        channels = [ListChannel() for _ in range(3)]
        for channel in channels:
            broadcaster.subscribe(channel)

        delivered = broadcaster.publish(EVENT)

        assert delivered == 3
        for channel in channels:
            assert decode(channel.frames[-1]) == {"type": "new_lead", "data": {"name": "Jane Doe"}}

    def test_failing_channel_is_dropped(self):
        broadcaster = EventBroadcaster()
        healthy = ListChannel()
        broken = BrokenChannel(fail_after=1)
        broadcaster.subscribe(healthy)
        broadcaster.subscribe(broken)

        delivered = broadcaster.publish(EVENT)

        assert delivered == 1
        assert broken not in broadcaster
        assert healthy in broadcaster
        assert len(healthy.frames) == 2

    def test_channel_failing_on_greeting_is_not_kept(self):
        broadcaster = EventBroadcaster()
        broken = BrokenChannel(fail_after=0)

        broadcaster.subscribe(broken)

        assert broken not in broadcaster

    def test_unsubscribe_unknown_channel_is_noop(self):
        broadcaster = EventBroadcaster()
        broadcaster.unsubscribe(ListChannel())
        assert broadcaster.subscriber_count == 0

    def test_publish_with_no_channels(self):
        broadcaster = EventBroadcaster()
        assert broadcaster.publish(EVENT) == 0
        assert broadcaster.published_count == 1

    def test_publish_all_preserves_order(self):
        broadcaster = EventBroadcaster()
        channel = ListChannel()
        broadcaster.subscribe(channel)
        events = [
            ChangeEvent(ChangeType.STATUS_CHANGE, {"name": "A", "oldStatus": "x", "newStatus": "Booked"}),
            ChangeEvent(ChangeType.APPOINTMENT_BOOKED, {"name": "A"}),
        ]

        broadcaster.publish_all(events)

        assert [decode(f)["type"] for f in channel.frames] == ["connected", "status_change", "appointment_booked"]


# =============================================================================
# QUEUE CHANNEL TESTS
# =============================================================================

class TestQueueChannel:
    """Test the asyncio.Queue-backed channel."""

    @pytest.mark.asyncio
    async def test_read_returns_written_frames_in_order(self):
        channel = QueueChannel()
        channel.write("one")
        channel.write("two")

        assert await channel.read(timeout=0.1) == "one"
        assert await channel.read(timeout=0.1) == "two"

    @pytest.mark.asyncio
    async def test_read_times_out_with_none(self):
        channel = QueueChannel()
        assert await channel.read(timeout=0.01) is None

    def test_overflow_closes_channel(self):
        channel = QueueChannel(maxsize=1)
        channel.write("one")

        with pytest.raises(ChannelClosed):
            channel.write("two")

        assert channel.closed

    def test_write_after_close_fails(self):
        channel = QueueChannel()
        channel.close()
        with pytest.raises(ChannelClosed):
            channel.write("frame")

    def test_overflowing_subscriber_is_dropped(self):
        broadcaster = EventBroadcaster()
        slow = QueueChannel(maxsize=1)  # connected frame fills it
        broadcaster.subscribe(slow)

        broadcaster.publish(EVENT)

        assert slow not in broadcaster
        assert slow.closed
