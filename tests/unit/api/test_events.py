"""Unit tests for EventManager and events."""

import asyncio
import json
import threading

import pytest

from prwatch.api.events import Event, EventManager, EventType
from prwatch.github import SearchKind, SearchResult
from prwatch.notifications import StatusNotification
from prwatch.orchestrator import BranchOutcome, RefreshResult


@pytest.fixture
def event_manager() -> EventManager:
    """Create an EventManager instance."""
    return EventManager()


@pytest.mark.unit
class TestEventManagerSubscribe:
    """Tests for subscribe and unsubscribe."""

    def test_subscribe(self, event_manager: EventManager) -> None:
        """Client can subscribe."""
        subscriber = event_manager.subscribe()

        assert subscriber.id is not None
        assert subscriber.queue is not None
        assert subscriber.loop is None
        assert event_manager.subscriber_count == 1

    def test_unsubscribe(self, event_manager: EventManager) -> None:
        """Client can unsubscribe."""
        subscriber = event_manager.subscribe()

        event_manager.unsubscribe(subscriber.id)

        assert event_manager.subscriber_count == 0

    def test_unsubscribe_nonexistent(self, event_manager: EventManager) -> None:
        """Unsubscribing nonexistent client doesn't fail."""
        event_manager.unsubscribe("nonexistent-id")
        assert event_manager.subscriber_count == 0


@pytest.mark.unit
class TestEventManagerEmit:
    """Tests for emit and emit_sync."""

    @pytest.mark.asyncio
    async def test_emit_to_all(self, event_manager: EventManager) -> None:
        """Event reaches all subscribers."""
        sub1 = event_manager.subscribe()
        sub2 = event_manager.subscribe()

        await event_manager.emit(Event(EventType.HEARTBEAT, {"timestamp": "now"}))

        event1 = await asyncio.wait_for(sub1.queue.get(), timeout=1.0)
        event2 = await asyncio.wait_for(sub2.queue.get(), timeout=1.0)
        assert event1.event_type == EventType.HEARTBEAT
        assert event2.event_type == EventType.HEARTBEAT

    def test_emit_sync_no_subscribers(self, event_manager: EventManager) -> None:
        """Emit doesn't fail with no subscribers."""
        event_manager.emit_sync(Event(EventType.HEARTBEAT, {}))

    @pytest.mark.asyncio
    async def test_emit_sync_from_another_thread(self, event_manager: EventManager) -> None:
        """Events emitted from a worker thread reach a subscriber on the event loop."""
        subscriber = event_manager.subscribe()
        assert subscriber.loop is asyncio.get_running_loop()

        thread = threading.Thread(
            target=event_manager.send, args=("CI Failed", "octo/widgets #1: Change 1")
        )
        thread.start()
        event = await asyncio.wait_for(subscriber.queue.get(), timeout=2.0)
        thread.join(timeout=2.0)

        assert event.event_type == EventType.NOTIFICATION
        assert event.data["title"] == "CI Failed"

    @pytest.mark.asyncio
    async def test_unbound_subscriber_is_bound_by_stream(
        self, event_manager: EventManager
    ) -> None:
        """A subscriber made off-loop gets thread-safe delivery once streaming."""
        subscriber = await asyncio.to_thread(event_manager.subscribe)
        assert subscriber.loop is None

        await asyncio.to_thread(event_manager.send, "CI Failed", "octo/widgets #1: Fix")
        frames = event_manager.stream(subscriber)
        first = await asyncio.wait_for(anext(frames), timeout=1.0)

        assert first.startswith("event: notification\n")
        assert subscriber.loop is asyncio.get_running_loop()

        timer = threading.Timer(
            0.05, event_manager.send, args=("Checks Passed", "octo/widgets #1: Fix")
        )
        timer.start()
        second = await asyncio.wait_for(anext(frames), timeout=2.0)
        timer.join(timeout=2.0)

        assert '"title": "Checks Passed"' in second
        await frames.aclose()


@pytest.mark.unit
class TestEventFormat:
    """Tests for event payloads and SSE formatting."""

    def test_notification_event(self, event_manager: EventManager) -> None:
        """send() publishes a notification event."""
        sub = event_manager.subscribe()

        assert event_manager.is_available is True
        event_manager.send("All Checks Passed", "octo/widgets #2: Docs", "https://example/2")

        event = sub.queue.get_nowait()
        assert event.event_type == EventType.NOTIFICATION
        assert event.data["title"] == "All Checks Passed"
        assert event.data["body"] == "octo/widgets #2: Docs"
        assert event.data["url"] == "https://example/2"
        assert event.data["timestamp"].endswith("Z")

        sse = event.to_sse()
        assert sse.startswith("event: notification\n")
        data = json.loads(sse.split("data: ")[1].strip())
        assert data["title"] == "All Checks Passed"

    def test_refresh_completed_event(self, event_manager: EventManager) -> None:
        """refresh_completed reports counts, with None for a failed branch."""
        sub = event_manager.subscribe()
        result = RefreshResult(
            authored=BranchOutcome(SearchKind.AUTHORED, result=SearchResult()),
            reviews=BranchOutcome(SearchKind.REVIEW_REQUESTED, error="timed out"),
            notifications=[StatusNotification("CI Failed", "body")],
            error="Reviews: timed out",
        )

        event_manager.emit_refresh_completed(result)

        event = sub.queue.get_nowait()
        assert event.event_type == EventType.REFRESH_COMPLETED
        assert event.data["authored"] == 0
        assert event.data["reviews"] is None
        assert event.data["notifications"] == 1
        assert event.data["error"] == "Reviews: timed out"

    def test_refresh_completed_without_branches(self, event_manager: EventManager) -> None:
        """A cycle that never searched omits the branch counts."""
        sub = event_manager.subscribe()

        event_manager.emit_refresh_completed(RefreshResult(error="gh not authenticated"))

        event = sub.queue.get_nowait()
        assert "authored" not in event.data
        assert "reviews" not in event.data

    def test_heartbeat_event(self, event_manager: EventManager) -> None:
        """Heartbeat events carry a timestamp."""
        event = event_manager.create_heartbeat_event()
        assert event.event_type == EventType.HEARTBEAT
        assert event.to_sse().startswith("event: heartbeat\n")


@pytest.mark.unit
class TestEventStream:
    """Tests for the SSE frame generator."""

    @pytest.mark.asyncio
    async def test_yields_published_events(self, event_manager: EventManager) -> None:
        """Events queued for the subscriber come out as SSE frames."""
        sub = event_manager.subscribe()
        frames = event_manager.stream(sub)

        event_manager.send("CI Failed", "octo/widgets #1: Fix")
        frame = await asyncio.wait_for(anext(frames), timeout=1.0)

        assert frame.startswith("event: notification\n")
        assert frame.endswith("\n\n")
        await frames.aclose()

    @pytest.mark.asyncio
    async def test_heartbeat_when_idle(self, event_manager: EventManager) -> None:
        """A heartbeat frame is produced after the idle interval."""
        event_manager.heartbeat_interval = 0.05
        frames = event_manager.stream(event_manager.subscribe())

        frame = await asyncio.wait_for(anext(frames), timeout=1.0)

        assert frame.startswith("event: heartbeat\n")
        await frames.aclose()

    @pytest.mark.asyncio
    async def test_close_unsubscribes(self, event_manager: EventManager) -> None:
        """Closing the generator removes the subscriber."""
        event_manager.heartbeat_interval = 0.05
        frames = event_manager.stream(event_manager.subscribe())
        await asyncio.wait_for(anext(frames), timeout=1.0)
        assert event_manager.subscriber_count == 1

        await frames.aclose()

        assert event_manager.subscriber_count == 0
