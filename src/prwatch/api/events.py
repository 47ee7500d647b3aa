"""Event manager for Server-Sent Events (SSE)."""

from __future__ import annotations

import asyncio
import json
import logging
import threading
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import TYPE_CHECKING, Any
from uuid import uuid4

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

    from prwatch.orchestrator import RefreshResult

logger = logging.getLogger("prwatch.api.events")


class EventType(str, Enum):
    """Types of events that can be emitted."""

    NOTIFICATION = "notification"
    REFRESH_COMPLETED = "refresh_completed"
    HEARTBEAT = "heartbeat"


@dataclass
class Event:
    """An event to be sent via SSE."""

    event_type: EventType
    data: dict[str, Any]

    def to_sse(self) -> str:
        """Convert to SSE format."""
        return f"event: {self.event_type.value}\ndata: {json.dumps(self.data)}\n\n"


@dataclass
class Subscriber:
    """A subscriber to the event stream.

    ``loop`` is the loop that consumes ``queue``. A subscriber created outside
    a running loop starts unbound and is bound when its stream starts.
    """

    id: str
    queue: asyncio.Queue[Event]
    loop: asyncio.AbstractEventLoop | None = None

    @classmethod
    def create(cls) -> Subscriber:
        """Create a new subscriber bound to the running event loop, if any."""
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            loop = None
        return cls(id=str(uuid4()), queue=asyncio.Queue(), loop=loop)


def _timestamp() -> str:
    return datetime.now(UTC).isoformat().replace("+00:00", "Z")


@dataclass
class EventManager:
    """Manager for SSE events.

    Also acts as a notification sink: ``send()`` publishes a ``notification``
    event, so the orchestrator can deliver straight to stream subscribers.
    """

    _subscribers: dict[str, Subscriber] = field(default_factory=dict)
    heartbeat_interval: float = 30.0
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def subscribe(self) -> Subscriber:
        """Subscribe a client to events."""
        subscriber = Subscriber.create()
        self._subscribers[subscriber.id] = subscriber
        return subscriber

    def unsubscribe(self, subscriber_id: str) -> None:
        """Unsubscribe a client from events."""
        self._subscribers.pop(subscriber_id, None)

    async def emit(self, event: Event) -> None:
        """Emit an event to all subscribers."""
        for subscriber in list(self._subscribers.values()):
            await subscriber.queue.put(event)

    def emit_sync(self, event: Event) -> None:
        """Emit an event from any thread.

        Events for a subscriber bound to another thread's loop are handed over
        with ``call_soon_threadsafe``; asyncio queues are not thread-safe.
        Unbound subscribers are filled directly while holding the lock that
        ``stream()`` takes to bind them, so no consumer is waiting on the
        queue at that point.
        """
        try:
            current = asyncio.get_running_loop()
        except RuntimeError:
            current = None

        with self._lock:
            for subscriber in list(self._subscribers.values()):
                loop = subscriber.loop
                if loop is None or loop is current:
                    subscriber.queue.put_nowait(event)
                elif not loop.is_closed():
                    loop.call_soon_threadsafe(subscriber.queue.put_nowait, event)

    async def stream(self, subscriber: Subscriber) -> AsyncGenerator[str, None]:
        """Yield SSE frames for ``subscriber`` until the client goes away.

        A heartbeat frame is sent whenever nothing was published for
        ``heartbeat_interval`` seconds. The subscriber is removed on exit.
        """
        with self._lock:
            if subscriber.loop is None:
                subscriber.loop = asyncio.get_running_loop()
        try:
            while True:
                try:
                    event = await asyncio.wait_for(
                        subscriber.queue.get(), timeout=self.heartbeat_interval
                    )
                except TimeoutError:
                    event = self.create_heartbeat_event()
                yield event.to_sse()
        finally:
            self.unsubscribe(subscriber.id)

    @property
    def subscriber_count(self) -> int:
        """Get the number of active subscribers."""
        return len(self._subscribers)

    # NotificationService

    @property
    def is_available(self) -> bool:
        return True

    def send(self, title: str, body: str, url: str | None = None) -> None:
        """Publish a status notification to subscribers."""
        logger.info("Notification: %s - %s", title, body)
        self.emit_sync(
            Event(
                event_type=EventType.NOTIFICATION,
                data={"title": title, "body": body, "url": url, "timestamp": _timestamp()},
            )
        )

    def emit_refresh_completed(self, result: RefreshResult) -> None:
        """Emit a refresh_completed event summarizing a cycle."""
        data: dict[str, Any] = {
            "error": result.error,
            "notifications": len(result.notifications),
            "timestamp": _timestamp(),
        }
        if result.authored is not None:
            authored = result.authored
            data["authored"] = len(authored.pull_requests) if authored.succeeded else None
        if result.reviews is not None:
            reviews = result.reviews
            data["reviews"] = len(reviews.pull_requests) if reviews.succeeded else None
        self.emit_sync(Event(event_type=EventType.REFRESH_COMPLETED, data=data))

    def create_heartbeat_event(self) -> Event:
        """Create a heartbeat event."""
        return Event(event_type=EventType.HEARTBEAT, data={"timestamp": _timestamp()})
