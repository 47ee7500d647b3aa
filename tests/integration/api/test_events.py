"""Integration tests for SSE events endpoint."""

import threading
import time
from collections.abc import Callable, Generator

import httpx
import pytest
import uvicorn

from prwatch.api.app import create_app
from prwatch.api.dependencies import get_event_manager
from prwatch.api.events import EventManager
from prwatch.checks import CIStatus
from prwatch.github import PullRequest, SearchKind, SearchResult
from prwatch.orchestrator import FetchOrchestrator


@pytest.fixture
def server(orchestrator: FetchOrchestrator) -> Generator[str, None, None]:
    """Start the app in a background thread."""
    app = create_app(orchestrator=orchestrator, start_polling=False)
    config = uvicorn.Config(app, host="127.0.0.1", port=8765, log_level="error")
    server = uvicorn.Server(config)

    thread = threading.Thread(target=server.run)
    thread.daemon = True
    thread.start()

    # Wait for server to start
    time.sleep(0.5)
    yield "http://127.0.0.1:8765"

    server.should_exit = True
    thread.join(timeout=2)


@pytest.fixture
def event_manager(server: str) -> EventManager:
    """The EventManager created by the running app."""
    return next(get_event_manager())


def _collect(url: str, event_name: str, seconds: float = 2.0) -> list[str]:
    """Read SSE lines until ``event_name`` and its data line arrive or time runs out."""
    lines: list[str] = []
    with (
        httpx.Client(timeout=5.0) as client,
        client.stream("GET", url) as response,
    ):
        start = time.time()
        for line in response.iter_lines():
            lines.append(line)
            if len(lines) >= 2 and lines[-2] == f"event: {event_name}":
                break
            if time.time() - start > seconds:
                break
    return lines


@pytest.mark.integration
class TestSSEConnection:
    """Tests for SSE connection."""

    def test_sse_connection_opens(self, server: str) -> None:
        """Client can connect to /events/stream."""
        with (
            httpx.Client(timeout=5.0) as client,
            client.stream("GET", f"{server}/api/v1/events/stream") as response,
        ):
            assert response.status_code == 200
            assert response.headers["content-type"] == "text/event-stream; charset=utf-8"

    def test_sse_receives_heartbeat(self, server: str, event_manager: EventManager) -> None:
        """Heartbeat received within interval."""
        event_manager.heartbeat_interval = 1

        lines = _collect(f"{server}/api/v1/events/stream", "heartbeat")

        assert "event: heartbeat" in lines

    def test_sse_client_disconnect(self, server: str, event_manager: EventManager) -> None:
        """Cleanup on disconnect."""
        initial_count = event_manager.subscriber_count

        with (
            httpx.Client(timeout=5.0) as client,
            client.stream("GET", f"{server}/api/v1/events/stream"),
        ):
            time.sleep(0.2)
            assert event_manager.subscriber_count == initial_count + 1

        time.sleep(0.3)
        assert event_manager.subscriber_count == initial_count


@pytest.mark.integration
class TestSSERefreshEvents:
    """Refresh cycles publish events to stream subscribers."""

    def test_refresh_completed_event(self, server: str, event_manager: EventManager) -> None:
        """A manual refresh emits refresh_completed from the worker thread."""

        def refresh_after_delay() -> None:
            time.sleep(0.3)
            httpx.post(f"{server}/api/v1/refresh", timeout=5.0)

        trigger = threading.Thread(target=refresh_after_delay)
        trigger.start()
        lines = _collect(f"{server}/api/v1/events/stream", "refresh_completed")
        trigger.join()

        assert "event: refresh_completed" in lines
        assert '"authored": 0' in lines[-1]

    def test_notification_event(
        self,
        server: str,
        event_manager: EventManager,
        orchestrator: FetchOrchestrator,
        search_results: dict[SearchKind, SearchResult],
        make_pr: Callable[..., PullRequest],
    ) -> None:
        """A CI transition on the second cycle reaches subscribers as a notification."""
        # Pre-built orchestrators keep their own sink; route it to the stream
        orchestrator.notifier = event_manager
        search_results[SearchKind.AUTHORED] = SearchResult(
            pull_requests=[make_pr(number=5, ci_status=CIStatus.PENDING)]
        )
        orchestrator.refresh_all()

        def second_cycle() -> None:
            time.sleep(0.3)
            search_results[SearchKind.AUTHORED] = SearchResult(
                pull_requests=[make_pr(number=5, ci_status=CIStatus.FAILURE)]
            )
            orchestrator.refresh_all()

        trigger = threading.Thread(target=second_cycle)
        trigger.start()
        lines = _collect(f"{server}/api/v1/events/stream", "notification")
        trigger.join()

        assert "event: notification" in lines
        assert '"title": "CI Failed"' in lines[-1]
        assert "octo/widgets #5" in lines[-1]
