"""PollingScheduler - Runs an action on a fixed interval in a background thread."""

from __future__ import annotations

import logging
import threading
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable

logger = logging.getLogger("prwatch.scheduler")


class PollingScheduler:
    """Drives an action on a timer: sleep, fire, sleep, ...

    The sleep is an ``Event.wait``, so ``stop()`` wakes the loop and it exits
    without firing again. An action already running when ``stop()`` is called
    is left to finish; only the next fire is cancelled.
    """

    def __init__(self, name: str = "prwatch-poller") -> None:
        self.name = name
        self.interval: float | None = None
        self.next_refresh_at: datetime | None = None
        self._lock = threading.Lock()
        self._stop_event: threading.Event | None = None
        self._thread: threading.Thread | None = None

    @property
    def is_running(self) -> bool:
        return self._stop_event is not None and not self._stop_event.is_set()

    def start(self, interval: float, action: Callable[[], object]) -> None:
        """Start polling, replacing any loop that is already running.

        Args:
            interval: Seconds to sleep before each fire.
            action: Called once per interval from the polling thread.

        Raises:
            ValueError: If interval is not positive.
        """
        if interval <= 0:
            raise ValueError(f"interval must be positive, got {interval}")

        with self._lock:
            self._cancel_locked()
            stop_event = threading.Event()
            thread = threading.Thread(
                target=self._run,
                args=(interval, action, stop_event),
                name=self.name,
                daemon=True,
            )
            self._stop_event = stop_event
            self._thread = thread
            self.interval = interval
            thread.start()

        logger.info("Polling started: every %ss", interval)

    def stop(self) -> None:
        """Stop polling. Safe to call when already stopped."""
        with self._lock:
            was_running = self._cancel_locked()
        if was_running:
            logger.info("Polling stopped")

    def join(self, timeout: float | None = None) -> None:
        """Wait for the most recent polling thread to exit."""
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)

    def _cancel_locked(self) -> bool:
        if self._stop_event is None:
            return False
        self._stop_event.set()
        self._stop_event = None
        self.next_refresh_at = None
        return True

    def _run(
        self, interval: float, action: Callable[[], object], stop_event: threading.Event
    ) -> None:
        while True:
            with self._lock:
                if stop_event is not self._stop_event:
                    return
                self.next_refresh_at = datetime.now(UTC) + timedelta(seconds=interval)

            if stop_event.wait(interval):
                return

            try:
                action()
            except Exception:
                logger.exception("Scheduled action failed")
