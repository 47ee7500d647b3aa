"""FetchOrchestrator - Owns the refresh cycle and the state it produces."""

from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from prwatch.github import GitHubError, SearchKind
from prwatch.notifications import (
    ChangeSnapshot,
    LoggingNotificationService,
    StatusChangeDetector,
    dispatch,
)
from prwatch.orchestrator.exceptions import UserNotResolvedError
from prwatch.orchestrator.models import BranchOutcome, RefreshResult
from prwatch.review import is_ready, partition_by_readiness
from prwatch.scheduler import PollingScheduler

if TYPE_CHECKING:
    from collections.abc import Callable

    from prwatch.github import GitHubService, PullRequest
    from prwatch.notifications import NotificationService, StatusNotification
    from prwatch.settings_store import FilterSettings, SettingsStore

logger = logging.getLogger("prwatch.orchestrator")

NOT_AUTHENTICATED_MESSAGE = "gh not authenticated"
REVIEWS_ERROR_PREFIX = "Reviews: "
ERROR_SEPARATOR = " | "


class FetchOrchestrator:
    """Runs refresh cycles and holds the latest PR lists.

    One cycle resolves the user, runs the authored and review-requested
    searches concurrently, applies each outcome independently, diffs the
    authored list against the previous cycle and delivers the resulting
    notifications.

    A failed branch keeps the data from its last successful cycle. Only one
    cycle runs at a time; a refresh requested while one is in flight returns
    a skipped result immediately.
    """

    def __init__(
        self,
        service: GitHubService,
        settings_store: SettingsStore,
        notifier: NotificationService | None = None,
        scheduler: PollingScheduler | None = None,
        detector: StatusChangeDetector | None = None,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            service: GitHubService used for both searches.
            settings_store: Source of filter settings and polling interval.
            notifier: Sink for status notifications. Defaults to logging.
            scheduler: Polling scheduler. A new one is created if omitted.
            detector: Status change detector. A new one is created if omitted.
        """
        self.service = service
        self.settings_store = settings_store
        self.notifier: NotificationService = notifier or LoggingNotificationService()
        self.scheduler = scheduler or PollingScheduler()
        self.detector = detector or StatusChangeDetector()

        self.username: str | None = None
        self.pull_requests: list[PullRequest] = []
        self.review_prs: list[PullRequest] = []
        self.last_error: str | None = None
        self.has_completed_initial_load = False
        self.authored_cap_reached = False
        self.reviews_cap_reached = False
        self.last_refreshed_at: datetime | None = None

        self.filter_settings: FilterSettings = settings_store.load_filter_settings()
        self.refresh_interval: int = settings_store.load_refresh_interval()

        self._snapshot = ChangeSnapshot()
        self._refresh_guard = threading.Lock()
        self._refresh_listeners: list[Callable[[RefreshResult], None]] = []

    # --- User ---

    def resolve_user(self) -> str | None:
        """Resolve and cache the authenticated user's login."""
        if self.username is None:
            self.username = self.service.current_user()
        return self.username

    def require_user(self) -> str:
        """Like resolve_user(), but raise if no user can be resolved.

        Raises:
            UserNotResolvedError: If the transport is not authenticated.
        """
        username = self.resolve_user()
        if username is None:
            raise UserNotResolvedError(NOT_AUTHENTICATED_MESSAGE)
        return username

    # --- Refresh cycle ---

    @property
    def is_refreshing(self) -> bool:
        return self._refresh_guard.locked()

    @property
    def snapshot(self) -> ChangeSnapshot:
        """State retained from the last successful authored fetch."""
        return self._snapshot

    def add_refresh_listener(self, listener: Callable[[RefreshResult], None]) -> None:
        """Register a callback run after every completed (not skipped) cycle."""
        self._refresh_listeners.append(listener)

    def refresh_all(self) -> RefreshResult:
        """Run one refresh cycle, or do nothing if one is already running.

        Returns:
            RefreshResult for the cycle, with ``skipped`` set if it did not run.
        """
        if not self._refresh_guard.acquire(blocking=False):
            logger.info("Refresh already in progress, skipping")
            return RefreshResult(skipped=True, error=self.last_error)
        try:
            result = self._run_cycle()
        finally:
            self._refresh_guard.release()

        for listener in self._refresh_listeners:
            try:
                listener(result)
            except Exception:
                logger.exception("Refresh listener failed")
        return result

    def _run_cycle(self) -> RefreshResult:
        username = self.resolve_user()
        if username is None:
            logger.error("Cannot refresh: %s", NOT_AUTHENTICATED_MESSAGE)
            self.last_error = NOT_AUTHENTICATED_MESSAGE
            return RefreshResult(error=self.last_error)

        logger.info("Refreshing PRs for %s", username)

        # Both searches are submitted before either is awaited.
        with ThreadPoolExecutor(max_workers=2, thread_name_prefix="prwatch-fetch") as pool:
            authored_future = pool.submit(self._run_branch, SearchKind.AUTHORED, username)
            reviews_future = pool.submit(self._run_branch, SearchKind.REVIEW_REQUESTED, username)
            authored = authored_future.result()
            reviews = reviews_future.result()

        notifications = self._apply_authored(authored)
        self._apply_reviews(reviews)

        self.has_completed_initial_load = True
        self.last_refreshed_at = datetime.now(UTC)
        logger.info(
            "Refresh complete: %d authored, %d review requests%s",
            len(self.pull_requests),
            len(self.review_prs),
            f" (error: {self.last_error})" if self.last_error else "",
        )

        return RefreshResult(
            authored=authored,
            reviews=reviews,
            notifications=notifications,
            error=self.last_error,
        )

    def _run_branch(self, kind: SearchKind, username: str) -> BranchOutcome:
        try:
            result = self.service.search(kind, username)
        except GitHubError as e:
            logger.error("Failed to fetch %s PRs: %s", kind, e)
            return BranchOutcome(kind=kind, error=str(e))
        except Exception as e:
            # A bug in one branch must not discard the other branch's result.
            logger.exception("Unexpected error fetching %s PRs", kind)
            return BranchOutcome(kind=kind, error=str(e) or type(e).__name__)
        return BranchOutcome(kind=kind, result=result)

    def _apply_authored(self, outcome: BranchOutcome) -> list[StatusNotification]:
        if outcome.result is None:
            self.last_error = outcome.error
            return []

        prs = outcome.result.pull_requests
        notifications, self._snapshot = self.detector.advance(self._snapshot, prs)
        self.pull_requests = prs
        self.authored_cap_reached = outcome.result.cap_reached
        self.last_error = None

        if notifications:
            delivered = dispatch(notifications, self.notifier)
            logger.info("Delivered %d of %d notifications", delivered, len(notifications))
        return notifications

    def _apply_reviews(self, outcome: BranchOutcome) -> None:
        if outcome.result is None:
            message = f"{REVIEWS_ERROR_PREFIX}{outcome.error}"
            if self.last_error:
                self.last_error = f"{self.last_error}{ERROR_SEPARATOR}{message}"
            else:
                self.last_error = message
            return

        self.review_prs = outcome.result.pull_requests
        self.reviews_cap_reached = outcome.result.cap_reached

    # --- Settings ---

    def update_filter_settings(self, settings: FilterSettings) -> None:
        """Validate, persist and apply new filter settings.

        Raises:
            InvalidFilterSettingsError: If required and ignored checks overlap.
        """
        self.settings_store.save_filter_settings(settings)
        self.filter_settings = settings
        logger.info(
            "Filter settings updated: hide_drafts=%s required=%s ignored=%s",
            settings.hide_drafts,
            settings.required_check_names,
            settings.ignored_check_names,
        )

    def set_refresh_interval(self, interval: int) -> None:
        """Persist a new polling interval and restart polling if it is running.

        Raises:
            InvalidIntervalError: If interval is not a positive integer.
        """
        self.settings_store.save_refresh_interval(interval)
        self.refresh_interval = interval
        if self.scheduler.is_running:
            self.start_polling()

    # --- Polling ---

    def start_polling(self) -> None:
        self.scheduler.start(self.refresh_interval, self.refresh_all)

    def stop_polling(self) -> None:
        self.scheduler.stop()

    @property
    def next_refresh_at(self) -> datetime | None:
        return self.scheduler.next_refresh_at

    # --- Views ---

    @property
    def filtered_review_prs(self) -> list[PullRequest]:
        """Review requests after the hide-drafts filter."""
        return self.filter_settings.apply_review_filters(self.review_prs)

    def partition_reviews(self) -> tuple[list[PullRequest], list[PullRequest]]:
        """Split filtered review requests into (ready, not_ready)."""
        return partition_by_readiness(
            self.filtered_review_prs,
            self.filter_settings.required_check_names,
            self.filter_settings.ignored_check_names,
        )

    def is_ready(self, pr: PullRequest) -> bool:
        return is_ready(
            pr,
            self.filter_settings.required_check_names,
            self.filter_settings.ignored_check_names,
        )

    def close(self) -> None:
        """Stop polling and release the transport and settings database."""
        self.stop_polling()
        self.service.close()
        self.settings_store.close()
