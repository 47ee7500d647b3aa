"""Data models for the Orchestrator module."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from prwatch.github.models import PullRequest, SearchKind, SearchResult
    from prwatch.notifications import StatusNotification


@dataclass
class BranchOutcome:
    """Result of one search branch within a refresh cycle.

    Exactly one of ``result`` and ``error`` is set.
    """

    kind: SearchKind
    result: SearchResult | None = None
    error: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.result is not None

    @property
    def pull_requests(self) -> list[PullRequest]:
        return self.result.pull_requests if self.result is not None else []


@dataclass
class RefreshResult:
    """Outcome of a refresh request.

    Attributes:
        skipped: True if another cycle was in flight and nothing was done.
        authored: Outcome of the authored-PR search, if it ran.
        reviews: Outcome of the review-requested search, if it ran.
        notifications: Notifications produced by this cycle.
        error: The user-facing error message after this cycle, if any.
    """

    skipped: bool = False
    authored: BranchOutcome | None = None
    reviews: BranchOutcome | None = None
    notifications: list[StatusNotification] = field(default_factory=list)
    error: str | None = None
