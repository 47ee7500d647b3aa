"""Data models for GitHub pull request data."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from typing import Any

from prwatch.checks import CheckInfo, CheckResult, CIStatus


class PRState(StrEnum):
    """Lifecycle state of a pull request."""

    OPEN = "open"
    DRAFT = "draft"
    MERGED = "merged"
    CLOSED = "closed"


class ReviewDecision(StrEnum):
    """Aggregate review decision reported by GitHub."""

    APPROVED = "approved"
    CHANGES_REQUESTED = "changesRequested"
    REVIEW_REQUIRED = "reviewRequired"
    NONE = "none"


class MergeableState(StrEnum):
    """Whether the PR can be merged without conflicts."""

    MERGEABLE = "mergeable"
    CONFLICTING = "conflicting"
    UNKNOWN = "unknown"


class SearchKind(StrEnum):
    """The two PR searches run every cycle."""

    AUTHORED = "author"
    REVIEW_REQUESTED = "review-requested"


@dataclass(frozen=True)
class PullRequest:
    """One observed state of a pull request at one fetch moment.

    Identity is ``(owner, repo, number)``; every other field is replaced
    wholesale on the next fetch.
    """

    owner: str
    repo: str
    number: int
    title: str
    author: str
    url: str
    state: PRState = PRState.OPEN
    ci_status: CIStatus = CIStatus.UNKNOWN
    is_in_merge_queue: bool = False
    queue_position: int | None = None
    mergeable: MergeableState = MergeableState.UNKNOWN
    review_decision: ReviewDecision = ReviewDecision.NONE
    approval_count: int = 0
    checks_total: int = 0
    checks_passed: int = 0
    checks_failed: int = 0
    check_results: list[CheckResult] = field(default_factory=list)
    failed_checks: list[CheckInfo] = field(default_factory=list)
    head_sha: str = ""
    head_ref_name: str = ""
    viewer_has_approved: bool = False
    last_fetched: datetime | None = None

    @property
    def identity(self) -> str:
        """Stable cross-cycle key, e.g. ``octo/widgets#42``."""
        return f"{self.owner}/{self.repo}#{self.number}"

    @property
    def repo_full_name(self) -> str:
        return f"{self.owner}/{self.repo}"

    @property
    def display_number(self) -> str:
        return f"#{self.number}"

    @property
    def sort_priority(self) -> int:
        """Open 0, draft 1, queued 2, merged/closed 3."""
        if self.is_in_merge_queue:
            return 2
        match self.state:
            case PRState.OPEN:
                return 0
            case PRState.DRAFT:
                return 1
            case _:
                return 3

    @property
    def review_sort_priority(self) -> int:
        """Needs review 0, changes requested 1, approved 2."""
        match self.review_decision:
            case ReviewDecision.CHANGES_REQUESTED:
                return 1
            case ReviewDecision.APPROVED:
                return 2
            case _:
                return 0

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON output (CLI and API)."""
        return {
            "identity": self.identity,
            "owner": self.owner,
            "repo": self.repo,
            "number": self.number,
            "title": self.title,
            "author": self.author,
            "url": self.url,
            "state": self.state.value,
            "ci_status": self.ci_status.value,
            "is_in_merge_queue": self.is_in_merge_queue,
            "queue_position": self.queue_position,
            "mergeable": self.mergeable.value,
            "review_decision": self.review_decision.value,
            "approval_count": self.approval_count,
            "checks_total": self.checks_total,
            "checks_passed": self.checks_passed,
            "checks_failed": self.checks_failed,
            "check_results": [
                {"name": c.name, "status": c.status.value, "details_url": c.details_url}
                for c in self.check_results
            ],
            "failed_checks": [
                {"name": c.name, "details_url": c.details_url} for c in self.failed_checks
            ],
            "head_sha": self.head_sha,
            "head_ref_name": self.head_ref_name,
            "viewer_has_approved": self.viewer_has_approved,
        }


@dataclass(frozen=True)
class PageInfo:
    """Cursor information for one page of search results."""

    has_next_page: bool = False
    end_cursor: str | None = None


@dataclass
class SearchPage:
    """One decoded page of search results.

    Attributes:
        nodes: Raw PR nodes, still to be converted individually.
        page_info: Cursor information for the next request.
    """

    nodes: list[dict[str, Any]]
    page_info: PageInfo


@dataclass
class SearchResult:
    """Accumulated result of a paginated search.

    Attributes:
        pull_requests: Every PR that decoded successfully, in server order.
        pages_fetched: Number of pages requested.
        cap_reached: True when pagination stopped at the page cap while the
            server still reported more pages.
        dropped_records: Number of nodes discarded because required fields were missing.
    """

    pull_requests: list[PullRequest] = field(default_factory=list)
    pages_fetched: int = 0
    cap_reached: bool = False
    dropped_records: int = 0
