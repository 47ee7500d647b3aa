"""Status summary derived from the authored PR list."""

from __future__ import annotations

from enum import StrEnum
from typing import TYPE_CHECKING

from prwatch.checks import CIStatus
from prwatch.github.models import PRState

if TYPE_CHECKING:
    from prwatch.github.models import PullRequest


class OverallStatus(StrEnum):
    """Single status shown for the whole authored list."""

    NONE = "none"
    FAILURE = "failure"
    PENDING = "pending"
    ALL_CLOSED = "all_closed"
    SUCCESS = "success"


def overall_status(prs: list[PullRequest]) -> OverallStatus:
    if not prs:
        return OverallStatus.NONE
    if any(pr.ci_status == CIStatus.FAILURE for pr in prs):
        return OverallStatus.FAILURE
    if any(pr.ci_status == CIStatus.PENDING for pr in prs):
        return OverallStatus.PENDING
    if all(pr.state in (PRState.MERGED, PRState.CLOSED) for pr in prs):
        return OverallStatus.ALL_CLOSED
    return OverallStatus.SUCCESS


def has_failure(prs: list[PullRequest]) -> bool:
    return any(pr.ci_status == CIStatus.FAILURE for pr in prs)


def open_count(prs: list[PullRequest]) -> int:
    """Open PRs that are not in the merge queue."""
    return sum(1 for pr in prs if pr.state == PRState.OPEN and not pr.is_in_merge_queue)


def draft_count(prs: list[PullRequest]) -> int:
    return sum(1 for pr in prs if pr.state == PRState.DRAFT)


def queued_count(prs: list[PullRequest]) -> int:
    return sum(1 for pr in prs if pr.is_in_merge_queue)


def status_bar_summary(prs: list[PullRequest]) -> str:
    """Compact summary, e.g. ``3·10·2`` for draft·open·queued, omitting zeros."""
    if not prs:
        return ""
    counts = (draft_count(prs), open_count(prs), queued_count(prs))
    return "·".join(str(c) for c in counts if c > 0)


def refresh_interval_label(interval: int) -> str:
    """Human-readable label for a polling interval in seconds."""
    if interval < 60:
        return f"{interval}s"
    if interval == 60:
        return "1 min"
    if interval % 60 == 0:
        return f"{interval // 60} min"
    return f"{interval}s"
