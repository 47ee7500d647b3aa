"""Review - Readiness policy, grouping and status summaries for PR lists."""

from prwatch.review.grouping import group_by_repo
from prwatch.review.readiness import (
    effective_check_counts,
    effective_check_results,
    effective_ci_status,
    effective_failed_checks,
    is_ready,
    partition_by_readiness,
)
from prwatch.review.summary import (
    OverallStatus,
    draft_count,
    has_failure,
    open_count,
    overall_status,
    queued_count,
    refresh_interval_label,
    status_bar_summary,
)

__all__ = [
    "OverallStatus",
    "draft_count",
    "effective_check_counts",
    "effective_check_results",
    "effective_ci_status",
    "effective_failed_checks",
    "group_by_repo",
    "has_failure",
    "is_ready",
    "open_count",
    "overall_status",
    "partition_by_readiness",
    "queued_count",
    "refresh_interval_label",
    "status_bar_summary",
]
