"""Pydantic models for REST API."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Generic, Literal, TypeVar

from pydantic import BaseModel, Field

from prwatch.review import (
    effective_check_counts,
    effective_ci_status,
    group_by_repo,
    is_ready,
)

if TYPE_CHECKING:
    from prwatch.github import PullRequest
    from prwatch.settings_store import FilterSettings

T = TypeVar("T")

ReadinessSection = Literal["ready", "not_ready"]


class APIResponse(BaseModel, Generic[T]):
    """Standard API response wrapper."""

    data: T | None = None
    error: str | None = None


# Pull request models


class CheckResultResponse(BaseModel):
    """One check on a PR's head commit."""

    name: str
    status: str
    details_url: str | None = None


class FailedCheckResponse(BaseModel):
    """A failed check, with a link to its details."""

    name: str
    details_url: str | None = None


class PullRequestResponse(BaseModel):
    """Response model for a pull request.

    ``effective_*`` fields and ``ready`` are computed under the current
    filter settings; the raw fields are as fetched.
    """

    identity: str
    owner: str
    repo: str
    number: int
    title: str
    author: str
    url: str
    state: str
    ci_status: str
    is_in_merge_queue: bool
    queue_position: int | None
    mergeable: str
    review_decision: str
    approval_count: int
    checks_total: int
    checks_passed: int
    checks_failed: int
    check_results: list[CheckResultResponse]
    failed_checks: list[FailedCheckResponse]
    head_sha: str
    head_ref_name: str
    viewer_has_approved: bool
    effective_ci_status: str
    effective_checks_total: int
    effective_checks_passed: int
    effective_checks_failed: int
    ready: bool


class RepoGroupResponse(BaseModel):
    """PRs of one repository, sorted for display."""

    repo: str
    pull_requests: list[PullRequestResponse]


class PullListResponse(BaseModel):
    """Response model for the authored PR list."""

    total: int
    cap_reached: bool
    groups: list[RepoGroupResponse]


class ReviewListResponse(BaseModel):
    """Response model for the review-requested list, split by readiness."""

    total: int
    cap_reached: bool
    ready: list[RepoGroupResponse]
    not_ready: list[RepoGroupResponse]


def pull_request_to_response(pr: PullRequest, settings: FilterSettings) -> PullRequestResponse:
    """Convert a PullRequest to PullRequestResponse under the given filter settings."""
    required = settings.required_check_names
    ignored = settings.ignored_check_names
    total, passed, failed = effective_check_counts(pr, ignored)
    return PullRequestResponse(
        **pr.to_dict(),
        effective_ci_status=effective_ci_status(pr, ignored).value,
        effective_checks_total=total,
        effective_checks_passed=passed,
        effective_checks_failed=failed,
        ready=is_ready(pr, required, ignored),
    )


def groups_to_response(
    prs: list[PullRequest], settings: FilterSettings, is_reviews: bool = False
) -> list[RepoGroupResponse]:
    """Group PRs by repository and convert each one."""
    return [
        RepoGroupResponse(
            repo=repo,
            pull_requests=[pull_request_to_response(pr, settings) for pr in group],
        )
        for repo, group in group_by_repo(prs, is_reviews=is_reviews)
    ]


# Status / control models


class StatusResponse(BaseModel):
    """Response model for the watcher status."""

    username: str | None
    overall_status: str
    has_failure: bool
    summary: str
    open_count: int
    draft_count: int
    queued_count: int
    last_error: str | None
    is_refreshing: bool
    has_completed_initial_load: bool
    last_refreshed_at: datetime | None
    polling: bool
    refresh_interval: int
    refresh_interval_label: str
    next_refresh_at: datetime | None


class RefreshResponse(BaseModel):
    """Response model for a manual refresh."""

    skipped: bool
    authored_ok: bool | None = None
    reviews_ok: bool | None = None
    notifications: int = 0
    error: str | None = None


# Settings models


class SettingsResponse(BaseModel):
    """Response model for user settings."""

    refresh_interval: int
    hide_drafts: bool
    required_check_names: list[str]
    ignored_check_names: list[str]
    collapsed_repos: list[str]
    collapsed_readiness_sections: list[ReadinessSection]


class SettingsUpdate(BaseModel):
    """Request model for updating settings (partial update)."""

    refresh_interval: int | None = Field(default=None, gt=0)
    hide_drafts: bool | None = None
    required_check_names: list[str] | None = None
    ignored_check_names: list[str] | None = None
    collapsed_repos: list[str] | None = None
    collapsed_readiness_sections: list[ReadinessSection] | None = None
