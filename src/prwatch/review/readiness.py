"""Readiness - Is a pull request actionable for review under the user's check policy?

All functions here are pure and cheap, so callers may evaluate them on every
render without caching.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from prwatch.checks import CheckStatus, CIStatus, resolve_from_results
from prwatch.github.models import MergeableState, PRState

if TYPE_CHECKING:
    from collections.abc import Collection

    from prwatch.checks import CheckInfo, CheckResult
    from prwatch.github.models import PullRequest


def effective_check_results(
    pr: PullRequest, ignored_checks: Collection[str] = ()
) -> list[CheckResult]:
    """Check results excluding ignored check names."""
    if not ignored_checks:
        return list(pr.check_results)
    ignored = set(ignored_checks)
    return [c for c in pr.check_results if c.name not in ignored]


def effective_failed_checks(
    pr: PullRequest, ignored_checks: Collection[str] = ()
) -> list[CheckInfo]:
    """Failed checks excluding ignored check names."""
    if not ignored_checks:
        return list(pr.failed_checks)
    ignored = set(ignored_checks)
    return [c for c in pr.failed_checks if c.name not in ignored]


def effective_ci_status(pr: PullRequest, ignored_checks: Collection[str] = ()) -> CIStatus:
    """CI status recomputed without ignored checks.

    With nothing ignored this is the fetched status, which may come from the
    server rollup fallback.
    """
    if not ignored_checks:
        return pr.ci_status
    return resolve_from_results(effective_check_results(pr, ignored_checks))


def effective_check_counts(
    pr: PullRequest, ignored_checks: Collection[str] = ()
) -> tuple[int, int, int]:
    """Return (total, passed, failed) over the non-ignored check results."""
    effective = effective_check_results(pr, ignored_checks)
    passed = sum(1 for c in effective if c.status is CheckStatus.PASSED)
    failed = sum(1 for c in effective if c.status is CheckStatus.FAILED)
    return len(effective), passed, failed


def is_ready(
    pr: PullRequest,
    required_checks: Collection[str] = (),
    ignored_checks: Collection[str] = (),
) -> bool:
    """Decide whether a PR is ready for review.

    Drafts and conflicting PRs are never ready. Without required checks the
    PR is ready unless the status rebuilt from its non-ignored check results
    is failure or pending. With required checks, every required check that
    has reported must have passed; a required check that has not reported
    yet does not block.

    Args:
        pr: The pull request to evaluate.
        required_checks: Check names that must pass.
        ignored_checks: Check names excluded from evaluation. Expected to be
            disjoint from ``required_checks``; a name in both is ignored.

    Returns:
        True if the PR is ready for review.
    """
    if pr.state == PRState.DRAFT:
        return False
    if pr.mergeable == MergeableState.CONFLICTING:
        return False

    effective = effective_check_results(pr, ignored_checks)

    if not required_checks:
        status = resolve_from_results(effective)
        return status not in (CIStatus.FAILURE, CIStatus.PENDING)

    ignored = set(ignored_checks)
    by_name: dict[str, CheckResult] = {}
    for check in effective:
        by_name.setdefault(check.name, check)

    for name in required_checks:
        if name in ignored:
            continue
        check = by_name.get(name)
        if check is None:
            continue
        if check.status is not CheckStatus.PASSED:
            return False
    return True


def partition_by_readiness(
    prs: list[PullRequest],
    required_checks: Collection[str] = (),
    ignored_checks: Collection[str] = (),
) -> tuple[list[PullRequest], list[PullRequest]]:
    """Split PRs into (ready, not_ready), preserving order."""
    ready: list[PullRequest] = []
    not_ready: list[PullRequest] = []
    for pr in prs:
        if is_ready(pr, required_checks, ignored_checks):
            ready.append(pr)
        else:
            not_ready.append(pr)
    return ready, not_ready
