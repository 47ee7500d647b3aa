"""Grouping and sorting of PRs by repository."""

from __future__ import annotations

from itertools import groupby
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from prwatch.github.models import PullRequest


def _sort_key(pr: PullRequest, is_reviews: bool) -> tuple[int, ...]:
    if is_reviews:
        # Needs-review first, then fewest approvals
        return (pr.review_sort_priority, pr.approval_count, pr.sort_priority, pr.number)
    return (pr.sort_priority, pr.number)


def group_by_repo(
    prs: list[PullRequest], is_reviews: bool = False
) -> list[tuple[str, list[PullRequest]]]:
    """Group PRs by repository.

    Repositories are sorted alphabetically. Within a repository PRs are sorted
    by state priority then number; the reviews list sorts by review priority
    and approval count first.

    Args:
        prs: The PRs to group (already filtered).
        is_reviews: Whether this is the review-requested list.

    Returns:
        List of (repo full name, sorted PRs) pairs.
    """
    ordered = sorted(prs, key=lambda pr: pr.repo_full_name)
    return [
        (repo, sorted(group, key=lambda pr: _sort_key(pr, is_reviews)))
        for repo, group in groupby(ordered, key=lambda pr: pr.repo_full_name)
    ]
