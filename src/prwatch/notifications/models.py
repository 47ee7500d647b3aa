"""Data models for status-change notifications."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from prwatch.checks import CIStatus
    from prwatch.github.models import PullRequest


@dataclass(frozen=True)
class StatusNotification:
    """A notification to emit for a PR status change."""

    title: str
    body: str
    url: str | None = None


@dataclass(frozen=True)
class ChangeSnapshot:
    """What the previous cycle saw, reduced to what the next diff needs.

    Attributes:
        previous_ci: CI status per PR identity.
        previous_ids: Identities present in the previous cycle.
        is_first_load: True until one cycle has completed; no diff is made
            against an empty baseline.
    """

    previous_ci: dict[str, CIStatus] = field(default_factory=dict)
    previous_ids: frozenset[str] = frozenset()
    is_first_load: bool = True

    @classmethod
    def from_pull_requests(cls, prs: list[PullRequest]) -> ChangeSnapshot:
        """Build the snapshot that follows a completed cycle."""
        return cls(
            previous_ci={pr.identity: pr.ci_status for pr in prs},
            previous_ids=frozenset(pr.identity for pr in prs),
            is_first_load=False,
        )
