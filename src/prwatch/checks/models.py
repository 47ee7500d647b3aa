"""Data models for check-status classification."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum


class CIStatus(StrEnum):
    """Overall CI verdict for a pull request's latest commit."""

    SUCCESS = "success"
    FAILURE = "failure"
    PENDING = "pending"
    UNKNOWN = "unknown"


class CheckStatus(StrEnum):
    """Classified outcome of a single check."""

    PASSED = "passed"
    FAILED = "failed"
    PENDING = "pending"


@dataclass(frozen=True)
class CheckInfo:
    """A failed check, kept for linking to its details page."""

    name: str
    details_url: str | None = None


@dataclass(frozen=True)
class CheckResult:
    """A classified check of any outcome."""

    name: str
    status: CheckStatus
    details_url: str | None = None


# Raw check contexts. The upstream rollup returns both shapes in one list;
# they are decoded into one of these two variants before tallying.


@dataclass(frozen=True)
class StatusContextNode:
    """A commit status (legacy status API) reported by an external service.

    Attributes:
        context: Status context name, e.g. ``ci/jenkins``.
        state: Raw state (SUCCESS, FAILURE, ERROR, PENDING, EXPECTED).
        target_url: Link to the status details.
    """

    context: str
    state: str = ""
    target_url: str | None = None


@dataclass(frozen=True)
class CheckRunNode:
    """A check run (checks API), e.g. a GitHub Actions job.

    Attributes:
        name: Check run name. May be missing on partially-populated nodes.
        status: Run status (QUEUED, IN_PROGRESS, COMPLETED, ...). Empty if unreported.
        conclusion: Conclusion once completed (SUCCESS, FAILURE, SKIPPED, ...).
        details_url: Link to the run details.
    """

    name: str | None = None
    status: str = ""
    conclusion: str = ""
    details_url: str | None = None


CheckContext = StatusContextNode | CheckRunNode


@dataclass(frozen=True)
class RollupData:
    """The status-check rollup of a PR's latest commit.

    Attributes:
        state: Server-computed aggregate state, used only as a fallback.
        total_count: Number of contexts the server reports, which may exceed
            ``len(contexts)`` when the per-check listing was truncated.
        contexts: The check contexts that were actually returned.
    """

    state: str | None
    total_count: int
    contexts: list[CheckContext] = field(default_factory=list)


@dataclass
class CheckTally:
    """Counts and typed results produced from a list of raw contexts."""

    passed: int = 0
    failed: int = 0
    pending: int = 0
    check_results: list[CheckResult] = field(default_factory=list)
    failed_checks: list[CheckInfo] = field(default_factory=list)

    @property
    def counted(self) -> int:
        """Number of contexts that were classified (skipped ones excluded)."""
        return self.passed + self.failed + self.pending


@dataclass(frozen=True)
class CIResult:
    """Everything the PR model needs to know about its checks."""

    status: CIStatus
    total: int = 0
    passed: int = 0
    failed: int = 0
    failed_checks: list[CheckInfo] = field(default_factory=list)
    check_results: list[CheckResult] = field(default_factory=list)
