"""Unit tests for the readiness policy."""

from collections.abc import Callable

import pytest

from prwatch.checks import CheckInfo, CheckResult, CheckStatus, CIStatus
from prwatch.github import MergeableState, PRState, PullRequest
from prwatch.review import (
    effective_check_counts,
    effective_ci_status,
    effective_failed_checks,
    is_ready,
    partition_by_readiness,
)

PASSED = CheckStatus.PASSED
FAILED = CheckStatus.FAILED
PENDING = CheckStatus.PENDING


def results(**statuses: CheckStatus) -> list[CheckResult]:
    return [CheckResult(name=name, status=status) for name, status in statuses.items()]


@pytest.mark.unit
class TestIsReadyBasics:
    """Drafts, conflicts and the no-required-checks policy."""

    def test_open_with_passing_checks(self, make_pr: Callable[..., PullRequest]) -> None:
        pr = make_pr(check_results=results(build=PASSED, lint=PASSED))
        assert is_ready(pr) is True

    def test_draft_is_never_ready(self, make_pr: Callable[..., PullRequest]) -> None:
        pr = make_pr(state=PRState.DRAFT, check_results=results(build=PASSED))
        assert is_ready(pr) is False
        assert is_ready(pr, required_checks=["build"]) is False

    def test_conflicting_is_never_ready(self, make_pr: Callable[..., PullRequest]) -> None:
        pr = make_pr(mergeable=MergeableState.CONFLICTING, check_results=results(build=PASSED))
        assert is_ready(pr) is False

    def test_unknown_mergeability_does_not_block(
        self, make_pr: Callable[..., PullRequest]
    ) -> None:
        pr = make_pr(mergeable=MergeableState.UNKNOWN)
        assert is_ready(pr) is True

    def test_failure_blocks(self, make_pr: Callable[..., PullRequest]) -> None:
        pr = make_pr(check_results=results(build=PASSED, test=FAILED))
        assert is_ready(pr) is False

    def test_pending_blocks(self, make_pr: Callable[..., PullRequest]) -> None:
        pr = make_pr(check_results=results(build=PASSED, test=PENDING))
        assert is_ready(pr) is False

    def test_no_checks_is_ready(self, make_pr: Callable[..., PullRequest]) -> None:
        assert is_ready(make_pr()) is True

    def test_ignored_failure_does_not_block(self, make_pr: Callable[..., PullRequest]) -> None:
        pr = make_pr(check_results=results(build=PASSED, flaky=FAILED))
        assert is_ready(pr, ignored_checks=["flaky"]) is True


@pytest.mark.unit
class TestIsReadyRequiredChecks:
    """Readiness with a required-check list."""

    def test_required_check_passed(self, make_pr: Callable[..., PullRequest]) -> None:
        pr = make_pr(check_results=results(lint=PASSED, e2e=FAILED))
        # Only required checks matter once any are configured
        assert is_ready(pr, required_checks=["lint"]) is True

    def test_required_check_failed(self, make_pr: Callable[..., PullRequest]) -> None:
        pr = make_pr(check_results=results(lint=FAILED))
        assert is_ready(pr, required_checks=["lint"]) is False

    def test_required_check_pending(self, make_pr: Callable[..., PullRequest]) -> None:
        pr = make_pr(check_results=results(lint=PENDING))
        assert is_ready(pr, required_checks=["lint"]) is False

    def test_missing_required_check_does_not_block(
        self, make_pr: Callable[..., PullRequest]
    ) -> None:
        pr = make_pr(check_results=[])
        assert is_ready(pr, required_checks=["lint"]) is True

    def test_all_required_must_pass(self, make_pr: Callable[..., PullRequest]) -> None:
        pr = make_pr(check_results=results(lint=PASSED, build=FAILED))
        assert is_ready(pr, required_checks=["lint", "build"]) is False

    def test_name_in_both_lists_is_ignored(self, make_pr: Callable[..., PullRequest]) -> None:
        pr = make_pr(check_results=results(lint=FAILED))
        assert is_ready(pr, required_checks=["lint"], ignored_checks=["lint"]) is True


@pytest.mark.unit
class TestEffectiveViews:
    """Tests for ignored-check filtering of status and counts."""

    def test_status_unchanged_without_ignored(self, make_pr: Callable[..., PullRequest]) -> None:
        # Rollup fallback status survives when nothing is ignored
        pr = make_pr(ci_status=CIStatus.SUCCESS, check_results=[])
        assert effective_ci_status(pr) == CIStatus.SUCCESS

    def test_status_recomputed_with_ignored(self, make_pr: Callable[..., PullRequest]) -> None:
        pr = make_pr(
            ci_status=CIStatus.FAILURE,
            check_results=results(build=PASSED, flaky=FAILED),
        )
        assert effective_ci_status(pr, ["flaky"]) == CIStatus.SUCCESS

    def test_all_ignored_is_unknown(self, make_pr: Callable[..., PullRequest]) -> None:
        pr = make_pr(ci_status=CIStatus.FAILURE, check_results=results(flaky=FAILED))
        assert effective_ci_status(pr, ["flaky"]) == CIStatus.UNKNOWN

    def test_counts(self, make_pr: Callable[..., PullRequest]) -> None:
        pr = make_pr(check_results=results(a=PASSED, b=FAILED, c=PENDING, d=PASSED))
        assert effective_check_counts(pr) == (4, 2, 1)
        assert effective_check_counts(pr, ["a", "b"]) == (2, 1, 0)

    def test_failed_checks_filtered(self, make_pr: Callable[..., PullRequest]) -> None:
        pr = make_pr(failed_checks=[CheckInfo("flaky"), CheckInfo("build", "https://ci/1")])
        assert effective_failed_checks(pr, ["flaky"]) == [CheckInfo("build", "https://ci/1")]


@pytest.mark.unit
def test_partition_preserves_order(make_pr: Callable[..., PullRequest]) -> None:
    a = make_pr(number=1)
    b = make_pr(number=2, state=PRState.DRAFT)
    c = make_pr(number=3, check_results=results(build=PASSED))
    d = make_pr(number=4, mergeable=MergeableState.CONFLICTING)

    ready, not_ready = partition_by_readiness([a, b, c, d])

    assert ready == [a, c]
    assert not_ready == [b, d]
