"""Check tallying and CI status resolution.

Raw check contexts are classified one by one into passed / failed / pending,
then the counts (and, as a last resort, the server rollup) are folded into a
single :class:`CIStatus`.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, assert_never

from prwatch.checks.models import (
    CheckInfo,
    CheckResult,
    CheckRunNode,
    CheckStatus,
    CheckTally,
    CIResult,
    CIStatus,
    StatusContextNode,
)

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from prwatch.checks.models import CheckContext, RollupData

logger = logging.getLogger("prwatch.checks")

_STATUS_FAILED_STATES = frozenset({"FAILURE", "ERROR"})
_PASSING_CONCLUSIONS = frozenset({"SUCCESS", "SKIPPED", "NEUTRAL"})


def tally_check_contexts(
    contexts: Sequence[CheckContext],
    declared_total: int | None = None,
    label: str = "",
) -> CheckTally:
    """Classify raw check contexts into counts and typed results.

    Check runs that have reported neither a status nor a conclusion are
    skipped entirely: they are not counted and not recorded.

    Args:
        contexts: Raw contexts in server order.
        declared_total: Total the server reports. A value larger than
            ``len(contexts)`` means the listing was truncated; this is logged.
        label: PR identity used in the truncation warning.

    Returns:
        CheckTally with counts, all classified results and failed checks.
    """
    if declared_total is not None and declared_total > len(contexts):
        logger.warning(
            "Check contexts truncated for %s: %d/%d fetched",
            label or "pull request",
            len(contexts),
            declared_total,
        )

    tally = CheckTally()
    for ctx in contexts:
        match ctx:
            case StatusContextNode():
                _classify_status_context(ctx, tally)
            case CheckRunNode():
                _classify_check_run(ctx, tally)
            case _:
                assert_never(ctx)
    return tally


def _record(tally: CheckTally, name: str | None, status: CheckStatus, url: str | None) -> None:
    """Bump the counter for ``status`` and record the named result."""
    if status is CheckStatus.PASSED:
        tally.passed += 1
    elif status is CheckStatus.FAILED:
        tally.failed += 1
    else:
        tally.pending += 1

    # Nameless check runs still count, but cannot be listed.
    if name is None:
        return
    tally.check_results.append(CheckResult(name=name, status=status, details_url=url))
    if status is CheckStatus.FAILED:
        tally.failed_checks.append(CheckInfo(name=name, details_url=url))


def _classify_status_context(ctx: StatusContextNode, tally: CheckTally) -> None:
    if ctx.state == "SUCCESS":
        status = CheckStatus.PASSED
    elif ctx.state in _STATUS_FAILED_STATES:
        status = CheckStatus.FAILED
    else:
        # PENDING, EXPECTED, or anything unrecognized
        status = CheckStatus.PENDING
    _record(tally, ctx.context, status, ctx.target_url)


def _classify_check_run(ctx: CheckRunNode, tally: CheckTally) -> None:
    if not ctx.status and not ctx.conclusion:
        return

    if ctx.status != "COMPLETED":
        status = CheckStatus.PENDING
    elif ctx.conclusion in _PASSING_CONCLUSIONS:
        status = CheckStatus.PASSED
    else:
        status = CheckStatus.FAILED
    _record(tally, ctx.name, status, ctx.details_url)


def resolve_overall_status(
    declared_total: int,
    passed: int,
    failed: int,
    pending: int,
    rollup_state: str | None = None,
) -> CIStatus:
    """Combine check counts into one CI verdict.

    Precedence, first match wins: nothing declared -> unknown, any failure ->
    failure, any pending -> pending, nothing passed -> server rollup, else success.

    The rollup fallback covers PRs whose every context was skipped during
    tallying while the server still carries a verdict.
    """
    if declared_total == 0:
        return CIStatus.UNKNOWN
    if failed > 0:
        return CIStatus.FAILURE
    if pending > 0:
        return CIStatus.PENDING
    if passed == 0:
        match rollup_state or "":
            case "SUCCESS":
                return CIStatus.SUCCESS
            case "FAILURE" | "ERROR":
                return CIStatus.FAILURE
            case "PENDING":
                return CIStatus.PENDING
            case _:
                return CIStatus.UNKNOWN
    return CIStatus.SUCCESS


def resolve_from_results(results: Iterable[CheckResult]) -> CIStatus:
    """Rebuild a CI verdict from already-classified results.

    Used after ignored checks are filtered out; there are no skipped nodes at
    this stage so the rollup fallback does not apply.
    """
    statuses = {r.status for r in results}
    if not statuses:
        return CIStatus.UNKNOWN
    if CheckStatus.FAILED in statuses:
        return CIStatus.FAILURE
    if CheckStatus.PENDING in statuses:
        return CIStatus.PENDING
    return CIStatus.SUCCESS


def summarize_checks(rollup: RollupData | None, label: str = "") -> CIResult:
    """Tally and resolve a PR's rollup in one step.

    Args:
        rollup: The latest commit's rollup, or None if the commit has none.
        label: PR identity used in log messages.

    Returns:
        CIResult; UNKNOWN with zero counts when there is no rollup.
    """
    if rollup is None:
        return CIResult(status=CIStatus.UNKNOWN)

    tally = tally_check_contexts(rollup.contexts, rollup.total_count, label=label)
    status = resolve_overall_status(
        declared_total=rollup.total_count,
        passed=tally.passed,
        failed=tally.failed,
        pending=tally.pending,
        rollup_state=rollup.state,
    )
    return CIResult(
        status=status,
        total=rollup.total_count,
        passed=tally.passed,
        failed=tally.failed,
        failed_checks=tally.failed_checks,
        check_results=tally.check_results,
    )
