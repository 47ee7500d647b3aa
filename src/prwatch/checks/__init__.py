"""Checks - Classify per-check data into one CI status."""

from prwatch.checks.models import (
    CheckContext,
    CheckInfo,
    CheckResult,
    CheckRunNode,
    CheckStatus,
    CheckTally,
    CIResult,
    CIStatus,
    RollupData,
    StatusContextNode,
)
from prwatch.checks.tally import (
    resolve_from_results,
    resolve_overall_status,
    summarize_checks,
    tally_check_contexts,
)

__all__ = [
    "CIResult",
    "CIStatus",
    "CheckContext",
    "CheckInfo",
    "CheckResult",
    "CheckRunNode",
    "CheckStatus",
    "CheckTally",
    "RollupData",
    "StatusContextNode",
    "resolve_from_results",
    "resolve_overall_status",
    "summarize_checks",
    "tally_check_contexts",
]
