"""Orchestrator - Refresh cycles over the authored and review-requested searches."""

from prwatch.orchestrator.exceptions import (
    OrchestratorError,
    UserNotResolvedError,
)
from prwatch.orchestrator.models import BranchOutcome, RefreshResult
from prwatch.orchestrator.orchestrator import NOT_AUTHENTICATED_MESSAGE, FetchOrchestrator

__all__ = [
    "NOT_AUTHENTICATED_MESSAGE",
    "BranchOutcome",
    "FetchOrchestrator",
    "OrchestratorError",
    "RefreshResult",
    "UserNotResolvedError",
]
