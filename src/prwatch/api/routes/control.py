"""Control endpoints: watcher status and manual refresh."""

from fastapi import APIRouter

from prwatch.api.dependencies import OrchestratorDep
from prwatch.api.models import APIResponse, RefreshResponse, StatusResponse
from prwatch.review import (
    draft_count,
    has_failure,
    open_count,
    overall_status,
    queued_count,
    refresh_interval_label,
    status_bar_summary,
)

router = APIRouter(tags=["control"])


@router.get("/status", response_model=APIResponse[StatusResponse])
def get_status(orchestrator: OrchestratorDep) -> APIResponse[StatusResponse]:
    """Get the overall CI status of authored PRs and the refresh state."""
    prs = orchestrator.pull_requests
    return APIResponse(
        data=StatusResponse(
            username=orchestrator.username,
            overall_status=overall_status(prs).value,
            has_failure=has_failure(prs),
            summary=status_bar_summary(prs),
            open_count=open_count(prs),
            draft_count=draft_count(prs),
            queued_count=queued_count(prs),
            last_error=orchestrator.last_error,
            is_refreshing=orchestrator.is_refreshing,
            has_completed_initial_load=orchestrator.has_completed_initial_load,
            last_refreshed_at=orchestrator.last_refreshed_at,
            polling=orchestrator.scheduler.is_running,
            refresh_interval=orchestrator.refresh_interval,
            refresh_interval_label=refresh_interval_label(orchestrator.refresh_interval),
            next_refresh_at=orchestrator.next_refresh_at,
        )
    )


@router.post("/refresh", response_model=APIResponse[RefreshResponse])
def refresh(orchestrator: OrchestratorDep) -> APIResponse[RefreshResponse]:
    """Run one refresh cycle now.

    Returns immediately with ``skipped`` set if a cycle is already running.
    """
    orchestrator.require_user()

    result = orchestrator.refresh_all()
    if result.skipped:
        return APIResponse(data=RefreshResponse(skipped=True, error=result.error))

    return APIResponse(
        data=RefreshResponse(
            skipped=False,
            authored_ok=result.authored.succeeded if result.authored else None,
            reviews_ok=result.reviews.succeeded if result.reviews else None,
            notifications=len(result.notifications),
            error=result.error,
        )
    )
