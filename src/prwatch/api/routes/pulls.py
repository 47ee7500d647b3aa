"""Pull request list endpoints."""

from fastapi import APIRouter

from prwatch.api.dependencies import OrchestratorDep
from prwatch.api.models import (
    APIResponse,
    PullListResponse,
    ReviewListResponse,
    groups_to_response,
)

router = APIRouter(tags=["pulls"])


@router.get("/pulls", response_model=APIResponse[PullListResponse])
def list_pulls(orchestrator: OrchestratorDep) -> APIResponse[PullListResponse]:
    """List the user's open authored PRs, grouped by repository."""
    prs = orchestrator.pull_requests
    return APIResponse(
        data=PullListResponse(
            total=len(prs),
            cap_reached=orchestrator.authored_cap_reached,
            groups=groups_to_response(prs, orchestrator.filter_settings),
        ),
        error=orchestrator.last_error,
    )


@router.get("/reviews", response_model=APIResponse[ReviewListResponse])
def list_reviews(orchestrator: OrchestratorDep) -> APIResponse[ReviewListResponse]:
    """List PRs awaiting the user's review, split into ready and not ready."""
    settings = orchestrator.filter_settings
    ready, not_ready = orchestrator.partition_reviews()
    return APIResponse(
        data=ReviewListResponse(
            total=len(ready) + len(not_ready),
            cap_reached=orchestrator.reviews_cap_reached,
            ready=groups_to_response(ready, settings, is_reviews=True),
            not_ready=groups_to_response(not_ready, settings, is_reviews=True),
        ),
        error=orchestrator.last_error,
    )
