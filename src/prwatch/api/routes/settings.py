"""Settings endpoints."""

from fastapi import APIRouter

from prwatch.api.dependencies import OrchestratorDep
from prwatch.api.models import APIResponse, SettingsResponse, SettingsUpdate
from prwatch.orchestrator import FetchOrchestrator
from prwatch.settings_store import FilterSettings

router = APIRouter(prefix="/settings", tags=["settings"])


def _settings_response(orchestrator: FetchOrchestrator) -> SettingsResponse:
    settings = orchestrator.filter_settings
    store = orchestrator.settings_store
    return SettingsResponse(
        refresh_interval=orchestrator.refresh_interval,
        hide_drafts=settings.hide_drafts,
        required_check_names=list(settings.required_check_names),
        ignored_check_names=list(settings.ignored_check_names),
        collapsed_repos=sorted(store.load_collapsed_repos()),
        collapsed_readiness_sections=sorted(store.load_collapsed_readiness_sections()),
    )


@router.get("", response_model=APIResponse[SettingsResponse])
def get_settings(orchestrator: OrchestratorDep) -> APIResponse[SettingsResponse]:
    """Get current user settings."""
    return APIResponse(data=_settings_response(orchestrator))


@router.put("", response_model=APIResponse[SettingsResponse])
def update_settings(
    update: SettingsUpdate, orchestrator: OrchestratorDep
) -> APIResponse[SettingsResponse]:
    """Update user settings. Omitted fields keep their current value."""
    current = orchestrator.filter_settings
    new_settings = FilterSettings(
        hide_drafts=current.hide_drafts if update.hide_drafts is None else update.hide_drafts,
        required_check_names=(
            list(current.required_check_names)
            if update.required_check_names is None
            else update.required_check_names
        ),
        ignored_check_names=(
            list(current.ignored_check_names)
            if update.ignored_check_names is None
            else update.ignored_check_names
        ),
    )
    new_settings.validate()

    interval = update.refresh_interval
    if interval is not None and interval != orchestrator.refresh_interval:
        orchestrator.set_refresh_interval(interval)
    orchestrator.update_filter_settings(new_settings)

    store = orchestrator.settings_store
    if update.collapsed_repos is not None:
        store.save_collapsed_repos(set(update.collapsed_repos))
    if update.collapsed_readiness_sections is not None:
        store.save_collapsed_readiness_sections(set(update.collapsed_readiness_sections))

    return APIResponse(data=_settings_response(orchestrator))
