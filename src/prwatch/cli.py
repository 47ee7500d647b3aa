"""CLI entry point for prwatch.

Commands:
- serve: run the HTTP API with background polling
- check: run one refresh cycle and print the results
- settings: show or change persisted preferences
"""

from __future__ import annotations

import json
import sys
from typing import TYPE_CHECKING

import click

from prwatch.config import AppConfig, ConfigError
from prwatch.logging import setup_logging
from prwatch.orchestrator import FetchOrchestrator, UserNotResolvedError
from prwatch.review import (
    effective_check_counts,
    effective_ci_status,
    group_by_repo,
    refresh_interval_label,
)
from prwatch.settings_store import FilterSettings, SettingsError, SettingsStore

if TYPE_CHECKING:
    from prwatch.github import PullRequest

CI_SYMBOLS = {
    "success": "✓",
    "failure": "✗",
    "pending": "…",
    "unknown": "?",
}


def _load_config() -> AppConfig:
    try:
        return AppConfig.from_env()
    except ConfigError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@click.group()
@click.version_option(package_name="prwatch")
def main() -> None:
    """prwatch - watch GitHub pull requests for CI and review status."""
    pass


@main.command()
@click.option("--host", default="127.0.0.1", show_default=True, help="Address to bind")
@click.option("--port", default=8000, show_default=True, type=int, help="Port to bind")
@click.option("--no-poll", is_flag=True, help="Do not refresh automatically")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
def serve(host: str, port: int, no_poll: bool, verbose: bool) -> None:
    """Run the HTTP API and poll GitHub in the background."""
    import uvicorn  # noqa: PLC0415

    from prwatch.api.app import create_app  # noqa: PLC0415

    setup_logging(level="DEBUG" if verbose else None)
    config = _load_config()
    app = create_app(config=config, start_polling=not no_poll)
    uvicorn.run(app, host=host, port=port, log_level="debug" if verbose else "info")


def _format_pr(pr: PullRequest, orchestrator: FetchOrchestrator, show_ready: bool) -> str:
    ignored = orchestrator.filter_settings.ignored_check_names
    status = effective_ci_status(pr, ignored)
    total, passed, _failed = effective_check_counts(pr, ignored)
    line = f"  {CI_SYMBOLS[status.value]} {pr.display_number:>6}  {pr.title}"
    if total:
        line += f"  [{passed}/{total}]"
    if pr.state.value != "open":
        line += f"  ({pr.state.value})"
    if pr.is_in_merge_queue:
        line += "  (queued)"
    if show_ready and orchestrator.is_ready(pr):
        line += "  ready"
    return line


def _print_groups(
    prs: list[PullRequest], orchestrator: FetchOrchestrator, is_reviews: bool
) -> None:
    for repo, group in group_by_repo(prs, is_reviews=is_reviews):
        click.echo(repo)
        for pr in group:
            click.echo(_format_pr(pr, orchestrator, show_ready=is_reviews))


@main.command()
@click.option("--json", "as_json", is_flag=True, help="Print results as JSON")
@click.option("-v", "--verbose", is_flag=True, help="Log to the console")
def check(as_json: bool, verbose: bool) -> None:
    """Run one refresh cycle and print authored and review-requested PRs."""
    setup_logging(level="DEBUG" if verbose else None, console=verbose)
    config = _load_config()
    orchestrator = config.make_orchestrator()

    try:
        try:
            username = orchestrator.require_user()
        except UserNotResolvedError as e:
            click.echo(f"Error: {e}", err=True)
            sys.exit(1)

        result = orchestrator.refresh_all()
        ready, not_ready = orchestrator.partition_reviews()

        if as_json:
            payload = {
                "username": username,
                "error": result.error,
                "pulls": [pr.to_dict() for pr in orchestrator.pull_requests],
                "reviews": {
                    "ready": [pr.to_dict() for pr in ready],
                    "not_ready": [pr.to_dict() for pr in not_ready],
                },
            }
            click.echo(json.dumps(payload, indent=2))
        else:
            click.echo(f"My PRs ({username}): {len(orchestrator.pull_requests)}")
            _print_groups(orchestrator.pull_requests, orchestrator, is_reviews=False)
            if orchestrator.authored_cap_reached:
                click.echo("  (result limit reached, list is incomplete)")

            click.echo(f"\nReady for review: {len(ready)}")
            _print_groups(ready, orchestrator, is_reviews=True)
            click.echo(f"\nNot ready: {len(not_ready)}")
            _print_groups(not_ready, orchestrator, is_reviews=True)

        if result.error:
            click.echo(f"\nError: {result.error}", err=True)
            sys.exit(1)
    finally:
        orchestrator.close()


@main.group("settings")
def settings_group() -> None:
    """Show or change persisted preferences."""
    pass


def _open_store() -> SettingsStore:
    return SettingsStore(_load_config().db_path)


def _save_filters(store: SettingsStore, settings: FilterSettings) -> None:
    try:
        store.save_filter_settings(settings)
    except SettingsError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@settings_group.command("show")
def settings_show() -> None:
    """Print current settings."""
    store = _open_store()
    try:
        interval = store.load_refresh_interval()
        filters = store.load_filter_settings()
    finally:
        store.close()

    click.echo(f"Refresh interval: {refresh_interval_label(interval)}")
    click.echo(f"Hide drafts: {'yes' if filters.hide_drafts else 'no'}")
    click.echo(f"Required checks: {', '.join(filters.required_check_names) or '(none)'}")
    click.echo(f"Ignored checks: {', '.join(filters.ignored_check_names) or '(none)'}")


@settings_group.command("set-interval")
@click.argument("seconds", type=int)
def settings_set_interval(seconds: int) -> None:
    """Set the polling interval in seconds."""
    store = _open_store()
    try:
        store.save_refresh_interval(seconds)
    except SettingsError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    finally:
        store.close()
    click.echo(f"Refresh interval set to {refresh_interval_label(seconds)}")


@settings_group.command("require")
@click.argument("names", nargs=-1, required=True)
def settings_require(names: tuple[str, ...]) -> None:
    """Add check names that must pass for a PR to be ready."""
    store = _open_store()
    try:
        filters = store.load_filter_settings()
        for name in names:
            if name not in filters.required_check_names:
                filters.required_check_names.append(name)
        _save_filters(store, filters)
    finally:
        store.close()
    click.echo(f"Required checks: {', '.join(filters.required_check_names)}")


@settings_group.command("ignore")
@click.argument("names", nargs=-1, required=True)
def settings_ignore(names: tuple[str, ...]) -> None:
    """Add check names to exclude from CI status and readiness."""
    store = _open_store()
    try:
        filters = store.load_filter_settings()
        for name in names:
            if name not in filters.ignored_check_names:
                filters.ignored_check_names.append(name)
        _save_filters(store, filters)
    finally:
        store.close()
    click.echo(f"Ignored checks: {', '.join(filters.ignored_check_names)}")


@settings_group.command("hide-drafts")
@click.argument("value", type=bool)
def settings_hide_drafts(value: bool) -> None:
    """Hide (true) or show (false) drafts in the review list."""
    store = _open_store()
    try:
        filters = store.load_filter_settings()
        filters.hide_drafts = value
        _save_filters(store, filters)
    finally:
        store.close()
    click.echo(f"Hide drafts: {'yes' if value else 'no'}")


@settings_group.command("clear")
@click.option("--required", "clear_required", is_flag=True, help="Clear only required checks")
@click.option("--ignored", "clear_ignored", is_flag=True, help="Clear only ignored checks")
def settings_clear(clear_required: bool, clear_ignored: bool) -> None:
    """Clear required and/or ignored check names (both by default)."""
    if not clear_required and not clear_ignored:
        clear_required = clear_ignored = True

    store = _open_store()
    try:
        filters = store.load_filter_settings()
        if clear_required:
            filters.required_check_names = []
        if clear_ignored:
            filters.ignored_check_names = []
        _save_filters(store, filters)
    finally:
        store.close()
    click.echo("Check filters cleared")


if __name__ == "__main__":
    main()
