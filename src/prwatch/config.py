"""Runtime configuration read from the environment."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import TYPE_CHECKING

from prwatch.github import GhCliTransport, GitHubService, HttpTransport, get_github_token
from prwatch.github.pager import DEFAULT_MAX_PAGES, DEFAULT_PAGE_SIZE
from prwatch.github.transport import DEFAULT_TIMEOUT
from prwatch.orchestrator import FetchOrchestrator
from prwatch.settings_store import SettingsStore

if TYPE_CHECKING:
    from collections.abc import Callable

    from prwatch.github import Transport
    from prwatch.notifications import NotificationService

logger = logging.getLogger("prwatch.config")

TRANSPORT_GH = "gh"
TRANSPORT_HTTP = "http"


class ConfigError(ValueError):
    """An environment setting has an unusable value."""


def _env_number(name: str, default: float, cast: Callable[[str], float] = int) -> float:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = cast(raw)
    except ValueError:
        raise ConfigError(f"{name} must be a number, got {raw!r}") from None
    if value <= 0:
        raise ConfigError(f"{name} must be positive, got {raw!r}")
    return value


@dataclass
class AppConfig:
    """Process-level settings. User preferences live in SettingsStore instead."""

    db_path: str = "prwatch.db"
    transport: str = TRANSPORT_GH
    gh_path: str | None = None
    github_token: str | None = None
    timeout: float = DEFAULT_TIMEOUT
    page_size: int = DEFAULT_PAGE_SIZE
    max_pages: int = DEFAULT_MAX_PAGES

    @classmethod
    def from_env(cls) -> AppConfig:
        """Build config from PRWATCH_* variables and GITHUB_TOKEN.

        Raises:
            ConfigError: If a variable has an invalid value.
        """
        transport = os.environ.get("PRWATCH_TRANSPORT", TRANSPORT_GH).strip().lower()
        if transport not in (TRANSPORT_GH, TRANSPORT_HTTP):
            raise ConfigError(f"PRWATCH_TRANSPORT must be 'gh' or 'http', got {transport!r}")

        return cls(
            db_path=os.environ.get("PRWATCH_DB_PATH", "prwatch.db"),
            transport=transport,
            gh_path=os.environ.get("PRWATCH_GH_PATH") or None,
            github_token=os.environ.get("GITHUB_TOKEN") or None,
            timeout=_env_number("PRWATCH_TIMEOUT", DEFAULT_TIMEOUT, float),
            page_size=int(_env_number("PRWATCH_PAGE_SIZE", DEFAULT_PAGE_SIZE)),
            max_pages=int(_env_number("PRWATCH_MAX_PAGES", DEFAULT_MAX_PAGES)),
        )

    def make_transport(self) -> Transport:
        """Create the configured query transport."""
        if self.transport == TRANSPORT_HTTP:
            token = self.github_token or get_github_token()
            if not token:
                logger.warning("No GitHub token available for the HTTP transport")
            return HttpTransport(token=token, timeout=self.timeout)
        return GhCliTransport(gh_path=self.gh_path, timeout=self.timeout)

    def make_service(self) -> GitHubService:
        return GitHubService(
            self.make_transport(), page_size=self.page_size, max_pages=self.max_pages
        )

    def make_orchestrator(self, notifier: NotificationService | None = None) -> FetchOrchestrator:
        """Wire a FetchOrchestrator with this config's service and settings database."""
        return FetchOrchestrator(
            service=self.make_service(),
            settings_store=SettingsStore(self.db_path),
            notifier=notifier,
        )
