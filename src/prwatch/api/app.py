"""FastAPI application setup."""

from __future__ import annotations

import logging
import threading
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from prwatch.api.dependencies import (
    close_event_manager,
    close_orchestrator,
    init_event_manager,
    init_orchestrator,
)
from prwatch.api.models import APIResponse
from prwatch.api.routes import control, events, pulls, settings
from prwatch.config import AppConfig
from prwatch.github import GitHubError
from prwatch.orchestrator import FetchOrchestrator, UserNotResolvedError
from prwatch.settings_store import SettingsError

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

logger = logging.getLogger("prwatch.api")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    # Startup
    event_manager = init_event_manager()

    orchestrator: FetchOrchestrator | None = app.state.orchestrator
    if orchestrator is None:
        config = app.state.config or AppConfig.from_env()
        orchestrator = config.make_orchestrator(notifier=event_manager)
    orchestrator.add_refresh_listener(event_manager.emit_refresh_completed)
    init_orchestrator(orchestrator)

    if app.state.start_polling:
        # First cycle runs right away; the scheduler then sleeps before each fire.
        threading.Thread(
            target=orchestrator.refresh_all, name="prwatch-initial-refresh", daemon=True
        ).start()
        orchestrator.start_polling()

    yield
    # Shutdown
    close_orchestrator()
    close_event_manager()


def create_app(
    config: AppConfig | None = None,
    orchestrator: FetchOrchestrator | None = None,
    start_polling: bool = True,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        config: Process configuration. Read from the environment at startup if None.
        orchestrator: Pre-built orchestrator; built from ``config`` if None.
        start_polling: Refresh immediately and poll on the saved interval.
    """
    app = FastAPI(
        title="prwatch API",
        description="REST API for prwatch - GitHub pull request CI and review watcher",
        version="0.1.0",
        lifespan=lifespan,
    )

    # Store config for lifespan manager
    app.state.config = config
    app.state.orchestrator = orchestrator
    app.state.start_polling = start_polling

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Exception handlers
    @app.exception_handler(SettingsError)
    async def settings_error_handler(_request: Request, exc: SettingsError) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content=APIResponse[None](data=None, error=str(exc)).model_dump(),
        )

    @app.exception_handler(UserNotResolvedError)
    async def user_not_resolved_handler(
        _request: Request, exc: UserNotResolvedError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content=APIResponse[None](data=None, error=str(exc)).model_dump(),
        )

    @app.exception_handler(GitHubError)
    async def github_error_handler(_request: Request, exc: GitHubError) -> JSONResponse:
        logger.error("GitHub error: %s", exc)
        return JSONResponse(
            status_code=status.HTTP_502_BAD_GATEWAY,
            content=APIResponse[None](data=None, error=str(exc)).model_dump(),
        )

    # Include routers
    app.include_router(pulls.router, prefix="/api/v1")
    app.include_router(control.router, prefix="/api/v1")
    app.include_router(settings.router, prefix="/api/v1")
    app.include_router(events.router, prefix="/api/v1")

    return app
