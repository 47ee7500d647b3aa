"""Fixtures for API integration tests."""

from collections.abc import Generator
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from prwatch.api.app import create_app
from prwatch.github import SearchKind, SearchResult
from prwatch.orchestrator import FetchOrchestrator
from prwatch.settings_store import SettingsStore


@pytest.fixture
def search_results() -> dict[SearchKind, SearchResult]:
    """Per-kind results returned by the mock service; tests replace entries."""
    return {SearchKind.AUTHORED: SearchResult(), SearchKind.REVIEW_REQUESTED: SearchResult()}


@pytest.fixture
def mock_service(search_results: dict[SearchKind, SearchResult]) -> MagicMock:
    """Create a mock GitHubService for user octocat."""
    service = MagicMock()
    service.current_user.return_value = "octocat"

    def search(kind: SearchKind, _username: str) -> SearchResult:
        return search_results[kind]

    service.search.side_effect = search
    return service


@pytest.fixture
def settings_store() -> SettingsStore:
    """In-memory settings store; closed by the app on shutdown."""
    return SettingsStore(":memory:")


@pytest.fixture
def orchestrator(mock_service: MagicMock, settings_store: SettingsStore) -> FetchOrchestrator:
    return FetchOrchestrator(service=mock_service, settings_store=settings_store)


@pytest.fixture
def client(orchestrator: FetchOrchestrator) -> Generator[TestClient, None, None]:
    """Test client running the app lifespan without background polling."""
    app = create_app(orchestrator=orchestrator, start_polling=False)
    with TestClient(app) as c:
        yield c
