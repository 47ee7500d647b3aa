"""Integration tests for settings routes."""

import pytest
from fastapi.testclient import TestClient

from prwatch.orchestrator import FetchOrchestrator
from prwatch.settings_store import SettingsStore


@pytest.mark.integration
class TestGetSettings:
    """Tests for GET /api/v1/settings."""

    def test_defaults(self, client: TestClient) -> None:
        response = client.get("/api/v1/settings")

        assert response.status_code == 200
        assert response.json()["data"] == {
            "refresh_interval": 60,
            "hide_drafts": True,
            "required_check_names": [],
            "ignored_check_names": [],
            "collapsed_repos": [],
            "collapsed_readiness_sections": ["not_ready"],
        }


@pytest.mark.integration
class TestUpdateSettings:
    """Tests for PUT /api/v1/settings."""

    def test_partial_update(
        self, client: TestClient, settings_store: SettingsStore
    ) -> None:
        client.put("/api/v1/settings", json={"required_check_names": ["lint"]})
        response = client.put("/api/v1/settings", json={"ignored_check_names": ["flaky"]})

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["required_check_names"] == ["lint"]
        assert data["ignored_check_names"] == ["flaky"]
        assert data["hide_drafts"] is True
        assert settings_store.load_filter_settings().required_check_names == ["lint"]

    def test_interval_update(
        self, client: TestClient, orchestrator: FetchOrchestrator, settings_store: SettingsStore
    ) -> None:
        response = client.put("/api/v1/settings", json={"refresh_interval": 300})

        assert response.json()["data"]["refresh_interval"] == 300
        assert orchestrator.refresh_interval == 300
        assert settings_store.load_refresh_interval() == 300
        assert orchestrator.scheduler.is_running is False

    def test_interval_update_restarts_polling(
        self, client: TestClient, orchestrator: FetchOrchestrator
    ) -> None:
        orchestrator.start_polling()

        client.put("/api/v1/settings", json={"refresh_interval": 600})

        assert orchestrator.scheduler.is_running is True
        assert orchestrator.scheduler.interval == 600

    def test_overlap_rejected(self, client: TestClient, settings_store: SettingsStore) -> None:
        client.put("/api/v1/settings", json={"required_check_names": ["lint"]})

        response = client.put("/api/v1/settings", json={"ignored_check_names": ["lint"]})

        assert response.status_code == 422
        body = response.json()
        assert body["data"] is None
        assert "lint" in body["error"]
        assert settings_store.load_filter_settings().ignored_check_names == []

    @pytest.mark.parametrize("interval", [0, -10])
    def test_invalid_interval(self, client: TestClient, interval: int) -> None:
        response = client.put("/api/v1/settings", json={"refresh_interval": interval})

        assert response.status_code == 422
        assert client.get("/api/v1/settings").json()["data"]["refresh_interval"] == 60

    def test_collapsed_state(self, client: TestClient) -> None:
        response = client.put(
            "/api/v1/settings",
            json={
                "collapsed_repos": ["octo/zeta", "octo/alpha"],
                "collapsed_readiness_sections": [],
            },
        )

        data = response.json()["data"]
        assert data["collapsed_repos"] == ["octo/alpha", "octo/zeta"]
        assert data["collapsed_readiness_sections"] == []

    def test_unknown_readiness_section(self, client: TestClient) -> None:
        response = client.put(
            "/api/v1/settings", json={"collapsed_readiness_sections": ["maybe"]}
        )
        assert response.status_code == 422
