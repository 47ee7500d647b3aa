"""Unit tests for GitHubService."""

from collections.abc import Callable
from typing import Any
from unittest.mock import MagicMock

import pytest

from prwatch.github import GitHubService, SearchKind, TransportUnavailableError
from prwatch.github.query import VIEWER_QUERY


@pytest.fixture
def mock_transport() -> MagicMock:
    """Create a mock query transport."""
    return MagicMock()


@pytest.fixture
def service(mock_transport: MagicMock) -> GitHubService:
    """Create a service with a small page size."""
    return GitHubService(mock_transport, page_size=2, max_pages=3)


@pytest.mark.unit
class TestCurrentUser:
    """Tests for resolving the authenticated user."""

    def test_returns_login(self, service: GitHubService, mock_transport: MagicMock) -> None:
        mock_transport.execute.return_value = {"data": {"viewer": {"login": "octocat"}}}

        assert service.current_user() == "octocat"
        mock_transport.execute.assert_called_once_with(VIEWER_QUERY)

    def test_transport_failure_returns_none(
        self, service: GitHubService, mock_transport: MagicMock
    ) -> None:
        mock_transport.execute.side_effect = TransportUnavailableError("gh missing")
        assert service.current_user() is None

    def test_missing_login_returns_none(
        self, service: GitHubService, mock_transport: MagicMock
    ) -> None:
        mock_transport.execute.return_value = {"data": {"viewer": {}}}
        assert service.current_user() is None


@pytest.mark.unit
class TestSearch:
    """Tests for the authored and review-requested searches."""

    def test_authored_filter(
        self,
        service: GitHubService,
        mock_transport: MagicMock,
        make_node: Callable[..., dict[str, Any]],
        make_search_payload: Callable[..., dict[str, Any]],
    ) -> None:
        mock_transport.execute.return_value = make_search_payload([make_node(1), make_node(2)])

        result = service.fetch_authored("octocat")

        assert [pr.number for pr in result.pull_requests] == [1, 2]
        variables = mock_transport.execute.call_args.args[1]
        assert variables["q"] == "author:octocat type:pr state:open"
        assert variables["first"] == 2

    def test_review_requested_filter(
        self,
        service: GitHubService,
        mock_transport: MagicMock,
        make_search_payload: Callable[..., dict[str, Any]],
    ) -> None:
        mock_transport.execute.return_value = make_search_payload([])

        result = service.search(SearchKind.REVIEW_REQUESTED, "octocat")

        assert result.pull_requests == []
        variables = mock_transport.execute.call_args.args[1]
        assert variables["q"] == "review-requested:octocat type:pr state:open"

    def test_close_closes_transport(
        self, service: GitHubService, mock_transport: MagicMock
    ) -> None:
        service.close()
        mock_transport.close.assert_called_once()
