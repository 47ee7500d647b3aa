"""Shared pytest fixtures and configuration."""

from collections.abc import Callable
from typing import Any

import pytest

from prwatch.github import PullRequest


# Register custom markers
def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers for test categorization."""
    config.addinivalue_line("markers", "unit: fast tests with no external dependencies")
    config.addinivalue_line("markers", "integration: component interaction tests")


# Shared fixtures


@pytest.fixture
def make_pr() -> Callable[..., PullRequest]:
    """Factory for PullRequest records with sensible defaults."""

    def _make(
        owner: str = "octo", repo: str = "widgets", number: int = 1, **kwargs: Any
    ) -> PullRequest:
        fields: dict[str, Any] = {
            "title": f"Change {number}",
            "author": "alice",
            "url": f"https://github.com/{owner}/{repo}/pull/{number}",
        }
        fields.update(kwargs)
        return PullRequest(owner=owner, repo=repo, number=number, **fields)

    return _make


@pytest.fixture
def make_node() -> Callable[..., dict[str, Any]]:
    """Factory for raw GraphQL search nodes as returned by the PR search."""

    def _make(
        number: int = 1,
        repo: str = "octo/widgets",
        contexts: list[dict[str, Any]] | None = None,
        total_count: int | None = None,
        rollup_state: str | None = "SUCCESS",
        **overrides: Any,
    ) -> dict[str, Any]:
        node: dict[str, Any] = {
            "number": number,
            "title": f"Change {number}",
            "url": f"https://github.com/{repo}/pull/{number}",
            "state": "OPEN",
            "isDraft": False,
            "author": {"login": "alice"},
            "repository": {"nameWithOwner": repo},
            "mergeable": "MERGEABLE",
            "reviewDecision": "REVIEW_REQUIRED",
            "reviews": {"totalCount": 0},
            "latestReviews": {"nodes": []},
            "mergeQueueEntry": None,
            "headRefOid": "abcdef0123456789",
            "headRefName": f"feature-{number}",
        }
        if contexts is not None:
            node["commits"] = {
                "nodes": [
                    {
                        "commit": {
                            "statusCheckRollup": {
                                "state": rollup_state,
                                "contexts": {
                                    "totalCount": (
                                        len(contexts) if total_count is None else total_count
                                    ),
                                    "nodes": contexts,
                                },
                            }
                        }
                    }
                ]
            }
        node.update(overrides)
        return node

    return _make


def search_payload(
    nodes: list[dict[str, Any]], has_next: bool = False, cursor: str | None = None
) -> dict[str, Any]:
    """Build a search response envelope."""
    return {
        "data": {
            "search": {
                "pageInfo": {"hasNextPage": has_next, "endCursor": cursor},
                "nodes": nodes,
            }
        }
    }


@pytest.fixture
def make_search_payload() -> Callable[..., dict[str, Any]]:
    """Factory for search response envelopes."""
    return search_payload
