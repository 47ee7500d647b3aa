"""GitHub - Paginated PR searches over the GraphQL API."""

from prwatch.github.exceptions import (
    GitHubError,
    LaunchError,
    MalformedResponseError,
    NotAuthenticatedError,
    RecordDecodeError,
    TransportTimeoutError,
    TransportUnavailableError,
    UpstreamError,
)
from prwatch.github.models import (
    MergeableState,
    PageInfo,
    PRState,
    PullRequest,
    ReviewDecision,
    SearchKind,
    SearchPage,
    SearchResult,
)
from prwatch.github.pager import QueryPager
from prwatch.github.query import build_search_filter, escape_search_term
from prwatch.github.service import GitHubService
from prwatch.github.transport import (
    GhCliTransport,
    HttpTransport,
    Transport,
    get_github_token,
)

__all__ = [
    "GhCliTransport",
    "GitHubError",
    "GitHubService",
    "HttpTransport",
    "LaunchError",
    "MalformedResponseError",
    "MergeableState",
    "NotAuthenticatedError",
    "PRState",
    "PageInfo",
    "PullRequest",
    "QueryPager",
    "RecordDecodeError",
    "ReviewDecision",
    "SearchKind",
    "SearchPage",
    "SearchResult",
    "Transport",
    "TransportTimeoutError",
    "TransportUnavailableError",
    "UpstreamError",
    "build_search_filter",
    "escape_search_term",
    "get_github_token",
]
