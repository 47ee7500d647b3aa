"""GitHubService - PR searches for one user over a query transport."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from prwatch.github.decode import decode_viewer_login
from prwatch.github.exceptions import GitHubError
from prwatch.github.models import SearchKind
from prwatch.github.pager import DEFAULT_MAX_PAGES, DEFAULT_PAGE_SIZE, QueryPager
from prwatch.github.query import VIEWER_QUERY, build_search_filter

if TYPE_CHECKING:
    from prwatch.github.models import SearchResult
    from prwatch.github.transport import Transport

logger = logging.getLogger("prwatch.github")


class GitHubService:
    """Fetches the authenticated user's authored and review-requested PRs."""

    def __init__(
        self,
        transport: Transport,
        page_size: int = DEFAULT_PAGE_SIZE,
        max_pages: int = DEFAULT_MAX_PAGES,
    ) -> None:
        """Initialize the service.

        Args:
            transport: Query transport (gh CLI or HTTP).
            page_size: Records per search page.
            max_pages: Page cap per search.
        """
        self.transport = transport
        self.pager = QueryPager(transport, page_size=page_size, max_pages=max_pages)

    def close(self) -> None:
        """Close the underlying transport."""
        self.transport.close()

    def current_user(self) -> str | None:
        """Return the authenticated user's login, or None if it cannot be resolved."""
        try:
            login = decode_viewer_login(self.transport.execute(VIEWER_QUERY))
        except GitHubError as e:
            logger.warning("Could not resolve GitHub user: %s", e)
            return None
        if login is None:
            logger.warning("GitHub viewer has no login")
            return None
        logger.info("Resolved GitHub user: %s", login)
        return login

    def search(self, kind: SearchKind, username: str) -> SearchResult:
        """Run one paginated PR search."""
        search = build_search_filter(kind, username)
        result = self.pager.fetch(search, viewer=username)
        logger.info(
            "Search '%s': %d PRs in %d pages%s",
            search,
            len(result.pull_requests),
            result.pages_fetched,
            " (capped)" if result.cap_reached else "",
        )
        return result

    def fetch_authored(self, username: str) -> SearchResult:
        """Fetch open PRs authored by ``username``."""
        return self.search(SearchKind.AUTHORED, username)

    def fetch_review_requested(self, username: str) -> SearchResult:
        """Fetch open PRs with a pending review request for ``username``."""
        return self.search(SearchKind.REVIEW_REQUESTED, username)
