"""QueryPager - Cursor-driven pagination of a single PR search."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from prwatch.github.decode import convert_node, decode_search_page
from prwatch.github.exceptions import RecordDecodeError
from prwatch.github.models import SearchResult
from prwatch.github.query import SEARCH_QUERY

if TYPE_CHECKING:
    from prwatch.github.transport import Transport

logger = logging.getLogger("prwatch.github.pager")

DEFAULT_PAGE_SIZE = 100
DEFAULT_MAX_PAGES = 10


class QueryPager:
    """Runs one search query page by page until exhausted or capped.

    Hitting the page cap is not an error: the accumulated records are
    returned with ``cap_reached`` set. Records that fail to decode are dropped
    one at a time and counted; transport and envelope errors propagate.
    """

    def __init__(
        self,
        transport: Transport,
        page_size: int = DEFAULT_PAGE_SIZE,
        max_pages: int = DEFAULT_MAX_PAGES,
    ) -> None:
        """Initialize the pager.

        Args:
            transport: Transport used to execute each page request.
            page_size: Records requested per page (GitHub allows at most 100).
            max_pages: Safety cap on the number of pages per search.
        """
        if page_size < 1 or max_pages < 1:
            raise ValueError("page_size and max_pages must be positive")
        self.transport = transport
        self.page_size = page_size
        self.max_pages = max_pages

    def fetch(self, search: str, viewer: str | None = None) -> SearchResult:
        """Fetch every page for a search filter.

        Args:
            search: Search filter string, e.g. ``author:octocat type:pr state:open``.
            viewer: Authenticated login, passed through to record conversion.

        Returns:
            SearchResult with decoded PRs and pagination bookkeeping.

        Raises:
            GitHubError: Any transport, upstream or envelope failure.
        """
        result = SearchResult()
        cursor: str | None = None
        fetched_at = datetime.now(UTC)

        while True:
            if result.pages_fetched >= self.max_pages:
                result.cap_reached = True
                logger.warning(
                    "Pagination cap reached for '%s' after %d pages (%d records); "
                    "remaining results not fetched",
                    search,
                    result.pages_fetched,
                    len(result.pull_requests),
                )
                break

            payload = self.transport.execute(
                SEARCH_QUERY,
                {"q": search, "first": self.page_size, "after": cursor},
            )
            page = decode_search_page(payload)
            result.pages_fetched += 1

            for node in page.nodes:
                try:
                    result.pull_requests.append(convert_node(node, viewer, fetched_at))
                except RecordDecodeError as e:
                    result.dropped_records += 1
                    logger.debug("Dropping PR record: %s", e)

            logger.debug(
                "Page %d for '%s': %d nodes, has_next=%s",
                result.pages_fetched,
                search,
                len(page.nodes),
                page.page_info.has_next_page,
            )

            if not page.page_info.has_next_page:
                break
            if not page.page_info.end_cursor:
                logger.warning("Server reported another page for '%s' without a cursor", search)
                break
            cursor = page.page_info.end_cursor

        if result.dropped_records:
            logger.warning(
                "Dropped %d malformed PR records for '%s'", result.dropped_records, search
            )
        return result
