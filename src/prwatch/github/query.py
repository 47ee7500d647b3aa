"""GraphQL documents and search-filter construction."""

from __future__ import annotations

from prwatch.github.models import SearchKind

# Per-check listing is capped at this many contexts per PR; the server's
# totalCount tells us when it was truncated.
CHECK_CONTEXTS_LIMIT = 100

VIEWER_QUERY = """
query {
  viewer { login }
}
"""

SEARCH_QUERY = """
query($q: String!, $first: Int!, $after: String) {
  search(query: $q, type: ISSUE, first: $first, after: $after) {
    pageInfo {
      hasNextPage
      endCursor
    }
    nodes {
      ... on PullRequest {
        number
        title
        url
        author { login }
        isDraft
        state
        repository { nameWithOwner }
        reviewDecision
        mergeable
        mergeQueueEntry { position }
        reviews(states: APPROVED, first: 0) { totalCount }
        latestReviews(first: 20) {
          nodes {
            author { login }
            state
          }
        }
        headRefOid
        headRefName
        commits(last: 1) {
          nodes {
            commit {
              statusCheckRollup {
                state
                contexts(first: %d) {
                  totalCount
                  nodes {
                    __typename
                    ... on CheckRun {
                      name
                      status
                      conclusion
                      detailsUrl
                    }
                    ... on StatusContext {
                      context
                      state
                      targetUrl
                    }
                  }
                }
              }
            }
          }
        }
      }
    }
  }
}
""" % CHECK_CONTEXTS_LIMIT


def escape_search_term(value: str) -> str:
    """Escape backslashes and double quotes in a user-supplied search term."""
    return value.replace("\\", "\\\\").replace('"', '\\"')


def build_search_filter(kind: SearchKind, username: str) -> str:
    """Build the search filter for open PRs related to ``username``.

    Args:
        kind: Which relation to search for (authored or review requested).
        username: GitHub login; escaped before embedding.

    Returns:
        A search string such as ``author:octocat type:pr state:open``.
    """
    return f"{kind.value}:{escape_search_term(username)} type:pr state:open"
