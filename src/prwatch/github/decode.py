"""Typed decoding of GitHub GraphQL responses.

Every response shape is decoded here, once, into the models used by the rest
of the package. Envelope problems raise; a bad PR record raises
:class:`RecordDecodeError` so the caller can drop just that record.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from prwatch.checks import (
    CheckContext,
    CheckRunNode,
    RollupData,
    StatusContextNode,
    summarize_checks,
)
from prwatch.github.exceptions import MalformedResponseError, RecordDecodeError, UpstreamError
from prwatch.github.models import (
    MergeableState,
    PageInfo,
    PRState,
    PullRequest,
    ReviewDecision,
    SearchPage,
)


def decode_envelope(payload: Any) -> dict[str, Any]:
    """Validate a GraphQL envelope and return its ``data`` object.

    Args:
        payload: Parsed JSON from the transport.

    Returns:
        The ``data`` mapping.

    Raises:
        UpstreamError: If the envelope carries a non-empty ``errors`` list.
        MalformedResponseError: If the payload is not an envelope.
    """
    if not isinstance(payload, dict):
        raise MalformedResponseError("Response is not a JSON object")

    errors = payload.get("errors")
    if errors:
        if not isinstance(errors, list):
            raise MalformedResponseError("'errors' is not a list")
        messages = [
            str(e.get("message", "")) if isinstance(e, dict) else str(e) for e in errors
        ]
        raise UpstreamError([m for m in messages if m])

    data = payload.get("data")
    if not isinstance(data, dict):
        raise MalformedResponseError("Response has no 'data' object")
    return data


def decode_viewer_login(payload: Any) -> str | None:
    """Extract ``viewer.login`` from a viewer query response."""
    data = decode_envelope(payload)
    viewer = data.get("viewer")
    if not isinstance(viewer, dict):
        raise MalformedResponseError("Response has no 'viewer' object")
    login = viewer.get("login")
    if not isinstance(login, str) or not login.strip():
        return None
    return login.strip()


def decode_search_page(payload: Any) -> SearchPage:
    """Decode one page of a search query.

    Raises:
        UpstreamError: If the envelope carries errors.
        MalformedResponseError: If ``search.nodes`` is missing.
    """
    data = decode_envelope(payload)
    search = data.get("search")
    if not isinstance(search, dict):
        raise MalformedResponseError("Response has no 'search' object")

    nodes = search.get("nodes")
    if not isinstance(nodes, list):
        raise MalformedResponseError("Search result has no 'nodes' list")

    raw_page_info = search.get("pageInfo")
    if isinstance(raw_page_info, dict):
        cursor = raw_page_info.get("endCursor")
        page_info = PageInfo(
            has_next_page=bool(raw_page_info.get("hasNextPage", False)),
            end_cursor=cursor if isinstance(cursor, str) else None,
        )
    else:
        page_info = PageInfo()

    return SearchPage(
        nodes=[n if isinstance(n, dict) else {} for n in nodes],
        page_info=page_info,
    )


def _opt_str(raw: dict[str, Any], key: str) -> str | None:
    value = raw.get(key)
    return value if isinstance(value, str) else None


def decode_check_context(raw: dict[str, Any]) -> CheckContext:
    """Decode one rollup context into its tagged variant.

    ``__typename`` decides when present; otherwise a ``context`` field marks a
    commit status and anything else is treated as a check run.
    """
    typename = raw.get("__typename")
    is_status = typename == "StatusContext" or (
        typename is None and isinstance(raw.get("context"), str)
    )
    if is_status:
        return StatusContextNode(
            context=_opt_str(raw, "context") or "",
            state=_opt_str(raw, "state") or "",
            target_url=_opt_str(raw, "targetUrl"),
        )
    return CheckRunNode(
        name=_opt_str(raw, "name"),
        status=_opt_str(raw, "status") or "",
        conclusion=_opt_str(raw, "conclusion") or "",
        details_url=_opt_str(raw, "detailsUrl"),
    )


def decode_rollup(node: dict[str, Any]) -> RollupData | None:
    """Extract the latest commit's status-check rollup, if any."""
    commits = node.get("commits")
    if not isinstance(commits, dict):
        return None
    commit_nodes = commits.get("nodes")
    if not isinstance(commit_nodes, list) or not commit_nodes:
        return None
    first = commit_nodes[0]
    commit = first.get("commit") if isinstance(first, dict) else None
    if not isinstance(commit, dict):
        return None
    rollup = commit.get("statusCheckRollup")
    if not isinstance(rollup, dict):
        return None
    contexts = rollup.get("contexts")
    if not isinstance(contexts, dict):
        return None

    total = contexts.get("totalCount")
    raw_nodes = contexts.get("nodes")
    if not isinstance(total, int) or not isinstance(raw_nodes, list):
        return None

    return RollupData(
        state=_opt_str(rollup, "state"),
        total_count=total,
        contexts=[decode_check_context(c) for c in raw_nodes if isinstance(c, dict)],
    )


def parse_review_decision(raw: str | None) -> ReviewDecision:
    match raw or "":
        case "APPROVED":
            return ReviewDecision.APPROVED
        case "CHANGES_REQUESTED":
            return ReviewDecision.CHANGES_REQUESTED
        case "REVIEW_REQUIRED":
            return ReviewDecision.REVIEW_REQUIRED
        case _:
            return ReviewDecision.NONE


def parse_mergeable_state(raw: str | None) -> MergeableState:
    match raw or "":
        case "MERGEABLE":
            return MergeableState.MERGEABLE
        case "CONFLICTING":
            return MergeableState.CONFLICTING
        case _:
            return MergeableState.UNKNOWN


def parse_pr_state(raw: str | None, is_draft: bool) -> PRState:
    match raw or "OPEN":
        case "MERGED":
            return PRState.MERGED
        case "CLOSED":
            return PRState.CLOSED
        case _:
            return PRState.DRAFT if is_draft else PRState.OPEN


def _viewer_has_approved(node: dict[str, Any], viewer: str | None) -> bool:
    if not viewer:
        return False
    latest = node.get("latestReviews")
    reviews = latest.get("nodes") if isinstance(latest, dict) else None
    if not isinstance(reviews, list):
        return False
    for review in reviews:
        if not isinstance(review, dict):
            continue
        author = review.get("author")
        login = author.get("login") if isinstance(author, dict) else None
        if (
            isinstance(login, str)
            and login.casefold() == viewer.casefold()
            and review.get("state") == "APPROVED"
        ):
            return True
    return False


def convert_node(
    node: dict[str, Any],
    viewer: str | None = None,
    fetched_at: datetime | None = None,
) -> PullRequest:
    """Convert one search node into a PullRequest.

    Args:
        node: Raw PR node from a search page.
        viewer: Authenticated login, used for ``viewer_has_approved``.
        fetched_at: Timestamp stamped onto the record. Defaults to now.

    Raises:
        RecordDecodeError: If number, title, url or repository is missing or invalid.
    """
    number = node.get("number")
    if not isinstance(number, int) or isinstance(number, bool):
        raise RecordDecodeError("number")
    title = node.get("title")
    if not isinstance(title, str):
        raise RecordDecodeError("title")
    url = node.get("url")
    if not isinstance(url, str) or not url:
        raise RecordDecodeError("url")

    repository = node.get("repository")
    name_with_owner = repository.get("nameWithOwner") if isinstance(repository, dict) else None
    if not isinstance(name_with_owner, str):
        raise RecordDecodeError("repository")
    parts = name_with_owner.split("/")
    if len(parts) != 2 or not all(parts):
        raise RecordDecodeError("repository", f"malformed: {name_with_owner!r}")
    owner, repo = parts

    author = node.get("author")
    login = author.get("login") if isinstance(author, dict) else None
    queue_entry = node.get("mergeQueueEntry")
    reviews = node.get("reviews")
    approvals = reviews.get("totalCount") if isinstance(reviews, dict) else None
    queue_position = queue_entry.get("position") if isinstance(queue_entry, dict) else None

    ci = summarize_checks(decode_rollup(node), label=f"{name_with_owner}#{number}")

    return PullRequest(
        owner=owner,
        repo=repo,
        number=number,
        title=title,
        author=login if isinstance(login, str) else "unknown",
        url=url,
        state=parse_pr_state(_opt_str(node, "state"), bool(node.get("isDraft", False))),
        ci_status=ci.status,
        is_in_merge_queue=isinstance(queue_entry, dict),
        queue_position=queue_position if isinstance(queue_position, int) else None,
        mergeable=parse_mergeable_state(_opt_str(node, "mergeable")),
        review_decision=parse_review_decision(_opt_str(node, "reviewDecision")),
        approval_count=approvals if isinstance(approvals, int) else 0,
        checks_total=ci.total,
        checks_passed=ci.passed,
        checks_failed=ci.failed,
        check_results=list(ci.check_results),
        failed_checks=list(ci.failed_checks),
        head_sha=(_opt_str(node, "headRefOid") or "")[:7],
        head_ref_name=_opt_str(node, "headRefName") or "",
        viewer_has_approved=_viewer_has_approved(node, viewer),
        last_fetched=fetched_at or datetime.now(UTC),
    )
