"""StatusChangeDetector - Diff two cycles of authored PRs into notifications."""

from __future__ import annotations

from typing import TYPE_CHECKING

from prwatch.checks import CIStatus
from prwatch.notifications.models import ChangeSnapshot, StatusNotification

if TYPE_CHECKING:
    from prwatch.github.models import PullRequest

CI_FAILED_TITLE = "CI Failed"
CHECKS_PASSED_TITLE = "All Checks Passed"
NO_LONGER_OPEN_TITLE = "PR No Longer Open"


def ci_status_body(pr: PullRequest) -> str:
    return f"{pr.repo_full_name} {pr.display_number}: {pr.title}"


def closed_body(identity: str) -> str:
    return f"{identity} was merged or closed"


class StatusChangeDetector:
    """Compares the previous snapshot with the current PR list.

    Notifications are generated for:
    - CI pending -> failure ("CI Failed")
    - CI pending -> success ("All Checks Passed")
    - PR disappeared from the results ("PR No Longer Open")

    PRs seen for the first time and transitions that do not start from
    pending produce nothing. Nothing at all is produced on the first load.
    """

    def detect_changes(
        self, snapshot: ChangeSnapshot, new_prs: list[PullRequest]
    ) -> list[StatusNotification]:
        """Return notifications for transitions between ``snapshot`` and ``new_prs``.

        Args:
            snapshot: State retained from the previous cycle.
            new_prs: This cycle's authored PRs.

        Returns:
            Notifications in PR order, followed by disappeared PRs sorted by identity.
        """
        if snapshot.is_first_load:
            return []

        notifications: list[StatusNotification] = []
        for pr in new_prs:
            old_status = snapshot.previous_ci.get(pr.identity)
            if old_status != CIStatus.PENDING:
                continue
            if pr.ci_status == CIStatus.FAILURE:
                notifications.append(
                    StatusNotification(CI_FAILED_TITLE, ci_status_body(pr), pr.url)
                )
            elif pr.ci_status == CIStatus.SUCCESS:
                notifications.append(
                    StatusNotification(CHECKS_PASSED_TITLE, ci_status_body(pr), pr.url)
                )

        current_ids = {pr.identity for pr in new_prs}
        for identity in sorted(snapshot.previous_ids - current_ids):
            notifications.append(StatusNotification(NO_LONGER_OPEN_TITLE, closed_body(identity)))

        return notifications

    def advance(
        self, snapshot: ChangeSnapshot, new_prs: list[PullRequest]
    ) -> tuple[list[StatusNotification], ChangeSnapshot]:
        """Diff against ``snapshot`` and return the notifications plus the next snapshot."""
        return self.detect_changes(snapshot, new_prs), ChangeSnapshot.from_pull_requests(new_prs)
