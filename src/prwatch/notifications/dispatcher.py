"""Notification delivery sinks."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from collections.abc import Iterable

    from prwatch.notifications.models import StatusNotification

logger = logging.getLogger("prwatch.notifications")


class NotificationService(Protocol):
    """Interface for anything that can deliver a notification."""

    @property
    def is_available(self) -> bool:
        """Whether notifications can currently be delivered."""
        ...

    def send(self, title: str, body: str, url: str | None = None) -> None:
        """Deliver one notification."""
        ...


class LoggingNotificationService:
    """Delivers notifications to the log. Used when no other sink is configured."""

    @property
    def is_available(self) -> bool:
        return True

    def send(self, title: str, body: str, url: str | None = None) -> None:
        logger.info("Notification: %s - %s%s", title, body, f" ({url})" if url else "")


def dispatch(notifications: Iterable[StatusNotification], service: NotificationService) -> int:
    """Send notifications through ``service``.

    A failed delivery is logged and does not stop the remaining ones.

    Returns:
        Number of notifications delivered.
    """
    if not service.is_available:
        logger.debug("Notification service unavailable, skipping delivery")
        return 0

    delivered = 0
    for notification in notifications:
        try:
            service.send(notification.title, notification.body, notification.url)
        except Exception as e:
            logger.exception("Failed to deliver notification '%s': %s", notification.title, e)
            continue
        delivered += 1
    return delivered
