"""Notifications - Detect PR status changes and deliver them."""

from prwatch.notifications.detector import (
    CHECKS_PASSED_TITLE,
    CI_FAILED_TITLE,
    NO_LONGER_OPEN_TITLE,
    StatusChangeDetector,
)
from prwatch.notifications.dispatcher import (
    LoggingNotificationService,
    NotificationService,
    dispatch,
)
from prwatch.notifications.models import ChangeSnapshot, StatusNotification

__all__ = [
    "CHECKS_PASSED_TITLE",
    "CI_FAILED_TITLE",
    "NO_LONGER_OPEN_TITLE",
    "ChangeSnapshot",
    "LoggingNotificationService",
    "NotificationService",
    "StatusChangeDetector",
    "StatusNotification",
    "dispatch",
]
