"""REST API for prwatch."""

from prwatch.api.app import create_app
from prwatch.api.events import Event, EventManager, EventType
from prwatch.api.models import APIResponse, PullRequestResponse

__all__ = [
    "APIResponse",
    "Event",
    "EventManager",
    "EventType",
    "PullRequestResponse",
    "create_app",
]
