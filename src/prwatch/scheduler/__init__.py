"""Scheduler - Fixed-interval polling with cancellation-safe sleep."""

from prwatch.scheduler.scheduler import PollingScheduler

__all__ = [
    "PollingScheduler",
]
