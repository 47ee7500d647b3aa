"""Settings Store - Persistent user preferences (filters, polling interval)."""

from prwatch.settings_store.exceptions import (
    InvalidFilterSettingsError,
    InvalidIntervalError,
    MalformedSettingsError,
    SettingsError,
)
from prwatch.settings_store.models import DEFAULT_REFRESH_INTERVAL, FilterSettings
from prwatch.settings_store.store import SettingsStore

__all__ = [
    "DEFAULT_REFRESH_INTERVAL",
    "FilterSettings",
    "InvalidFilterSettingsError",
    "InvalidIntervalError",
    "MalformedSettingsError",
    "SettingsError",
    "SettingsStore",
]
