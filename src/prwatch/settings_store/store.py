"""SettingsStore - Persistent user preferences."""

from __future__ import annotations

import json
import logging
from typing import Any

from prwatch.settings_store.database import Database
from prwatch.settings_store.exceptions import InvalidIntervalError, MalformedSettingsError
from prwatch.settings_store.models import (
    DEFAULT_COLLAPSED_READINESS_SECTIONS,
    DEFAULT_REFRESH_INTERVAL,
    FilterSettings,
    SettingEntry,
)

logger = logging.getLogger("prwatch.settings_store")

REFRESH_INTERVAL_KEY = "polling_interval"
FILTER_SETTINGS_KEY = "filter_settings"
COLLAPSED_REPOS_KEY = "collapsed_repos"
COLLAPSED_READINESS_SECTIONS_KEY = "collapsed_readiness_sections"


class SettingsStore:
    """Loads and saves preferences as JSON values in SQLite.

    Missing or unreadable values fall back to defaults; a preference store
    should never prevent the watcher from starting.
    """

    def __init__(self, db_path: str = "prwatch.db") -> None:
        """Initialize the store, creating tables if needed.

        Args:
            db_path: Path to SQLite database file
        """
        self._db = Database(db_path)
        self._db.create_tables()

    def close(self) -> None:
        """Close the database connection."""
        self._db.close()

    # --- Raw access ---

    def _load(self, key: str) -> Any | None:
        with self._db.session() as session:
            entry = session.get(SettingEntry, key)
            raw = entry.value if entry is not None else None
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            logger.error("Corrupt value for setting '%s': %s", key, e)
            return None

    def _save(self, key: str, value: Any) -> None:
        with self._db.session() as session:
            session.merge(SettingEntry(key=key, value=json.dumps(value)))

    # --- Refresh interval ---

    def load_refresh_interval(self) -> int:
        """Return the saved polling interval in seconds, or the default."""
        saved = self._load(REFRESH_INTERVAL_KEY)
        result = saved if isinstance(saved, int) and saved > 0 else DEFAULT_REFRESH_INTERVAL
        logger.debug("load_refresh_interval: %ds", result)
        return result

    def save_refresh_interval(self, value: int) -> None:
        """Persist the polling interval.

        Raises:
            InvalidIntervalError: If value is not a positive integer.
        """
        if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
            raise InvalidIntervalError(f"Polling interval must be a positive integer: {value!r}")
        self._save(REFRESH_INTERVAL_KEY, value)
        logger.debug("save_refresh_interval: %ds", value)

    # --- Filter settings ---

    def load_filter_settings(self) -> FilterSettings:
        """Return saved filter settings, or defaults if none are stored."""
        saved = self._load(FILTER_SETTINGS_KEY)
        if not isinstance(saved, dict):
            logger.info("load_filter_settings: no saved data, using defaults")
            return FilterSettings()
        try:
            return FilterSettings.from_dict(saved)
        except MalformedSettingsError as e:
            logger.error("Unreadable filter settings, using defaults: %s", e)
            return FilterSettings()

    def save_filter_settings(self, value: FilterSettings) -> None:
        """Validate and persist filter settings.

        Raises:
            InvalidFilterSettingsError: If required and ignored checks overlap.
        """
        value.validate()
        self._save(FILTER_SETTINGS_KEY, value.to_dict())

    # --- Collapsed UI state ---

    def load_collapsed_repos(self) -> set[str]:
        saved = self._load(COLLAPSED_REPOS_KEY)
        return {str(r) for r in saved} if isinstance(saved, list) else set()

    def save_collapsed_repos(self, value: set[str]) -> None:
        self._save(COLLAPSED_REPOS_KEY, sorted(value))

    def load_collapsed_readiness_sections(self) -> set[str]:
        """Collapsed readiness sections; first launch collapses "not_ready"."""
        saved = self._load(COLLAPSED_READINESS_SECTIONS_KEY)
        if not isinstance(saved, list):
            return set(DEFAULT_COLLAPSED_READINESS_SECTIONS)
        return {str(s) for s in saved}

    def save_collapsed_readiness_sections(self, value: set[str]) -> None:
        self._save(COLLAPSED_READINESS_SECTIONS_KEY, sorted(value))
