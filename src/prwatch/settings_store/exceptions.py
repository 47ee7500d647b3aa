"""Custom exceptions for the Settings Store."""


class SettingsError(Exception):
    """Base exception for Settings Store errors."""


class InvalidFilterSettingsError(SettingsError):
    """A check name appears in both the required and ignored lists."""


class InvalidIntervalError(SettingsError):
    """Polling interval is not a positive number of seconds."""


class MalformedSettingsError(SettingsError):
    """A saved value is valid JSON but not the expected shape."""
