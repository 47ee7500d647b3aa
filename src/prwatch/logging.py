"""Logging setup for prwatch.

Every component logs under the ``prwatch`` namespace, so one rotating file
collects fetch cycles, pagination warnings and notifications. Records pass
through :class:`RedactingFilter` before they are written, which keeps tokens
echoed by ``gh`` or httpx out of the log.
"""

from __future__ import annotations

import logging
import os
import re
from logging.handlers import RotatingFileHandler
from pathlib import Path

ROOT_LOGGER = "prwatch"

DEFAULT_LOG_DIR = "logs"
DEFAULT_LOG_FILE = "prwatch.log"
DEFAULT_MAX_BYTES = 10 * 1024 * 1024
DEFAULT_BACKUP_COUNT = 5
DEFAULT_LOG_LEVEL = "INFO"

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_REDACTIONS = [
    (re.compile(r"gh[pousr]_[A-Za-z0-9]{36}"), "[GITHUB_TOKEN]"),
    (re.compile(r"github_pat_[A-Za-z0-9_]{82}"), "[GITHUB_TOKEN]"),
    (re.compile(r"Bearer [A-Za-z0-9._-]+"), "Bearer [REDACTED]"),
    (re.compile(r"token=[A-Za-z0-9._-]+"), "token=[REDACTED]"),
]


def sanitize_for_log(text: str) -> str:
    """Replace GitHub tokens and bearer credentials in ``text``."""
    for pattern, replacement in _REDACTIONS:
        text = pattern.sub(replacement, text)
    return text


def truncate_output(output: str, max_length: int = 5000) -> str:
    """Cut ``output`` to ``max_length`` chars, noting how much was dropped."""
    if len(output) <= max_length:
        return output
    return output[:max_length] + f"\n... [truncated, {len(output) - max_length} more chars]"


class RedactingFilter(logging.Filter):
    """Handler filter that applies :func:`sanitize_for_log` to the final message."""

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        redacted = sanitize_for_log(message)
        if redacted != message:
            record.msg = redacted
            record.args = None
        return True


def _resolve_level(level: str | None) -> int:
    name = level or os.environ.get("PRWATCH_LOG_LEVEL", DEFAULT_LOG_LEVEL)
    return getattr(logging, name.upper(), logging.INFO)


def _resolve_log_dir(log_dir: str | Path | None) -> Path:
    path = Path(log_dir or os.environ.get("PRWATCH_LOG_DIR", DEFAULT_LOG_DIR))
    path.mkdir(parents=True, exist_ok=True)
    return path


def setup_logging(
    log_dir: str | Path | None = None,
    log_file: str = DEFAULT_LOG_FILE,
    max_bytes: int = DEFAULT_MAX_BYTES,
    backup_count: int = DEFAULT_BACKUP_COUNT,
    level: str | None = None,
    console: bool = True,
) -> logging.Logger:
    """Attach a rotating file handler (and optionally stderr) to the prwatch logger.

    Calling this again replaces the handlers from the previous call.

    Args:
        log_dir: Directory for the log file. Falls back to ``PRWATCH_LOG_DIR``,
            then ``logs``.
        log_file: Log file name.
        max_bytes: Size at which the file is rotated.
        backup_count: Rotated files to keep.
        level: Level name. Falls back to ``PRWATCH_LOG_LEVEL``, then INFO.
        console: Also log to stderr.

    Returns:
        The ``prwatch`` logger.
    """
    log_path = _resolve_log_dir(log_dir) / log_file
    log_level = _resolve_level(level)

    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(log_level)
    for old in logger.handlers:
        old.close()
    logger.handlers.clear()

    handlers: list[logging.Handler] = [
        RotatingFileHandler(
            log_path, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"
        )
    ]
    if console:
        handlers.append(logging.StreamHandler())

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    redactor = RedactingFilter()
    for handler in handlers:
        handler.setLevel(log_level)
        handler.setFormatter(formatter)
        handler.addFilter(redactor)
        logger.addHandler(handler)

    logger.info("Logging to %s at %s", log_path, logging.getLevelName(log_level))
    return logger


def get_logger(name: str) -> logging.Logger:
    """Return the logger for a component, e.g. ``get_logger("github.pager")``."""
    if not name.startswith(f"{ROOT_LOGGER}."):
        name = f"{ROOT_LOGGER}.{name}"
    return logging.getLogger(name)
