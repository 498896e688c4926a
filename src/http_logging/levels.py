"""Logging modes and severity levels."""

from __future__ import annotations

import logging
from enum import Enum, IntEnum


class LogMode(str, Enum):
    """When an axis is logged."""

    LOG_NONE = "log_none"  # Never, whether the call succeeded or failed
    LOG_ALL = "log_all"  # Successes and failures
    LOG_FAILURES = "log_failures"  # Failed calls only


class LogLevel(IntEnum):
    """Severity of a log entry (values match the stdlib logging levels)."""

    VERBOSE = 5
    DEBUG = logging.DEBUG
    INFORMATION = logging.INFO
    WARNING = logging.WARNING
    ERROR = logging.ERROR
    FATAL = logging.CRITICAL
