"""
Pytest configuration for unit tests.

Provides an in-memory log sink for transport tests.
"""

from __future__ import annotations

import pytest

from src.http_logging.levels import LogLevel
from src.http_logging.models import LogEvent
from src.http_logging.sinks import LogSink


class RecordingSink(LogSink):
    """Sink that keeps events in memory and records level checks."""

    def __init__(self, min_level: LogLevel = LogLevel.VERBOSE):
        self.min_level = min_level
        self.events: list[LogEvent] = []
        self.checked_levels: list[LogLevel] = []

    def is_enabled(self, level: LogLevel) -> bool:
        self.checked_levels.append(level)
        return level >= self.min_level

    def write(self, event: LogEvent) -> None:
        self.events.append(event)


@pytest.fixture
def recording_sink() -> RecordingSink:
    """Sink with every level enabled."""
    return RecordingSink()


@pytest.fixture
def sink_factory() -> type[RecordingSink]:
    """RecordingSink class, for tests that need a custom minimum level."""
    return RecordingSink
