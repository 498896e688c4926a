"""
Log sinks for captured HTTP calls.

A sink receives one LogEvent per logged call and owns level filtering and
serialization. Supported backends:
- LoggingSink: Python logging (message + structured properties in `extra`)
- JsonlFileSink: JSONL (JSON Lines) file output
- CompositeSink: Multiple backends simultaneously

Usage:
    from src.http_logging.sinks import CompositeSink, JsonlFileSink, LoggingSink

    sink = CompositeSink([LoggingSink(), JsonlFileSink("/var/log/app/http.jsonl")])
    transport = AsyncLoggingTransport(RequestLoggingOptions(), sink=sink)
"""

from __future__ import annotations

import asyncio
import json
import logging
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

from src.http_logging.levels import LogLevel
from src.http_logging.models import LogEvent

logger = logging.getLogger(__name__)

DEFAULT_LOGGER_NAME = "http_logging.requests"


class LogSink(ABC):
    """
    Base class for log sinks.

    `is_enabled` is consulted before any capture work is done for a call,
    so it should be cheap.
    """

    @abstractmethod
    def is_enabled(self, level: LogLevel) -> bool:
        """Whether an event at this level would be written."""
        ...

    @abstractmethod
    def write(self, event: LogEvent) -> None:
        """
        Write an event.

        Args:
            event: The log entry to write
        """
        ...

    async def awrite(self, event: LogEvent) -> None:
        """Write an event from async code (defaults to write)."""
        self.write(event)

    def close(self) -> None:
        """Release resources."""
        pass


class LoggingSink(LogSink):
    """
    Write events through Python logging.

    The rendered message is the log message; the template and all properties
    are attached as `message_template` and `properties` record attributes
    (see StructuredFormatter in src.common.logging).
    """

    def __init__(self, logger_name: str = DEFAULT_LOGGER_NAME, log: logging.Logger | None = None):
        """
        Initialize logging sink.

        Args:
            logger_name: Name of logger to use
            log: Explicit logger (overrides logger_name)
        """
        self._logger = log or logging.getLogger(logger_name)

    @property
    def logger(self) -> logging.Logger:
        return self._logger

    def is_enabled(self, level: LogLevel) -> bool:
        return self._logger.isEnabledFor(int(level))

    def write(self, event: LogEvent) -> None:
        self._logger.log(
            int(event.level),
            event.render(),
            exc_info=event.exception,
            extra={
                "message_template": event.message_template,
                "properties": event.bound_properties(),
            },
        )


def event_to_dict(event: LogEvent) -> dict[str, Any]:
    """Plain JSON-serializable view of an event."""
    return {
        "timestamp": event.timestamp.isoformat(),
        "level": event.level.name,
        "message_template": event.message_template,
        "message": event.render(),
        "exception": repr(event.exception) if event.exception is not None else None,
        "properties": event.bound_properties(),
    }


class JsonlFileSink(LogSink):
    """
    Write events to a JSONL (JSON Lines) file.

    Each event is written as a single JSON line, making it easy to process
    with standard tools (jq, pandas, etc.). Values that are not JSON types
    are written with str().
    """

    def __init__(
        self,
        file_path: str | Path,
        min_level: LogLevel = LogLevel.INFORMATION,
        create_dirs: bool = True,
    ):
        """
        Initialize file sink.

        Args:
            file_path: Path to output JSONL file
            min_level: Lowest level written
            create_dirs: Create parent directories if needed
        """
        self._file_path = Path(file_path)
        self._min_level = min_level
        self._lock = threading.Lock()

        if create_dirs:
            self._file_path.parent.mkdir(parents=True, exist_ok=True)

    @property
    def file_path(self) -> Path:
        return self._file_path

    def is_enabled(self, level: LogLevel) -> bool:
        return level >= self._min_level

    def write(self, event: LogEvent) -> None:
        line = json.dumps(event_to_dict(event), default=str, ensure_ascii=False)
        with self._lock:
            with open(self._file_path, "a", encoding="utf-8") as f:
                f.write(line + "\n")

    async def awrite(self, event: LogEvent) -> None:
        await asyncio.to_thread(self.write, event)


class CompositeSink(LogSink):
    """
    Write events to multiple sinks.

    Each sink only receives the levels it has enabled. Failures in one sink
    don't affect others.
    """

    def __init__(self, sinks: list[LogSink]):
        """
        Initialize composite sink.

        Args:
            sinks: Sinks to forward events to
        """
        self._sinks = list(sinks)

    def is_enabled(self, level: LogLevel) -> bool:
        return any(sink.is_enabled(level) for sink in self._sinks)

    def write(self, event: LogEvent) -> None:
        for sink in self._sinks:
            if not sink.is_enabled(event.level):
                continue
            try:
                sink.write(event)
            except Exception as e:
                logger.warning(f"CompositeSink: {type(sink).__name__} failed: {e}")

    async def awrite(self, event: LogEvent) -> None:
        targets = [sink for sink in self._sinks if sink.is_enabled(event.level)]
        results = await asyncio.gather(
            *(sink.awrite(event) for sink in targets), return_exceptions=True
        )
        for sink, result in zip(targets, results):
            if isinstance(result, Exception):
                logger.warning(f"CompositeSink: {type(sink).__name__} failed: {result}")

    def close(self) -> None:
        for sink in self._sinks:
            sink.close()
