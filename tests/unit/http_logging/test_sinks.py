"""Tests for log sinks."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from src.http_logging.levels import LogLevel
from src.http_logging.models import LogEvent
from src.http_logging.sinks import (
    DEFAULT_LOGGER_NAME,
    CompositeSink,
    JsonlFileSink,
    LoggingSink,
    LogSink,
    event_to_dict,
)


def _event(level: LogLevel = LogLevel.INFORMATION, exception: BaseException | None = None) -> LogEvent:
    return LogEvent(
        level=level,
        message_template="HTTP {RequestMethod} {RequestUri} responded {StatusCode}",
        message_parameters=("GET", "https://example.com/items", 200),
        properties={"RequestHeaders": {"Authorization": "*** MASKED ***"}},
        exception=exception,
    )


class _FailingSink(LogSink):
    def is_enabled(self, level: LogLevel) -> bool:
        return True

    def write(self, event: LogEvent) -> None:
        raise OSError("disk full")

    async def awrite(self, event: LogEvent) -> None:
        raise OSError("disk full")


class TestLoggingSink:
    """Test LoggingSink."""

    def test_write_logs_rendered_message(self, caplog: pytest.LogCaptureFixture) -> None:
        """Test the message and structured record attributes."""
        sink = LoggingSink()

        with caplog.at_level(logging.INFO, logger=DEFAULT_LOGGER_NAME):
            sink.write(_event())

        assert len(caplog.records) == 1
        record = caplog.records[0]
        assert record.levelno == logging.INFO
        assert record.getMessage() == "HTTP GET https://example.com/items responded 200"
        assert record.message_template == "HTTP {RequestMethod} {RequestUri} responded {StatusCode}"
        assert record.properties["StatusCode"] == 200
        assert record.properties["RequestHeaders"] == {"Authorization": "*** MASKED ***"}

    def test_write_attaches_exception(self, caplog: pytest.LogCaptureFixture) -> None:
        """Test that the call's exception is attached to the record."""
        sink = LoggingSink()
        error = ConnectionError("refused")

        with caplog.at_level(logging.INFO, logger=DEFAULT_LOGGER_NAME):
            sink.write(_event(LogLevel.ERROR, exception=error))

        assert caplog.records[0].levelno == logging.ERROR
        assert caplog.records[0].exc_info[1] is error

    def test_custom_logger(self, caplog: pytest.LogCaptureFixture) -> None:
        """Test writing to a custom logger name."""
        sink = LoggingSink(logger_name="custom.http")

        with caplog.at_level(logging.INFO, logger="custom.http"):
            sink.write(_event())

        assert caplog.records[0].name == "custom.http"

    def test_is_enabled_follows_logger_level(self) -> None:
        """Test level filtering is delegated to the logger."""
        log = logging.getLogger("test.sinks.level")
        log.setLevel(logging.WARNING)
        sink = LoggingSink(log=log)

        assert not sink.is_enabled(LogLevel.INFORMATION)
        assert sink.is_enabled(LogLevel.WARNING)
        assert sink.is_enabled(LogLevel.ERROR)

    @pytest.mark.asyncio
    async def test_awrite(self, caplog: pytest.LogCaptureFixture) -> None:
        """Test the async entry point."""
        sink = LoggingSink()

        with caplog.at_level(logging.INFO, logger=DEFAULT_LOGGER_NAME):
            await sink.awrite(_event())

        assert len(caplog.records) == 1


class TestJsonlFileSink:
    """Test JsonlFileSink."""

    def test_write_creates_file(self, tmp_path: Path) -> None:
        """Test that events are appended as JSON lines."""
        path = tmp_path / "logs" / "http.jsonl"
        sink = JsonlFileSink(path)

        sink.write(_event())
        sink.write(_event(LogLevel.WARNING))

        lines = path.read_text(encoding="utf-8").strip().split("\n")
        assert len(lines) == 2
        first = json.loads(lines[0])
        assert first["level"] == "INFORMATION"
        assert first["message"] == "HTTP GET https://example.com/items responded 200"
        assert first["properties"]["RequestUri"] == "https://example.com/items"
        assert first["exception"] is None
        assert json.loads(lines[1])["level"] == "WARNING"

    def test_min_level(self, tmp_path: Path) -> None:
        """Test level filtering."""
        sink = JsonlFileSink(tmp_path / "http.jsonl", min_level=LogLevel.WARNING)

        assert not sink.is_enabled(LogLevel.INFORMATION)
        assert sink.is_enabled(LogLevel.ERROR)

    @pytest.mark.asyncio
    async def test_awrite(self, tmp_path: Path) -> None:
        """Test writing from async code."""
        path = tmp_path / "http.jsonl"
        sink = JsonlFileSink(path)

        await sink.awrite(_event(LogLevel.ERROR, exception=TimeoutError("slow")))

        data = json.loads(path.read_text(encoding="utf-8"))
        assert data["level"] == "ERROR"
        assert "slow" in data["exception"]


class TestEventToDict:
    """Test event serialization."""

    def test_fields(self) -> None:
        """Test the serialized fields."""
        data = event_to_dict(_event())

        assert set(data) == {"timestamp", "level", "message_template", "message", "exception", "properties"}
        assert data["properties"]["RequestMethod"] == "GET"


class TestCompositeSink:
    """Test CompositeSink."""

    def test_forwards_to_enabled_sinks(self, sink_factory) -> None:
        """Test that each sink only receives levels it has enabled."""
        verbose = sink_factory()
        errors_only = sink_factory(min_level=LogLevel.ERROR)
        composite = CompositeSink([verbose, errors_only])

        composite.write(_event(LogLevel.INFORMATION))
        composite.write(_event(LogLevel.ERROR))

        assert len(verbose.events) == 2
        assert len(errors_only.events) == 1

    def test_is_enabled_if_any_sink_is(self, sink_factory) -> None:
        """Test the combined level check."""
        composite = CompositeSink([sink_factory(min_level=LogLevel.ERROR)])

        assert not composite.is_enabled(LogLevel.WARNING)
        assert composite.is_enabled(LogLevel.FATAL)
        assert not CompositeSink([]).is_enabled(LogLevel.FATAL)

    def test_failure_isolated(self, sink_factory, caplog: pytest.LogCaptureFixture) -> None:
        """Test that one failing sink doesn't affect others."""
        healthy = sink_factory()
        composite = CompositeSink([_FailingSink(), healthy])

        with caplog.at_level(logging.WARNING, logger="src.http_logging.sinks"):
            composite.write(_event())

        assert len(healthy.events) == 1
        assert "_FailingSink failed" in caplog.text

    @pytest.mark.asyncio
    async def test_awrite_failure_isolated(self, sink_factory) -> None:
        """Test async fan-out with a failing sink."""
        healthy = sink_factory()
        composite = CompositeSink([_FailingSink(), healthy])

        await composite.awrite(_event())

        assert len(healthy.events) == 1
