"""Tests for the sync logging transport."""

from __future__ import annotations

import json

import httpx
import pytest

from src.http_logging.client import create_client
from src.http_logging.levels import LogLevel, LogMode
from src.http_logging.models import NOT_LOGGED
from src.http_logging.options import RequestLoggingOptions
from src.http_logging.transport import LoggingTransport


class _ChunkedStream(httpx.SyncByteStream):
    def __init__(self, chunks: list[bytes]):
        self._chunks = chunks

    def __iter__(self):
        yield from self._chunks


class _FailingAfterFirstChunk(httpx.SyncByteStream):
    def __iter__(self):
        yield b"partial"
        raise httpx.ReadTimeout("timed out")


def _handler(request: httpx.Request) -> httpx.Response:
    if request.url.path == "/fail":
        raise httpx.ConnectError("connection refused", request=request)
    if request.url.path == "/broken":
        return httpx.Response(200, stream=_FailingAfterFirstChunk())
    if request.url.path == "/stream":
        return httpx.Response(200, stream=_ChunkedStream([b'{"otp": ', b'"123"}']))
    return httpx.Response(201, json={"id": 7, "client_secret": "s"})


class TestLoggingTransport:
    """Test LoggingTransport with httpx.Client."""

    def test_post_logged(self, recording_sink) -> None:
        """Test a successful call."""
        transport = LoggingTransport(
            RequestLoggingOptions(masked_properties=["*secret*", "*password*"]),
            transport=httpx.MockTransport(_handler),
            sink=recording_sink,
        )

        with httpx.Client(transport=transport) as client:
            response = client.post("https://example.com/users", json={"password": "p"})

        assert response.status_code == 201
        assert len(recording_sink.events) == 1
        props = recording_sink.events[0].properties
        assert recording_sink.events[0].level == LogLevel.INFORMATION
        assert props["RequestMethod"] == "POST"
        assert props["RequestPath"] == "/users"
        assert props["RequestBody"] == {"password": "*** MASKED ***"}
        assert props["StatusCode"] == 201
        assert props["ResponseBodyString"] == NOT_LOGGED

    def test_streamed_response_replayed(self, recording_sink) -> None:
        """Test that the caller still receives a buffered streamed body."""
        transport = LoggingTransport(
            RequestLoggingOptions(response_body_log_mode=LogMode.LOG_ALL),
            transport=httpx.MockTransport(_handler),
            sink=recording_sink,
        )

        with httpx.Client(transport=transport) as client:
            response = client.get("https://example.com/stream")

        assert response.json() == {"otp": "123"}
        props = recording_sink.events[0].properties
        assert props["ResponseBody"] == {"otp": "*** MASKED ***"}
        assert json.loads(props["ResponseBodyString"]) == {"otp": "*** MASKED ***"}

    def test_error_logged_and_reraised(self, recording_sink) -> None:
        """Test that transport errors propagate after logging."""
        transport = LoggingTransport(
            RequestLoggingOptions(),
            transport=httpx.MockTransport(_handler),
            sink=recording_sink,
        )

        with httpx.Client(transport=transport) as client:
            with pytest.raises(httpx.ConnectError) as exc_info:
                client.get("https://example.com/fail")

        event = recording_sink.events[0]
        assert event.level == LogLevel.ERROR
        assert event.exception is exc_info.value
        assert event.properties["StatusCode"] is None

    def test_body_read_error_logged_and_reraised(self, recording_sink) -> None:
        """Test that a response stream failing mid-read surfaces its own error."""
        transport = LoggingTransport(
            RequestLoggingOptions(response_body_log_mode=LogMode.LOG_ALL),
            transport=httpx.MockTransport(_handler),
            sink=recording_sink,
        )

        with httpx.Client(transport=transport) as client:
            with pytest.raises(httpx.ReadTimeout) as exc_info:
                client.get("https://example.com/broken")

        assert len(recording_sink.events) == 1
        event = recording_sink.events[0]
        assert event.level == LogLevel.ERROR
        assert event.exception is exc_info.value
        assert event.properties["IsSucceed"] is False
        assert event.properties["StatusCode"] == 200
        assert event.properties["ResponseBodyString"] == ""

    def test_non_default_port_in_uri(self, recording_sink) -> None:
        """Test that an explicit port is kept in the logged URI."""
        transport = LoggingTransport(
            RequestLoggingOptions(),
            transport=httpx.MockTransport(_handler),
            sink=recording_sink,
        )

        with httpx.Client(transport=transport) as client:
            client.get("http://localhost:8080/api?a=1")
            client.get("https://example.com:443/api")

        assert recording_sink.events[0].message_parameters[1] == "http://localhost:8080/api?a=1"
        assert recording_sink.events[1].message_parameters[1] == "https://example.com/api"

    def test_overall_gate_off(self, recording_sink) -> None:
        """Test that LOG_NONE emits nothing."""
        transport = LoggingTransport(
            RequestLoggingOptions(log_mode=LogMode.LOG_NONE),
            transport=httpx.MockTransport(_handler),
            sink=recording_sink,
        )

        with httpx.Client(transport=transport) as client:
            client.get("https://example.com/users")
            with pytest.raises(httpx.ConnectError):
                client.get("https://example.com/fail")

        assert recording_sink.events == []

    def test_create_client(self, recording_sink) -> None:
        """Test the sync client helper."""
        with create_client(
            RequestLoggingOptions(),
            sink=recording_sink,
            transport=httpx.MockTransport(_handler),
        ) as client:
            client.delete("https://example.com/users/7")

        assert recording_sink.events[0].properties["RequestMethod"] == "DELETE"
