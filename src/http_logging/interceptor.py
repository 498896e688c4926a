"""
Request Log Assembly

The synchronous core shared by the sync and async logging transports:
gating (level, overall mode), per-axis capture, and log event construction.
The transports only add timing, I/O (reading the response body, writing to
the sink) and error isolation around it.
"""

from __future__ import annotations

from dataclasses import dataclass

import httpx

from src.http_logging.capture import (
    capture_body,
    capture_headers,
    mask_query_string,
    parse_query,
    read_request_text,
)
from src.http_logging.exceptions import MissingConfigError
from src.http_logging.levels import LogLevel
from src.http_logging.models import (
    HttpClientContext,
    HttpRequestInfo,
    HttpResponseInfo,
    LogEvent,
)
from src.http_logging.options import RequestLoggingOptions
from src.http_logging.policy import is_succeeded, should_log
from src.http_logging.sinks import LogSink


@dataclass(frozen=True)
class LogDecision:
    """What is captured for one call."""

    level: LogLevel
    succeeded: bool
    request_headers: bool
    request_body: bool
    response_headers: bool
    response_body: bool


class RequestLogBuilder:
    """
    Build log events for completed calls.

    Holds only the shared, read-only options; every method works on per-call
    values, so one builder serves any number of concurrent calls.
    """

    def __init__(self, options: RequestLoggingOptions):
        if options is None:
            raise MissingConfigError(
                "options",
                hint="Pass RequestLoggingOptions() to use the defaults",
            )
        self._options = options

    @property
    def options(self) -> RequestLoggingOptions:
        return self._options

    def decide(
        self,
        request: httpx.Request,
        response: httpx.Response | None,
        elapsed_ms: float,
        exception: BaseException | None,
        sink: LogSink,
    ) -> LogDecision | None:
        """
        Run the level gate and the overall gate.

        Returns:
            The per-axis decision, or None when nothing is to be logged
        """
        options = self._options
        level = options.policy.get_level(request, response, elapsed_ms, exception)
        if not sink.is_enabled(level):
            return None

        succeeded = is_succeeded(response, exception)
        if not should_log(options.log_mode, succeeded):
            return None

        return LogDecision(
            level=level,
            succeeded=succeeded,
            request_headers=should_log(options.request_header_log_mode, succeeded),
            request_body=should_log(options.request_body_log_mode, succeeded),
            response_headers=should_log(options.response_header_log_mode, succeeded),
            response_body=should_log(options.response_body_log_mode, succeeded),
        )

    def capture_request(self, request: httpx.Request, decision: LogDecision) -> HttpRequestInfo:
        options = self._options
        patterns = options.masked_properties
        mask = options.mask_format

        body_text = read_request_text(request) if decision.request_body else ""
        body = capture_body(
            body_text,
            decision.request_body,
            parse_structured=options.log_request_body_as_structured_object,
            patterns=patterns,
            mask=mask,
            limit=options.request_body_log_text_length_limit,
            mask_unparsed_text=options.mask_unparsed_body_text,
        )

        raw_query = request.url.query.decode("ascii", errors="replace")
        query_string = f"?{raw_query}" if raw_query else ""
        query_patterns = patterns if options.mask_query_parameters else ()

        return HttpRequestInfo(
            method=request.method,
            scheme=request.url.scheme,
            host=request.url.host,
            port=request.url.port,
            path=request.url.path,
            query_string=mask_query_string(query_string, query_patterns, mask),
            query=parse_query(query_string, query_patterns, mask),
            body_string=body.text,
            body=body.structured,
            headers=capture_headers(request.headers, decision.request_headers, patterns, mask),
        )

    def capture_response(
        self,
        response: httpx.Response | None,
        response_text: str,
        elapsed_ms: float,
        decision: LogDecision,
    ) -> HttpResponseInfo:
        options = self._options
        patterns = options.masked_properties
        mask = options.mask_format

        body = capture_body(
            response_text,
            decision.response_body,
            parse_structured=options.log_response_body_as_structured_object,
            patterns=patterns,
            mask=mask,
            limit=options.response_body_log_text_length_limit,
            mask_unparsed_text=options.mask_unparsed_body_text,
        )

        return HttpResponseInfo(
            status_code=response.status_code if response is not None else None,
            is_succeed=decision.succeeded,
            elapsed_milliseconds=max(elapsed_ms, 0.0),
            body_string=body.text,
            body=body.structured,
            headers=capture_headers(
                response.headers if response is not None else None,
                decision.response_headers,
                patterns,
                mask,
            ),
        )

    def build_context(
        self,
        request: httpx.Request,
        response: httpx.Response | None,
        response_text: str,
        elapsed_ms: float,
        decision: LogDecision,
    ) -> HttpClientContext:
        return HttpClientContext(
            request=self.capture_request(request, decision),
            response=self.capture_response(response, response_text, elapsed_ms, decision),
        )

    def build_event(
        self,
        request: httpx.Request,
        response: httpx.Response | None,
        response_text: str,
        elapsed_ms: float,
        exception: BaseException | None,
        decision: LogDecision,
    ) -> LogEvent:
        """
        Capture both sides of the call and build its log event.

        Args:
            request: The outbound request
            response: The response, or None if the transport raised
            response_text: Decoded response body ("" unless the body axis is captured)
            elapsed_ms: Time spent in the wrapped transport
            exception: Error raised by the wrapped transport, if any
            decision: Result of decide()

        Returns:
            LogEvent ready for the sink
        """
        context = self.build_context(request, response, response_text, elapsed_ms, decision)
        entry = self._options.policy.build_entry(context)
        return LogEvent(
            level=decision.level,
            message_template=entry.message_template,
            message_parameters=tuple(entry.message_parameters),
            properties=dict(entry.additional_properties),
            exception=exception,
        )
