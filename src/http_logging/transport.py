"""
Logging Transports for httpx

Wrap any httpx transport so that every call is timed and, depending on the
configured policy, written to a log sink with masked headers and bodies.

Usage:
    import httpx
    from src.http_logging import AsyncLoggingTransport, RequestLoggingOptions

    options = RequestLoggingOptions(response_body_log_mode=LogMode.LOG_ALL)
    async with httpx.AsyncClient(transport=AsyncLoggingTransport(options)) as client:
        await client.get("https://example.com/api/users?page=2")

Logging never changes the outcome of a call: errors raised by the wrapped
transport (or by its response stream) are re-raised unchanged after being
logged, and errors raised while logging are reported on this module's
logger and swallowed.
"""

from __future__ import annotations

import asyncio
import logging
import time

import httpx

from src.common.telemetry import add_span_attributes, record_exception
from src.http_logging.capture import abuffer_response, buffer_response
from src.http_logging.interceptor import LogDecision, RequestLogBuilder
from src.http_logging.options import RequestLoggingOptions
from src.http_logging.policy import is_succeeded
from src.http_logging.sinks import LoggingSink, LogSink

logger = logging.getLogger(__name__)


def _elapsed_ms(start: float) -> float:
    return (time.perf_counter() - start) * 1000


def _report_logging_failure(request: httpx.Request, error: Exception) -> None:
    logger.warning(
        f"Failed to log HTTP {request.method} {request.url.host}{request.url.path}: {error}",
        exc_info=True,
    )


def _annotate_span(
    request: httpx.Request,
    response: httpx.Response | None,
    elapsed_ms: float,
    exception: BaseException | None,
) -> None:
    add_span_attributes(
        {
            "http.request.method": request.method,
            "http.response.status_code": response.status_code if response is not None else None,
            "http_logging.elapsed_ms": elapsed_ms,
            "http_logging.succeeded": is_succeeded(response, exception),
        }
    )
    if exception is not None:
        record_exception(exception)


class AsyncLoggingTransport(httpx.AsyncBaseTransport):
    """
    Async httpx transport that logs each call made through it.

    Per call:
    1. Start a monotonic timer and forward the request to the inner transport.
    2. Stop the timer when it returns or raises (cancellation included).
    3. Ask the policy for a level; stop if the sink has that level disabled.
    4. Stop if the overall mode does not log this outcome.
    5. Capture and mask headers, bodies and query parameters per axis.
    6. Build the entry with the policy and write it to the sink.
    7. Return the response, or re-raise the inner transport's error.

    A response body that fails while being read for step 5 turns the call
    into a failure: it is logged with that error, which is then re-raised.
    """

    def __init__(
        self,
        options: RequestLoggingOptions,
        transport: httpx.AsyncBaseTransport | None = None,
        sink: LogSink | None = None,
    ):
        """
        Initialize the logging transport.

        Args:
            options: Shared logging configuration (required)
            transport: Transport to wrap (defaults to httpx.AsyncHTTPTransport())
            sink: Where log events go (defaults to LoggingSink())

        Raises:
            MissingConfigError: If options is None
        """
        self._builder = RequestLogBuilder(options)
        self._transport = transport or httpx.AsyncHTTPTransport()
        self._sink = sink or LoggingSink()

    @property
    def options(self) -> RequestLoggingOptions:
        return self._builder.options

    @property
    def sink(self) -> LogSink:
        return self._sink

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        start = time.perf_counter()
        try:
            response = await self._transport.handle_async_request(request)
        except (Exception, asyncio.CancelledError) as exc:
            await self._log_failure(request, None, _elapsed_ms(start), exc)
            raise

        elapsed_ms = _elapsed_ms(start)
        decision = self._decide(request, response, elapsed_ms, None)
        response_text = ""
        if decision is not None and decision.response_body:
            try:
                response, response_text = await abuffer_response(response)
            except (Exception, asyncio.CancelledError) as exc:
                await self._log_failure(request, response, _elapsed_ms(start), exc)
                raise

        _annotate_span(request, response, elapsed_ms, None)
        if decision is not None:
            await self._emit(request, response, response_text, elapsed_ms, None, decision)
        return response

    def _decide(
        self,
        request: httpx.Request,
        response: httpx.Response | None,
        elapsed_ms: float,
        exception: BaseException | None,
    ) -> LogDecision | None:
        try:
            return self._builder.decide(request, response, elapsed_ms, exception, self._sink)
        except Exception as e:
            _report_logging_failure(request, e)
            return None

    async def _emit(
        self,
        request: httpx.Request,
        response: httpx.Response | None,
        response_text: str,
        elapsed_ms: float,
        exception: BaseException | None,
        decision: LogDecision,
    ) -> None:
        try:
            event = self._builder.build_event(
                request, response, response_text, elapsed_ms, exception, decision
            )
            await self._sink.awrite(event)
        except Exception as e:
            _report_logging_failure(request, e)

    async def _log_failure(
        self,
        request: httpx.Request,
        response: httpx.Response | None,
        elapsed_ms: float,
        exception: BaseException,
    ) -> None:
        _annotate_span(request, response, elapsed_ms, exception)
        decision = self._decide(request, response, elapsed_ms, exception)
        if decision is not None:
            await self._emit(request, response, "", elapsed_ms, exception, decision)

    async def aclose(self) -> None:
        await self._transport.aclose()


class LoggingTransport(httpx.BaseTransport):
    """
    Sync httpx transport that logs each call made through it.

    Same behaviour as AsyncLoggingTransport for httpx.Client.
    """

    def __init__(
        self,
        options: RequestLoggingOptions,
        transport: httpx.BaseTransport | None = None,
        sink: LogSink | None = None,
    ):
        """
        Initialize the logging transport.

        Args:
            options: Shared logging configuration (required)
            transport: Transport to wrap (defaults to httpx.HTTPTransport())
            sink: Where log events go (defaults to LoggingSink())

        Raises:
            MissingConfigError: If options is None
        """
        self._builder = RequestLogBuilder(options)
        self._transport = transport or httpx.HTTPTransport()
        self._sink = sink or LoggingSink()

    @property
    def options(self) -> RequestLoggingOptions:
        return self._builder.options

    @property
    def sink(self) -> LogSink:
        return self._sink

    def handle_request(self, request: httpx.Request) -> httpx.Response:
        start = time.perf_counter()
        try:
            response = self._transport.handle_request(request)
        except Exception as exc:
            self._log_failure(request, None, _elapsed_ms(start), exc)
            raise

        elapsed_ms = _elapsed_ms(start)
        decision = self._decide(request, response, elapsed_ms, None)
        response_text = ""
        if decision is not None and decision.response_body:
            try:
                response, response_text = buffer_response(response)
            except Exception as exc:
                self._log_failure(request, response, _elapsed_ms(start), exc)
                raise

        _annotate_span(request, response, elapsed_ms, None)
        if decision is not None:
            self._emit(request, response, response_text, elapsed_ms, None, decision)
        return response

    def _decide(
        self,
        request: httpx.Request,
        response: httpx.Response | None,
        elapsed_ms: float,
        exception: BaseException | None,
    ) -> LogDecision | None:
        try:
            return self._builder.decide(request, response, elapsed_ms, exception, self._sink)
        except Exception as e:
            _report_logging_failure(request, e)
            return None

    def _emit(
        self,
        request: httpx.Request,
        response: httpx.Response | None,
        response_text: str,
        elapsed_ms: float,
        exception: BaseException | None,
        decision: LogDecision,
    ) -> None:
        try:
            event = self._builder.build_event(
                request, response, response_text, elapsed_ms, exception, decision
            )
            self._sink.write(event)
        except Exception as e:
            _report_logging_failure(request, e)

    def _log_failure(
        self,
        request: httpx.Request,
        response: httpx.Response | None,
        elapsed_ms: float,
        exception: BaseException,
    ) -> None:
        _annotate_span(request, response, elapsed_ms, exception)
        decision = self._decide(request, response, elapsed_ms, exception)
        if decision is not None:
            self._emit(request, response, "", elapsed_ms, exception, decision)

    def close(self) -> None:
        self._transport.close()
