"""
Logging Policy

Decides whether a call (and each part of it) is logged, at which level, and
how a captured call is turned into a log entry.

Five axes are evaluated independently with the same three-state mode:
overall, request headers, request body, response headers, response body.
The overall axis gates everything else.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, Protocol, runtime_checkable

import httpx

from src.http_logging.levels import LogLevel, LogMode
from src.http_logging.models import HttpClientContext, LogEntryParameters
from src.http_logging.templates import template_holes


LevelSelector = Callable[
    [httpx.Request, httpx.Response | None, float, BaseException | None], LogLevel
]


def should_log(mode: LogMode, succeeded: bool) -> bool:
    """
    Resolve a mode for one call outcome.

    Args:
        mode: Mode configured for the axis
        succeeded: Whether the call succeeded

    Returns:
        True if the axis should be captured
    """
    return mode == LogMode.LOG_ALL or (mode == LogMode.LOG_FAILURES and not succeeded)


def is_succeeded(response: httpx.Response | None, exception: BaseException | None) -> bool:
    """A call succeeded when nothing was raised and the status code is below 400."""
    return exception is None and response is not None and response.status_code < 400


def default_get_level(
    request: httpx.Request,
    response: httpx.Response | None,
    elapsed_ms: float,
    exception: BaseException | None,
) -> LogLevel:
    """
    Default level selection.

    ERROR when an exception was raised, no response was received, or the
    status code is 5xx; WARNING for 4xx; INFORMATION otherwise.
    """
    if exception is not None or response is None:
        return LogLevel.ERROR
    if response.status_code >= 500:
        return LogLevel.ERROR
    if response.status_code >= 400:
        return LogLevel.WARNING
    return LogLevel.INFORMATION


# =============================================================================
# Log entry policies
# =============================================================================


@runtime_checkable
class LogEntryPolicy(Protocol):
    """
    Pluggable level selection and log entry construction.

    Implementations must be safe to share between concurrent calls.
    """

    def get_level(
        self,
        request: httpx.Request,
        response: httpx.Response | None,
        elapsed_ms: float,
        exception: BaseException | None,
    ) -> LogLevel:
        """Choose the severity for a completed call."""
        ...

    def build_entry(self, context: HttpClientContext) -> LogEntryParameters:
        """Build the message template and values for a captured call."""
        ...


class PropertiesLogEntryPolicy:
    """
    Default policy: one message plus flat named properties.

    The message template holes receive positional parameters; every captured
    field is attached as its own property (RequestMethod, RequestHost,
    ResponseBodyString, ...).
    """

    DEFAULT_MESSAGE_TEMPLATE = (
        "HTTP Client request {RequestMethod} {RequestUri} "
        "completed in {ElapsedMilliseconds:.4f}ms"
    )

    def __init__(
        self,
        message_template: str | None = None,
        get_level: LevelSelector | None = None,
    ):
        """
        Initialize the policy.

        Args:
            message_template: Template overriding the default message
            get_level: Level selector replacing default_get_level
        """
        self.message_template = message_template or self.DEFAULT_MESSAGE_TEMPLATE
        self._get_level = get_level or default_get_level

    def get_level(
        self,
        request: httpx.Request,
        response: httpx.Response | None,
        elapsed_ms: float,
        exception: BaseException | None,
    ) -> LogLevel:
        return self._get_level(request, response, elapsed_ms, exception)

    def _template_values(self, context: HttpClientContext) -> dict[str, Any]:
        request = context.request
        response = context.response
        return {
            "RequestMethod": request.method,
            "RequestUri": request.uri,
            "StatusCode": response.status_code,
            "ElapsedMilliseconds": response.elapsed_milliseconds,
        }

    def _parameters(self, context: HttpClientContext) -> tuple[Any, ...]:
        values = self._template_values(context)
        return tuple(values.get(hole) for hole in template_holes(self.message_template))

    def build_entry(self, context: HttpClientContext) -> LogEntryParameters:
        request = context.request
        response = context.response
        properties = {
            "RequestMethod": request.method,
            "RequestScheme": request.scheme,
            "RequestHost": request.host,
            "RequestPath": request.path,
            "RequestQueryString": request.query_string,
            "RequestQuery": request.query,
            "RequestBodyString": request.body_string,
            "RequestBody": request.body,
            "RequestHeaders": request.headers,
            "StatusCode": response.status_code,
            "IsSucceed": response.is_succeed,
            "ElapsedMilliseconds": response.elapsed_milliseconds,
            "ResponseBodyString": response.body_string,
            "ResponseBody": response.body,
            "ResponseHeaders": response.headers,
        }
        return LogEntryParameters(
            message_template=self.message_template,
            message_parameters=self._parameters(context),
            additional_properties=properties,
        )


class ContextLogEntryPolicy(PropertiesLogEntryPolicy):
    """
    Policy that attaches the whole captured call as one structured property.

    The message holes still receive positional parameters; the request and
    response details travel nested under "HttpClientContext".
    """

    DEFAULT_MESSAGE_TEMPLATE = (
        "HTTP {RequestMethod} {RequestUri} responded {StatusCode} "
        "in {ElapsedMilliseconds:.4f} ms"
    )
    CONTEXT_PROPERTY = "HttpClientContext"

    def build_entry(self, context: HttpClientContext) -> LogEntryParameters:
        return LogEntryParameters(
            message_template=self.message_template,
            message_parameters=self._parameters(context),
            additional_properties={self.CONTEXT_PROPERTY: context.to_properties()},
        )
