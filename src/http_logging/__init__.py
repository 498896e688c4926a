"""
HTTP Request Logging for httpx

Times outbound HTTP calls, captures request/response metadata under
configurable visibility policies, masks sensitive values, and writes one
structured log entry per call.

Usage:
    from src.http_logging import (
        AsyncLoggingTransport,
        LogMode,
        RequestLoggingOptions,
        create_async_client,
    )

    options = RequestLoggingOptions(response_body_log_mode=LogMode.LOG_ALL)
    async with create_async_client(options) as client:
        await client.post("https://example.com/login", json={"password": "..."})
"""

from src.http_logging.client import create_async_client, create_client
from src.http_logging.config import RequestLoggingSettings, load_config
from src.http_logging.exceptions import (
    ConfigurationError,
    HttpLoggingError,
    InvalidConfigError,
    MissingConfigError,
)
from src.http_logging.interceptor import LogDecision, RequestLogBuilder
from src.http_logging.levels import LogLevel, LogMode
from src.http_logging.models import (
    NOT_LOGGED,
    HttpClientContext,
    HttpRequestInfo,
    HttpResponseInfo,
    LogEntryParameters,
    LogEvent,
)
from src.http_logging.options import RequestLoggingOptions
from src.http_logging.policy import (
    ContextLogEntryPolicy,
    LogEntryPolicy,
    PropertiesLogEntryPolicy,
    default_get_level,
    is_succeeded,
    should_log,
)
from src.http_logging.sinks import CompositeSink, JsonlFileSink, LoggingSink, LogSink
from src.http_logging.transport import AsyncLoggingTransport, LoggingTransport

__all__ = [
    # Transports
    "AsyncLoggingTransport",
    "LoggingTransport",
    "create_async_client",
    "create_client",
    # Configuration
    "RequestLoggingOptions",
    "RequestLoggingSettings",
    "load_config",
    "LogMode",
    "LogLevel",
    # Policy
    "LogEntryPolicy",
    "PropertiesLogEntryPolicy",
    "ContextLogEntryPolicy",
    "default_get_level",
    "is_succeeded",
    "should_log",
    # Assembly
    "RequestLogBuilder",
    "LogDecision",
    # Models
    "HttpClientContext",
    "HttpRequestInfo",
    "HttpResponseInfo",
    "LogEntryParameters",
    "LogEvent",
    "NOT_LOGGED",
    # Sinks
    "LogSink",
    "LoggingSink",
    "JsonlFileSink",
    "CompositeSink",
    # Errors
    "HttpLoggingError",
    "ConfigurationError",
    "InvalidConfigError",
    "MissingConfigError",
]
