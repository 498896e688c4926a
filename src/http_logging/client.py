"""
Client construction helpers.

Convenience wrappers that put a logging transport under an httpx client.
They only assemble objects; nothing here is process-wide state.
"""

from __future__ import annotations

from typing import Any

import httpx

from src.http_logging.options import RequestLoggingOptions
from src.http_logging.sinks import LogSink
from src.http_logging.transport import AsyncLoggingTransport, LoggingTransport


def create_async_client(
    options: RequestLoggingOptions | None = None,
    sink: LogSink | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
    **client_kwargs: Any,
) -> httpx.AsyncClient:
    """
    Create an httpx.AsyncClient whose calls are logged.

    Args:
        options: Logging configuration (defaults to RequestLoggingOptions())
        sink: Where log events go (defaults to LoggingSink())
        transport: Transport to wrap (defaults to httpx.AsyncHTTPTransport())
        **client_kwargs: Passed through to httpx.AsyncClient

    Returns:
        Configured AsyncClient
    """
    logging_transport = AsyncLoggingTransport(
        options if options is not None else RequestLoggingOptions(),
        transport=transport,
        sink=sink,
    )
    return httpx.AsyncClient(transport=logging_transport, **client_kwargs)


def create_client(
    options: RequestLoggingOptions | None = None,
    sink: LogSink | None = None,
    transport: httpx.BaseTransport | None = None,
    **client_kwargs: Any,
) -> httpx.Client:
    """Create an httpx.Client whose calls are logged (see create_async_client)."""
    logging_transport = LoggingTransport(
        options if options is not None else RequestLoggingOptions(),
        transport=transport,
        sink=sink,
    )
    return httpx.Client(transport=logging_transport, **client_kwargs)
