"""
Tracing Utilities.

Helpers for annotating the caller's current OpenTelemetry span. Without a
configured tracer provider the OpenTelemetry API hands out non-recording
spans and these helpers do nothing.
"""

from __future__ import annotations

import logging
from typing import Any

from opentelemetry import trace
from opentelemetry.trace import Span, Status, StatusCode, Tracer

logger = logging.getLogger(__name__)


def get_tracer(name: str) -> Tracer:
    """
    Get a tracer from the globally configured provider.

    Args:
        name: Instrumentation scope name (typically __name__)
    """
    return trace.get_tracer(name)


def add_span_attributes(attributes: dict[str, Any], span: Span | None = None) -> None:
    """
    Add attributes to the current span.

    Args:
        attributes: Key-value pairs to add; None values are skipped
        span: Optional span (uses current span if not provided)

    Example:
        add_span_attributes({
            "http.request.method": "GET",
            "http.response.status_code": 200,
        })
    """
    try:
        if span is None:
            span = trace.get_current_span()
        if span.is_recording():
            span.set_attributes({k: v for k, v in attributes.items() if v is not None})
    except Exception as e:
        logger.debug(f"Failed to add span attributes: {e}")


def record_exception(exception: BaseException, span: Span | None = None) -> None:
    """
    Record an exception on the current or specified span.

    Args:
        exception: The exception to record
        span: Optional span (uses current span if not provided)
    """
    try:
        if span is None:
            span = trace.get_current_span()
        if span.is_recording():
            span.record_exception(exception)
            span.set_status(Status(StatusCode.ERROR, str(exception)))
    except Exception as e:
        logger.debug(f"Failed to record exception: {e}")
