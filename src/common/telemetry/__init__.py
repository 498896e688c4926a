"""
Telemetry helpers.

Annotates the caller's OpenTelemetry spans with the outcome of logged HTTP
calls. Exporters and providers are configured by the host application.

Usage:
    from src.common.telemetry import add_span_attributes, record_exception

    add_span_attributes({"http.response.status_code": 200})
"""

from src.common.telemetry.tracing import (
    add_span_attributes,
    get_tracer,
    record_exception,
)

__all__ = [
    "add_span_attributes",
    "get_tracer",
    "record_exception",
]
