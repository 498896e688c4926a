"""httpx-request-logging - Structured, masked logging of outbound HTTP calls."""

__version__ = "0.1.0"
