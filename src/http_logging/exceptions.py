"""
HTTP Logging Exception Hierarchy

Provides structured exception types for the request logging transports.
All package-specific exceptions inherit from HttpLoggingError.

Only configuration problems are ever raised to callers. Errors that happen
while capturing or masking a call are reported on the diagnostic loggers and
never change the outcome of the wrapped HTTP call.

Usage:
    from src.http_logging.exceptions import ConfigurationError

    try:
        transport = AsyncLoggingTransport(options)
    except ConfigurationError as e:
        logger.error(f"Request logging misconfigured: {e}")
"""

from __future__ import annotations


class HttpLoggingError(Exception):
    """
    Base exception for all request logging errors.

    Attributes:
        message: Human-readable error description
        code: Optional machine-readable error code for programmatic handling
    """

    def __init__(self, message: str, code: str | None = None) -> None:
        self.message = message
        self.code = code
        super().__init__(message)

    def __str__(self) -> str:
        if self.code:
            return f"[{self.code}] {self.message}"
        return self.message


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(HttpLoggingError):
    """Base class for configuration-related errors."""

    pass


class InvalidConfigError(ConfigurationError):
    """Configuration value is invalid or malformed."""

    def __init__(self, field: str, value: str, reason: str) -> None:
        super().__init__(
            f"Invalid configuration for '{field}': {value}. {reason}",
            code="CONFIG_INVALID",
        )
        self.field = field
        self.value = value
        self.reason = reason


class MissingConfigError(ConfigurationError):
    """Required configuration is missing."""

    def __init__(self, field: str, hint: str | None = None) -> None:
        message = f"Missing required configuration: '{field}'"
        if hint:
            message += f". {hint}"
        super().__init__(message, code="CONFIG_MISSING")
        self.field = field
