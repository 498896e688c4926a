"""
Structured Log Output

Formatters and setup helpers for the stdlib logging records produced by
LoggingSink, which attaches the message template and captured properties
as `message_template` and `properties` record attributes.
"""

from __future__ import annotations

import json
import logging
import sys
from typing import Any

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class StructuredFormatter(logging.Formatter):
    """
    Format log records as single-line JSON objects.

    Records without structured attributes are still formatted, with just
    the standard fields.
    """

    def format(self, record: logging.LogRecord) -> str:
        """
        Format a log record as JSON.

        Args:
            record: Python logging.LogRecord to format

        Returns:
            JSON string with structured log data
        """
        log_data: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        template = getattr(record, "message_template", None)
        if template is not None:
            log_data["message_template"] = template

        properties = getattr(record, "properties", None)
        if isinstance(properties, dict):
            log_data["properties"] = properties

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str, ensure_ascii=False)


def configure_logging(
    level: int | str = logging.INFO,
    json_format: bool = False,
    logger_name: str | None = None,
    stream: Any = None,
) -> logging.Handler:
    """
    Attach a console handler to a logger.

    Args:
        level: Logging level
        json_format: Use StructuredFormatter instead of the plain text format
        logger_name: Logger to configure (root logger if not specified)
        stream: Output stream (defaults to stderr)

    Returns:
        The handler that was added
    """
    target = logging.getLogger(logger_name)
    target.setLevel(level)

    handler = logging.StreamHandler(stream or sys.stderr)
    if json_format:
        handler.setFormatter(StructuredFormatter())
    else:
        handler.setFormatter(logging.Formatter(DEFAULT_FORMAT))
    target.addHandler(handler)
    return handler
