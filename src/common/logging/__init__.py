"""
Common Logging Utilities

Provides JSON formatting and console setup for structured request logs.
"""

from src.common.logging.structured import StructuredFormatter, configure_logging

__all__ = [
    "StructuredFormatter",
    "configure_logging",
]
