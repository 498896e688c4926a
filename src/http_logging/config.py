"""
Request Logging Configuration

Configuration settings using pydantic-settings for environment variable support.
"""

from __future__ import annotations

import logging
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.common.logging import configure_logging
from src.http_logging.exceptions import InvalidConfigError
from src.http_logging.levels import LogMode
from src.http_logging.options import (
    DEFAULT_BODY_LENGTH_LIMIT,
    DEFAULT_MASK_FORMAT,
    DEFAULT_MASKED_PROPERTIES,
    RequestLoggingOptions,
)
from src.http_logging.policy import (
    ContextLogEntryPolicy,
    LogEntryPolicy,
    PropertiesLogEntryPolicy,
)
from src.http_logging.sinks import DEFAULT_LOGGER_NAME, LoggingSink


class RequestLoggingSettings(BaseSettings):
    """
    Configuration for HTTP request logging.

    Reads from environment variables with HTTP_LOGGING_ prefix. List values
    (masked_properties) are given as JSON, e.g.
    HTTP_LOGGING_MASKED_PROPERTIES='["*password*", "*token*"]'.
    """

    model_config = SettingsConfigDict(
        env_prefix="HTTP_LOGGING_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Visibility
    log_mode: LogMode = Field(
        default=LogMode.LOG_ALL,
        description="Whether calls are logged: log_all, log_failures or log_none",
    )
    request_header_log_mode: LogMode = Field(default=LogMode.LOG_ALL)
    request_body_log_mode: LogMode = Field(default=LogMode.LOG_ALL)
    response_header_log_mode: LogMode = Field(default=LogMode.LOG_ALL)
    response_body_log_mode: LogMode = Field(default=LogMode.LOG_FAILURES)

    # Body capture
    request_body_log_text_length_limit: int = Field(
        default=DEFAULT_BODY_LENGTH_LIMIT,
        ge=0,
        description="Maximum characters of request body text kept",
    )
    response_body_log_text_length_limit: int = Field(
        default=DEFAULT_BODY_LENGTH_LIMIT,
        ge=0,
        description="Maximum characters of response body text kept",
    )
    log_request_body_as_structured_object: bool = Field(default=True)
    log_response_body_as_structured_object: bool = Field(default=True)
    mask_unparsed_body_text: bool = Field(
        default=False,
        description="Mask key=value pairs in bodies that are not JSON",
    )

    # Masking
    masked_properties: list[str] = Field(
        default_factory=lambda: list(DEFAULT_MASKED_PROPERTIES),
        description="Wildcard patterns of fields, headers and query parameters to mask",
    )
    mask_format: str = Field(
        default=DEFAULT_MASK_FORMAT,
        description="Replacement literal for masked values",
    )
    mask_query_parameters: bool = Field(default=True)

    # Log entry shape
    entry_shape: Literal["properties", "context"] = Field(
        default="properties",
        description="Flat named properties, or one nested HttpClientContext property",
    )
    message_template: str | None = Field(
        default=None,
        description="Override for the log message template",
    )

    # Logging
    logger_name: str = Field(
        default=DEFAULT_LOGGER_NAME,
        description="Logger used by the default sink",
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level",
    )
    log_format: Literal["text", "json"] = Field(
        default="text",
        description="Console log format",
    )

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        level = value.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise InvalidConfigError(
                "log_level", value, "Expected DEBUG, INFO, WARNING, ERROR or CRITICAL"
            )
        return level

    def build_policy(self) -> LogEntryPolicy:
        """Create the log entry policy selected by entry_shape."""
        if self.entry_shape == "context":
            return ContextLogEntryPolicy(message_template=self.message_template)
        return PropertiesLogEntryPolicy(message_template=self.message_template)

    def build_sink(self) -> LoggingSink:
        """Create the default stdlib logging sink."""
        return LoggingSink(logger_name=self.logger_name)

    def setup_logging(self) -> None:
        """Attach a console handler to the sink logger at log_level."""
        configure_logging(
            level=self.log_level.upper(),
            json_format=self.log_format == "json",
            logger_name=self.logger_name,
        )

    def to_options(self) -> RequestLoggingOptions:
        """Build immutable transport options from these settings."""
        return RequestLoggingOptions(
            log_mode=self.log_mode,
            request_header_log_mode=self.request_header_log_mode,
            request_body_log_mode=self.request_body_log_mode,
            response_header_log_mode=self.response_header_log_mode,
            response_body_log_mode=self.response_body_log_mode,
            request_body_log_text_length_limit=self.request_body_log_text_length_limit,
            response_body_log_text_length_limit=self.response_body_log_text_length_limit,
            log_request_body_as_structured_object=self.log_request_body_as_structured_object,
            log_response_body_as_structured_object=self.log_response_body_as_structured_object,
            mask_unparsed_body_text=self.mask_unparsed_body_text,
            masked_properties=tuple(self.masked_properties),
            mask_format=self.mask_format,
            mask_query_parameters=self.mask_query_parameters,
            policy=self.build_policy(),
        )


def load_config() -> RequestLoggingSettings:
    """Load configuration from environment."""
    return RequestLoggingSettings()
