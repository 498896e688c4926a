"""
Request Logging Options

Immutable configuration shared by every call that goes through a logging
transport. Build it once and pass it to the transport constructor.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from src.http_logging.levels import LogMode
from src.http_logging.policy import LogEntryPolicy, PropertiesLogEntryPolicy

DEFAULT_MASKED_PROPERTIES: tuple[str, ...] = (
    "*password*",
    "*token*",
    "*clientsecret*",
    "*bearer*",
    "*authorization*",
    "*client-secret*",
    "*otp",
)
DEFAULT_MASK_FORMAT = "*** MASKED ***"
DEFAULT_BODY_LENGTH_LIMIT = 4000


class RequestLoggingOptions(BaseModel):
    """
    Configuration for the logging transports.

    Modes are evaluated per call: LOG_ALL always captures the axis,
    LOG_FAILURES only when the call failed, LOG_NONE never. When `log_mode`
    resolves to false nothing is logged for the call at all.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    # Visibility
    log_mode: LogMode = Field(
        default=LogMode.LOG_ALL,
        description="Whether calls are logged at all",
    )
    request_header_log_mode: LogMode = Field(
        default=LogMode.LOG_ALL,
        description="When request headers are captured",
    )
    request_body_log_mode: LogMode = Field(
        default=LogMode.LOG_ALL,
        description="When the request body is captured",
    )
    response_header_log_mode: LogMode = Field(
        default=LogMode.LOG_ALL,
        description="When response headers are captured",
    )
    response_body_log_mode: LogMode = Field(
        default=LogMode.LOG_FAILURES,
        description="When the response body is captured",
    )

    # Body capture
    request_body_log_text_length_limit: int = Field(
        default=DEFAULT_BODY_LENGTH_LIMIT,
        ge=0,
        description="Maximum characters of request body text kept in the log",
    )
    response_body_log_text_length_limit: int = Field(
        default=DEFAULT_BODY_LENGTH_LIMIT,
        ge=0,
        description="Maximum characters of response body text kept in the log",
    )
    log_request_body_as_structured_object: bool = Field(
        default=True,
        description="Parse JSON request bodies so fields can be masked and logged as objects",
    )
    log_response_body_as_structured_object: bool = Field(
        default=True,
        description="Parse JSON response bodies so fields can be masked and logged as objects",
    )
    mask_unparsed_body_text: bool = Field(
        default=False,
        description="Mask key=value / key: value pairs in bodies that are not valid JSON",
    )

    # Masking
    masked_properties: tuple[str, ...] = Field(
        default=DEFAULT_MASKED_PROPERTIES,
        description="Wildcard patterns of fields, headers and query parameters to mask",
    )
    mask_format: str = Field(
        default=DEFAULT_MASK_FORMAT,
        description="Replacement literal for masked values",
    )
    mask_query_parameters: bool = Field(
        default=True,
        description="Apply masked_properties to query string parameters",
    )

    # Log entry construction
    policy: LogEntryPolicy = Field(
        default_factory=PropertiesLogEntryPolicy,
        description="Level selection and log entry builder",
    )

    @field_validator("masked_properties", mode="before")
    @classmethod
    def _reject_missing_patterns(cls, value: Any) -> Any:
        if value is None:
            raise ValueError("masked_properties must not be None; use an empty list to disable")
        if isinstance(value, str):
            return (value,)
        return value