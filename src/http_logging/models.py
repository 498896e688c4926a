"""
Request Logging Models

Per-call data captured by the logging transports. Everything here is built
fresh for a single call and dropped once its log entry has been written.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, computed_field
from pydantic.alias_generators import to_pascal

from src.http_logging.levels import LogLevel
from src.http_logging.templates import bind_parameters, render_template

NOT_LOGGED = "(Not Logged)"

HeaderMap = dict[str, str | list[str]]


def _now_utc() -> datetime:
    """Return current UTC datetime."""
    return datetime.now(timezone.utc)


class _CapturedModel(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_pascal,
        populate_by_name=True,
    )


class HttpRequestInfo(_CapturedModel):
    """What was captured about the outbound request."""

    method: str | None = Field(default=None, description="HTTP method (e.g., POST)")
    scheme: str = Field(default="", description="URI scheme")
    host: str = Field(default="", description="Target host")
    port: int | None = Field(default=None, description="Non-default port, if any")
    path: str = Field(default="", description="Absolute path of the URI")
    query_string: str = Field(
        default="",
        description="Raw query string including the leading '?' (sensitive values masked)",
    )
    query: HeaderMap = Field(default_factory=dict, description="Parsed query parameters")
    body_string: str = Field(default="", description="Body text, masked and truncated")
    body: Any = Field(default=None, description="Masked structured body, if parsed")
    headers: HeaderMap = Field(default_factory=dict, description="Masked request headers")

    @computed_field  # type: ignore[prop-decorator]
    @property
    def uri(self) -> str:
        """Full request URI as logged."""
        host = f"[{self.host}]" if ":" in self.host else self.host
        if self.port is not None:
            host = f"{host}:{self.port}"
        authority = f"{self.scheme}://{host}" if self.scheme else host
        return f"{authority}{self.path}{self.query_string}"


class HttpResponseInfo(_CapturedModel):
    """What was captured about the call outcome."""

    status_code: int | None = Field(default=None, description="None when no response")
    is_succeed: bool = Field(default=False, description="No exception and status < 400")
    elapsed_milliseconds: float = Field(default=0.0, ge=0.0)
    body_string: str = Field(default="", description="Body text, masked and truncated")
    body: Any = Field(default=None, description="Masked structured body, if parsed")
    headers: HeaderMap = Field(default_factory=dict, description="Masked response headers")


class HttpClientContext(_CapturedModel):
    """Request and outcome of a single call."""

    request: HttpRequestInfo
    response: HttpResponseInfo

    def to_properties(self) -> dict[str, Any]:
        """Dump as nested PascalCase properties for a structured log sink."""
        return self.model_dump(by_alias=True)


@dataclass
class LogEntryParameters:
    """Message template and values produced by a log entry builder."""

    message_template: str
    message_parameters: tuple[Any, ...] = ()
    additional_properties: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class LogEvent:
    """
    A single log entry handed to a sink.

    Positional parameters are bound to the template holes in order; named
    properties are carried alongside. Sinks decide how to serialize both.
    """

    level: LogLevel
    message_template: str
    message_parameters: tuple[Any, ...] = ()
    properties: dict[str, Any] = field(default_factory=dict)
    exception: BaseException | None = None
    timestamp: datetime = field(default_factory=_now_utc)

    def bound_properties(self) -> dict[str, Any]:
        """Template-bound parameters merged with the named properties."""
        bound = bind_parameters(self.message_template, self.message_parameters)
        bound.update(self.properties)
        return bound

    def render(self) -> str:
        """Render the message template with all known values."""
        return render_template(self.message_template, self.bound_properties())
