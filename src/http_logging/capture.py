"""
Body, Header and Query Capture

Turns the parts of an httpx request/response into loggable values:
decoded, masked and truncated body text, the masked structured body,
masked header maps and parsed query parameters.

Parse and masking problems never raise to the caller: they are reported on
this module's logger and degrade the captured value (empty map, text-masked
or raw truncated text, no structured body). Errors of the response stream
itself are part of the call outcome and propagate from the buffer functions.
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any
from urllib.parse import unquote_plus

import httpx

from src.http_logging.masking import (
    group_entries,
    is_mask_match,
    mask_entries,
    mask_fields,
    mask_text,
    try_parse_json,
)
from src.http_logging.models import NOT_LOGGED, HeaderMap

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CapturedBody:
    """Body as it will appear in the log."""

    text: str
    structured: Any = None


def truncate(text: str, limit: int) -> str:
    """Cut text to at most `limit` characters (no ellipsis)."""
    if len(text) <= limit:
        return text
    return text[:limit]


def capture_body(
    text: str | None,
    should_capture: bool,
    *,
    parse_structured: bool,
    patterns: Sequence[str],
    mask: str,
    limit: int,
    mask_unparsed_text: bool = False,
) -> CapturedBody:
    """
    Prepare a body for logging.

    Args:
        text: Decoded body text (None or "" when there is no body)
        should_capture: Result of the axis policy for this call
        parse_structured: Parse JSON bodies and mask them field by field
        patterns: Wildcard patterns of fields to mask
        mask: Replacement literal
        limit: Maximum characters kept
        mask_unparsed_text: Apply key/value text masking to non-JSON bodies

    Returns:
        CapturedBody with masked, truncated text and the masked tree (if any)
    """
    if not should_capture:
        return CapturedBody(text=NOT_LOGGED)

    text = text or ""
    structured: Any = None
    try:
        parsed = try_parse_json(text) if parse_structured and text.strip() else None
        if parsed is not None:
            structured = mask_fields(parsed, patterns, mask)
            text = json.dumps(structured, ensure_ascii=False)
        elif mask_unparsed_text:
            text = mask_text(text, patterns, mask)
    except Exception as e:
        logger.warning(f"Cannot mask body, logging it unparsed: {e}")
        structured = None
        if mask_unparsed_text:
            text = mask_text(text, patterns, mask)

    return CapturedBody(text=truncate(text, limit), structured=structured)


# =============================================================================
# Reading bodies
# =============================================================================


def decode_body(headers: httpx.Headers, raw: bytes) -> str:
    """
    Decode raw body bytes the way httpx decodes response content.

    Honours Content-Encoding (gzip, deflate, ...) and the charset of the
    Content-Type header, defaulting to UTF-8.
    """
    if not raw:
        return ""
    decoder = httpx.Response(200, headers=headers, stream=httpx.ByteStream(raw))
    try:
        decoder.read()
        return decoder.text
    except httpx.DecodingError as e:
        logger.debug(f"Cannot decode body with its declared encoding: {e}")
        return raw.decode("utf-8", errors="replace")


def read_request_text(request: httpx.Request) -> str:
    """
    Return the decoded request body.

    Streaming request bodies that were never buffered are not captured.
    """
    try:
        content = request.content
    except httpx.RequestNotRead:
        logger.debug("Request body is a stream that was not buffered, not captured")
        return ""
    return decode_body(request.headers, content)


def _response_text(response: httpx.Response) -> str:
    try:
        return response.text
    except httpx.ResponseNotRead:
        return ""


def _replay(response: httpx.Response, raw: bytes) -> httpx.Response:
    try:
        request = response.request
    except RuntimeError:
        request = None
    return httpx.Response(
        status_code=response.status_code,
        headers=response.headers,
        stream=httpx.ByteStream(raw),
        extensions=response.extensions,
        request=request,
    )


async def abuffer_response(response: httpx.Response) -> tuple[httpx.Response, str]:
    """
    Read a response body once so it can be both logged and returned.

    Args:
        response: Response from the wrapped async transport

    Returns:
        (response to hand back to the client, decoded body text). The first
        item replays the same raw bytes, status, headers and extensions.

    Raises:
        Whatever the response stream raises while being read (e.g.
        httpx.ReadTimeout). The response is closed first.
    """
    if response.is_stream_consumed:
        return response, _response_text(response)
    try:
        raw = b"".join([part async for part in response.aiter_raw()])
    except (Exception, asyncio.CancelledError):
        await response.aclose()
        raise
    return _replay(response, raw), decode_body(response.headers, raw)


def buffer_response(response: httpx.Response) -> tuple[httpx.Response, str]:
    """Synchronous counterpart of abuffer_response."""
    if response.is_stream_consumed:
        return response, _response_text(response)
    try:
        raw = b"".join(response.iter_raw())
    except Exception:
        response.close()
        raise
    return _replay(response, raw), decode_body(response.headers, raw)


# =============================================================================
# Headers and query strings
# =============================================================================


def _collapse(entries: list[tuple[str, list[str]]]) -> HeaderMap:
    return {key: values[0] if len(values) == 1 else values for key, values in entries}


def capture_headers(
    headers: httpx.Headers | None,
    should_capture: bool,
    patterns: Sequence[str],
    mask: str,
) -> HeaderMap:
    """
    Build the masked header map of a request or response.

    Repeated headers are merged into one entry with a list of values; a
    header with a single value maps to that value. Names keep the casing
    they were sent with.
    """
    if not should_capture or headers is None:
        return {}
    try:
        entries = [
            (key.decode(headers.encoding), value.decode(headers.encoding))
            for key, value in headers.raw
        ]
        return _collapse(mask_entries(group_entries(entries), patterns, mask))
    except Exception as e:
        logger.warning(f"Cannot capture headers: {e}")
        return {}


def parse_query(
    query_string: str,
    patterns: Sequence[str] = (),
    mask: str = "",
) -> HeaderMap:
    """
    Parse a raw query string into parameters.

    Args:
        query_string: Raw query, with or without the leading "?"
        patterns: Wildcard patterns of parameters to mask (none by default)
        mask: Replacement literal

    Returns:
        Parameter name -> value, or list of values when repeated
    """
    query = query_string.lstrip("?")
    if not query.strip():
        return {}
    try:
        params = httpx.QueryParams(query)
        grouped = group_entries(params.multi_items(), fold_case=False)
        return _collapse(mask_entries(grouped, patterns, mask))
    except Exception as e:
        logger.warning(f"Cannot parse query string: {e}")
        return {}


def mask_query_string(query_string: str, patterns: Sequence[str], mask: str) -> str:
    """
    Replace the values of sensitive parameters in a raw query string.

    "?user=bob&token=abc" -> "?user=bob&token=*** MASKED ***"
    """
    if not query_string or not patterns:
        return query_string
    prefix = "?" if query_string.startswith("?") else ""
    segments = query_string[len(prefix) :].split("&")
    masked: list[str] = []
    for segment in segments:
        name, sep, _ = segment.partition("=")
        if sep and is_mask_match(unquote_plus(name), patterns):
            masked.append(f"{name}={mask}")
        else:
            masked.append(segment)
    return prefix + "&".join(masked)
