"""
Text Masking

Best-effort masking for payloads that could not be parsed as JSON:
form-encoded bodies ("user=bob&password=hunter2"), truncated or malformed
JSON ('{"token": "abc", ...'), and "key: value" text. A value is replaced
when its key matches one of the wildcard patterns; quotes around the value
are preserved.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from re import Match

from src.http_logging.masking.wildcard import is_mask_match

_KEY_VALUE_PATTERN = re.compile(
    r"""
    (?P<key>"[^"\\\r\n]+"|'[^'\\\r\n]+'|[\w.\-]+)    # bare or quoted key
    (?P<sep>\s*[=:]\s*)
    (?P<value>"(?:[^"\\]|\\.)*"|'(?:[^'\\]|\\.)*'|[^&,;\s}\]]*)
    """,
    re.VERBOSE,
)


def mask_text(text: str, patterns: Sequence[str], mask: str) -> str:
    """
    Mask values of sensitive keys inside free-form text.

    Args:
        text: Raw payload text
        patterns: Wildcard patterns matched against the keys
        mask: Replacement literal

    Returns:
        Text with matched values replaced
    """
    if not text or not patterns:
        return text

    def _replace(match: Match[str]) -> str:
        key = match.group("key").strip("\"'")
        if not is_mask_match(key, patterns):
            return match.group(0)
        value = match.group("value")
        if value[:1] in ("'", '"'):
            masked = f"{value[0]}{mask}{value[0]}"
        else:
            masked = mask
        return f"{match.group('key')}{match.group('sep')}{masked}"

    return _KEY_VALUE_PATTERN.sub(_replace, text)
