"""
Wildcard Matching

Glob-like patterns used to select sensitive fields, header names and query
parameters. `*` matches any run of characters (including none); every other
character is a literal. Patterns match the whole path, ignoring case.
"""

from __future__ import annotations

import functools
import re
from collections.abc import Iterable
from re import Pattern


def wildcard_to_regex(pattern: str) -> str:
    """
    Translate a wildcard pattern into an anchored regular expression.

    Args:
        pattern: Wildcard pattern (e.g., "*token*")

    Returns:
        Regex source (e.g., "^.*token.*$")
    """
    return "^" + re.escape(pattern).replace(r"\*", ".*") + "$"


@functools.lru_cache(maxsize=512)
def _compile(pattern: str) -> Pattern[str]:
    return re.compile(wildcard_to_regex(pattern), re.IGNORECASE | re.DOTALL)


def matches(path: str, pattern: str) -> bool:
    """Check whether a single wildcard pattern matches the whole path."""
    return _compile(pattern).fullmatch(path) is not None


def is_mask_match(path: str, patterns: Iterable[str]) -> bool:
    """
    Check whether a path must be masked.

    Args:
        path: Field path, header name or query parameter name
        patterns: Wildcard patterns; an empty collection never matches

    Returns:
        True if any pattern matches the path
    """
    return any(matches(path, pattern) for pattern in patterns)
