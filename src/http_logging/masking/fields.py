"""
Field Masking

Redacts sensitive values before they reach a log sink.

Two shapes are supported:
- Structured values: a parsed JSON tree (dict / list / scalar). Object
  properties whose JSON path matches a wildcard pattern get their value
  replaced by the mask literal.
- Flat maps: (name, value-or-values) pairs such as HTTP headers or query
  parameters. Matching names get their whole value replaced by [mask].

Usage:
    from src.http_logging.masking import mask_fields, mask_entries

    masked = mask_fields({"user": {"password": "s3cret"}}, ["*password*"], "***")
    # {"user": {"password": "***"}}
"""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Iterable, Sequence
from typing import Any

from src.http_logging.masking.wildcard import is_mask_match

logger = logging.getLogger(__name__)

# Property names containing any of these are written bracket-quoted in paths
_PATH_SPECIAL_CHARS = frozenset(".'/\"[]() \t\n\r\f\b\\\u0085\u2028\u2029")

EntryValue = str | Sequence[str]


# =============================================================================
# Structured (JSON tree) masking
# =============================================================================


def try_parse_json(text: str) -> Any | None:
    """
    Parse text as a JSON object or array.

    Only text that looks like a container (`{...}` or `[...]`) is parsed, so
    plain strings and numbers are never turned into structured values.

    Args:
        text: Candidate JSON text

    Returns:
        The parsed dict or list, or None when the text is not JSON
    """
    stripped = text.strip()
    if not (
        (stripped.startswith("{") and stripped.endswith("}"))
        or (stripped.startswith("[") and stripped.endswith("]"))
    ):
        return None
    try:
        return json.loads(stripped)
    except ValueError:
        return None


def json_path(parent: str, key: str | int) -> str:
    """
    Build the path of a child value.

    Args:
        parent: Path of the containing value ("" for the root)
        key: Property name (objects) or index (arrays)

    Returns:
        Path such as "a.b", "a[0].b" or "a['x.y']"
    """
    if isinstance(key, int):
        return f"{parent}[{key}]"
    if any(ch in _PATH_SPECIAL_CHARS for ch in key):
        escaped = key.replace("\\", "\\\\").replace("'", "\\'")
        return f"{parent}['{escaped}']"
    if parent:
        return f"{parent}.{key}"
    return key


def _property_matches(path: str, patterns: Sequence[str]) -> bool:
    try:
        return is_mask_match(path, patterns)
    except (TypeError, re.error) as e:
        logger.debug(f"Cannot evaluate mask patterns for '{path}', leaving it unmasked: {e}")
        return False


def _mask_node(value: Any, path: str, patterns: Sequence[str], mask: str) -> Any:
    if isinstance(value, dict):
        masked: dict[str, Any] = {}
        for key, child in value.items():
            child_path = json_path(path, key)
            if _property_matches(child_path, patterns):
                masked[key] = mask
            else:
                masked[key] = _mask_node(child, child_path, patterns, mask)
        return masked
    if isinstance(value, list):
        return [
            _mask_node(item, json_path(path, index), patterns, mask)
            for index, item in enumerate(value)
        ]
    return value


def mask_fields(tree: Any, patterns: Sequence[str], mask: str) -> Any:
    """
    Mask object properties of a parsed JSON tree.

    The input is not modified; a new tree with the same shape and key order
    is returned. Arrays are walked element by element, scalars are never
    masked on their own.

    Args:
        tree: Parsed JSON value
        patterns: Wildcard patterns matched against property paths
        mask: Replacement literal

    Returns:
        Masked tree (the input itself when there is nothing to mask)

    Raises:
        ValueError: If patterns is None
    """
    if patterns is None:
        raise ValueError("patterns must not be None")
    if not patterns:
        return tree
    if not isinstance(tree, dict | list):
        return tree
    return _mask_node(tree, "", list(patterns), mask)


def mask_json(text: str, patterns: Sequence[str], mask: str) -> str:
    """
    Mask a JSON document given as text.

    Args:
        text: JSON text
        patterns: Wildcard patterns matched against property paths
        mask: Replacement literal

    Returns:
        Re-serialized masked JSON, or the text unchanged if blank or
        there are no patterns

    Raises:
        ValueError: If patterns is None
        json.JSONDecodeError: If the text is not valid JSON
    """
    if patterns is None:
        raise ValueError("patterns must not be None")
    if not text or not text.strip() or not patterns:
        return text
    return json.dumps(mask_fields(json.loads(text), patterns, mask), ensure_ascii=False)


# =============================================================================
# Flat map masking
# =============================================================================


def _as_values(value: EntryValue) -> list[str]:
    if isinstance(value, str):
        return [value]
    return list(value)


def group_entries(
    entries: Iterable[tuple[str, EntryValue]],
    fold_case: bool = True,
) -> list[tuple[str, list[str]]]:
    """
    Merge repeated names into one entry each.

    By default names compare case-insensitively (as HTTP header names do).
    The first spelling and the order of first appearance are kept; values
    are concatenated in the order they were seen.
    """
    grouped: dict[str, tuple[str, list[str]]] = {}
    for key, value in entries:
        folded = key.casefold() if fold_case else key
        if folded not in grouped:
            grouped[folded] = (key, [])
        grouped[folded][1].extend(_as_values(value))
    return list(grouped.values())


def mask_entries(
    entries: Iterable[tuple[str, EntryValue]],
    patterns: Sequence[str],
    mask: str,
) -> list[tuple[str, list[str]]]:
    """
    Mask a sequence of (name, value-or-values) pairs.

    Args:
        entries: Pairs to mask, e.g. grouped HTTP headers
        patterns: Wildcard patterns matched against the names
        mask: Replacement literal

    Returns:
        Pairs in the same order; matched names carry [mask] as their values
    """
    if patterns is None:
        raise ValueError("patterns must not be None")
    masked: list[tuple[str, list[str]]] = []
    for key, value in entries:
        if _property_matches(key, patterns):
            masked.append((key, [mask]))
        else:
            masked.append((key, _as_values(value)))
    return masked
