"""
Masking Engine

Wildcard matching and redaction of sensitive values in JSON trees,
flat name/value maps and free-form text.
"""

from src.http_logging.masking.fields import (
    group_entries,
    json_path,
    mask_entries,
    mask_fields,
    mask_json,
    try_parse_json,
)
from src.http_logging.masking.text import mask_text
from src.http_logging.masking.wildcard import is_mask_match, matches, wildcard_to_regex

__all__ = [
    "group_entries",
    "is_mask_match",
    "json_path",
    "mask_entries",
    "mask_fields",
    "mask_json",
    "mask_text",
    "matches",
    "try_parse_json",
    "wildcard_to_regex",
]
