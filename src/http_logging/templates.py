"""
Message Templates

Log entries carry a message template with named holes, e.g.
"HTTP Client request {RequestMethod} {RequestUri} completed in {ElapsedMilliseconds:.4f}ms".
Holes use Python format specs. Positional parameters are bound to holes in
the order the holes appear; the sink owns final serialization.
"""

from __future__ import annotations

import logging
import string
from collections.abc import Mapping, Sequence
from typing import Any

logger = logging.getLogger(__name__)

_formatter = string.Formatter()


def template_holes(template: str) -> list[str]:
    """
    List the distinct hole names of a template in order of appearance.

    Returns an empty list for templates that cannot be parsed.
    """
    holes: list[str] = []
    try:
        for _, field_name, _, _ in _formatter.parse(template):
            if field_name and field_name not in holes:
                holes.append(field_name)
    except ValueError as e:
        logger.debug(f"Cannot parse message template {template!r}: {e}")
        return []
    return holes


def bind_parameters(template: str, parameters: Sequence[Any]) -> dict[str, Any]:
    """Bind positional parameters to the template's holes, in order."""
    return dict(zip(template_holes(template), parameters))


def _format_hole(value: Any, spec: str) -> str:
    if not spec:
        return str(value)
    try:
        return format(value, spec)
    except (TypeError, ValueError):
        return str(value)


def render_template(template: str, properties: Mapping[str, Any]) -> str:
    """
    Render a template against named properties.

    Unknown holes are left as written and unusable format specs fall back to
    str(value), so rendering never raises.

    Args:
        template: Message template
        properties: Values by hole name

    Returns:
        Human-readable message
    """
    try:
        parsed = list(_formatter.parse(template))
    except ValueError:
        return template

    parts: list[str] = []
    for literal, field_name, spec, conversion in parsed:
        parts.append(literal)
        if field_name is None:
            continue
        if field_name not in properties:
            hole = field_name
            if conversion:
                hole += f"!{conversion}"
            if spec:
                hole += f":{spec}"
            parts.append("{" + hole + "}")
            continue
        value = properties[field_name]
        if conversion == "r":
            value = repr(value)
        elif conversion in ("s", "a"):
            value = str(value) if conversion == "s" else ascii(value)
        parts.append(_format_hole(value, spec or ""))
    return "".join(parts)
