"""Bidirectional field coercion between loose strings and typed JSON values.

Record fields usually arrive as strings (CLI ``--field k=v`` flags, CSV
cells, form inputs). :func:`coerce` turns them into the JSON types the
backend's schema expects, and :func:`to_form_fields` goes the other way for
multipart submissions, where every part has to be a string.

The two directions round-trip for JSON-shaped values::

    >>> coerce(to_form_fields({"meta": {"tags": ["a"]}})["meta"])
    {'tags': ['a']}
"""

from __future__ import annotations

import json
import re
from collections.abc import Mapping
from datetime import date, datetime
from typing import Any

_NUMBER_PATTERN = re.compile(r"^-?(0|[1-9][0-9]*)(\.[0-9]+)?$")


class _Unset:
    """Marker for a field that was never provided (as opposed to ``None``)."""

    _instance: "_Unset | None" = None

    def __new__(cls) -> "_Unset":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET: Any = _Unset()


def coerce_string(value: str) -> Any:
    """Coerce a single string to its intended JSON value.

    Whitespace-only strings and strings that match no rule are returned
    unchanged (including their original whitespace). Bracket- or
    brace-delimited strings that fail to parse as JSON are also returned
    unchanged; this function never raises.
    """
    trimmed = value.strip()
    if not trimmed:
        return value

    lowered = trimmed.lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    if lowered == "null":
        return None

    match = _NUMBER_PATTERN.match(trimmed)
    if match:
        try:
            return float(trimmed) if match.group(2) else int(trimmed)
        except ValueError:
            # int() refuses more digits than sys.get_int_max_str_digits()
            return value

    if (trimmed.startswith("{") and trimmed.endswith("}")) or (
        trimmed.startswith("[") and trimmed.endswith("]")
    ):
        try:
            return json.loads(trimmed)
        except ValueError:
            return value

    return value


def coerce(value: Any, enabled: bool = True) -> Any:
    """Recursively coerce string leaves of *value* into typed JSON values.

    Args:
        value: A scalar, list/tuple, or mapping. Mappings keep their key order.
        enabled: When ``False`` the value is returned as-is.

    Returns:
        A new structure with coerced leaves. Dates and datetimes become
        ISO-8601 strings; other non-string leaves pass through.
    """
    if not enabled:
        return value
    if isinstance(value, (datetime, date)):
        return coerce_string(value.isoformat())
    if isinstance(value, Mapping):
        return {key: coerce(entry, enabled) for key, entry in value.items()}
    if isinstance(value, (list, tuple)):
        return [coerce(entry, enabled) for entry in value]
    if isinstance(value, str):
        return coerce_string(value)
    return value


def normalize_fields(fields: Mapping[str, Any], enabled: bool = True) -> dict[str, Any]:
    """Coerce every field of a record body, dropping :data:`UNSET` entries."""
    return {
        key: coerce(value, enabled)
        for key, value in fields.items()
        if value is not UNSET
    }


def to_form_fields(fields: Mapping[str, Any]) -> dict[str, str]:
    """Encode record fields as multipart-safe strings.

    :data:`UNSET` values are dropped, ``None`` becomes an empty string,
    mappings and lists become compact JSON, booleans become ``"true"`` /
    ``"false"``, and every other scalar goes through ``str()``.
    """
    form: dict[str, str] = {}
    for key, value in fields.items():
        if value is UNSET:
            continue
        if value is None:
            form[key] = ""
        elif isinstance(value, (Mapping, list, tuple)):
            form[key] = json.dumps(value, separators=(",", ":"), ensure_ascii=False, default=str)
        elif isinstance(value, bool):
            form[key] = "true" if value else "false"
        elif isinstance(value, (datetime, date)):
            form[key] = value.isoformat()
        else:
            form[key] = str(value)
    return form
