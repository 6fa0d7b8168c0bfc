"""Secret masking and request debug snapshots.

:func:`redact` produces a deep copy of a JSON-like value with sensitive keys
masked, and :func:`build_debug_info` uses it to turn a
:class:`~pbclient.models.RequestSpec` into a :class:`~pbclient.models.DebugInfo`
that is safe to print, log, or attach to a result as ``__debug``.
"""

from __future__ import annotations

import copy
from collections.abc import Mapping
from typing import Any, Optional

from pbclient.models import DebugInfo, RequestSpec
from pbclient.urls import compose

REDACTED = "[REDACTED]"

SENSITIVE_KEYS = frozenset(
    key.lower()
    for key in ("password", "adminPassword", "apiToken", "token", "authorization", "auth")
)


def is_sensitive(key: Any) -> bool:
    """Return ``True`` if *key* names a secret (case-insensitive)."""
    return str(key).lower() in SENSITIVE_KEYS


def redact(value: Any, max_depth: int = 6) -> Any:
    """Return a deep copy of *value* with sensitive mapping keys masked.

    Recursion stops past *max_depth* levels: deeper values are returned
    as-is rather than blanked, which bounds the cost on pathological input.
    The input is never mutated.
    """
    return _redact(value, 0, max_depth)


def _redact(value: Any, depth: int, max_depth: int) -> Any:
    if value is None or depth > max_depth:
        return value
    if isinstance(value, (list, tuple)):
        return [_redact(entry, depth + 1, max_depth) for entry in value]
    if not isinstance(value, Mapping):
        return value
    return {
        key: REDACTED if is_sensitive(key) else _redact(entry, depth + 1, max_depth)
        for key, entry in value.items()
    }


def build_debug_info(request: RequestSpec, base_url: Optional[str] = None) -> DebugInfo:
    """Snapshot *request* for diagnostics.

    Args:
        request: The request to describe.
        base_url: When given, ``url`` is the fully composed request URL;
            otherwise the endpoint is reported as written.

    Returns:
        A :class:`~pbclient.models.DebugInfo` whose body and headers are
        redacted and whose query is an independent copy.
    """
    url = compose(base_url, request.endpoint) if base_url else request.endpoint
    body = request.body
    if body is None and request.form_data:
        body = request.form_data
    return DebugInfo(
        method=request.method.upper(),
        url=url,
        query=copy.deepcopy(request.query or {}),
        body=redact(body if body is not None else {}),
        headers=redact(request.headers or {}),
    )


def attach_meta(
    data: Mapping[str, Any],
    include_raw: bool = False,
    include_debug: bool = False,
    raw_response: Any = None,
    debug_info: Optional[DebugInfo] = None,
) -> dict[str, Any]:
    """Copy *data* and add ``__raw`` / ``__debug`` entries on request."""
    output = dict(data)
    if include_raw and raw_response is not None:
        output["__raw"] = raw_response
    if include_debug and debug_info is not None:
        output["__debug"] = debug_info.model_dump()
    return output
