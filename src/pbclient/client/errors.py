"""Error normalisation -- maps any failure shape to a :class:`RequestError`.

Failures reach the core in three shapes:

1. a raw network error (an exception with no response at all),
2. a transport-wrapped error exposing a ``response`` (our own
   :class:`~pbclient.client.transport.TransportError`, an
   :class:`httpx.HTTPStatusError`, or any object/mapping with a ``response``),
3. the backend's own JSON error body, e.g.::

       {"code": 400, "message": "Failed to create record.",
        "data": {"title": {"code": "validation_required", "message": "Missing required value."}}}

:func:`normalize_error` checks them in that order and never raises.
Attributes are looked up on mappings by key and on objects by attribute, in
either camelCase or snake_case spelling.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any, Optional

import httpx

from pbclient.client.transport import decode_body
from pbclient.exceptions import DEFAULT_REQUEST_MESSAGE, RequestError

_MISSING = object()


def _field(obj: Any, *names: str) -> Any:
    """Return the first present, non-``None`` value among *names* on *obj*."""
    if obj is None:
        return None
    for name in names:
        if isinstance(obj, Mapping):
            value = obj.get(name, _MISSING)
        else:
            value = getattr(obj, name, _MISSING)
        if value is not _MISSING and value is not None:
            return value
    return None


def parse_status(value: Any) -> Optional[int]:
    """Parse an HTTP status from an int or a numeric string, else ``None``."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


def _response_body(response: Any) -> Any:
    if isinstance(response, httpx.Response):
        try:
            return decode_body(response)
        except httpx.ResponseNotRead:
            return None
    return _field(response, "body", "data")


def _response_status(response: Any) -> Optional[int]:
    return parse_status(_field(response, "statusCode", "status_code", "status"))


def _error_message(error: Any) -> Optional[str]:
    message = _field(error, "message")
    if isinstance(message, str) and message:
        return message
    if isinstance(error, BaseException):
        text = str(error)
        if text:
            return text
    return None


def _detail_text(detail: Any) -> str:
    if isinstance(detail, str):
        return detail
    message = _field(detail, "message")
    if message:
        return str(message)
    return json.dumps(detail, separators=(",", ":"), ensure_ascii=False, default=str)


def extract_field_errors(data: Any) -> list[str]:
    """Flatten a backend validation map into ``"<field>: <detail>"`` strings."""
    if not isinstance(data, Mapping):
        return []
    return [f"{field}: {_detail_text(detail)}" for field, detail in data.items()]


def normalize_error(error: Any) -> RequestError:
    """Convert any error shape into a :class:`~pbclient.exceptions.RequestError`.

    Args:
        error: An exception, a mapping, or any object. Its ``response``
            (``body``/``data``) is preferred, then its own ``body``, then an
            exception's ``raw``, then the error itself is treated as the body.

    Returns:
        A ``RequestError`` whose ``raw`` holds the resolved body.
    """
    if isinstance(error, RequestError):
        return error

    response = _field(error, "response")
    body = _response_body(response) if response is not None else None
    if body is None:
        body = _field(error, "body")
    if body is None and isinstance(error, BaseException):
        # AuthError and ProtocolError keep the backend body on ``raw``
        body = getattr(error, "raw", None)
    if body is None:
        body = error

    status_code = _response_status(response) if response is not None else None
    if status_code is None:
        status_code = parse_status(_field(error, "statusCode", "status_code"))

    body_is_error = body is error and isinstance(error, BaseException)
    body_map = body if isinstance(body, Mapping) else None

    message = None
    if body_map is not None and isinstance(body_map.get("message"), str):
        message = body_map["message"] or None
    if message is None:
        message = _error_message(error) or DEFAULT_REQUEST_MESSAGE

    code = body_map.get("code") if body_map is not None else None
    if code is None:
        code = _field(error, "code")
    if not isinstance(code, (int, str)) or isinstance(code, bool):
        code = None

    field_errors = extract_field_errors(body_map.get("data")) if body_map is not None else []

    raw = {"message": message} if body_is_error else body
    return RequestError(
        message=message,
        code=code,
        status_code=status_code,
        field_errors=field_errors,
        raw=raw,
    )


def get_status_code(error: Any) -> Optional[int]:
    """Best-effort HTTP status of *error*, searching it, its response, and its cause.

    Used by the admin login fallback to decide whether an endpoint is absent.
    """
    cause = _field(error, "cause")
    if cause is None and isinstance(error, BaseException):
        cause = error.__cause__
    for candidate in (error, _field(error, "response"), cause):
        if candidate is None:
            continue
        if isinstance(candidate, httpx.Response):
            return candidate.status_code
        status = parse_status(_field(candidate, "statusCode", "status_code", "httpCode", "status"))
        if status is not None:
            return status
    return None
