"""Exception hierarchy for pbclient.

All exceptions inherit from :class:`PbclientError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`pbclient.exit_codes`.
The top-level error handler in :func:`pbclient.app.main` catches
``PbclientError`` and exits with the appropriate code, while unexpected
exceptions produce a crash log and exit with :data:`EXIT_GENERIC_FAILURE`.

Subclass hierarchy::

    PbclientError (exit 1)
    +-- InvalidUsageError   (exit 2)
    +-- ConfigError         (exit 1)
    +-- AuthError           (exit 3)
    +-- ProtocolError       (exit 8)
    +-- RequestError        (exit derived from the HTTP status)

Every error raised by the auth resolver or the request dispatcher keeps the
backend's raw body on ``raw`` so callers can decide whether to abort a batch
or record a per-item error.
"""

from __future__ import annotations

from typing import Any, Optional

from pbclient.exit_codes import (
    EXIT_AUTH_FAILURE,
    EXIT_CONNECTION_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_NOT_FOUND,
    EXIT_PROTOCOL_ERROR,
    EXIT_SERVER_ERROR,
)

DEFAULT_REQUEST_MESSAGE = "Request failed"


class PbclientError(Exception):
    """Base exception for all pbclient errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`pbclient.exit_codes`. The entry point catches
    this exception type and calls ``sys.exit(exc.exit_code)``.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        self.message = message
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(PbclientError):
    """Raised for invalid CLI arguments or missing required parameters."""

    exit_code = EXIT_INVALID_USAGE


class ConfigError(PbclientError):
    """Raised for configuration problems (missing credential fields, bad profiles, bad sources).

    Not retryable: the caller has to fix the configuration.
    """

    exit_code = EXIT_GENERIC_FAILURE


class AuthError(PbclientError):
    """Raised when a login call fails after every allowed endpoint was tried.

    Args:
        message: Human-readable error description.
        status_code: HTTP status of the last failed attempt, if any.
        raw: The backend body of the last failed attempt.
    """

    exit_code = EXIT_AUTH_FAILURE

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        raw: Any = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.raw = raw


class ProtocolError(PbclientError):
    """Raised when the backend answers successfully but violates the response contract.

    The canonical case is an authentication response without a ``token`` field.
    """

    exit_code = EXIT_PROTOCOL_ERROR

    def __init__(self, message: str, raw: Any = None):
        super().__init__(message)
        self.raw = raw


class RequestError(PbclientError):
    """A failed data request, normalised from whatever the transport raised.

    Built by :func:`pbclient.client.errors.normalize_error`. ``field_errors``
    is only populated when the backend returned a per-field validation map,
    and ``message`` is never empty.

    Args:
        message: Backend or transport message (falls back to a generic string).
        code: Backend-specific error code, if present.
        status_code: HTTP status code, if one could be determined.
        field_errors: ``"<field>: <detail>"`` strings in backend order.
        raw: The resolved error body, kept for display.
    """

    def __init__(
        self,
        message: str,
        code: int | str | None = None,
        status_code: Optional[int] = None,
        field_errors: Optional[list[str]] = None,
        raw: Any = None,
    ):
        super().__init__(message or DEFAULT_REQUEST_MESSAGE)
        self.code = code
        self.status_code = status_code
        self.field_errors = list(field_errors or [])
        self.raw = raw
        self.exit_code = _exit_code_for_status(status_code)

    def __str__(self) -> str:
        prefix = f"HTTP {self.status_code}: " if self.status_code else ""
        text = f"{prefix}{self.message}"
        if self.field_errors:
            text += " (" + "; ".join(self.field_errors) + ")"
        return text

    def to_item(self) -> dict[str, Any]:
        """Render the error as a per-item result for batch callers that continue on failure."""
        return {
            "error": self.message,
            "code": self.code,
            "statusCode": self.status_code,
            "fieldErrors": list(self.field_errors),
            "raw": self.raw,
        }


def _exit_code_for_status(status_code: Optional[int]) -> int:
    if status_code is None:
        return EXIT_CONNECTION_ERROR
    if status_code in (401, 403):
        return EXIT_AUTH_FAILURE
    if status_code == 404:
        return EXIT_NOT_FOUND
    if status_code >= 500:
        return EXIT_SERVER_ERROR
    return EXIT_GENERIC_FAILURE
