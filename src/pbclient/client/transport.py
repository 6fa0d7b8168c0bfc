"""Asynchronous HTTP transport backed by :mod:`httpx`.

The dispatcher and the auth providers treat the transport as an opaque
:class:`Transport`: one coroutine that sends a request and either returns the
decoded body or raises. :class:`HttpxTransport` is the production
implementation; tests substitute an :class:`httpx.MockTransport` through the
``client`` argument or provide their own object with a matching ``send``.

Non-2xx answers raise :class:`TransportError` with a :class:`TransportResponse`
attached, which is exactly the "transport-wrapped" shape that
:func:`~pbclient.client.errors.normalize_error` understands. Network failures
raise :class:`TransportError` without a response, chained from the httpx error.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Optional, Protocol

import httpx

from pbclient.models import Attachment, RequestConfig

logger = logging.getLogger(__name__)


def decode_body(response: httpx.Response) -> Any:
    """JSON body of *response*, its text when it is not JSON, or ``None`` when empty."""
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text


class Transport(Protocol):
    """Anything that can send one request and return the decoded JSON body."""

    async def send(
        self,
        method: str,
        url: str,
        headers: dict[str, str],
        query: Optional[dict[str, Any]] = None,
        body: Any = None,
        form_data: Optional[dict[str, str]] = None,
        files: Optional[list[Attachment]] = None,
    ) -> Any: ...


@dataclass
class TransportResponse:
    """The parts of a failed HTTP response kept for error normalisation."""

    status_code: int
    body: Any = None
    headers: dict[str, str] = field(default_factory=dict)


class TransportError(Exception):
    """Raised by :class:`HttpxTransport` on non-2xx responses and network failures.

    Args:
        message: Human-readable description.
        response: The failed response, or ``None`` for network errors.
    """

    def __init__(self, message: str, response: Optional[TransportResponse] = None):
        super().__init__(message)
        self.message = message
        self.response = response

    @property
    def status_code(self) -> Optional[int]:
        return self.response.status_code if self.response is not None else None


class HttpxTransport:
    """:class:`Transport` implementation on :class:`httpx.AsyncClient`.

    Must be used as an async context manager unless an already-open
    ``client`` is injected, in which case the caller keeps ownership of it.

    Args:
        config: Timeout and SSL verification settings.
        client: Optional pre-built client (e.g. one with a mock transport).

    Example::

        async with HttpxTransport(RequestConfig(timeout=10)) as transport:
            body = await transport.send("GET", "http://127.0.0.1:8090/api/health", {})
    """

    def __init__(
        self,
        config: Optional[RequestConfig] = None,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self._config = config or RequestConfig()
        self._client = client
        self._owns_client = client is None

    # ------------------------------------------------------------------ #
    # Async context manager
    # ------------------------------------------------------------------ #

    async def __aenter__(self) -> HttpxTransport:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self._config.timeout,
                verify=self._config.verify_ssl,
                follow_redirects=True,
            )
        return self

    async def __aexit__(self, *args: object) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    # ------------------------------------------------------------------ #
    # Sending
    # ------------------------------------------------------------------ #

    async def send(
        self,
        method: str,
        url: str,
        headers: dict[str, str],
        query: Optional[dict[str, Any]] = None,
        body: Any = None,
        form_data: Optional[dict[str, str]] = None,
        files: Optional[list[Attachment]] = None,
    ) -> Any:
        """Send one request and return the decoded response body.

        Raises:
            TransportError: On a non-2xx status or a network-level failure.
        """
        assert self._client is not None, "Transport not initialised -- use as async context manager"

        kwargs: dict[str, Any] = {
            "method": method.upper(),
            "url": url,
            "headers": {"Accept": "application/json", **headers},
        }
        if query:
            kwargs["params"] = _query_params(query)
        if form_data is not None or files:
            kwargs["files"] = _multipart_parts(form_data or {}, files or [])
        elif body is not None:
            kwargs["json"] = body

        try:
            response = await self._client.request(**kwargs)
        except httpx.HTTPError as exc:
            raise TransportError(f"{type(exc).__name__}: {exc}") from exc

        data = decode_body(response)
        if response.is_success:
            return data

        logger.debug("%s %s -> HTTP %s", method.upper(), url, response.status_code)
        raise TransportError(
            f"HTTP {response.status_code} {response.reason_phrase}",
            TransportResponse(
                status_code=response.status_code,
                body=data,
                headers=dict(response.headers),
            ),
        )


def _multipart_parts(
    form_data: dict[str, str],
    files: list[Attachment],
) -> list[tuple[str, tuple[Optional[str], Any, Optional[str]]]]:
    """Build multipart parts; plain fields carry no filename so they stay form values."""
    parts: list[tuple[str, tuple[Optional[str], Any, Optional[str]]]] = [
        (key, (None, value, None)) for key, value in form_data.items()
    ]
    parts.extend(
        (f.field, (f.filename, f.content, f.content_type or "application/octet-stream"))
        for f in files
    )
    return parts


def _query_params(query: dict[str, Any]) -> dict[str, Any]:
    """Render booleans the way the backend expects them (``true``/``false``)."""
    params: dict[str, Any] = {}
    for key, value in query.items():
        if value is None:
            continue
        params[key] = ("true" if value else "false") if isinstance(value, bool) else value
    return params
