"""HTTP client core for pbclient.

Classes and functions:
    :class:`RequestDispatcher` -- builds, authenticates and sends requests.
    :class:`HttpxTransport` -- the httpx-backed transport.
    :class:`TransportError` -- raised by the transport on failure.
    :func:`normalize_error` -- maps any failure shape to a ``RequestError``.

Example::

    from pbclient.client import HttpxTransport, RequestDispatcher

    async with HttpxTransport() as transport:
        dispatcher = RequestDispatcher(credentials, transport)
        health = await dispatcher.dispatch("GET", "/health", skip_auth=True)
"""

from pbclient.client.dispatcher import RequestDispatcher
from pbclient.client.errors import get_status_code, normalize_error
from pbclient.client.transport import HttpxTransport, Transport, TransportError, TransportResponse

__all__ = [
    "HttpxTransport",
    "RequestDispatcher",
    "Transport",
    "TransportError",
    "TransportResponse",
    "get_status_code",
    "normalize_error",
]
