"""pbclient -- authenticated HTTP client core for record-collection backends.

This package talks to a REST backend that exposes collections of
schema-validated records plus password- and token-based authentication
endpoints. It resolves and caches bearer tokens, dispatches JSON, query and
multipart requests, coerces loosely-typed string input into typed JSON
fields, and normalises the backend's error shapes into a single structured
error.

Typical usage::

    from pbclient import AdminPassword, CredentialConfig, RequestDispatcher
    from pbclient.client import HttpxTransport

    creds = CredentialConfig(
        base_url="http://127.0.0.1:8090",
        auth=AdminPassword(email="admin@example.com", password="secret"),
    )
    async with HttpxTransport() as transport:
        dispatcher = RequestDispatcher(creds, transport)
        page = await dispatcher.dispatch("GET", "/collections/posts/records")

Modules:
    urls: Base URL normalisation and endpoint composition.
    coercion: String-to-JSON field coercion and multipart form encoding.
    redaction: Secret masking and request debug snapshots.
    models: Pydantic models shared across the package.
    config: XDG-aware profile management and credential sources.
    exceptions: Exception hierarchy with exit-code mapping.
    app: Typer CLI entry point.
"""

__version__ = "0.1.0"

from pbclient.client.dispatcher import RequestDispatcher  # noqa: E402
from pbclient.models import (  # noqa: E402
    AdminPassword,
    CollectionPassword,
    CredentialConfig,
    NoAuth,
    StaticToken,
)

__all__ = [
    "AdminPassword",
    "CollectionPassword",
    "CredentialConfig",
    "NoAuth",
    "RequestDispatcher",
    "StaticToken",
    "__version__",
]
