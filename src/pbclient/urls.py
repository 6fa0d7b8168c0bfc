"""Base URL normalisation and endpoint composition.

Every request path is composed against the backend's ``/api`` prefix::

    >>> compose("http://127.0.0.1:8090/", "collections/posts/records")
    'http://127.0.0.1:8090/api/collections/posts/records'
    >>> compose("http://127.0.0.1:8090", "/api/health")
    'http://127.0.0.1:8090/api/health'

Absolute ``http://`` / ``https://`` endpoints are returned untouched so that
fully custom requests can target any URL.
"""

from __future__ import annotations

API_PREFIX = "/api"


def normalize_base(url: str) -> str:
    """Strip trailing slashes from *url*."""
    return url.rstrip("/")


def is_absolute(endpoint: str) -> bool:
    """Return ``True`` if *endpoint* already carries an http(s) scheme."""
    return endpoint.startswith(("http://", "https://"))


def compose(base: str, endpoint: str) -> str:
    """Join *base* and *endpoint*, inserting the ``/api`` prefix when missing.

    Args:
        base: The backend base URL; trailing slashes are ignored.
        endpoint: A relative path (with or without leading slash or ``/api``
            prefix) or an absolute URL.

    Returns:
        The full request URL.
    """
    if is_absolute(endpoint):
        return endpoint

    base = normalize_base(base)
    path = "/" + endpoint.lstrip("/")
    if path.startswith(API_PREFIX + "/"):
        return f"{base}{path}"
    return f"{base}{API_PREFIX}{path}"
