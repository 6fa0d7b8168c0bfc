"""Free-form requests and connection checks."""

from __future__ import annotations

from typing import Any, Optional

from pbclient.client.dispatcher import RequestDispatcher
from pbclient.models import RequestSpec
from pbclient.redaction import attach_meta

_BODYLESS_METHODS = frozenset({"GET", "DELETE"})


async def custom_request(
    dispatcher: RequestDispatcher,
    method: str,
    endpoint: str,
    query: Optional[dict[str, Any]] = None,
    body: Any = None,
    include_raw: bool = False,
    include_debug: bool = False,
    skip_auth: bool = False,
) -> list[dict[str, Any]]:
    """Send an arbitrary request and return its result as a list of items.

    GET and DELETE never carry a body. An array response yields one item per
    element (with ``{"items": [...]}`` as the raw response); anything else
    yields a single item.
    """
    method = method.upper()
    if method in _BODYLESS_METHODS:
        body = None

    response = await dispatcher.dispatch(method, endpoint, body=body, query=query, skip_auth=skip_auth)
    debug_info = None
    if include_debug:
        debug_info = dispatcher.build_debug_info(
            RequestSpec(method=method, endpoint=endpoint, query=query, body=body)
        )

    if isinstance(response, list):
        wrapper = {"items": response}
        return [
            attach_meta(
                entry if isinstance(entry, dict) else {"value": entry},
                include_raw=include_raw,
                include_debug=include_debug,
                raw_response=wrapper,
                debug_info=debug_info,
            )
            for entry in response
        ]

    data = response if isinstance(response, dict) else {"result": response}
    return [
        attach_meta(
            data,
            include_raw=include_raw,
            include_debug=include_debug,
            raw_response=response,
            debug_info=debug_info,
        )
    ]


async def check_connection(dispatcher: RequestDispatcher) -> str:
    """Verify that the configured credentials work and describe how.

    Password modes log in (or hit the token cache), static tokens list
    collections, and unauthenticated profiles call the health endpoint.

    Raises:
        PbclientError: Whatever the underlying call raised.
    """
    mode = dispatcher.credentials.auth.mode
    if mode in ("admin", "collection"):
        await dispatcher.resolve_token()
        return f"{mode} login succeeded"
    if mode == "token":
        await dispatcher.dispatch("GET", "/api/collections", query={"perPage": 1})
        return "token accepted"
    await dispatcher.dispatch("GET", "/api/health", skip_auth=True)
    return "backend is healthy"
