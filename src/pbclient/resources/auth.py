"""Explicit authentication operations: password logins and token refresh.

These calls always skip the dispatcher's own token resolution; the refresh
call sends the token it is refreshing as its ``Authorization`` header.
"""

from __future__ import annotations

from typing import Any, Literal, Optional
from urllib.parse import quote

from pbclient.auth.providers import LEGACY_ADMIN_AUTH_ENDPOINT, collection_auth_endpoint
from pbclient.client.dispatcher import RequestDispatcher
from pbclient.exceptions import ConfigError

ADMIN_REFRESH_ENDPOINT = "/api/admins/auth-refresh"


class AuthResource:
    """Login and refresh calls bound to a dispatcher."""

    def __init__(self, dispatcher: RequestDispatcher) -> None:
        self._dispatcher = dispatcher

    async def admin_login(self, email: str, password: str) -> Any:
        """Log in through the admin endpoint and return the backend's auth response."""
        return await self._dispatcher.dispatch(
            "POST",
            LEGACY_ADMIN_AUTH_ENDPOINT,
            body={"email": email, "password": password},
            skip_auth=True,
        )

    async def collection_login(self, collection: str, identity: str, password: str) -> Any:
        """Log in as a record of an auth collection."""
        return await self._dispatcher.dispatch(
            "POST",
            collection_auth_endpoint(collection),
            body={"identity": identity, "password": password},
            skip_auth=True,
        )

    async def refresh(
        self,
        kind: Literal["admin", "collection"],
        collection: Optional[str] = None,
        token: Optional[str] = None,
    ) -> Any:
        """Refresh a token, falling back to the configured credentials' token.

        Raises:
            ConfigError: No token was given and none could be resolved, or a
                collection refresh has no collection name.
        """
        if kind == "admin":
            endpoint = ADMIN_REFRESH_ENDPOINT
        else:
            if not collection:
                raise ConfigError("Collection refresh requires an auth collection name.")
            endpoint = f"/api/collections/{quote(collection, safe='')}/auth-refresh"

        if not token:
            token = await self._dispatcher.resolve_token()
        if not token:
            raise ConfigError("Refresh requires a token. Provide one or configure credentials.")

        return await self._dispatcher.dispatch(
            "POST",
            endpoint,
            headers={"Authorization": f"Bearer {token}"},
            skip_auth=True,
        )
