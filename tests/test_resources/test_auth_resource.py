"""Tests for pbclient.resources.auth -- explicit logins and token refresh."""

from __future__ import annotations

import asyncio

import pytest

from pbclient.client.dispatcher import RequestDispatcher
from pbclient.exceptions import ConfigError
from pbclient.models import CredentialConfig, NoAuth, StaticToken
from pbclient.resources import AuthResource


def _auth(handler, transport_factory, credential=None) -> AuthResource:
    creds = CredentialConfig(base_url="http://pb.test", auth=credential or NoAuth())
    return AuthResource(RequestDispatcher(creds, transport_factory(handler)))


class TestAuthResource:
    def test_admin_login(self, handler, transport_factory) -> None:
        handler.routes["POST /api/admins/auth-with-password"] = (200, {"token": "t", "admin": {}})
        resource = _auth(handler, transport_factory, StaticToken(token="ignored"))
        assert asyncio.run(resource.admin_login("a@b.c", "pw"))["token"] == "t"
        request = handler.requests[0]
        assert handler.json_body(0) == {"email": "a@b.c", "password": "pw"}
        assert "Authorization" not in request.headers

    def test_collection_login(self, handler, transport_factory) -> None:
        handler.routes["POST /api/collections/members/auth-with-password"] = (200, {"token": "t"})
        resource = _auth(handler, transport_factory)
        asyncio.run(resource.collection_login("members", "ana", "pw"))
        assert handler.json_body(0) == {"identity": "ana", "password": "pw"}

    def test_refresh_with_explicit_token(self, handler, transport_factory) -> None:
        handler.routes["POST /api/admins/auth-refresh"] = (200, {"token": "new"})
        resource = _auth(handler, transport_factory)
        assert asyncio.run(resource.refresh("admin", token="old")) == {"token": "new"}
        assert handler.requests[0].headers["Authorization"] == "Bearer old"

    def test_refresh_uses_resolved_token(self, handler, transport_factory) -> None:
        handler.routes["POST /api/collections/users/auth-refresh"] = (200, {"token": "new"})
        resource = _auth(handler, transport_factory, StaticToken(token="configured"))
        asyncio.run(resource.refresh("collection", collection="users"))
        assert handler.requests[0].headers["Authorization"] == "Bearer configured"

    def test_refresh_without_any_token(self, handler, transport_factory) -> None:
        resource = _auth(handler, transport_factory)
        with pytest.raises(ConfigError, match="Refresh requires a token"):
            asyncio.run(resource.refresh("admin"))
        assert handler.requests == []

    def test_collection_refresh_needs_collection(self, handler, transport_factory) -> None:
        resource = _auth(handler, transport_factory)
        with pytest.raises(ConfigError, match="collection name"):
            asyncio.run(resource.refresh("collection", token="t"))
