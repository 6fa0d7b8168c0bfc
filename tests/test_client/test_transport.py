"""Tests for pbclient.client.transport -- the httpx-backed transport."""

from __future__ import annotations

import asyncio
import json

import httpx
import pytest

from pbclient.client.transport import HttpxTransport, TransportError
from pbclient.models import Attachment, RequestConfig


def _run(coro):
    return asyncio.run(coro)


class TestHttpxTransport:
    def test_json_request_and_response(self, handler, transport_factory) -> None:
        handler.routes["POST /api/collections/posts/records"] = (200, {"id": "r1"})
        transport = transport_factory(handler)

        result = _run(
            transport.send(
                "post",
                "http://pb.test/api/collections/posts/records",
                {"Authorization": "Bearer t"},
                body={"title": "Hi"},
            )
        )

        assert result == {"id": "r1"}
        request = handler.requests[0]
        assert request.method == "POST"
        assert request.headers["Authorization"] == "Bearer t"
        assert request.headers["Accept"] == "application/json"
        assert json.loads(request.content) == {"title": "Hi"}

    def test_query_booleans_and_none(self, handler, transport_factory) -> None:
        handler.routes["GET /api/x"] = (200, {})
        transport = transport_factory(handler)
        _run(transport.send("GET", "http://pb.test/api/x", {}, query={"skipTotal": True, "a": None, "page": 2}))
        params = handler.requests[0].url.params
        assert params["skipTotal"] == "true"
        assert params["page"] == "2"
        assert "a" not in params

    def test_multipart_with_fields_and_files(self, handler, transport_factory) -> None:
        handler.routes["POST /api/x"] = (200, {"ok": True})
        transport = transport_factory(handler)
        _run(
            transport.send(
                "POST",
                "http://pb.test/api/x",
                {},
                body={"ignored": True},
                form_data={"title": "Hello"},
                files=[Attachment(field="cover", filename="a.png", content=b"PNG", content_type="image/png")],
            )
        )
        request = handler.requests[0]
        assert request.headers["Content-Type"].startswith("multipart/form-data")
        content = request.content
        assert b'name="title"' in content
        assert b"Hello" in content
        assert b'filename="a.png"' in content
        assert b"ignored" not in content

    def test_multipart_without_files(self, handler, transport_factory) -> None:
        handler.routes["POST /api/x"] = (200, {})
        transport = transport_factory(handler)
        _run(transport.send("POST", "http://pb.test/api/x", {}, form_data={"title": "Hello"}))
        assert handler.requests[0].headers["Content-Type"].startswith("multipart/form-data")

    def test_error_status_raises_with_response(self, handler, transport_factory) -> None:
        handler.routes["GET /api/x"] = (400, {"message": "bad"})
        transport = transport_factory(handler)
        with pytest.raises(TransportError) as exc_info:
            _run(transport.send("GET", "http://pb.test/api/x", {}))
        assert exc_info.value.status_code == 400
        assert exc_info.value.response.body == {"message": "bad"}

    def test_network_error_has_no_status(self, transport_factory) -> None:
        def _fail(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        transport = transport_factory(_fail)
        with pytest.raises(TransportError) as exc_info:
            _run(transport.send("GET", "http://pb.test/api/x", {}))
        assert exc_info.value.status_code is None
        assert isinstance(exc_info.value.__cause__, httpx.ConnectError)

    def test_empty_body_is_none(self, handler, transport_factory) -> None:
        handler.routes["DELETE /api/x"] = (204, None)
        transport = transport_factory(handler)
        assert _run(transport.send("DELETE", "http://pb.test/api/x", {})) is None

    def test_context_manager_owns_client(self) -> None:
        async def _scenario() -> bool:
            transport = HttpxTransport(RequestConfig(timeout=3))
            async with transport:
                client = transport._client
                assert client is not None
            return client.is_closed

        assert _run(_scenario()) is True
