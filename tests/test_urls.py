"""Tests for pbclient.urls -- base normalisation and endpoint composition."""

from __future__ import annotations

import pytest

from pbclient.urls import compose, is_absolute, normalize_base


class TestNormalizeBase:
    @pytest.mark.parametrize(
        "url, expected",
        [
            ("http://127.0.0.1:8090", "http://127.0.0.1:8090"),
            ("http://127.0.0.1:8090/", "http://127.0.0.1:8090"),
            ("http://127.0.0.1:8090///", "http://127.0.0.1:8090"),
            ("https://pb.example.com/sub/", "https://pb.example.com/sub"),
        ],
    )
    def test_trailing_slashes_removed(self, url: str, expected: str) -> None:
        assert normalize_base(url) == expected

    def test_idempotent(self) -> None:
        once = normalize_base("http://x//")
        assert normalize_base(once) == once


class TestCompose:
    @pytest.mark.parametrize(
        "endpoint",
        [
            "/collections/posts/records",
            "collections/posts/records",
            "/api/collections/posts/records",
            "api/collections/posts/records",
        ],
    )
    def test_api_prefix_added_exactly_once(self, endpoint: str) -> None:
        url = compose("http://127.0.0.1:8090/", endpoint)
        assert url == "http://127.0.0.1:8090/api/collections/posts/records"

    def test_health_endpoint(self) -> None:
        assert compose("http://x", "/api/health") == "http://x/api/health"

    def test_bare_api_segment_is_not_a_prefix(self) -> None:
        # "/apix" must not be mistaken for the /api prefix
        assert compose("http://x", "/apix/thing") == "http://x/api/apix/thing"

    def test_absolute_url_untouched(self) -> None:
        assert compose("http://x", "https://other.example.com/hook") == (
            "https://other.example.com/hook"
        )

    def test_is_absolute(self) -> None:
        assert is_absolute("http://a")
        assert is_absolute("https://a")
        assert not is_absolute("/api/health")
