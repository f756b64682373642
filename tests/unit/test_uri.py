"""Unit tests for request URI building."""

from __future__ import annotations

from aquicore_sdk.core.uri import UriBuilder, build_uri, upgrade_scheme


class TestBuildUri:
    """Tests for build_uri."""

    def test_relative_path(self) -> None:
        assert build_uri("http://host/api", "/users/me", {}, False) == "http://host/api/users/me"

    def test_secure_upgrades_base(self) -> None:
        assert build_uri("http://host/api", "/users/me", {}, True) == "https://host/api/users/me"

    def test_absolute_path_wins(self) -> None:
        assert build_uri("http://host/api", "https://other/x", {}, False) == "https://other/x"

    def test_absolute_http_path_is_not_upgraded(self) -> None:
        """Secure only rewrites the base, never an absolute path."""
        assert build_uri("http://host/api", "http://other/x", {}, True) == "http://other/x"

    def test_single_separator(self) -> None:
        for base in ("http://host/api", "http://host/api/"):
            for path in ("users", "/users", "//users"):
                assert build_uri(base, path) == "http://host/api/users"

    def test_empty_path_returns_base(self) -> None:
        assert build_uri("http://host/api") == "http://host/api"

    def test_query_string(self) -> None:
        url = build_uri("http://host/api", "devices", {"a": "1", "b": "x y&z"})

        assert url == "http://host/api/devices?a=1&b=x+y%26z"

    def test_query_appended_to_existing_query(self) -> None:
        url = build_uri("http://host/api", "https://other/x?page=1", {"a": "1"})

        assert url == "https://other/x?page=1&a=1"

    def test_secure_keeps_https_base(self) -> None:
        assert build_uri("https://host/api", "me", secure=True) == "https://host/api/me"

    def test_secure_leaves_path_untouched(self) -> None:
        url = build_uri("http://host/api", "http-proxy/status", {"next": "http://x"}, True)

        assert url == "https://host/api/http-proxy/status?next=http%3A%2F%2Fx"


class TestUpgradeScheme:
    """Tests for upgrade_scheme."""

    def test_http(self) -> None:
        assert upgrade_scheme("http://host/http") == "https://host/http"

    def test_https_unchanged(self) -> None:
        assert upgrade_scheme("https://host") == "https://host"


class TestUriBuilder:
    """Tests for UriBuilder."""

    def test_uses_base(self) -> None:
        builder = UriBuilder("http://host/api")

        assert builder.build("users/me", secure=True) == "https://host/api/users/me"
