"""Unit tests for configuration."""

from __future__ import annotations

import pytest
from pydantic import ValidationError as PydanticValidationError

from aquicore_sdk.config import (
    BACKEND_AUTH_URI,
    BACKEND_BASE_URI,
    ClientConfig,
    TelemetryConfig,
)


class TestDefaults:
    """Tests for default values."""

    def test_backend_endpoints(self) -> None:
        config = ClientConfig(access_token="a1")

        assert config.base_uri == BACKEND_BASE_URI
        assert config.auth_uri == BACKEND_AUTH_URI
        assert config.api_uri == BACKEND_BASE_URI
        assert config.timeout == 60.0
        assert config.connect_timeout == 10.0
        assert config.allow_insecure_fallback is False

    def test_requires_credentials(self) -> None:
        with pytest.raises(PydanticValidationError):
            ClientConfig()

    def test_username_alone_is_not_enough(self) -> None:
        with pytest.raises(PydanticValidationError):
            ClientConfig(username="u")

    def test_invalid_timeout(self) -> None:
        with pytest.raises(PydanticValidationError):
            ClientConfig(access_token="a1", timeout=0)

    def test_log_level_normalized(self) -> None:
        assert TelemetryConfig(log_level="debug").log_level == "DEBUG"

    def test_invalid_log_level(self) -> None:
        with pytest.raises(PydanticValidationError):
            TelemetryConfig(log_level="verbose")


class TestFromEnv:
    """Tests for ClientConfig.from_env."""

    def test_reads_prefixed_variables(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("AQUICORE_USERNAME", "user@example.com")
        monkeypatch.setenv("AQUICORE_PASSWORD", "s3cret")
        monkeypatch.setenv("AQUICORE_BASE_URI", "https://staging.aquicore.test/api/v1")
        monkeypatch.setenv("AQUICORE_TIMEOUT", "15")
        monkeypatch.setenv("AQUICORE_ALLOW_INSECURE_FALLBACK", "true")

        config = ClientConfig.from_env()

        assert config.username == "user@example.com"
        assert config.password.get_secret_value() == "s3cret"
        assert config.base_uri == "https://staging.aquicore.test/api/v1"
        assert config.timeout == 15.0
        assert config.allow_insecure_fallback is True

    def test_custom_prefix(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("METER_ACCESS_TOKEN", "a1")

        config = ClientConfig.from_env(prefix="METER_")

        assert config.access_token == "a1"
        assert config.allow_insecure_fallback is False
