"""Configuration for the Aquicore SDK.

Uses Pydantic v2 frozen models. Endpoints default to the public Aquicore
backend; credentials must provide at least one way of obtaining a token.
"""

from __future__ import annotations

from typing import Annotated, Any, Self

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    SecretStr,
    field_validator,
    model_validator,
)

BACKEND_BASE_URI = "http://my.aquicore.com/api/v1"
BACKEND_AUTH_URI = "http://my.aquicore.com/api/v1/session/login"


class TelemetryConfig(BaseModel):
    """Logging and tracing configuration."""

    model_config = ConfigDict(frozen=True)

    enabled: bool = True
    service_name: str = "aquicore-sdk"
    log_level: str = "INFO"

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level name."""
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            msg = f"Unsupported log level: {v}"
            raise ValueError(msg)
        return level


class ClientConfig(BaseModel):
    """Main configuration for the Aquicore client."""

    model_config = ConfigDict(frozen=True, validate_default=True)

    # Endpoints
    base_uri: str = BACKEND_BASE_URI
    auth_uri: str | None = BACKEND_AUTH_URI
    services_uri: str | None = None

    # Credentials
    username: str | None = None
    password: SecretStr | None = None
    access_token: str | None = None
    refresh_token: str | None = None
    code: str | None = None
    redirect_uri: str | None = None
    client_id: str | None = None
    client_secret: SecretStr | None = None

    # HTTP settings
    timeout: Annotated[float, Field(gt=0, le=600)] = 60.0
    """Seconds allowed for each read, write and pool wait.

    httpx applies it per phase, so a slow server that keeps sending data
    can take longer in total.
    """
    connect_timeout: Annotated[float, Field(gt=0, le=120)] = 10.0
    user_agent: str = "aquicoreclient"
    allow_insecure_fallback: bool = False

    telemetry: TelemetryConfig = Field(default_factory=TelemetryConfig)

    @field_validator("base_uri", "auth_uri", "services_uri")
    @classmethod
    def validate_uri(cls, v: str | None) -> str | None:
        """Endpoints must be absolute http(s) URIs."""
        if v is None:
            return v
        if not v.startswith(("http://", "https://")):
            msg = f"Endpoint must be an absolute http(s) URI: {v}"
            raise ValueError(msg)
        return v

    @model_validator(mode="after")
    def require_credentials(self) -> Self:
        """At least one credential path must be configured."""
        if not (
            self.access_token
            or (self.username and self.password)
            or self.refresh_token
            or self.code
        ):
            msg = (
                "One of access_token, username+password, refresh_token "
                "or code is required"
            )
            raise ValueError(msg)
        return self

    @property
    def api_uri(self) -> str:
        """Base URI used for API calls."""
        return self.services_uri or self.base_uri

    @property
    def has_password_credentials(self) -> bool:
        return bool(self.username and self.password)

    def with_overrides(self, **kwargs: Any) -> Self:
        """Create new config with overridden values."""
        data = self.model_dump()
        data.update(kwargs)
        return self.__class__(**data)

    @classmethod
    def from_env(cls, prefix: str = "AQUICORE_") -> Self:
        """Create config from environment variables."""
        import os

        def get_env(key: str, default: Any = None) -> Any:
            return os.environ.get(f"{prefix}{key}", default)

        fields: dict[str, Any] = {}
        for key in (
            "base_uri",
            "auth_uri",
            "services_uri",
            "username",
            "password",
            "access_token",
            "refresh_token",
            "code",
            "redirect_uri",
            "client_id",
            "client_secret",
        ):
            value = get_env(key.upper())
            if value:
                fields[key] = value

        timeout = get_env("TIMEOUT")
        if timeout:
            fields["timeout"] = float(timeout)
        connect_timeout = get_env("CONNECT_TIMEOUT")
        if connect_timeout:
            fields["connect_timeout"] = float(connect_timeout)
        insecure = get_env("ALLOW_INSECURE_FALLBACK", "")
        fields["allow_insecure_fallback"] = insecure.lower() in {"1", "true", "yes"}

        return cls(**fields)
