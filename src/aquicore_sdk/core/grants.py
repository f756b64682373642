"""Grant selection and token request building.

Shared by the sync and async executors: this module decides which grant
to run and builds its request, while the executors perform the I/O.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING, Any

from ..errors import ApiError
from ..models import TokenPair
from ..telemetry import logger_for

if TYPE_CHECKING:
    from ..config import ClientConfig
    from .token_store import TokenStore


class GrantType(StrEnum):
    """OAuth2 grants supported by the client."""

    PASSWORD = "password"
    REFRESH_TOKEN = "refresh_token"
    AUTHORIZATION_CODE = "authorization_code"


@dataclass(frozen=True)
class GrantRequest:
    """A token request to POST to the auth endpoint."""

    grant_type: GrantType
    url: str
    params: dict[str, Any] = field(repr=False)


class GrantResolver:
    """Chooses how an access token is obtained.

    Priority is fixed: a stored access token is returned as is, then the
    password grant runs when username and password are configured. The
    refresh grant and the authorization code exchange only run when asked
    for explicitly.
    """

    def __init__(self, config: ClientConfig, store: TokenStore) -> None:
        self.config = config
        self._store = store
        self._logger = logger_for(config.telemetry)

    def resolve(self) -> str | GrantRequest:
        """Return the stored access token, or the grant to execute.

        Raises:
            ApiError: ``INTERNAL`` when no grant can produce a token.
        """
        token = self._store.access_token
        if token:
            return token

        if self.config.has_password_credentials:
            return self.password_grant()

        raise ApiError.internal("No access token stored")

    def password_grant(self) -> GrantRequest:
        """Build the password credentials grant request."""
        if not self.config.auth_uri or self.config.password is None:
            raise ApiError.internal("missing args for getting password grant")

        self._logger.info("grant_selected", grant_type=GrantType.PASSWORD.value)
        return GrantRequest(
            GrantType.PASSWORD,
            self.config.auth_uri,
            {
                "user": self.config.username,
                "password": self.config.password.get_secret_value(),
            },
        )

    def refresh_grant(self) -> GrantRequest:
        """Build the refresh token grant request."""
        refresh_token = self._store.refresh_token
        if not refresh_token:
            raise ApiError.internal("No refresh token stored")
        if not self.config.auth_uri:
            raise ApiError.internal("missing args for getting refresh token grant")

        self._logger.info("grant_selected", grant_type=GrantType.REFRESH_TOKEN.value)
        params: dict[str, Any] = {
            "grant_type": GrantType.REFRESH_TOKEN.value,
            "refresh_token": refresh_token,
        }
        params.update(self._client_credentials())
        return GrantRequest(GrantType.REFRESH_TOKEN, self.config.auth_uri, params)

    def authorization_code_grant(self, code: str | None = None) -> GrantRequest:
        """Build the authorization code exchange request.

        Args:
            code: Authorization code; defaults to the configured one.
        """
        code = code or self.config.code
        if not code or not self.config.auth_uri:
            raise ApiError.internal("missing args for getting authorization code grant")

        self._logger.info(
            "grant_selected", grant_type=GrantType.AUTHORIZATION_CODE.value
        )
        params: dict[str, Any] = {
            "grant_type": GrantType.AUTHORIZATION_CODE.value,
            "code": code,
        }
        if self.config.redirect_uri:
            params["redirect_uri"] = self.config.redirect_uri
        params.update(self._client_credentials())
        return GrantRequest(GrantType.AUTHORIZATION_CODE, self.config.auth_uri, params)

    def _client_credentials(self) -> dict[str, str]:
        data: dict[str, str] = {}
        if self.config.client_id:
            data["client_id"] = self.config.client_id
        if self.config.client_secret:
            data["client_secret"] = self.config.client_secret.get_secret_value()
        return data

    def complete(self, grant: GrantRequest, response: Any) -> str:
        """Store the tokens returned by a grant.

        Returns:
            The new access token.

        Raises:
            ApiError: ``INTERNAL`` when the response holds no access token.
        """
        if not isinstance(response, dict):
            raise ApiError.internal("grant response did not contain an access token")

        tokens = TokenPair.from_response(response)
        access_token = tokens.access_token
        if not access_token:
            raise ApiError.internal("grant response did not contain an access token")

        self._store.update(tokens)
        self._logger.info("grant_completed", grant_type=grant.grant_type.value)
        return access_token

    @property
    def stored_token(self) -> str | None:
        return self._store.access_token

    @property
    def can_refresh(self) -> bool:
        """True when a refresh token is stored."""
        return bool(self._store.refresh_token)

    def is_stale(self, failed_token: str | None) -> bool:
        """True when the stored access token is still the one that failed.

        A caller waiting on a refresh in flight sees False here once the
        other caller has stored a new token.
        """
        return self._store.access_token in (None, failed_token)
