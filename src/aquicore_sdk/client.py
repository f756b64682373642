"""Synchronous Aquicore API client.

Wires the token store, grant resolver, transport and executor together
behind the ``request(path, method, params, secure)`` contract.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, Self

from .config import ClientConfig
from .core.executor import SyncRequestExecutor, encode_params, unwrap_body
from .core.grants import GrantResolver
from .core.token_store import TokenStore
from .core.uri import UriBuilder
from .models import RequestSpec, TokenPair
from .transport import HttpTransport, create_http_client

if TYPE_CHECKING:
    from .core.token_store import TokenObserver


def initial_tokens(config: ClientConfig) -> TokenPair:
    return TokenPair(
        access_token=config.access_token,
        refresh_token=config.refresh_token,
    )


def as_token_pair(tokens: TokenPair | Mapping[str, Any]) -> TokenPair:
    """Accept a :class:`TokenPair` or a stored mapping with wire names."""
    if isinstance(tokens, TokenPair):
        return tokens
    return TokenPair.from_response(dict(tokens))


class AquicoreClient:
    """Synchronous Aquicore client.

    Args:
        config: SDK configuration.
        on_tokens_changed: Called with the full token pair whenever a grant
            stores new tokens, so the application can persist them.
    """

    def __init__(
        self,
        config: ClientConfig,
        *,
        on_tokens_changed: TokenObserver | None = None,
    ) -> None:
        self.config = config
        self._http = create_http_client(config)
        self._transport = HttpTransport(config, self._http)
        self._store = TokenStore(initial_tokens(config), observer=on_tokens_changed)
        self._grants = GrantResolver(config, self._store)
        self._executor = SyncRequestExecutor(
            self._transport,
            self._grants,
            UriBuilder(config.api_uri),
            telemetry=config.telemetry,
        )

    def __enter__(self) -> Self:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def close(self) -> None:
        """Close the HTTP client."""
        self._transport.close()

    @property
    def tokens(self) -> TokenPair:
        """Get the current token pair."""
        return self._store.current

    @property
    def refresh_token(self) -> str | None:
        """Get the current refresh token."""
        return self._store.refresh_token

    def request(
        self,
        path: str,
        method: str = "GET",
        params: Mapping[str, Any] | None = None,
        secure: bool = False,
    ) -> Any:
        """Make an authorized API call.

        The access token is added to the parameters. When the server answers
        with an invalid or expired token error and a refresh token is stored,
        tokens are refreshed and the call is retried once.

        Args:
            path: Path relative to the API base URI, or an absolute URI.
            method: HTTP method.
            params: Query parameters for GET, JSON body otherwise. Values
                that are not strings are JSON-encoded.
            secure: Upgrade the base URI to https.

        Returns:
            The decoded response, unwrapped from its ``body`` member.

        Raises:
            ApiError: On any failure.
        """
        spec = RequestSpec(path, method.upper(), encode_params(params), secure)
        return unwrap_body(self._executor.execute(spec))

    def no_token_request(
        self,
        path: str,
        method: str = "GET",
        params: Mapping[str, Any] | None = None,
        secure: bool = False,
    ) -> Any:
        """Make an API call that needs no access token.

        Returns:
            The decoded response.
        """
        spec = RequestSpec(path, method.upper(), encode_params(params), secure)
        return self._executor.send_unauthenticated(spec)

    def get_access_token(self) -> TokenPair:
        """Return the current tokens, running the password grant if needed.

        Raises:
            ApiError: ``INTERNAL`` when no credentials can produce a token.
        """
        self._executor.ensure_token()
        return self._store.current

    def refresh_access_token(self) -> TokenPair:
        """Run the refresh token grant now."""
        self._executor.refresh()
        return self._store.current

    def exchange_code(self, code: str | None = None) -> TokenPair:
        """Exchange an authorization code for tokens.

        Args:
            code: Authorization code; defaults to the configured one.
        """
        self._executor.run_grant(self._grants.authorization_code_grant(code))
        return self._store.current

    def set_tokens_from_store(self, tokens: TokenPair | Mapping[str, Any]) -> None:
        """Restore tokens kept by the application, e.g. in a session."""
        self._store.set_from_external(as_token_pair(tokens))

    def unset_tokens(self) -> None:
        """Forget the stored tokens."""
        self._store.clear()
