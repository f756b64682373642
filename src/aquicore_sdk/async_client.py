"""Async Aquicore API client.

Same contract as :class:`~aquicore_sdk.client.AquicoreClient`. Concurrent
calls that meet an expired token share a single refresh.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, Self

from .client import as_token_pair, initial_tokens
from .config import ClientConfig
from .core.executor import AsyncRequestExecutor, encode_params, unwrap_body
from .core.grants import GrantResolver
from .core.token_store import TokenStore
from .core.uri import UriBuilder
from .models import RequestSpec, TokenPair
from .transport import AsyncHttpTransport, create_async_http_client

if TYPE_CHECKING:
    from .core.token_store import TokenObserver


class AsyncAquicoreClient:
    """Asynchronous Aquicore client."""

    def __init__(
        self,
        config: ClientConfig,
        *,
        on_tokens_changed: TokenObserver | None = None,
    ) -> None:
        """Initialize async client.

        Args:
            config: SDK configuration.
            on_tokens_changed: Called with the full token pair whenever a
                grant stores new tokens.
        """
        self.config = config
        self._http = create_async_http_client(config)
        self._transport = AsyncHttpTransport(config, self._http)
        self._store = TokenStore(initial_tokens(config), observer=on_tokens_changed)
        self._grants = GrantResolver(config, self._store)
        self._executor = AsyncRequestExecutor(
            self._transport,
            self._grants,
            UriBuilder(config.api_uri),
            telemetry=config.telemetry,
        )

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the HTTP client."""
        await self._transport.close()

    @property
    def tokens(self) -> TokenPair:
        return self._store.current

    @property
    def refresh_token(self) -> str | None:
        return self._store.refresh_token

    async def request(
        self,
        path: str,
        method: str = "GET",
        params: Mapping[str, Any] | None = None,
        secure: bool = False,
    ) -> Any:
        """Make an authorized API call.

        See :meth:`AquicoreClient.request`.
        """
        spec = RequestSpec(path, method.upper(), encode_params(params), secure)
        return unwrap_body(await self._executor.execute(spec))

    async def no_token_request(
        self,
        path: str,
        method: str = "GET",
        params: Mapping[str, Any] | None = None,
        secure: bool = False,
    ) -> Any:
        """Make an API call that needs no access token."""
        spec = RequestSpec(path, method.upper(), encode_params(params), secure)
        return await self._executor.send_unauthenticated(spec)

    async def get_access_token(self) -> TokenPair:
        """Return the current tokens, running the password grant if needed."""
        await self._executor.ensure_token()
        return self._store.current

    async def refresh_access_token(self) -> TokenPair:
        """Run the refresh token grant now."""
        await self._executor.refresh()
        return self._store.current

    async def exchange_code(self, code: str | None = None) -> TokenPair:
        """Exchange an authorization code for tokens."""
        await self._executor.run_grant(self._grants.authorization_code_grant(code))
        return self._store.current

    def set_tokens_from_store(self, tokens: TokenPair | Mapping[str, Any]) -> None:
        """Restore tokens kept by the application."""
        self._store.set_from_external(as_token_pair(tokens))

    def unset_tokens(self) -> None:
        """Forget the stored tokens."""
        self._store.clear()
