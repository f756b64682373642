"""Authorized request execution for the Aquicore SDK.

Runs one logical API call: obtain a token, send the request, and when
the server reports an invalid or expired access token, refresh once and
retry once. Shared by the sync and async clients.
"""

from __future__ import annotations

import asyncio
import json
import threading
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from ..errors import ApiError, ErrorKind
from ..models import RequestSpec
from ..telemetry import logger_for, trace_operation, tracer_for
from .decoder import ResponseDecoder

if TYPE_CHECKING:
    from ..config import TelemetryConfig
    from ..transport import AsyncHttpTransport, HttpTransport
    from .grants import GrantRequest, GrantResolver
    from .uri import UriBuilder

ACCESS_TOKEN_PARAM = "authToken"

_QUERY_METHODS = frozenset({"GET", "DELETE", "HEAD"})


def split_params(
    method: str, params: Mapping[str, Any] | None
) -> tuple[dict[str, Any] | None, dict[str, Any] | None]:
    """Split params into query parameters and JSON body.

    Returns:
        Tuple of (query, body); at most one of them is set.
    """
    if not params:
        return None, None
    if method.upper() in _QUERY_METHODS:
        return dict(params), None
    return None, dict(params)


def with_access_token(params: Mapping[str, Any] | None, token: str) -> dict[str, Any]:
    """Copy params and add the access token."""
    signed = dict(params or {})
    signed[ACCESS_TOKEN_PARAM] = token
    return signed


def not_authenticated(error: ApiError) -> ApiError:
    """Wrap an ``API`` failure met while resolving a token."""
    return ApiError.not_authenticated(error.code, error.message)


class SyncRequestExecutor:
    """Synchronous authorized request executor."""

    def __init__(
        self,
        transport: HttpTransport,
        grants: GrantResolver,
        uri_builder: UriBuilder,
        decoder: ResponseDecoder | None = None,
        telemetry: TelemetryConfig | None = None,
    ) -> None:
        self._transport = transport
        self._grants = grants
        self._uri = uri_builder
        self._decoder = decoder or ResponseDecoder()
        self._token_lock = threading.Lock()
        self._tracer = tracer_for(telemetry)
        self._logger = logger_for(telemetry)

    def send_unauthenticated(self, spec: RequestSpec) -> Any:
        """Send a request without an access token and decode the response."""
        query, body = split_params(spec.method, spec.params)
        url = self._uri.build(spec.path, query, spec.secure)
        raw = self._transport.send(url, spec.method.upper(), body)
        return self._decoder.decode_response(raw)

    def run_grant(self, grant: GrantRequest) -> str:
        """Execute a grant request, store the tokens and return the access token."""
        with trace_operation(
            "token_grant",
            attributes={"grant_type": grant.grant_type.value},
            tracer=self._tracer,
        ):
            response = self.send_unauthenticated(
                RequestSpec(grant.url, "POST", grant.params)
            )
            return self._grants.complete(grant, response)

    def ensure_token(self) -> str:
        """Return a usable access token, running a grant when needed.

        The grant runs under the token lock. Callers that waited on it
        find the stored token and send no credentials of their own.
        """
        token = self._grants.stored_token
        if token:
            return token
        with self._token_lock:
            plan = self._grants.resolve()
            if isinstance(plan, str):
                self._logger.debug("token_grant_coalesced")
                return plan
            return self.run_grant(plan)

    def refresh(self, failed_token: str | None = None) -> None:
        """Run the refresh grant, unless another call already replaced the token.

        Raises:
            ApiError: If the refresh grant fails.
        """
        with self._token_lock:
            if failed_token is not None and not self._grants.is_stale(failed_token):
                self._logger.debug("token_refresh_coalesced")
                return
            self.run_grant(self._grants.refresh_grant())

    def execute(self, spec: RequestSpec) -> Any:
        """Execute an authorized call.

        Raises:
            ApiError: ``NOT_AUTHENTICATED`` when no token could be obtained,
                otherwise the error of the call itself.
        """
        with trace_operation(
            "authorized_request",
            attributes={"http.method": spec.method, "path": spec.path},
            tracer=self._tracer,
        ):
            token = self._authenticate()
            try:
                return self._send_with_token(spec, token)
            except ApiError as exc:
                if not (exc.is_auth_expiry and self._grants.can_refresh):
                    raise
                self._logger.info("token_expired", code=exc.code)
                try:
                    self.refresh(token)
                except ApiError as refresh_exc:
                    self._logger.warning(
                        "token_refresh_failed",
                        kind=refresh_exc.kind.value,
                        code=refresh_exc.code,
                    )
                    raise exc from refresh_exc
                self._logger.info("request_retry", path=spec.path)
                return self._send_with_token(spec, self._authenticate())

    def _authenticate(self) -> str:
        try:
            return self.ensure_token()
        except ApiError as exc:
            if exc.kind is ErrorKind.API:
                raise not_authenticated(exc) from exc
            raise

    def _send_with_token(self, spec: RequestSpec, token: str) -> Any:
        signed = RequestSpec(
            spec.path,
            spec.method,
            with_access_token(spec.params, token),
            spec.secure,
        )
        return self.send_unauthenticated(signed)


class AsyncRequestExecutor:
    """Asynchronous authorized request executor.

    Concurrent calls share one token grant and one refresh: the first
    takes the token lock and runs the grant, the others find the new token
    once they get the lock.
    """

    def __init__(
        self,
        transport: AsyncHttpTransport,
        grants: GrantResolver,
        uri_builder: UriBuilder,
        decoder: ResponseDecoder | None = None,
        telemetry: TelemetryConfig | None = None,
    ) -> None:
        self._transport = transport
        self._grants = grants
        self._uri = uri_builder
        self._decoder = decoder or ResponseDecoder()
        self._token_lock = asyncio.Lock()
        self._tracer = tracer_for(telemetry)
        self._logger = logger_for(telemetry)

    async def send_unauthenticated(self, spec: RequestSpec) -> Any:
        """Send a request without an access token and decode the response."""
        query, body = split_params(spec.method, spec.params)
        url = self._uri.build(spec.path, query, spec.secure)
        raw = await self._transport.send(url, spec.method.upper(), body)
        return self._decoder.decode_response(raw)

    async def run_grant(self, grant: GrantRequest) -> str:
        """Execute a grant request, store the tokens and return the access token."""
        with trace_operation(
            "token_grant",
            attributes={"grant_type": grant.grant_type.value},
            tracer=self._tracer,
        ):
            response = await self.send_unauthenticated(
                RequestSpec(grant.url, "POST", grant.params)
            )
            return self._grants.complete(grant, response)

    async def ensure_token(self) -> str:
        """Return a usable access token. See :meth:`SyncRequestExecutor.ensure_token`."""
        token = self._grants.stored_token
        if token:
            return token
        async with self._token_lock:
            plan = self._grants.resolve()
            if isinstance(plan, str):
                self._logger.debug("token_grant_coalesced")
                return plan
            return await self.run_grant(plan)

    async def refresh(self, failed_token: str | None = None) -> None:
        """Run the refresh grant, unless another call already replaced the token."""
        async with self._token_lock:
            if failed_token is not None and not self._grants.is_stale(failed_token):
                self._logger.debug("token_refresh_coalesced")
                return
            await self.run_grant(self._grants.refresh_grant())

    async def execute(self, spec: RequestSpec) -> Any:
        """Execute an authorized call. See :meth:`SyncRequestExecutor.execute`."""
        with trace_operation(
            "authorized_request",
            attributes={"http.method": spec.method, "path": spec.path},
            tracer=self._tracer,
        ):
            token = await self._authenticate()
            try:
                return await self._send_with_token(spec, token)
            except ApiError as exc:
                if not (exc.is_auth_expiry and self._grants.can_refresh):
                    raise
                self._logger.info("token_expired", code=exc.code)
                try:
                    await self.refresh(token)
                except ApiError as refresh_exc:
                    self._logger.warning(
                        "token_refresh_failed",
                        kind=refresh_exc.kind.value,
                        code=refresh_exc.code,
                    )
                    raise exc from refresh_exc
                self._logger.info("request_retry", path=spec.path)
                return await self._send_with_token(spec, await self._authenticate())

    async def _authenticate(self) -> str:
        try:
            return await self.ensure_token()
        except ApiError as exc:
            if exc.kind is ErrorKind.API:
                raise not_authenticated(exc) from exc
            raise

    async def _send_with_token(self, spec: RequestSpec, token: str) -> Any:
        signed = RequestSpec(
            spec.path,
            spec.method,
            with_access_token(spec.params, token),
            spec.secure,
        )
        return await self.send_unauthenticated(signed)


def encode_params(params: Mapping[str, Any] | None) -> dict[str, Any]:
    """JSON-encode every parameter value that is not already a string."""
    return {
        key: value if isinstance(value, str) else json.dumps(value)
        for key, value in (params or {}).items()
    }


def unwrap_body(result: Any) -> Any:
    """Return the ``body`` member of an API envelope, or the result itself."""
    if isinstance(result, dict) and result.get("body") is not None:
        return result["body"]
    return result
