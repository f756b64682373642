"""HTTP transport for the Aquicore SDK.

Performs single HTTP requests with httpx and translates transport
failures into ``TRANSPORT`` errors. Nothing is retried here except the
opt-in certificate fallback, which retries once without verification.
"""

from __future__ import annotations

import json
import ssl
import warnings
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

import httpx

from .errors import ApiError, InsecureFallbackWarning, TransportErrorCode
from .models import RawResponse
from .telemetry import logger_for, trace_operation, tracer_for

if TYPE_CHECKING:
    from .config import ClientConfig

_RESOLVE_MARKERS = (
    "name or service not known",
    "nodename nor servname",
    "getaddrinfo failed",
    "temporary failure in name resolution",
    "no address associated",
)

INSECURE_FALLBACK_MESSAGE = (
    "SSL verification has been disabled since a certificate error was "
    "retrieved. Please check your certificate configuration."
)


def _http_options(config: ClientConfig) -> dict[str, Any]:
    return {
        "timeout": httpx.Timeout(config.timeout, connect=config.connect_timeout),
        "headers": {
            "User-Agent": config.user_agent,
            "Accept": "application/json",
        },
        "follow_redirects": False,
    }


def create_http_client(config: ClientConfig, *, verify: bool = True) -> httpx.Client:
    """Create configured sync HTTP client.

    Args:
        config: SDK configuration.
        verify: Whether server certificates are verified.

    Returns:
        Configured httpx.Client.
    """
    return httpx.Client(verify=verify, **_http_options(config))


def create_async_http_client(
    config: ClientConfig, *, verify: bool = True
) -> httpx.AsyncClient:
    """Create configured async HTTP client.

    Args:
        config: SDK configuration.
        verify: Whether server certificates are verified.

    Returns:
        Configured httpx.AsyncClient.
    """
    return httpx.AsyncClient(verify=verify, **_http_options(config))


def is_certificate_error(exc: BaseException) -> bool:
    """Check whether a connection failed on certificate verification."""
    seen: set[int] = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in seen:
        if isinstance(current, ssl.SSLCertVerificationError):
            return True
        seen.add(id(current))
        current = current.__cause__ or current.__context__
    return "CERTIFICATE_VERIFY_FAILED" in str(exc)


def translate_error(exc: httpx.HTTPError) -> ApiError:
    """Classify an httpx failure as a ``TRANSPORT`` error."""
    message = str(exc) or exc.__class__.__name__
    if isinstance(exc, httpx.TimeoutException):
        return ApiError.transport(TransportErrorCode.OPERATION_TIMEDOUT, message)
    if isinstance(exc, httpx.ConnectError):
        if is_certificate_error(exc):
            return ApiError.transport(TransportErrorCode.SSL_CERTIFICATE, message)
        if any(marker in message.lower() for marker in _RESOLVE_MARKERS):
            return ApiError.transport(TransportErrorCode.COULDNT_RESOLVE_HOST, message)
        return ApiError.transport(TransportErrorCode.COULDNT_CONNECT, message)
    return ApiError.transport(TransportErrorCode.UNKNOWN, message)


def body_kwargs(body: Mapping[str, Any] | None) -> dict[str, Any]:
    """Encode a request body as JSON."""
    if not body:
        return {}
    return {
        "content": json.dumps(dict(body)),
        "headers": {"Content-Type": "application/json"},
    }


def to_raw_response(response: httpx.Response) -> RawResponse:
    return RawResponse(
        status_code=response.status_code,
        reason=response.reason_phrase or None,
        headers=dict(response.headers),
        body=response.content,
    )


def _warn_insecure_fallback(logger: Any, url: str) -> None:
    warnings.warn(INSECURE_FALLBACK_MESSAGE, InsecureFallbackWarning, stacklevel=3)
    logger.warning("insecure_ssl_fallback", url=url)


class HttpTransport:
    """Synchronous transport."""

    def __init__(
        self,
        config: ClientConfig,
        client: httpx.Client | None = None,
        insecure_client: httpx.Client | None = None,
    ) -> None:
        self.config = config
        self._client = client or create_http_client(config)
        self._insecure_client = insecure_client
        self._tracer = tracer_for(config.telemetry)
        self._logger = logger_for(config.telemetry)

    def send(
        self,
        url: str,
        method: str = "GET",
        body: Mapping[str, Any] | None = None,
    ) -> RawResponse:
        """Send one request.

        Args:
            url: Absolute request URI, query string included.
            method: HTTP method.
            body: Parameters sent as a JSON body.

        Returns:
            The undecoded response.

        Raises:
            ApiError: ``TRANSPORT`` on network or TLS failure.
        """
        kwargs = body_kwargs(body)
        with trace_operation(
            "http_request",
            attributes={"http.method": method, "http.url": url},
            tracer=self._tracer,
        ):
            try:
                response = self._client.request(method, url, **kwargs)
            except httpx.HTTPError as exc:
                if not (self.config.allow_insecure_fallback and is_certificate_error(exc)):
                    raise translate_error(exc) from exc
                _warn_insecure_fallback(self._logger, url)
                try:
                    response = self._insecure().request(method, url, **kwargs)
                except httpx.HTTPError as retry_exc:
                    raise translate_error(retry_exc) from retry_exc
            return to_raw_response(response)

    def _insecure(self) -> httpx.Client:
        if self._insecure_client is None:
            self._insecure_client = create_http_client(self.config, verify=False)
        return self._insecure_client

    def close(self) -> None:
        """Close the HTTP clients."""
        self._client.close()
        if self._insecure_client is not None:
            self._insecure_client.close()


class AsyncHttpTransport:
    """Asynchronous transport.

    Cancellation of the awaiting task propagates out of :meth:`send`
    unchanged.
    """

    def __init__(
        self,
        config: ClientConfig,
        client: httpx.AsyncClient | None = None,
        insecure_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.config = config
        self._client = client or create_async_http_client(config)
        self._insecure_client = insecure_client
        self._tracer = tracer_for(config.telemetry)
        self._logger = logger_for(config.telemetry)

    async def send(
        self,
        url: str,
        method: str = "GET",
        body: Mapping[str, Any] | None = None,
    ) -> RawResponse:
        """Send one request. See :meth:`HttpTransport.send`."""
        kwargs = body_kwargs(body)
        with trace_operation(
            "http_request",
            attributes={"http.method": method, "http.url": url},
            tracer=self._tracer,
        ):
            try:
                response = await self._client.request(method, url, **kwargs)
            except httpx.HTTPError as exc:
                if not (self.config.allow_insecure_fallback and is_certificate_error(exc)):
                    raise translate_error(exc) from exc
                _warn_insecure_fallback(self._logger, url)
                try:
                    response = await self._insecure().request(method, url, **kwargs)
                except httpx.HTTPError as retry_exc:
                    raise translate_error(retry_exc) from retry_exc
            return to_raw_response(response)

    def _insecure(self) -> httpx.AsyncClient:
        if self._insecure_client is None:
            self._insecure_client = create_async_http_client(self.config, verify=False)
        return self._insecure_client

    async def close(self) -> None:
        """Close the HTTP clients."""
        await self._client.aclose()
        if self._insecure_client is not None:
            await self._insecure_client.aclose()
