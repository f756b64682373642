"""
Shared test fixtures for Aquicore SDK tests.

Provides configurations, a scripted HTTP backend served through
``httpx.MockTransport``, and client factories wired to it.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from typing import Any
from unittest.mock import MagicMock, patch

import httpx
import pytest

from aquicore_sdk.async_client import AsyncAquicoreClient
from aquicore_sdk.client import AquicoreClient
from aquicore_sdk.config import ClientConfig

BASE_URI = "http://api.test/api/v1"
AUTH_URI = "http://api.test/api/v1/session/login"
LOGIN_PATH = "/api/v1/session/login"
ME_PATH = "/api/v1/users/me"

_MISSING = object()


class FakeApi:
    """Scripted backend answering by URL path.

    Each path holds a queue of canned answers. Answers are consumed in
    order and the last one is repeated once the queue runs dry.
    """

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self._routes: dict[str, list[dict[str, Any]]] = {}

    def add(
        self,
        path: str,
        status: int = 200,
        payload: Any = _MISSING,
        *,
        content: bytes | None = None,
        error: Exception | None = None,
    ) -> FakeApi:
        self._routes.setdefault(path, []).append(
            {"status": status, "payload": payload, "content": content, "error": error}
        )
        return self

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        queue = self._routes.get(request.url.path)
        if not queue:
            return httpx.Response(404, json={"error": {"code": 404, "message": "no route"}})
        answer = queue.pop(0) if len(queue) > 1 else queue[0]
        if answer["error"] is not None:
            raise answer["error"]
        if answer["payload"] is not _MISSING:
            return httpx.Response(answer["status"], json=answer["payload"])
        return httpx.Response(answer["status"], content=answer["content"] or b"")

    def calls(self, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.path == path]


@pytest.fixture
def fake_api() -> FakeApi:
    """Provide an empty scripted backend."""
    return FakeApi()


@pytest.fixture
def password_config() -> ClientConfig:
    """Provide a configuration using the password grant."""
    return ClientConfig(
        base_uri=BASE_URI,
        auth_uri=AUTH_URI,
        username="user@example.com",
        password="s3cret",
    )


@pytest.fixture
def token_config() -> ClientConfig:
    """Provide a configuration with stored access and refresh tokens."""
    return ClientConfig(
        base_uri=BASE_URI,
        auth_uri=AUTH_URI,
        access_token="access-1",
        refresh_token="refresh-1",
    )


@pytest.fixture
def make_client(fake_api: FakeApi) -> Iterator[Callable[..., AquicoreClient]]:
    """Provide a factory for sync clients served by ``fake_api``."""
    created: list[AquicoreClient] = []

    def factory(config: ClientConfig, **kwargs: Any) -> AquicoreClient:
        http = httpx.Client(transport=httpx.MockTransport(fake_api.handler))
        with patch("aquicore_sdk.client.create_http_client", return_value=http):
            client = AquicoreClient(config, **kwargs)
        created.append(client)
        return client

    yield factory

    for client in created:
        client.close()


@pytest.fixture
def make_async_client(fake_api: FakeApi) -> Callable[..., AsyncAquicoreClient]:
    """Provide a factory for async clients served by ``fake_api``."""

    def factory(config: ClientConfig, **kwargs: Any) -> AsyncAquicoreClient:
        http = httpx.AsyncClient(transport=httpx.MockTransport(fake_api.handler))
        with patch(
            "aquicore_sdk.async_client.create_async_http_client", return_value=http
        ):
            return AsyncAquicoreClient(config, **kwargs)

    return factory


@pytest.fixture
def observer() -> MagicMock:
    """Provide a token observer mock."""
    return MagicMock()


@pytest.fixture
def login_response() -> dict:
    """Provide a sample login response."""
    return {"authToken": "access-new", "refresh_token": "refresh-new"}


@pytest.fixture
def expired_response() -> dict:
    """Provide an access token expired error body."""
    return {"error": {"code": 3, "message": "Access token expired"}}
