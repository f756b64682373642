"""Unit tests for data models."""

from __future__ import annotations

import pytest
from pydantic import ValidationError as PydanticValidationError

from aquicore_sdk.models import RequestSpec, TokenPair


class TestTokenPair:
    """Tests for TokenPair."""

    def test_from_login_response(self) -> None:
        tokens = TokenPair.from_response({"authToken": "a1", "refresh_token": "r1"})

        assert tokens == TokenPair(access_token="a1", refresh_token="r1")

    def test_from_oauth_response(self) -> None:
        tokens = TokenPair.from_response(
            {"access_token": "a1", "expires_in": 10800, "refresh_token": "r1"}
        )

        assert tokens.access_token == "a1"

    def test_missing_members(self) -> None:
        assert TokenPair.from_response({"status": "ok"}) == TokenPair()

    def test_to_store_uses_wire_names(self) -> None:
        tokens = TokenPair(access_token="a1")

        assert tokens.to_store() == {"authToken": "a1", "refresh_token": None}

    def test_is_frozen(self) -> None:
        tokens = TokenPair(access_token="a1")

        with pytest.raises(PydanticValidationError):
            tokens.access_token = "a2"


def test_request_spec_defaults() -> None:
    spec = RequestSpec("/users/me")

    assert spec.method == "GET"
    assert spec.params == {}
    assert spec.secure is False
