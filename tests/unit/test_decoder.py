"""Unit tests for response decoding."""

from __future__ import annotations

import json

import pytest

from aquicore_sdk.core.decoder import ResponseDecoder
from aquicore_sdk.errors import ApiError, ErrorKind
from aquicore_sdk.models import RawResponse


@pytest.fixture
def decoder() -> ResponseDecoder:
    return ResponseDecoder()


class TestSuccess:
    """Tests for 2xx responses."""

    def test_json_object(self, decoder: ResponseDecoder) -> None:
        assert decoder.decode(200, b'{"body": {"id": 1}}', "OK") == {"body": {"id": 1}}

    def test_any_2xx(self, decoder: ResponseDecoder) -> None:
        assert decoder.decode(201, b"[1, 2]") == [1, 2]

    @pytest.mark.parametrize("raw, expected", [(b"false", False), (b"0", 0), (b"{}", {})])
    def test_falsy_json_is_success(
        self, decoder: ResponseDecoder, raw: bytes, expected: object
    ) -> None:
        assert decoder.decode(200, raw) == expected

    def test_unparsable_body(self, decoder: ResponseDecoder) -> None:
        with pytest.raises(ApiError) as exc_info:
            decoder.decode(200, b"<html>", "OK")

        error = exc_info.value
        assert error.kind is ErrorKind.JSON
        assert error.code == 200
        assert error.message == "OK"

    def test_empty_body_is_json_error(self, decoder: ResponseDecoder) -> None:
        with pytest.raises(ApiError) as exc_info:
            decoder.decode(204, b"")

        assert exc_info.value.kind is ErrorKind.JSON
        assert exc_info.value.message == "No Content"


class TestFailure:
    """Tests for non-2xx responses."""

    def test_structured_error_body(self, decoder: ResponseDecoder) -> None:
        body = {"error": {"code": 1, "message": "bad"}}

        with pytest.raises(ApiError) as exc_info:
            decoder.decode(404, json.dumps(body).encode(), "Not Found")

        error = exc_info.value
        assert error.kind is ErrorKind.API
        assert error.status_code == 404
        assert error.reason == "Not Found"
        assert error.body == body
        assert error.code == 1
        assert error.message == "bad"

    def test_unparsable_error_body(self, decoder: ResponseDecoder) -> None:
        with pytest.raises(ApiError) as exc_info:
            decoder.decode(500, b"oops", "Internal Server Error")

        error = exc_info.value
        assert error.kind is ErrorKind.API
        assert error.code == 500
        assert error.message == "Internal Server Error"
        assert error.body is None

    def test_non_object_error_body(self, decoder: ResponseDecoder) -> None:
        with pytest.raises(ApiError) as exc_info:
            decoder.decode(403, b'"denied"', "Forbidden")

        assert exc_info.value.body is None

    def test_object_without_error_member(self, decoder: ResponseDecoder) -> None:
        with pytest.raises(ApiError) as exc_info:
            decoder.decode(409, b'{"status": "conflict"}', "Conflict")

        error = exc_info.value
        assert error.code == 409
        assert error.body == {"status": "conflict"}

    @pytest.mark.parametrize("status", [None, 0, 42, 700])
    def test_unusable_status_defaults_to_bad_request(
        self, decoder: ResponseDecoder, status: int | None
    ) -> None:
        with pytest.raises(ApiError) as exc_info:
            decoder.decode(status, b"", "whatever")

        error = exc_info.value
        assert error.kind is ErrorKind.API
        assert error.code == 400
        assert error.message == "bad request"

    def test_default_reason(self, decoder: ResponseDecoder) -> None:
        with pytest.raises(ApiError) as exc_info:
            decoder.decode(401, b"")

        assert exc_info.value.reason == "Unauthorized"


def test_decode_response(decoder: ResponseDecoder) -> None:
    raw = RawResponse(status_code=200, reason="OK", headers={}, body=b'{"a": 1}')

    assert decoder.decode_response(raw) == {"a": 1}
