"""Response decoding for the Aquicore SDK.

Turns raw HTTP responses into decoded JSON values or classified
:class:`~aquicore_sdk.errors.ApiError` instances.
"""

from __future__ import annotations

import json
from http import HTTPStatus
from typing import TYPE_CHECKING, Any

from ..errors import ApiError

if TYPE_CHECKING:
    from ..models import RawResponse

_BAD_REQUEST = (400, "bad request")
_UNPARSED = object()


def _parse_json(body: bytes | str) -> Any:
    """Return the decoded body, or ``_UNPARSED`` when it is not JSON."""
    if not body:
        return _UNPARSED
    try:
        return json.loads(body)
    except (ValueError, UnicodeDecodeError):
        return _UNPARSED


def _default_reason(status_code: int) -> str:
    try:
        return HTTPStatus(status_code).phrase
    except ValueError:
        return ""


class ResponseDecoder:
    """Classifies HTTP responses.

    Only 2xx responses are successes. Any other status is an ``API``
    error carrying the decoded error body when the server sent a JSON
    object.
    """

    def decode(
        self,
        status_code: int | None,
        body: bytes | str,
        reason: str | None = None,
    ) -> Any:
        """Decode a response body.

        Args:
            status_code: HTTP status, or None when the status line was unusable.
            body: Raw response body.
            reason: Reason phrase from the status line.

        Returns:
            The decoded JSON value.

        Raises:
            ApiError: ``JSON`` for an unparsable 2xx body, ``API`` otherwise.
        """
        if status_code is None or not 100 <= status_code <= 599:
            status_code, reason = _BAD_REQUEST
        elif reason is None:
            reason = _default_reason(status_code)

        decoded = _parse_json(body)

        if 200 <= status_code <= 299:
            if decoded is _UNPARSED:
                raise ApiError.json(status_code, reason)
            return decoded

        if isinstance(decoded, dict):
            raise ApiError.api(status_code, reason, decoded)
        raise ApiError.api(status_code, reason, None)

    def decode_response(self, response: RawResponse) -> Any:
        """Decode a :class:`~aquicore_sdk.models.RawResponse`."""
        return self.decode(response.status_code, response.body, response.reason)
