"""Error types for the Aquicore SDK.

Every failure raised by the SDK is an :class:`ApiError` tagged with an
:class:`ErrorKind`, so callers match on ``error.kind`` instead of walking
an exception hierarchy.
"""

from __future__ import annotations

from enum import IntEnum, StrEnum
from typing import Any


class ErrorKind(StrEnum):
    """Discriminant of :class:`ApiError`."""

    TRANSPORT = "transport"
    JSON = "json"
    API = "api"
    NOT_AUTHENTICATED = "not_authenticated"
    INTERNAL = "internal"


class RestErrorCode(IntEnum):
    """Error codes carried in the ``error.code`` member of API error bodies."""

    ACCESS_TOKEN_MISSING = 1
    INVALID_ACCESS_TOKEN = 2
    ACCESS_TOKEN_EXPIRED = 3
    INCONSISTENCY_ERROR = 4
    APPLICATION_DEACTIVATED = 5
    INVALID_EMAIL = 6
    NOTHING_TO_MODIFY = 7
    EMAIL_ALREADY_EXISTS = 8
    DEVICE_NOT_FOUND = 9
    MISSING_ARGS = 10
    INTERNAL_ERROR = 11
    DEVICE_OR_SECRET_NO_MATCH = 12
    INVALID_TIMEZONE = 13
    INVALID_DATE = 14
    MAXIMUM_USAGE_REACHED = 26


class TransportErrorCode(IntEnum):
    """Transport failure codes, numbered like their curl counterparts."""

    UNKNOWN = 0
    COULDNT_RESOLVE_HOST = 6
    COULDNT_CONNECT = 7
    OPERATION_TIMEDOUT = 28
    SSL_CERTIFICATE = 60


AUTH_EXPIRY_CODES = frozenset(
    {RestErrorCode.INVALID_ACCESS_TOKEN, RestErrorCode.ACCESS_TOKEN_EXPIRED}
)


class ApiError(Exception):
    """Failure raised by any SDK operation.

    ``code`` and ``message`` describe the failure. For ``API`` errors they
    come from the decoded error body when it provides them, while
    ``status_code`` and ``reason`` always hold the HTTP status line.

    Example:
        A 404 answered with ``{"error": {"code": 1, "message": "Access token
        missing"}}`` gives ``code == 1`` and ``status_code == 404``. Without
        an error body, ``code`` is the HTTP status itself.
    """

    def __init__(
        self,
        kind: ErrorKind,
        code: int,
        message: str,
        *,
        body: Any = None,
        status_code: int | None = None,
        reason: str | None = None,
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.code = code
        self.message = message
        self.body = body
        self.status_code = status_code
        self.reason = reason

    @classmethod
    def transport(cls, code: int, message: str) -> ApiError:
        return cls(ErrorKind.TRANSPORT, int(code), message)

    @classmethod
    def json(cls, status_code: int, reason: str) -> ApiError:
        return cls(
            ErrorKind.JSON,
            status_code,
            reason,
            status_code=status_code,
            reason=reason,
        )

    @classmethod
    def api(cls, status_code: int, reason: str, body: Any = None) -> ApiError:
        """Build an API error, preferring the code and message of ``body``."""
        code, message = status_code, reason
        if isinstance(body, dict):
            detail = body.get("error")
            if isinstance(detail, dict) and "code" in detail:
                try:
                    code = int(detail["code"])
                except (TypeError, ValueError):
                    code = status_code
                message = str(detail.get("message", reason))
        return cls(
            ErrorKind.API,
            code,
            message,
            body=body,
            status_code=status_code,
            reason=reason,
        )

    @classmethod
    def not_authenticated(cls, code: int, message: str) -> ApiError:
        return cls(ErrorKind.NOT_AUTHENTICATED, code, message)

    @classmethod
    def internal(cls, message: str) -> ApiError:
        return cls(ErrorKind.INTERNAL, 0, message)

    @property
    def is_auth_expiry(self) -> bool:
        """True for API errors reporting an invalid or expired access token."""
        return self.kind is ErrorKind.API and self.code in AUTH_EXPIRY_CODES

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        return {
            "kind": self.kind.value,
            "code": self.code,
            "message": self.message,
            "status_code": self.status_code,
            "reason": self.reason,
            "body": self.body,
        }

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(kind={self.kind.value!r}, "
            f"code={self.code!r}, message={self.message!r})"
        )


class InsecureFallbackWarning(UserWarning):
    """Emitted when a request is retried with certificate checks disabled."""
