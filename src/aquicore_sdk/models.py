"""Data models for the Aquicore SDK."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Self

from pydantic import BaseModel, ConfigDict


class TokenPair(BaseModel):
    """Access and refresh token held by a client.

    Either field may be absent. When used as a partial update, absent
    fields leave the stored value untouched.
    """

    model_config = ConfigDict(frozen=True)

    access_token: str | None = None
    refresh_token: str | None = None

    @classmethod
    def from_response(cls, data: dict[str, Any]) -> Self:
        """Read a token pair from a grant response body.

        The Aquicore login endpoint answers with ``authToken``; the
        standard OAuth2 ``access_token`` member is accepted as well.
        """
        access = data.get("authToken") or data.get("access_token")
        refresh = data.get("refresh_token")
        return cls(
            access_token=str(access) if access else None,
            refresh_token=str(refresh) if refresh else None,
        )

    def to_store(self) -> dict[str, str | None]:
        """Serialize using the wire names, for session storage."""
        return {"authToken": self.access_token, "refresh_token": self.refresh_token}


@dataclass(frozen=True)
class RequestSpec:
    """One outbound API call."""

    path: str
    method: str = "GET"
    params: dict[str, Any] = field(default_factory=dict)
    secure: bool = False


@dataclass(frozen=True)
class RawResponse:
    """Undecoded HTTP response."""

    status_code: int | None
    reason: str | None
    headers: dict[str, str]
    body: bytes
