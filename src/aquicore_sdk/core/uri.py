"""Request URI composition."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any
from urllib.parse import urlencode


def upgrade_scheme(url: str) -> str:
    """Rewrite a leading ``http://`` scheme to ``https://``."""
    if url.startswith("http://"):
        return "https://" + url[len("http://"):]
    return url


def build_uri(
    base: str,
    path: str = "",
    params: Mapping[str, Any] | None = None,
    secure: bool = False,
) -> str:
    """Build the absolute URI for a request.

    Args:
        base: Base URI of the API.
        path: Path relative to ``base``, or an absolute URI that replaces it.
        params: Query parameters.
        secure: Upgrade the base scheme to https.

    Returns:
        The absolute URI.
    """
    url = upgrade_scheme(base) if secure else base

    if path:
        if path.startswith("http"):
            url = path
        else:
            url = url.rstrip("/") + "/" + path.lstrip("/")

    if params:
        separator = "&" if "?" in url else "?"
        url += separator + urlencode(params, doseq=True)

    return url


class UriBuilder:
    """Builds request URIs against a fixed base."""

    def __init__(self, base: str) -> None:
        self.base = base

    def build(
        self,
        path: str = "",
        params: Mapping[str, Any] | None = None,
        secure: bool = False,
    ) -> str:
        return build_uri(self.base, path, params, secure)
