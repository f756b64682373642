"""In-memory token storage with change notification."""

from __future__ import annotations

import threading
from typing import Protocol

from ..models import TokenPair
from ..telemetry import get_logger


class TokenObserver(Protocol):
    """Callback invoked with the full pair whenever stored tokens change."""

    def __call__(self, tokens: TokenPair) -> None: ...


class TokenStore:
    """Holds the current access and refresh token of one client.

    Reads and writes are serialized so that concurrent calls never lose
    an update. The observer runs outside the lock.
    """

    def __init__(
        self,
        tokens: TokenPair | None = None,
        observer: TokenObserver | None = None,
    ) -> None:
        self._lock = threading.RLock()
        self._tokens = tokens or TokenPair()
        self._observer = observer
        self._logger = get_logger()

    @property
    def current(self) -> TokenPair:
        """Get the current token pair."""
        with self._lock:
            return self._tokens

    @property
    def access_token(self) -> str | None:
        return self.current.access_token

    @property
    def refresh_token(self) -> str | None:
        return self.current.refresh_token

    def _merge(self, partial: TokenPair) -> TokenPair | None:
        """Merge present fields; return the new pair if anything changed."""
        with self._lock:
            merged = TokenPair(
                access_token=partial.access_token or self._tokens.access_token,
                refresh_token=partial.refresh_token or self._tokens.refresh_token,
            )
            if merged == self._tokens:
                return None
            self._tokens = merged
            return merged

    def update(self, partial: TokenPair) -> None:
        """Merge tokens obtained from a grant and notify the observer."""
        merged = self._merge(partial)
        if merged is None:
            return
        self._logger.debug(
            "tokens_updated",
            has_refresh_token=merged.refresh_token is not None,
        )
        if self._observer is not None:
            self._observer(merged)

    def set_from_external(self, partial: TokenPair) -> None:
        """Restore tokens kept by the application, without notifying."""
        self._merge(partial)

    def clear(self) -> None:
        """Forget both tokens, without notifying."""
        with self._lock:
            self._tokens = TokenPair()
