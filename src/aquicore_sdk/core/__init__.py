"""Core components for the Aquicore SDK.

Token lifecycle and request logic shared between the sync and async
clients.
"""

from __future__ import annotations

from .decoder import ResponseDecoder
from .executor import AsyncRequestExecutor, SyncRequestExecutor
from .grants import GrantRequest, GrantResolver, GrantType
from .token_store import TokenObserver, TokenStore
from .uri import UriBuilder, build_uri

__all__ = [
    "ResponseDecoder",
    "SyncRequestExecutor",
    "AsyncRequestExecutor",
    "GrantRequest",
    "GrantResolver",
    "GrantType",
    "TokenObserver",
    "TokenStore",
    "UriBuilder",
    "build_uri",
]
