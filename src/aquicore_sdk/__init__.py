"""Aquicore API Python SDK."""

from .async_client import AsyncAquicoreClient
from .client import AquicoreClient
from .config import ClientConfig, TelemetryConfig
from .errors import (
    ApiError,
    ErrorKind,
    InsecureFallbackWarning,
    RestErrorCode,
    TransportErrorCode,
)
from .models import TokenPair
from .telemetry import configure_telemetry

__all__ = [
    "AquicoreClient",
    "AsyncAquicoreClient",
    "ClientConfig",
    "TelemetryConfig",
    "ApiError",
    "ErrorKind",
    "InsecureFallbackWarning",
    "RestErrorCode",
    "TransportErrorCode",
    "TokenPair",
    "configure_telemetry",
]

__version__ = "0.1.0"
