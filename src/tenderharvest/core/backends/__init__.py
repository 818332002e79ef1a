"""Backend implementations for fetching pages and documents."""

from .base import (
    Backend,
    BackendError,
    FetchError,
    FetchResult,
    RequestSpec,
)
from .http_backend import DEFAULT_USER_AGENT, HttpBackend

__all__ = [
    # Base classes
    "Backend",
    "RequestSpec",
    "FetchResult",
    # Errors
    "BackendError",
    "FetchError",
    # HTTP backend
    "HttpBackend",
    "DEFAULT_USER_AGENT",
]
