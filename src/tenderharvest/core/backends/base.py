"""
Fetch backend contract.

A backend turns a ``RequestSpec`` into a ``FetchResult`` in exactly one
attempt, or raises ``FetchError``. Retrying is never the backend's job;
the runner skips whatever fails and carries on.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Literal


FetchKind = Literal["listing", "document"]


@dataclass(frozen=True)
class RequestSpec:
    """One GET request."""

    url: str
    timeout: float = 25.0
    headers: dict[str, str] = field(default_factory=dict)
    insecure_tls: bool = False

    # Only used for logging
    source_id: str | None = None
    kind: FetchKind = "listing"


@dataclass
class FetchResult:
    """A 2xx response body with the bits the pipeline needs."""

    url: str
    final_url: str
    status_code: int
    content: bytes
    headers: dict[str, str] = field(default_factory=dict)
    encoding: str | None = None
    elapsed_ms: float = 0.0

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    @property
    def content_type(self) -> str:
        """Media type without parameters, lowercased."""
        for key, value in self.headers.items():
            if key.lower() == "content-type":
                return value.split(";", 1)[0].strip().lower()
        return ""

    @property
    def text(self) -> str:
        return self.content.decode(self.encoding or "utf-8", errors="replace")


class Backend(ABC):
    """Something that can fetch listing pages and documents."""

    @property
    @abstractmethod
    def name(self) -> str:
        ...

    @abstractmethod
    async def fetch(self, request: RequestSpec) -> FetchResult:
        """Fetch ``request.url`` once.

        Raises:
            FetchError: On timeout, TLS or transport failure, or a non-2xx
                response
        """

    async def close(self) -> None:
        return None

    async def __aenter__(self) -> "Backend":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()


# =============================================================================
# Errors
# =============================================================================


class BackendError(Exception):
    """Base class for backend failures."""

    def __init__(self, message: str, url: str | None = None, status_code: int | None = None):
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class FetchError(BackendError):
    """A single fetch failed; the URL contributes nothing."""
