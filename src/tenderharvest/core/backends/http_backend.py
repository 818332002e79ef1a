"""
httpx fetch backend.

Pooled ``AsyncClient`` instances, one per TLS mode, shared by every
source in a run. Sources flagged ``insecure_tls`` get the unverified
client; everything else stays on the verifying one.
"""

from __future__ import annotations

import time

import httpx

from .base import Backend, FetchError, FetchResult, RequestSpec


DEFAULT_USER_AGENT = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"

DEFAULT_HEADERS = {
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-ZA,en;q=0.9",
}


class HttpBackend(Backend):
    """Single-attempt GETs over httpx."""

    def __init__(
        self,
        timeout: float = 25.0,
        user_agent: str | None = None,
        default_headers: dict[str, str] | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        max_connections: int = 20,
    ):
        """
        Args:
            timeout: Fallback timeout in seconds when a request sets none
            user_agent: User-Agent header value
            default_headers: Extra headers sent with every request
            transport: httpx transport override, e.g. ``httpx.MockTransport``
            max_connections: Pool size per client
        """
        self.timeout = timeout
        self.headers = {
            "User-Agent": user_agent or DEFAULT_USER_AGENT,
            **DEFAULT_HEADERS,
            **(default_headers or {}),
        }
        self.max_connections = max_connections
        self._transport = transport
        self._clients: dict[bool, httpx.AsyncClient] = {}

    @property
    def name(self) -> str:
        return "http"

    def _client(self, insecure_tls: bool) -> httpx.AsyncClient:
        client = self._clients.get(insecure_tls)
        if client is None or client.is_closed:
            client = httpx.AsyncClient(
                headers=self.headers,
                timeout=self.timeout,
                follow_redirects=True,
                verify=not insecure_tls,
                transport=self._transport,
                limits=httpx.Limits(max_connections=self.max_connections),
            )
            self._clients[insecure_tls] = client
        return client

    async def fetch(self, request: RequestSpec) -> FetchResult:
        client = self._client(request.insecure_tls)
        started = time.perf_counter()

        try:
            response = await client.get(request.url, headers=request.headers, timeout=request.timeout)
        except httpx.TimeoutException as e:
            raise FetchError(f"Timed out after {request.timeout:.0f}s", url=request.url) from e
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise FetchError(f"{type(e).__name__}: {e}", url=request.url) from e

        if not response.is_success:
            raise FetchError(
                f"HTTP {response.status_code}",
                url=request.url,
                status_code=response.status_code,
            )

        return FetchResult(
            url=request.url,
            final_url=str(response.url),
            status_code=response.status_code,
            content=response.content,
            headers=dict(response.headers),
            encoding=response.encoding,
            elapsed_ms=(time.perf_counter() - started) * 1000,
        )

    async def close(self) -> None:
        for client in self._clients.values():
            if not client.is_closed:
                await client.aclose()
        self._clients.clear()
