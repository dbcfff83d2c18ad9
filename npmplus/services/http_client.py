"""Shared outbound HTTP client for registry and security lookups."""

from __future__ import annotations

import asyncio
from typing import Any, Dict, Optional

import httpx

from npmplus.constants import USER_AGENT
from npmplus.exceptions import ResourceNotFoundError, UpstreamError
from npmplus.logger import session_logger as logger

# Upper bound on concurrent outbound requests
MAX_CONCURRENT_REQUESTS = 5


class HttpClient:
    """JSON-over-HTTP helper on top of ``httpx.AsyncClient``.

    Adds default headers, a concurrency limit, a single retry on HTTP 429 and
    translation of failures into ``UpstreamError``/``ResourceNotFoundError``.
    """

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 30.0,
        retry_delay: float = 1.0,
        max_concurrency: int = MAX_CONCURRENT_REQUESTS,
    ):
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout)
        self._retry_delay = retry_delay
        self._semaphore = asyncio.Semaphore(max_concurrency)
        self._headers = {"User-Agent": USER_AGENT, "Accept": "application/json"}

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def request(
        self,
        method: str,
        url: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        json: Any = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> httpx.Response:
        """Send a request, retrying once after a 429, and return the raw response."""
        merged = {**self._headers, **(headers or {})}
        async with self._semaphore:
            try:
                response = await self._client.request(method, url, params=params, json=json, headers=merged)
                if response.status_code == 429:
                    logger.warning("Rate limited, retrying once", url=url, delay=self._retry_delay)
                    await asyncio.sleep(self._retry_delay)
                    response = await self._client.request(method, url, params=params, json=json, headers=merged)
            except httpx.TimeoutException as e:
                raise UpstreamError(f"Request to {url} timed out", details={"url": url}) from e
            except httpx.HTTPError as e:
                raise UpstreamError(
                    f"Request to {url} failed: {e}",
                    details={"url": url, "error_type": type(e).__name__},
                ) from e
        return response

    async def get_json(self, url: str, **kwargs: Any) -> Any:
        return self._decode(await self.request("GET", url, **kwargs))

    async def post_json(self, url: str, body: Any, **kwargs: Any) -> Any:
        return self._decode(await self.request("POST", url, json=body, **kwargs))

    @staticmethod
    def _decode(response: httpx.Response) -> Any:
        url = str(response.request.url)
        if response.status_code == 404:
            raise ResourceNotFoundError(f"Not found: {url}", details={"url": url})
        if not response.is_success:
            raise UpstreamError(
                f"HTTP {response.status_code} from {url}",
                status_code=response.status_code,
                details={"url": url},
            )
        try:
            return response.json()
        except ValueError as e:
            raise UpstreamError(f"Invalid JSON from {url}", details={"url": url}) from e
