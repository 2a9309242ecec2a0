"""Base client for the Real-Debrid and Trakt APIs."""

from __future__ import annotations

import asyncio
import hashlib
import logging
from dataclasses import dataclass
from typing import Any, Self
from urllib.parse import quote

import httpx
from cachetools import TTLCache
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception,
    stop_after_attempt,
    wait_none,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProxyRotation:
    """A list of URL-prefix proxies and the position of the active one.

    The value is immutable; ``advance`` returns the next position. With no
    proxies configured, requests go straight to the target URL.
    """

    proxies: tuple[str, ...] = ()
    index: int = 0

    @property
    def current(self) -> str | None:
        """The active proxy prefix, or None when no proxies are configured."""
        if not self.proxies:
            return None
        return self.proxies[self.index % len(self.proxies)]

    def advance(self) -> ProxyRotation:
        """Get the rotation pointing at the next proxy."""
        if not self.proxies:
            return self
        return ProxyRotation(self.proxies, (self.index + 1) % len(self.proxies))

    def wrap(self, url: str) -> str:
        """Route a target URL through the active proxy."""
        proxy = self.current
        if proxy is None:
            return url
        return f"{proxy}{quote(url, safe='')}"


class BaseApiClient:
    """Base client with proxy rotation and caching.

    This base class provides:
    - HTTP client management with connection pooling
    - Proxy rotation on failed attempts, without backoff
    - Per-client TTL caching for GET requests
    - Context manager protocol for resource cleanup

    Subclasses supply their auth headers through ``_default_headers()`` and
    implement API methods with ``_get()``, ``_get_uncached()``, ``_post()``
    and ``_delete()``.
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 120.0,
        cache_ttl: int = 300,
        max_attempts: int = 3,
        proxy_rotation: ProxyRotation | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            base_url: The base URL of the API
            timeout: Request timeout in seconds (default 120.0)
            cache_ttl: Cache time-to-live in seconds (default 300)
            max_attempts: Attempts per request, each on the next proxy (default 3)
            proxy_rotation: Proxies to route requests through (optional)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.cache_ttl = cache_ttl
        self.max_attempts = max_attempts
        self.proxy_rotation = proxy_rotation or ProxyRotation()

        self._client: httpx.AsyncClient | None = None
        self._cache: TTLCache[str, Any] = TTLCache(maxsize=1000, ttl=cache_ttl)
        self._cache_lock = asyncio.Lock()

    async def __aenter__(self) -> Self:
        """Enter async context manager."""
        self._client = httpx.AsyncClient(timeout=self.timeout)
        return self

    async def __aexit__(self, *args: Any) -> None:
        """Exit async context manager."""
        if self._client:
            await self._client.aclose()
            self._client = None

    @property
    def client(self) -> httpx.AsyncClient:
        """Get the HTTP client, raising if not in context.

        Returns:
            The httpx async client

        Raises:
            RuntimeError: If called outside of async context manager
        """
        if self._client is None:
            raise RuntimeError("Client must be used within async context manager")
        return self._client

    def _default_headers(self) -> dict[str, str]:
        """Headers sent with every request."""
        return {}

    def _make_cache_key(self, endpoint: str, params: dict[str, Any] | None) -> str:
        """Generate a cache key from endpoint and parameters.

        Args:
            endpoint: The API endpoint path
            params: Query parameters

        Returns:
            A unique cache key string
        """
        params_str = str(sorted((params or {}).items()))
        key_data = f"{endpoint}:{params_str}"
        return hashlib.sha256(key_data.encode()).hexdigest()[:16]

    async def _get(self, endpoint: str, params: dict[str, Any] | None = None) -> Any:
        """Make a cached GET request.

        Args:
            endpoint: The API endpoint path (e.g., "/user")
            params: Optional query parameters

        Returns:
            The JSON response data
        """
        cache_key = self._make_cache_key(endpoint, params)

        async with self._cache_lock:
            if cache_key in self._cache:
                logger.debug("Cache hit for %s", endpoint)
                return self._cache[cache_key]

        logger.debug("Cache miss for %s, fetching from API", endpoint)
        data = await self._get_uncached(endpoint, params)

        async with self._cache_lock:
            self._cache[cache_key] = data

        return data

    async def _get_uncached(self, endpoint: str, params: dict[str, Any] | None = None) -> Any:
        """Make a GET request without caching."""
        return await self._request_with_retry("GET", endpoint, params=params)

    async def _post(
        self,
        endpoint: str,
        *,
        data: dict[str, Any] | None = None,
        json: Any = None,
    ) -> Any:
        """Make a POST request with a form or JSON body."""
        return await self._request_with_retry("POST", endpoint, data=data, json=json)

    async def _delete(self, endpoint: str) -> Any:
        """Make a DELETE request."""
        return await self._request_with_retry("DELETE", endpoint)

    def _is_retryable(self, error: BaseException) -> bool:
        """Decide whether a failed attempt is worth another try.

        Connection problems, timeouts, 429 and 5xx are always retried. When
        requests go through proxies, any HTTP error is retried because the
        proxy itself may be the one failing.
        """
        if isinstance(error, httpx.TransportError):
            return True
        if isinstance(error, httpx.HTTPStatusError):
            if self.proxy_rotation.current is not None:
                return True
            status = error.response.status_code
            return status == 429 or status >= 500
        return False

    async def _request_with_retry(
        self,
        method: str,
        endpoint: str,
        params: dict[str, Any] | None = None,
        data: dict[str, Any] | None = None,
        json: Any = None,
    ) -> Any:
        """Make an HTTP request, moving to the next proxy after each failure.

        If every attempt fails the rotation is restored to where it started
        and the last error is raised.

        Args:
            method: HTTP method (GET, POST, etc.)
            endpoint: The API endpoint path
            params: Optional query parameters
            data: Optional form body
            json: Optional JSON body

        Returns:
            The JSON response data, or None for an empty body

        Raises:
            httpx.HTTPStatusError: On HTTP errors after the last attempt
            httpx.TransportError: On connection errors after the last attempt
        """
        original_rotation = self.proxy_rotation
        target = f"{self.base_url}{endpoint}"

        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(self.max_attempts),
                wait=wait_none(),
                retry=retry_if_exception(self._is_retryable),
                before_sleep=self._rotate_proxy,
                reraise=True,
            ):
                with attempt:
                    return await self._send(method, target, params, data, json)
        except (httpx.HTTPStatusError, httpx.TransportError):
            self.proxy_rotation = original_rotation
            raise
        return None  # pragma: no cover - AsyncRetrying either returns or raises

    async def _send(
        self,
        method: str,
        target: str,
        params: dict[str, Any] | None,
        data: dict[str, Any] | None,
        json: Any,
    ) -> Any:
        """Send a single attempt through the active proxy."""
        headers = self._default_headers()
        if self.proxy_rotation.current is not None:
            headers["X-Requested-With"] = "XMLHttpRequest"
            if params:
                target = str(httpx.URL(target, params=params))
                params = None

        response = await self.client.request(
            method,
            self.proxy_rotation.wrap(target),
            params=params,
            data=data,
            json=json,
            headers=headers,
        )

        if response.status_code == 429 or response.status_code >= 500:
            logger.warning("Retryable HTTP error %d for %s", response.status_code, target)
        response.raise_for_status()

        if not response.content:
            return None
        return response.json()

    def _rotate_proxy(self, retry_state: RetryCallState) -> None:
        """Log the failed attempt and switch to the next proxy.

        Args:
            retry_state: Tenacity retry state object
        """
        logger.warning(
            "Attempt %d failed: %s",
            retry_state.attempt_number,
            retry_state.outcome.exception() if retry_state.outcome else "unknown",
        )
        if self.proxy_rotation.current is not None:
            self.proxy_rotation = self.proxy_rotation.advance()
            logger.info("Switching to proxy %s", self.proxy_rotation.current)

    async def invalidate_cache(self, endpoint: str, params: dict[str, Any] | None = None) -> bool:
        """Invalidate a specific cache entry.

        Returns:
            True if entry was found and removed, False otherwise
        """
        cache_key = self._make_cache_key(endpoint, params)
        async with self._cache_lock:
            if cache_key in self._cache:
                del self._cache[cache_key]
                return True
            return False

    async def clear_cache(self) -> int:
        """Clear all cached entries.

        Returns:
            The number of entries that were cleared
        """
        async with self._cache_lock:
            count = len(self._cache)
            self._cache.clear()
            return count
