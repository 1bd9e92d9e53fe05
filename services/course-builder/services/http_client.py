"""
HTTP Client with Retry Logic

Resilient client for the external HTTP services the course builder talks
to: the YouTube Data API, YouTube oEmbed and the Supabase edge functions.
"""

import asyncio
import logging
from typing import Any, Dict, Optional

import httpx


logger = logging.getLogger(__name__)


class RetryConfig:
    """Configuration for retry behavior"""
    def __init__(
        self,
        max_retries: int = 3,
        initial_delay: float = 1.0,
        max_delay: float = 15.0,
        exponential_base: float = 2.0,
        retry_on_status: tuple = (502, 503, 504),
    ):
        self.max_retries = max_retries
        self.initial_delay = initial_delay
        self.max_delay = max_delay
        self.exponential_base = exponential_base
        self.retry_on_status = retry_on_status


DEFAULT_RETRY_CONFIG = RetryConfig()

# Calls that must not be repeated (edge function triggers)
NO_RETRY_CONFIG = RetryConfig(max_retries=0)


class ResilientHTTPClient:
    """
    HTTP client with built-in retry on transient failures.

    Handles:
    - DNS resolution failures
    - Connection timeouts
    - Temporary upstream unavailability (502/503/504)
    """

    def __init__(
        self,
        base_url: str = "",
        timeout: float = 30.0,
        retry_config: Optional[RetryConfig] = None,
        headers: Optional[Dict[str, str]] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.retry_config = retry_config or DEFAULT_RETRY_CONFIG
        self.headers = headers or {}
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the underlying httpx client"""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=httpx.Timeout(self.timeout, connect=10.0),
                headers=self.headers,
                transport=self._transport,
            )
        return self._client

    async def close(self):
        """Close the HTTP client"""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    def _should_retry(self, exception: Exception) -> bool:
        """Network-related errors that are typically transient"""
        retryable_errors = (
            httpx.ConnectError,
            httpx.ConnectTimeout,
            httpx.ReadTimeout,
            httpx.WriteTimeout,
            httpx.PoolTimeout,
            ConnectionRefusedError,
        )
        return isinstance(exception, retryable_errors)

    def _calculate_delay(self, attempt: int) -> float:
        """Exponential backoff capped at max_delay"""
        delay = self.retry_config.initial_delay * (
            self.retry_config.exponential_base ** attempt
        )
        return min(delay, self.retry_config.max_delay)

    async def _request_with_retry(
        self,
        method: str,
        path: str,
        **kwargs
    ) -> httpx.Response:
        last_exception = None

        for attempt in range(self.retry_config.max_retries + 1):
            try:
                client = await self._get_client()
                response = await client.request(method, path, **kwargs)

                if response.status_code in self.retry_config.retry_on_status:
                    if attempt < self.retry_config.max_retries:
                        delay = self._calculate_delay(attempt)
                        logger.warning(
                            f"[HTTP_CLIENT] Status {response.status_code}, retrying in {delay:.1f}s "
                            f"(attempt {attempt + 1}/{self.retry_config.max_retries})"
                        )
                        await asyncio.sleep(delay)
                        continue

                return response

            except Exception as e:
                last_exception = e

                if not self._should_retry(e):
                    raise

                if attempt < self.retry_config.max_retries:
                    delay = self._calculate_delay(attempt)
                    logger.warning(
                        f"[HTTP_CLIENT] {type(e).__name__}: {str(e)[:100]}, retrying in {delay:.1f}s "
                        f"(attempt {attempt + 1}/{self.retry_config.max_retries})"
                    )
                    await self.close()
                    await asyncio.sleep(delay)
                else:
                    logger.error(f"[HTTP_CLIENT] Max retries exceeded for {method} {path}")
                    raise

        raise last_exception

    async def get(self, path: str, **kwargs) -> httpx.Response:
        """GET request with retry"""
        return await self._request_with_retry("GET", path, **kwargs)

    async def post(self, path: str, **kwargs) -> httpx.Response:
        """POST request with retry"""
        return await self._request_with_retry("POST", path, **kwargs)

    async def get_json(self, path: str, **kwargs) -> Dict[str, Any]:
        """GET request returning JSON"""
        response = await self.get(path, **kwargs)
        response.raise_for_status()
        return response.json()
