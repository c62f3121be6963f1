"""
Shared aiohttp plumbing for upstream API clients.

Owns the session lifecycle (``async with client:``) and turns transport
failures and HTTP status codes into the domain error taxonomy. Callers
decide whether to swallow those errors.
"""

import asyncio
from typing import Any, Optional

import aiohttp
import structlog

from nutrilink.domain.shared.errors import (
    ExternalServiceError,
    RateLimitError,
    ServiceUnavailableError,
    TimeoutError,
)

logger = structlog.get_logger(__name__)


class BaseApiClient:
    """Base class for JSON-over-HTTP upstream clients."""

    SERVICE_NAME = "upstream"

    def __init__(
        self,
        timeout_seconds: int = 10,
        headers: Optional[dict[str, str]] = None,
    ) -> None:
        """Initialize client.

        Args:
            timeout_seconds: Per-request timeout
            headers: Default headers sent with every request
        """
        self.timeout_seconds = timeout_seconds
        self.headers = headers or {}
        self._session: Optional[aiohttp.ClientSession] = None

    async def __aenter__(self) -> "BaseApiClient":
        """Async context manager entry."""
        self._session = aiohttp.ClientSession(headers=self.headers)
        return self

    async def __aexit__(self, *args: object) -> None:
        """Async context manager exit."""
        if self._session:
            await self._session.close()
            self._session = None

    async def _fetch_json(
        self,
        method: str,
        url: str,
        *,
        params: Optional[dict[str, Any]] = None,
        json: Optional[dict[str, Any]] = None,
    ) -> Optional[Any]:
        """Perform one request and decode its JSON body.

        Args:
            method: "GET" or "POST"
            url: Absolute URL
            params: Query parameters
            json: JSON request body (POST only)

        Returns:
            Decoded body, or None when the upstream answers 404

        Raises:
            RateLimitError: On 429
            ServiceUnavailableError: On 5xx
            TimeoutError: If the request times out
            ExternalServiceError: On any other failure
        """
        if not self._session:
            msg = f"{self.SERVICE_NAME} client not initialized, use async with"
            raise ExternalServiceError(msg)

        timeout = aiohttp.ClientTimeout(total=self.timeout_seconds)

        try:
            if method == "POST":
                request = self._session.post(url, params=params, json=json, timeout=timeout)
            else:
                request = self._session.get(url, params=params, timeout=timeout)

            async with request as response:
                if response.status == 404:
                    return None

                if response.status == 429:
                    msg = f"{self.SERVICE_NAME} API rate limit exceeded"
                    raise RateLimitError(msg)

                if response.status >= 500:
                    msg = f"{self.SERVICE_NAME} API error: {response.status}"
                    raise ServiceUnavailableError(msg)

                if response.status >= 400:
                    msg = f"{self.SERVICE_NAME} API error: {response.status}"
                    raise ExternalServiceError(msg)

                try:
                    return await response.json(content_type=None)
                except ValueError as e:
                    msg = f"{self.SERVICE_NAME} API returned an undecodable body"
                    raise ExternalServiceError(msg) from e

        except asyncio.TimeoutError as e:
            msg = f"{self.SERVICE_NAME} API timeout after {self.timeout_seconds}s"
            raise TimeoutError(msg) from e

        except aiohttp.ClientError as e:
            msg = f"{self.SERVICE_NAME} API client error: {e}"
            raise ExternalServiceError(msg) from e
