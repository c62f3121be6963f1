"""
USDA FoodData Central API client.

Handles HTTP requests with rate limiting and response caching. Search and
single-food lookups never raise; barcode lookups are strict.
"""

import asyncio
import time
from typing import Any, Optional

import structlog

from nutrilink.domain.food.models import CanonicalFoodItem, FoodSource
from nutrilink.domain.food.usda_mapper import USDAMapper
from nutrilink.domain.food.usda_models import USDADataType, USDAFoodItem
from nutrilink.domain.shared.errors import ExternalServiceError, RateLimitError
from nutrilink.domain.shared.value_objects import Barcode
from nutrilink.infrastructure.cache.ttl_cache import TTLCache
from nutrilink.infrastructure.http.base_client import BaseApiClient

logger = structlog.get_logger(__name__)

BARCODE_PAGE_SIZE = 25


class RateLimiter:
    """Token bucket rate limiter.

    Ensures we don't exceed USDA API rate limits (1000 requests/hour for a
    standard key).
    """

    def __init__(
        self,
        requests_per_hour: int = 1000,
        burst_size: int = 10,
        max_wait_seconds: float = 60,
    ) -> None:
        """Initialize rate limiter.

        Args:
            requests_per_hour: Max requests per hour
            burst_size: Max burst requests
            max_wait_seconds: Longest wait accepted before giving up
        """
        self.requests_per_hour = requests_per_hour
        self.burst_size = burst_size
        self.max_wait_seconds = max_wait_seconds
        self.tokens = float(burst_size)
        self.last_update = time.time()
        self.lock = asyncio.Lock()

    async def acquire(self) -> None:
        """Acquire token or wait.

        Raises:
            RateLimitError: If the wait would exceed ``max_wait_seconds``
        """
        async with self.lock:
            now = time.time()
            elapsed = now - self.last_update

            # Refill tokens based on time elapsed
            refill_rate = self.requests_per_hour / 3600.0
            self.tokens = min(self.burst_size, self.tokens + elapsed * refill_rate)
            self.last_update = now

            if self.tokens >= 1.0:
                self.tokens -= 1.0
                return

            wait_time = (1.0 - self.tokens) / refill_rate
            if wait_time > self.max_wait_seconds:
                msg = f"USDA rate limit exceeded, wait time {wait_time:.0f}s"
                raise RateLimitError(msg)

            await asyncio.sleep(wait_time)
            self.tokens = 0.0
            self.last_update = time.time()


class USDAApiClient(BaseApiClient):
    """USDA FoodData Central API client.

    Cache keys:
        usda:search:{query}:{limit}
        usda:food:{fdc_id}
        usda:barcode:{digits}
    """

    SERVICE_NAME = "USDA"
    BASE_URL = "https://api.nal.usda.gov/fdc/v1"
    CACHE_PREFIX = "usda:"

    source = FoodSource.USDA

    def __init__(
        self,
        api_key: Optional[str],
        cache: TTLCache,
        base_url: str = BASE_URL,
        timeout_seconds: int = 10,
        search_ttl_seconds: float = 3600,
        item_ttl_seconds: float = 86400,
        not_found_ttl_seconds: float = 900,
        rate_limiter: Optional[RateLimiter] = None,
    ) -> None:
        """Initialize API client.

        Args:
            api_key: USDA API key (None disables all network calls)
            cache: Shared TTL cache
            base_url: API root
            timeout_seconds: Request timeout
            search_ttl_seconds: TTL for search results
            item_ttl_seconds: TTL for single foods and barcode hits
            not_found_ttl_seconds: TTL for cached misses
            rate_limiter: Token bucket (default: 1000 requests/hour)
        """
        super().__init__(timeout_seconds=timeout_seconds)
        self.api_key = api_key
        self.cache = cache
        self.base_url = base_url.rstrip("/")
        self.search_ttl = search_ttl_seconds
        self.item_ttl = item_ttl_seconds
        self.not_found_ttl = not_found_ttl_seconds
        self.rate_limiter = rate_limiter or RateLimiter()

    def _has_key(self, operation: str) -> bool:
        if self.api_key:
            return True
        logger.warning("USDA_API_KEY is not configured", operation=operation)
        return False

    def _parse_foods(self, payload: Any) -> list[USDAFoodItem]:
        """Parse ``foods`` of a search payload, skipping malformed entries."""
        if not isinstance(payload, dict):
            raise ExternalServiceError("USDA API returned an unexpected body")

        foods: list[USDAFoodItem] = []
        for raw in payload.get("foods") or []:
            if not isinstance(raw, dict):
                logger.warning("Skipping malformed USDA item", reason="not an object")
                continue
            try:
                foods.append(USDAMapper.parse_food(raw))
            except ValueError as e:
                logger.warning(
                    "Skipping malformed USDA item",
                    fdc_id=raw.get("fdcId"),
                    error=str(e),
                )
        return foods

    async def search(self, query: str, limit: int = 25) -> list[USDAFoodItem]:
        """Search USDA database by free text.

        Args:
            query: Food description
            limit: Page size

        Returns:
            Parsed foods (empty on missing key or any upstream failure)

        Example:
            >>> async def example():
            ...     async with USDAApiClient(api_key="key", cache=TTLCache()) as client:
            ...         return await client.search("apple", limit=10)
        """
        if not self._has_key("search"):
            return []

        key = f"usda:search:{query}:{limit}"
        cached = self.cache.get(key)
        if cached is not None:
            return cached.data

        try:
            await self.rate_limiter.acquire()
            payload = await self._fetch_json(
                "GET",
                f"{self.base_url}/foods/search",
                params={"api_key": self.api_key, "query": query, "pageSize": limit},
            )
            if payload is None:
                raise ExternalServiceError("USDA search endpoint returned 404")
            foods = self._parse_foods(payload)
        except ExternalServiceError as e:
            logger.warning("USDA search failed", query=query, error=str(e))
            return []

        self.cache.set(key, foods, ttl=self.search_ttl)
        logger.info("USDA search completed", query=query, results=len(foods))
        return foods

    async def get_by_id(self, source_id: str) -> Optional[USDAFoodItem]:
        """Get one food by FDC id.

        Returns:
            Parsed food, or None if missing, not configured or on failure
        """
        if not self._has_key("get_by_id"):
            return None

        key = f"usda:food:{source_id}"
        cached = self.cache.get(key)
        if cached is not None:
            return cached.data

        try:
            await self.rate_limiter.acquire()
            payload = await self._fetch_json(
                "GET",
                f"{self.base_url}/food/{source_id}",
                params={"api_key": self.api_key},
            )
        except ExternalServiceError as e:
            logger.warning("USDA food lookup failed", fdc_id=source_id, error=str(e))
            return None

        if payload is None:
            logger.info("Food not found in USDA", fdc_id=source_id)
            self.cache.set(key, None, ttl=self.not_found_ttl)
            return None

        if not isinstance(payload, dict):
            logger.warning("USDA food lookup returned an unexpected body", fdc_id=source_id)
            return None

        try:
            food = USDAMapper.parse_food(payload)
        except ValueError as e:
            logger.warning("Malformed USDA food", fdc_id=source_id, error=str(e))
            return None

        self.cache.set(key, food, ttl=self.item_ttl)
        return food

    async def lookup_barcode(self, barcode: Barcode) -> Optional[USDAFoodItem]:
        """Find a Branded food by GTIN/UPC.

        Prefers a food whose digit-only ``gtinUpc`` equals the barcode or
        differs from it only by leading digits; otherwise takes the first
        hit. Misses are cached too.

        Raises:
            RateLimitError: If rate limit exceeded
            TimeoutError: If request times out
            ExternalServiceError: If API error
        """
        if not self._has_key("lookup_barcode"):
            return None

        code = barcode.value
        key = f"usda:barcode:{code}"
        cached = self.cache.get(key)
        if cached is not None:
            return cached.data

        await self.rate_limiter.acquire()
        payload = await self._fetch_json(
            "POST",
            f"{self.base_url}/foods/search",
            params={"api_key": self.api_key},
            json={
                "query": code,
                "dataType": [USDADataType.BRANDED.value],
                "pageSize": BARCODE_PAGE_SIZE,
            },
        )

        foods = [] if payload is None else self._parse_foods(payload)
        match = self._pick_barcode_match(foods, code)

        if match is None:
            logger.info("Barcode not found in USDA", barcode=code)
            self.cache.set(key, None, ttl=self.not_found_ttl)
            return None

        self.cache.set(key, match, ttl=self.item_ttl)
        return match

    @staticmethod
    def _pick_barcode_match(foods: list[USDAFoodItem], code: str) -> Optional[USDAFoodItem]:
        for food in foods:
            gtin = food.gtin_digits()
            if gtin and (gtin == code or gtin.endswith(code) or code.endswith(gtin)):
                return food
        return foods[0] if foods else None

    def to_canonical(self, raw: USDAFoodItem) -> Optional[CanonicalFoodItem]:
        """Map a USDA food to a canonical item."""
        return USDAMapper.to_canonical(raw)

    def clear_cache(self) -> int:
        """Drop every USDA cache entry."""
        return self.cache.invalidate_prefix(self.CACHE_PREFIX)
