"""
OpenFoodFacts API client.

Public API, no authentication. OpenFoodFacts asks every client to send a
descriptive User-Agent.
"""

from typing import Any, Optional

import structlog

from nutrilink.domain.food.models import (
    CanonicalFoodItem,
    FoodSource,
    ProductEnrichment,
)
from nutrilink.domain.food.openfoodfacts_mapper import OpenFoodFactsMapper
from nutrilink.domain.food.openfoodfacts_models import OFFProduct
from nutrilink.domain.shared.errors import ExternalServiceError
from nutrilink.domain.shared.value_objects import Barcode, clean_barcode
from nutrilink.infrastructure.cache.ttl_cache import TTLCache
from nutrilink.infrastructure.http.base_client import BaseApiClient

logger = structlog.get_logger(__name__)

SEARCH_FIELDS = ",".join(
    [
        "code",
        "product_name",
        "product_name_en",
        "generic_name",
        "brands",
        "categories",
        "quantity",
        "serving_size",
        "nutriments",
        "nutriscore_grade",
        "nova_group",
        "ingredients_text",
        "image_front_url",
        "image_url",
    ]
)


class OpenFoodFactsClient(BaseApiClient):
    """OpenFoodFacts API client.

    Cache keys:
        off:search:{query}:{limit}
        off:product:{barcode}
    """

    SERVICE_NAME = "OpenFoodFacts"
    BASE_URL = "https://world.openfoodfacts.org"
    USER_AGENT = "Nutrilink/1.0"
    CACHE_PREFIX = "off:"

    source = FoodSource.OPENFOODFACTS

    def __init__(
        self,
        cache: TTLCache,
        base_url: str = BASE_URL,
        user_agent: str = USER_AGENT,
        timeout_seconds: int = 10,
        search_ttl_seconds: float = 3600,
        item_ttl_seconds: float = 86400,
        not_found_ttl_seconds: float = 900,
    ) -> None:
        """Initialize API client.

        Args:
            cache: Shared TTL cache
            base_url: Site root (API paths are appended)
            user_agent: User-Agent header value
            timeout_seconds: Request timeout
            search_ttl_seconds: TTL for search results
            item_ttl_seconds: TTL for found products
            not_found_ttl_seconds: TTL for cached misses
        """
        super().__init__(
            timeout_seconds=timeout_seconds,
            headers={"User-Agent": user_agent},
        )
        self.cache = cache
        self.base_url = base_url.rstrip("/")
        self.search_ttl = search_ttl_seconds
        self.item_ttl = item_ttl_seconds
        self.not_found_ttl = not_found_ttl_seconds

    async def search(self, query: str, limit: int = 20) -> list[OFFProduct]:
        """Search products by name.

        Args:
            query: Search terms
            limit: Page size

        Returns:
            Parsed products (empty on any upstream failure)
        """
        key = f"off:search:{query}:{limit}"
        cached = self.cache.get(key)
        if cached is not None:
            return cached.data

        params = {
            "search_terms": query,
            "search_simple": 1,
            "action": "process",
            "json": 1,
            "page_size": limit,
            "page": 1,
            "fields": SEARCH_FIELDS,
        }

        try:
            payload = await self._fetch_json(
                "GET", f"{self.base_url}/cgi/search.pl", params=params
            )
        except ExternalServiceError as e:
            logger.warning("OpenFoodFacts search failed", query=query, error=str(e))
            return []

        if not isinstance(payload, dict):
            logger.warning("OpenFoodFacts search returned an unexpected body", query=query)
            return []

        products = self._parse_products(payload.get("products"))
        self.cache.set(key, products, ttl=self.search_ttl)
        logger.info("OpenFoodFacts search completed", query=query, results=len(products))
        return products

    @staticmethod
    def _parse_products(raw_products: Any) -> list[OFFProduct]:
        if not isinstance(raw_products, list):
            return []

        products: list[OFFProduct] = []
        for raw in raw_products:
            if not isinstance(raw, dict):
                logger.warning("Skipping malformed OpenFoodFacts product", reason="not an object")
                continue
            try:
                products.append(OpenFoodFactsMapper.parse_product(raw))
            except ValueError as e:
                logger.warning(
                    "Skipping malformed OpenFoodFacts product",
                    code=raw.get("code"),
                    error=str(e),
                )
        return products

    async def _fetch_product(self, code: str) -> Optional[OFFProduct]:
        """Fetch a product by barcode through the cache.

        Raises:
            ExternalServiceError: If the API call fails
        """
        key = f"off:product:{code}"
        cached = self.cache.get(key)
        if cached is not None:
            return cached.data

        payload = await self._fetch_json(
            "GET", f"{self.base_url}/api/v2/product/{code}.json"
        )

        if payload is None:
            result = None
        elif not isinstance(payload, dict):
            raise ExternalServiceError("OpenFoodFacts API returned an unexpected body")
        else:
            try:
                response = OpenFoodFactsMapper.parse_product_response(payload)
            except ValueError as e:
                raise ExternalServiceError(f"Malformed OpenFoodFacts product: {e}") from e
            result = response.product if response.is_found() else None

        if result is None:
            logger.info("Product not found in OpenFoodFacts", barcode=code)
            self.cache.set(key, None, ttl=self.not_found_ttl)
        else:
            self.cache.set(key, result, ttl=self.item_ttl)

        return result

    async def get_by_id(self, source_id: str) -> Optional[OFFProduct]:
        """Get a product by barcode, never raising.

        Returns:
            Product, or None if not found or on failure
        """
        try:
            return await self._fetch_product(source_id)
        except ExternalServiceError as e:
            logger.warning("OpenFoodFacts product lookup failed", barcode=source_id, error=str(e))
            return None

    async def lookup_barcode(self, barcode: Barcode) -> Optional[OFFProduct]:
        """Get a product by barcode.

        Raises:
            ExternalServiceError: If the API call fails
        """
        return await self._fetch_product(barcode.value)

    async def lookup_enrichment(self, barcode: str) -> Optional[ProductEnrichment]:
        """Image and quality labels for a barcode (None if nothing useful)."""
        code = clean_barcode(barcode)
        if not code:
            return None

        product = await self.get_by_id(code)
        if product is None:
            return None

        enrichment = OpenFoodFactsMapper.to_enrichment(product)
        return None if enrichment.is_empty() else enrichment

    def to_canonical(self, raw: OFFProduct) -> Optional[CanonicalFoodItem]:
        """Map an OFF product to a canonical item."""
        return OpenFoodFactsMapper.to_canonical(raw)

    def clear_cache(self) -> int:
        """Drop every OpenFoodFacts cache entry."""
        return self.cache.invalidate_prefix(self.CACHE_PREFIX)
