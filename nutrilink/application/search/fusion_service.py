"""
Food search fusion service.

Fans a query out to every enabled source concurrently, maps the raw
results to canonical items, applies any brand filter, then deduplicates,
scores, ranks and truncates them into one page.
"""

import asyncio
import time
from typing import Any, Optional, Sequence

import structlog

from nutrilink.application.enrichment import enrich_items
from nutrilink.domain.food.models import (
    CanonicalFoodItem,
    FoodSource,
    SearchResponse,
)
from nutrilink.domain.food.ports import IEnrichmentProvider, IFoodSourceClient
from nutrilink.domain.food.query import SearchQuery
from nutrilink.domain.food.scoring import (
    data_completeness,
    deduplicate,
    relevance_score,
)
from nutrilink.domain.shared.errors import ValidationError

logger = structlog.get_logger(__name__)

DEFAULT_LIMIT = 20
MIN_LIMIT = 1
MAX_LIMIT = 100


def clamp_limit(limit: Optional[int]) -> int:
    """Default a missing limit and clamp it to [1, 100].

    Example:
        >>> clamp_limit(None), clamp_limit(0), clamp_limit(500)
        (20, 1, 100)
    """
    if limit is None:
        return DEFAULT_LIMIT
    return max(MIN_LIMIT, min(MAX_LIMIT, int(limit)))


class FoodSearchService:
    """Search across every configured food source.

    Flow:
    1. Validate query, split off any ``store:brand:`` filter, resolve sources
    2. Fetch ``2 * limit`` raw items (``3 * limit`` when filtering by brand)
       from each source concurrently
    3. Map, concatenate in source order, drop items failing the brand
       filter, deduplicate by normalized name
    4. Score relevance and completeness, stable-sort by relevance
    5. Truncate, then enrich the final page by barcode
    """

    def __init__(
        self,
        sources: Sequence[IFoodSourceClient],
        enrichment_provider: Optional[IEnrichmentProvider] = None,
    ) -> None:
        """Initialize service.

        Args:
            sources: Source clients in priority order (first wins on dedup)
            enrichment_provider: Barcode enrichment provider (optional)
        """
        self.sources = list(sources)
        self.enrichment_provider = enrichment_provider

    @property
    def available_sources(self) -> list[FoodSource]:
        """Configured sources, in priority order."""
        return [client.source for client in self.sources]

    def _resolve_sources(
        self, requested: Optional[Sequence[str]]
    ) -> list[IFoodSourceClient]:
        if not requested:
            return list(self.sources)

        wanted: set[FoodSource] = set()
        for name in requested:
            try:
                wanted.add(FoodSource(name.strip().lower()))
            except ValueError as e:
                raise ValidationError(f"Unknown source: {name}") from e

        enabled = [client for client in self.sources if client.source in wanted]
        missing = wanted - {client.source for client in enabled}
        if missing:
            names = ", ".join(sorted(source.value for source in missing))
            raise ValidationError(f"Source not configured: {names}")

        return enabled

    async def _fetch(
        self, client: IFoodSourceClient, query: str, fetch_limit: int
    ) -> list[CanonicalFoodItem]:
        """Fetch and map one source; any failure yields an empty list."""
        try:
            raw_items: list[Any] = await client.search(query, fetch_limit)
        except Exception as e:  # noqa: BLE001
            logger.error(
                "Source search raised",
                source=client.source.value,
                query=query,
                error=str(e),
            )
            return []

        items: list[CanonicalFoodItem] = []
        for raw in raw_items:
            try:
                item = client.to_canonical(raw)
            except Exception as e:  # noqa: BLE001
                logger.warning(
                    "Dropped item that failed mapping",
                    source=client.source.value,
                    error=str(e),
                )
                continue
            if item is None:
                logger.debug("Dropped unmappable item", source=client.source.value)
                continue
            items.append(item)
        return items

    async def search(
        self,
        query: str,
        limit: Optional[int] = DEFAULT_LIMIT,
        sources: Optional[Sequence[str]] = None,
    ) -> SearchResponse:
        """Search all enabled sources and return one ranked page.

        Args:
            query: Free-text query, optionally ``brand:product`` or
                ``store:brand:product``
            limit: Page size (default 20, clamped to [1, 100])
            sources: Source names to query (default: all configured)

        Returns:
            SearchResponse with the page, the deduplicated total and the
            sources actually queried

        Raises:
            ValidationError: If the query or its product term is blank, or a
                source is unknown

        Example:
            >>> async def example(usda, off):
            ...     service = FoodSearchService([usda, off], enrichment_provider=off)
            ...     response = await service.search("apple", limit=10)
            ...     return response.total_count
        """
        if query is None or not query.strip():
            raise ValidationError("Query parameter is required")

        query = query.strip()
        parsed = SearchQuery.parse(query)
        if not parsed.product:
            raise ValidationError("Product term is required")

        term = parsed.product
        page_size = clamp_limit(limit)
        enabled = self._resolve_sources(sources)
        if parsed.has_brand_filter:
            fetch_limit = min(page_size * 3, MAX_LIMIT * 3)
        else:
            fetch_limit = min(page_size * 2, MAX_LIMIT * 2)

        start_time = time.time()
        logger.info(
            "Starting food search",
            query=query,
            product=term,
            brand=parsed.brand,
            store=parsed.store,
            limit=page_size,
            sources=[client.source.value for client in enabled],
        )

        per_source = await asyncio.gather(
            *(self._fetch(client, term, fetch_limit) for client in enabled)
        )

        merged = [item for items in per_source for item in items]
        filtered = [item for item in merged if parsed.matches(item)]
        unique = deduplicate(filtered)

        scored = [
            item.model_copy(
                update={
                    "relevance_score": relevance_score(item.normalized_name, term),
                    "data_completeness": data_completeness(item),
                }
            )
            for item in unique
        ]
        ranked = sorted(scored, key=lambda item: item.relevance_score, reverse=True)

        page = await enrich_items(ranked[:page_size], self.enrichment_provider)

        logger.info(
            "Food search completed",
            query=query,
            fetched=len(merged),
            filtered_out=len(merged) - len(filtered),
            unique=len(unique),
            returned=len(page),
            time_ms=round((time.time() - start_time) * 1000, 2),
        )

        return SearchResponse(
            results=page,
            total_count=len(unique),
            sources=[client.source for client in enabled],
        )
