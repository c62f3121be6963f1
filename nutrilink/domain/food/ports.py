"""
Ports (Interfaces) for food data sources.

The search and barcode services depend on these protocols only, so each
upstream keeps its own raw payload type behind its adapter and mapper.

Design Pattern: Ports & Adapters (Hexagonal Architecture)
"""

from typing import Any, Optional, Protocol, runtime_checkable

from nutrilink.domain.food.models import (
    CanonicalFoodItem,
    FoodSource,
    ProductEnrichment,
)
from nutrilink.domain.shared.value_objects import Barcode


@runtime_checkable
class IFoodSourceClient(Protocol):
    """
    Port for one upstream nutrition database.

    Bulk calls (``search``, ``get_by_id``) never raise: upstream failures
    are logged and downgraded to ``[]`` / ``None``. ``lookup_barcode`` is
    strict and lets ExternalServiceError propagate.
    """

    @property
    def source(self) -> FoodSource:
        """Which upstream this adapter talks to."""
        ...

    async def search(self, query: str, limit: int) -> list[Any]:
        """
        Search by free text.

        Args:
            query: Search term (e.g., "apple", "greek yogurt")
            limit: Maximum raw items to fetch

        Returns:
            Raw items in upstream order (empty on any failure)
        """
        ...

    async def get_by_id(self, source_id: str) -> Optional[Any]:
        """Fetch one raw item by upstream id (None if missing or on failure)."""
        ...

    async def lookup_barcode(self, barcode: Barcode) -> Optional[Any]:
        """
        Fetch one raw item by cleaned barcode.

        Returns:
            Raw item, or None when the upstream does not know the barcode

        Raises:
            ExternalServiceError: If the upstream call fails
        """
        ...

    def to_canonical(self, raw: Any) -> Optional[CanonicalFoodItem]:
        """Map a raw item (None when the item is unusable)."""
        ...

    def clear_cache(self) -> int:
        """Drop every cache entry this adapter owns; returns count dropped."""
        ...


@runtime_checkable
class IEnrichmentProvider(Protocol):
    """
    Port for cross-source enrichment by barcode.

    Supplies image and quality labels for items that another source
    returned. Implementations must not raise.
    """

    @property
    def source(self) -> FoodSource:
        """Source whose own items never need enrichment."""
        ...

    async def lookup_enrichment(self, barcode: str) -> Optional[ProductEnrichment]:
        """Return enrichment data for a barcode, or None."""
        ...
