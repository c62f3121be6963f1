"""Test doubles and builders shared across unit tests."""

from typing import Any, Optional
from unittest.mock import AsyncMock

from nutrilink.domain.food.models import (
    CanonicalFoodItem,
    FoodSource,
    NutritionInfo,
)
from nutrilink.domain.food.scoring import normalize_name


class FakeClock:
    """Manually advanced clock for TTL tests."""

    def __init__(self, start: float = 1_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeSourceClient:
    """In-memory source client whose raw items are canonical items already."""

    def __init__(
        self,
        source: FoodSource,
        items: Optional[list[CanonicalFoodItem]] = None,
        barcode_hit: Optional[CanonicalFoodItem] = None,
    ) -> None:
        self.source = source
        self.search = AsyncMock(return_value=list(items or []))
        self.get_by_id = AsyncMock(return_value=None)
        self.lookup_barcode = AsyncMock(return_value=barcode_hit)

    def to_canonical(self, raw: Any) -> Optional[CanonicalFoodItem]:
        return raw

    def clear_cache(self) -> int:
        return 0


def make_item(
    name: str,
    source: FoodSource = FoodSource.USDA,
    source_id: str = "1",
    **overrides: Any,
) -> CanonicalFoodItem:
    """Build a canonical item with sensible defaults."""
    fields: dict[str, Any] = {
        "id": f"{source.id_prefix}-{source_id}",
        "name": name,
        "normalized_name": normalize_name(name),
        "source": source,
        "source_id": source_id,
        "nutrition": NutritionInfo(calories=100, protein=1.0, carbs=20.0, fat=0.5),
    }
    fields.update(overrides)
    return CanonicalFoodItem(**fields)
