"""
Canonical food domain models.

Every upstream source is mapped into these records so that the search and
barcode services never touch per-source types. Python attributes are
snake_case; the wire shape is camelCase with absent optionals omitted.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class FoodSource(str, Enum):
    """Upstream nutrition database."""

    USDA = "usda"
    OPENFOODFACTS = "openfoodfacts"

    @property
    def id_prefix(self) -> str:
        """Prefix used when building globally unique item ids."""
        return _ID_PREFIXES[self]


_ID_PREFIXES = {
    FoodSource.USDA: "usda",
    FoodSource.OPENFOODFACTS: "off",
}


class _WireModel(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def to_wire(self) -> dict[str, Any]:
        """Serialize with camelCase keys, dropping unset optionals."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class NutritionInfo(_WireModel):
    """
    Nutrition facts for one canonical item.

    Calories are whole kcal, macros are grams with one decimal and sodium is
    whole milligrams.

    Example:
        >>> info = NutritionInfo(calories=52, protein=0.3, carbs=13.8, fat=0.2)
        >>> assert info.fiber is None
    """

    calories: int = Field(0, ge=0, description="Energy in kcal")
    protein: float = Field(0.0, ge=0, description="Protein in g")
    carbs: float = Field(0.0, ge=0, description="Carbohydrates in g")
    fat: float = Field(0.0, ge=0, description="Total fat in g")
    fiber: Optional[float] = Field(None, ge=0, description="Fiber in g")
    sugar: Optional[float] = Field(None, ge=0, description="Sugar in g")
    sodium: Optional[int] = Field(None, ge=0, description="Sodium in mg")
    serving_size: Optional[str] = Field(None, description="e.g. '30 g'")


class CanonicalFoodItem(_WireModel):
    """
    Unified food record regardless of origin.

    ``relevance_score`` only means something relative to the query that
    produced it; ``data_completeness`` is a property of the record alone.

    Example:
        >>> item = CanonicalFoodItem(
        ...     id="usda-1",
        ...     name="Apple",
        ...     normalized_name="apple",
        ...     source=FoodSource.USDA,
        ...     source_id="1",
        ...     nutrition=NutritionInfo(calories=52),
        ... )
        >>> assert item.to_wire()["normalizedName"] == "apple"
    """

    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    normalized_name: str
    category: str = "Other"
    nutrition: NutritionInfo = Field(default_factory=NutritionInfo)
    source: FoodSource
    source_id: str

    # Provenance (all optional)
    brand_owner: Optional[str] = None
    brand_name: Optional[str] = None
    gtin_upc: Optional[str] = None
    household_serving_full_text: Optional[str] = None
    data_type: Optional[str] = None
    ingredients: Optional[str] = None
    package_weight: Optional[str] = None
    image_url: Optional[str] = None
    nutriscore_grade: Optional[str] = None
    nova_group: Optional[int] = Field(None, ge=1, le=4)

    relevance_score: int = Field(0, ge=0, le=100)
    data_completeness: int = Field(0, ge=0, le=100)


class ProductEnrichment(BaseModel):
    """Image and quality labels borrowed from another source by barcode."""

    model_config = ConfigDict(frozen=True)

    image_url: Optional[str] = None
    nutriscore_grade: Optional[str] = None
    nova_group: Optional[int] = None

    def is_empty(self) -> bool:
        """True when there is nothing to backfill."""
        return (
            self.image_url is None
            and self.nutriscore_grade is None
            and self.nova_group is None
        )


class SearchResponse(_WireModel):
    """Result page of a fused search."""

    results: list[CanonicalFoodItem] = Field(default_factory=list)
    total_count: int = Field(0, ge=0)
    sources: list[FoodSource] = Field(default_factory=list)


class BarcodeResult(_WireModel):
    """Outcome of a barcode resolution."""

    found: bool
    source: Optional[FoodSource] = None
    item: Optional[CanonicalFoodItem] = None

    @classmethod
    def not_found(cls) -> BarcodeResult:
        """Result for a barcode no source knows."""
        return cls(found=False)


def apply_enrichment(
    item: CanonicalFoodItem, enrichment: Optional[ProductEnrichment]
) -> CanonicalFoodItem:
    """Backfill image and quality labels the item does not already carry.

    Example:
        >>> item = CanonicalFoodItem(
        ...     id="usda-1",
        ...     name="Nutella",
        ...     normalized_name="nutella",
        ...     source=FoodSource.USDA,
        ...     source_id="1",
        ... )
        >>> enriched = apply_enrichment(item, ProductEnrichment(nutriscore_grade="e"))
        >>> assert enriched.nutriscore_grade == "e"
    """
    if enrichment is None:
        return item

    updates: dict[str, Any] = {}
    if item.image_url is None and enrichment.image_url is not None:
        updates["image_url"] = enrichment.image_url
    if item.nutriscore_grade is None and enrichment.nutriscore_grade is not None:
        updates["nutriscore_grade"] = enrichment.nutriscore_grade
    if item.nova_group is None and enrichment.nova_group is not None:
        updates["nova_group"] = enrichment.nova_group

    return item.model_copy(update=updates) if updates else item
