"""
AI food analysis domain models.

Items extracted from a vision model's reply. Every field is always a legal
enum member or in range: the parser corrects bad input, and the model
constraints guarantee nothing illegal slips through.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class FoodCategory(str, Enum):
    """Pantry category."""

    PRODUCE = "produce"
    DAIRY = "dairy"
    MEAT = "meat"
    SEAFOOD = "seafood"
    BREAD = "bread"
    CANNED = "canned"
    FROZEN = "frozen"
    BEVERAGES = "beverages"
    CONDIMENTS = "condiments"
    SNACKS = "snacks"
    GRAINS = "grains"
    SPICES = "spices"
    OTHER = "other"


class QuantityUnit(str, Enum):
    """Unit the quantity is counted in."""

    ITEMS = "items"
    LBS = "lbs"
    OZ = "oz"
    BUNCH = "bunch"
    CONTAINER = "container"
    BAG = "bag"
    BOX = "box"
    BOTTLE = "bottle"
    CAN = "can"


class StorageLocation(str, Enum):
    """Where the item should be kept."""

    REFRIGERATOR = "refrigerator"
    FREEZER = "freezer"
    PANTRY = "pantry"
    COUNTER = "counter"


class AnalysisItem(BaseModel):
    """
    One normalized food item.

    Example:
        >>> item = AnalysisItem(name="Milk", category=FoodCategory.DAIRY)
        >>> assert item.storage_location == "refrigerator"
        >>> assert item.to_wire()["quantityUnit"] == "items"
    """

    model_config = ConfigDict(frozen=True, use_enum_values=True)

    name: str = Field("Unknown Item", min_length=1)
    category: FoodCategory = FoodCategory.OTHER
    quantity: float = Field(1, ge=0)
    quantity_unit: QuantityUnit = QuantityUnit.ITEMS
    storage_location: StorageLocation = StorageLocation.REFRIGERATOR
    shelf_life_days: int = Field(7, ge=1, le=365)
    confidence: float = Field(0.5, ge=0.0, le=1.0)

    def to_wire(self) -> dict[str, Any]:
        """camelCase dict for API responses."""
        return {
            "name": self.name,
            "category": self.category,
            "quantity": self.quantity,
            "quantityUnit": self.quantity_unit,
            "storageLocation": self.storage_location,
            "shelfLifeDays": self.shelf_life_days,
            "confidence": self.confidence,
        }


class AnalysisData(BaseModel):
    """Normalized payload of one analysis reply."""

    model_config = ConfigDict(frozen=True)

    items: list[AnalysisItem] = Field(default_factory=list)
    notes: Optional[str] = None
    error: Optional[str] = None

    def to_wire(self) -> dict[str, Any]:
        data: dict[str, Any] = {"items": [item.to_wire() for item in self.items]}
        if self.notes is not None:
            data["notes"] = self.notes
        if self.error is not None:
            data["error"] = self.error
        return data


class AnalysisParseResult(BaseModel):
    """
    Outcome of parsing an analysis reply. Never raised, always returned.

    ``normalized`` is True when at least one field of one item had to be
    corrected.
    """

    model_config = ConfigDict(frozen=True)

    success: bool
    normalized: bool = False
    data: Optional[AnalysisData] = None
    error: Optional[str] = None

    def to_wire(self) -> dict[str, Any]:
        result: dict[str, Any] = {"success": self.success, "normalized": self.normalized}
        if self.data is not None:
            result["data"] = self.data.to_wire()
        if self.error is not None:
            result["error"] = self.error
        return result
