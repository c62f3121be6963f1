"""
USDA domain models.

These models represent USDA FoodData Central API payloads (search hits
and single-food details) after parsing.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class USDADataType(str, Enum):
    """USDA food database types."""

    BRANDED = "Branded"
    SR_LEGACY = "SR Legacy"
    SURVEY = "Survey (FNDDS)"
    FOUNDATION = "Foundation"


class USDANutrient(BaseModel):
    """Single nutrient from a USDA payload.

    Search hits carry ``nutrientId``/``nutrientNumber``/``value``; detail
    payloads nest them under ``nutrient`` with ``amount``. Both are parsed
    into this shape.

    Example:
        >>> nutrient = USDANutrient(
        ...     nutrient_id=1008,
        ...     number="208",
        ...     name="Energy",
        ...     amount=52.0,
        ...     unit="KCAL",
        ... )
        >>> assert nutrient.amount == 52.0
    """

    model_config = ConfigDict(frozen=True)

    nutrient_id: Optional[int] = Field(None, description="USDA nutrient id")
    number: str = Field("", description="Legacy nutrient number")
    name: str = Field("", description="Nutrient name")
    amount: float = Field(..., description="Amount per 100g (or per serving)")
    unit: str = Field("", description="Unit of measurement")


class USDAFoodItem(BaseModel):
    """USDA food item (search hit or detail).

    Example:
        >>> food = USDAFoodItem(
        ...     fdc_id="123456",
        ...     description="Apple, raw",
        ...     data_type="SR Legacy",
        ... )
        >>> assert food.fdc_id == "123456"
    """

    model_config = ConfigDict(frozen=True)

    fdc_id: str = Field(..., min_length=1, description="FoodData Central ID")
    description: str = Field(..., description="Food description")
    data_type: Optional[str] = Field(None, description="Database type (see USDADataType)")
    nutrients: list[USDANutrient] = Field(default_factory=list)
    food_category: Optional[str] = Field(None, description="Category description")
    brand_owner: Optional[str] = Field(None, description="Brand owner (branded foods)")
    brand_name: Optional[str] = Field(None, description="Brand name (branded foods)")
    gtin_upc: Optional[str] = Field(None, description="Barcode (branded foods)")
    ingredients: Optional[str] = None
    serving_size: Optional[float] = Field(None, ge=0)
    serving_size_unit: Optional[str] = None
    household_serving_full_text: Optional[str] = None
    package_weight: Optional[str] = None

    def gtin_digits(self) -> str:
        """Digits of ``gtin_upc`` (empty when absent)."""
        return "".join(ch for ch in (self.gtin_upc or "") if ch.isdigit())
