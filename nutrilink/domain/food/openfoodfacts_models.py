"""
OpenFoodFacts domain models.

Models for OpenFoodFacts API responses mapped to our domain.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class NutriscoreGrade(str, Enum):
    """Nutriscore grade classification."""

    A = "a"  # Best
    B = "b"
    C = "c"
    D = "d"
    E = "e"  # Worst
    UNKNOWN = "unknown"


class NovaGroup(str, Enum):
    """NOVA food processing classification."""

    GROUP_1 = "1"  # Unprocessed or minimally processed
    GROUP_2 = "2"  # Processed culinary ingredients
    GROUP_3 = "3"  # Processed foods
    GROUP_4 = "4"  # Ultra-processed foods
    UNKNOWN = "unknown"


class OFFNutriments(BaseModel):
    """OpenFoodFacts nutriments (per 100g, as published).

    Sodium is published in grams; the mapper converts it to milligrams.

    Example:
        >>> nutriments = OFFNutriments(
        ...     energy_kcal=150.0,
        ...     proteins=3.0,
        ...     carbohydrates=25.0,
        ...     fat=5.0,
        ... )
        >>> assert nutriments.energy_kcal == 150.0
    """

    model_config = ConfigDict(frozen=True)

    energy_kcal: Optional[float] = Field(None, ge=0, description="Energy in kcal per 100g")
    proteins: Optional[float] = Field(None, ge=0, description="Protein in g per 100g")
    carbohydrates: Optional[float] = Field(None, ge=0, description="Carbohydrates in g per 100g")
    fat: Optional[float] = Field(None, ge=0, description="Fat in g per 100g")
    fiber: Optional[float] = Field(None, ge=0, description="Fiber in g per 100g")
    sugars: Optional[float] = Field(None, ge=0, description="Sugars in g per 100g")
    sodium: Optional[float] = Field(None, ge=0, description="Sodium in g per 100g")


class OFFProduct(BaseModel):
    """OpenFoodFacts product.

    Example:
        >>> product = OFFProduct(code="3017620422003", product_name="Nutella")
        >>> assert product.display_name() == "Nutella"
    """

    model_config = ConfigDict(frozen=True)

    code: str = Field(..., min_length=1, description="Product barcode")
    product_name: Optional[str] = Field(None, description="Product name")
    product_name_en: Optional[str] = Field(None, description="English product name")
    generic_name: Optional[str] = Field(None, description="Generic name")
    brands: Optional[str] = Field(None, description="Comma-separated brand names")
    categories: Optional[str] = Field(None, description="Comma-separated categories")
    quantity: Optional[str] = Field(None, description="Package quantity (e.g., '750g')")
    serving_size: Optional[str] = Field(None, description="Serving size (e.g., '15g')")
    image_url: Optional[str] = Field(None, description="Product image URL")
    image_front_url: Optional[str] = Field(None, description="Front-of-pack image URL")
    nutriments: OFFNutriments = Field(default_factory=OFFNutriments)
    nutriscore_grade: Optional[NutriscoreGrade] = Field(None, description="Nutriscore grade (a-e)")
    nova_group: Optional[NovaGroup] = Field(None, description="NOVA processing group (1-4)")
    ingredients_text: Optional[str] = Field(None, description="Ingredients list")

    def display_name(self) -> Optional[str]:
        """First non-blank of product name, English name, generic name."""
        for candidate in (self.product_name, self.product_name_en, self.generic_name):
            if candidate and candidate.strip():
                return candidate.strip()
        return None


class OFFProductResponse(BaseModel):
    """OpenFoodFacts single-product response.

    Example:
        >>> result = OFFProductResponse(
        ...     status=1,
        ...     product=OFFProduct(code="3017620422003", product_name="Nutella"),
        ... )
        >>> assert result.is_found()
    """

    model_config = ConfigDict(frozen=True)

    status: int = Field(..., description="API status (1=found, 0=not)")
    product: Optional[OFFProduct] = Field(None, description="Product data (if found)")

    def is_found(self) -> bool:
        """Check if product was found.

        Returns:
            True if product exists in database
        """
        return self.status == 1 and self.product is not None
