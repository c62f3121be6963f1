"""
OpenFoodFacts data mapper.

Transforms OpenFoodFacts API responses to domain models.
"""

import math
from typing import Any, Optional

from nutrilink.domain.food.models import (
    CanonicalFoodItem,
    FoodSource,
    NutritionInfo,
    ProductEnrichment,
)
from nutrilink.domain.food.openfoodfacts_models import (
    NovaGroup,
    NutriscoreGrade,
    OFFNutriments,
    OFFProduct,
    OFFProductResponse,
)
from nutrilink.domain.food.scoring import normalize_name, round_half_up


def _number(value: Any) -> Optional[float]:
    """Accept ints, floats and numeric strings; drop everything else."""
    if isinstance(value, bool) or value is None:
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number) or number < 0:
        return None
    return number


def _milligrams(grams: Optional[float]) -> Optional[int]:
    """Grams to whole milligrams; None when the result is not finite."""
    if grams is None or not math.isfinite(grams * 1000):
        return None
    return int(round_half_up(grams * 1000))


def _first_csv(value: Optional[str]) -> Optional[str]:
    if not value:
        return None
    first = value.split(",")[0].strip()
    return first or None


class OpenFoodFactsMapper:
    """Maps OpenFoodFacts API data to domain models."""

    @staticmethod
    def parse_nutriments(data: Any) -> OFFNutriments:
        """Parse the ``nutriments`` object (kcal key spelled either way)."""
        if not isinstance(data, dict):
            return OFFNutriments()

        energy = data.get("energy-kcal_100g", data.get("energy_kcal_100g"))

        return OFFNutriments(
            energy_kcal=_number(energy),
            proteins=_number(data.get("proteins_100g")),
            carbohydrates=_number(data.get("carbohydrates_100g")),
            fat=_number(data.get("fat_100g")),
            fiber=_number(data.get("fiber_100g")),
            sugars=_number(data.get("sugars_100g")),
            sodium=_number(data.get("sodium_100g")),
        )

    @staticmethod
    def parse_product(product_data: dict[str, Any]) -> OFFProduct:
        """Parse one product object.

        Raises:
            pydantic.ValidationError: If the product has no code

        Example:
            >>> product = OpenFoodFactsMapper.parse_product(
            ...     {
            ...         "code": "3017620422003",
            ...         "product_name": "Nutella",
            ...         "nutriscore_grade": "E",
            ...         "nova_group": 4,
            ...     }
            ... )
            >>> assert product.nutriscore_grade == NutriscoreGrade.E
            >>> assert product.nova_group == NovaGroup.GROUP_4
        """
        # Parse nutriscore
        nutriscore_raw = product_data.get("nutriscore_grade")
        nutriscore = None
        if isinstance(nutriscore_raw, str) and nutriscore_raw:
            try:
                nutriscore = NutriscoreGrade(nutriscore_raw.lower())
            except ValueError:
                nutriscore = NutriscoreGrade.UNKNOWN

        # Parse nova group
        nova_raw = product_data.get("nova_group")
        nova = None
        if nova_raw not in (None, ""):
            try:
                nova = NovaGroup(str(int(float(nova_raw))))
            except (TypeError, ValueError, OverflowError):
                nova = NovaGroup.UNKNOWN

        code = product_data.get("code")

        return OFFProduct(
            code="" if code is None else str(code),
            product_name=product_data.get("product_name"),
            product_name_en=product_data.get("product_name_en"),
            generic_name=product_data.get("generic_name"),
            brands=product_data.get("brands"),
            categories=product_data.get("categories"),
            quantity=product_data.get("quantity"),
            serving_size=product_data.get("serving_size"),
            image_url=product_data.get("image_url"),
            image_front_url=product_data.get("image_front_url"),
            nutriments=OpenFoodFactsMapper.parse_nutriments(product_data.get("nutriments")),
            nutriscore_grade=nutriscore,
            nova_group=nova,
            ingredients_text=product_data.get("ingredients_text"),
        )

    @staticmethod
    def parse_product_response(response_data: dict[str, Any]) -> OFFProductResponse:
        """Parse the ``/api/v2/product/{code}.json`` envelope.

        Example:
            >>> result = OpenFoodFactsMapper.parse_product_response(
            ...     {"status": 0, "status_verbose": "product not found"}
            ... )
            >>> assert not result.is_found()
        """
        status = response_data.get("status")
        product_data = response_data.get("product")

        if status != 1 or not isinstance(product_data, dict):
            return OFFProductResponse(status=0, product=None)

        return OFFProductResponse(
            status=1,
            product=OpenFoodFactsMapper.parse_product(product_data),
        )

    @staticmethod
    def category(product: OFFProduct) -> str:
        """First category with any language prefix (``en:``) removed."""
        first = _first_csv(product.categories)
        if first and ":" in first:
            first = first.split(":", 1)[1].strip()
        return first or "Other"

    @staticmethod
    def nutriscore(product: OFFProduct) -> Optional[str]:
        if product.nutriscore_grade in (None, NutriscoreGrade.UNKNOWN):
            return None
        return product.nutriscore_grade.value

    @staticmethod
    def nova(product: OFFProduct) -> Optional[int]:
        if product.nova_group in (None, NovaGroup.UNKNOWN):
            return None
        return int(product.nova_group.value)

    @staticmethod
    def image(product: OFFProduct) -> Optional[str]:
        return product.image_front_url or product.image_url or None

    @staticmethod
    def to_nutrition(product: OFFProduct) -> NutritionInfo:
        """Per-100g nutriments in canonical units (sodium g to mg)."""
        n = product.nutriments

        def grams(value: Optional[float]) -> Optional[float]:
            return None if value is None else round_half_up(value, 1)

        return NutritionInfo(
            calories=int(round_half_up(n.energy_kcal or 0.0)),
            protein=grams(n.proteins) or 0.0,
            carbs=grams(n.carbohydrates) or 0.0,
            fat=grams(n.fat) or 0.0,
            fiber=grams(n.fiber),
            sugar=grams(n.sugars),
            sodium=_milligrams(n.sodium),
            serving_size=product.serving_size or None,
        )

    @staticmethod
    def to_canonical(product: OFFProduct) -> Optional[CanonicalFoodItem]:
        """Convert an OFF product to a canonical item.

        Returns None for products without any name.

        Example:
            >>> item = OpenFoodFactsMapper.to_canonical(
            ...     OFFProduct(
            ...         code="3017620422003",
            ...         product_name="Nutella",
            ...         brands="Ferrero,Other Brand",
            ...         categories="en:Spreads,en:Sweet-spreads",
            ...     )
            ... )
            >>> assert item.id == "off-3017620422003"
            >>> assert item.brand_name == "Ferrero"
            >>> assert item.category == "Spreads"
        """
        name = product.display_name()
        if name is None:
            return None

        return CanonicalFoodItem(
            id=f"{FoodSource.OPENFOODFACTS.id_prefix}-{product.code}",
            name=name,
            normalized_name=normalize_name(name),
            category=OpenFoodFactsMapper.category(product),
            nutrition=OpenFoodFactsMapper.to_nutrition(product),
            source=FoodSource.OPENFOODFACTS,
            source_id=product.code,
            brand_name=_first_csv(product.brands),
            gtin_upc=product.code,
            ingredients=product.ingredients_text or None,
            package_weight=product.quantity or None,
            image_url=OpenFoodFactsMapper.image(product),
            nutriscore_grade=OpenFoodFactsMapper.nutriscore(product),
            nova_group=OpenFoodFactsMapper.nova(product),
        )

    @staticmethod
    def to_enrichment(product: OFFProduct) -> ProductEnrichment:
        """Subset of a product used to backfill other sources' items."""
        return ProductEnrichment(
            image_url=OpenFoodFactsMapper.image(product),
            nutriscore_grade=OpenFoodFactsMapper.nutriscore(product),
            nova_group=OpenFoodFactsMapper.nova(product),
        )
