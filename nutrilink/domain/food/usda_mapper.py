"""
USDA data mapper.

Transforms USDA API payloads to USDA models and USDA models to canonical
food items.
"""

import math
from typing import Any, Optional

from nutrilink.domain.food.models import (
    CanonicalFoodItem,
    FoodSource,
    NutritionInfo,
)
from nutrilink.domain.food.scoring import normalize_name, round_half_up
from nutrilink.domain.food.usda_models import USDAFoodItem, USDANutrient


def _finite(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


class USDAMapper:
    """Maps USDA API data to domain models."""

    # FDC nutrient id mappings
    NUTRIENT_ID_MAP = {
        1008: "calories",  # Energy (kcal)
        1003: "protein",  # Protein (g)
        1005: "carbs",  # Carbohydrate, by difference (g)
        1004: "fat",  # Total lipid (fat) (g)
        1079: "fiber",  # Fiber, total dietary (g)
        2000: "sugar",  # Sugars, total (g)
        1093: "sodium",  # Sodium, Na (mg)
    }

    # Legacy nutrient numbers, used when a payload lacks ids
    NUTRIENT_NUMBER_MAP = {
        "208": "calories",
        "203": "protein",
        "205": "carbs",
        "204": "fat",
        "291": "fiber",
        "269": "sugar",
        "307": "sodium",
    }

    @staticmethod
    def map_nutrients_to_dict(nutrients: list[USDANutrient]) -> dict[str, float]:
        """Convert USDA nutrients to a field-name dict.

        The first occurrence of each nutrient wins.

        Example:
            >>> nutrients = [
            ...     USDANutrient(nutrient_id=1008, amount=52.0),
            ...     USDANutrient(number="203", amount=0.3),
            ... ]
            >>> result = USDAMapper.map_nutrients_to_dict(nutrients)
            >>> assert result == {"calories": 52.0, "protein": 0.3}
        """
        nutrient_dict: dict[str, float] = {}

        for nutrient in nutrients:
            field_name = None
            if nutrient.nutrient_id is not None:
                field_name = USDAMapper.NUTRIENT_ID_MAP.get(nutrient.nutrient_id)
            if field_name is None:
                field_name = USDAMapper.NUTRIENT_NUMBER_MAP.get(nutrient.number)
            if field_name and field_name not in nutrient_dict:
                nutrient_dict[field_name] = nutrient.amount

        return nutrient_dict

    @staticmethod
    def parse_nutrient(data: dict[str, Any]) -> Optional[USDANutrient]:
        """Parse one ``foodNutrients`` entry in either payload shape.

        Returns None when the entry carries no amount.
        """
        nested = data.get("nutrient")
        if isinstance(nested, dict):
            amount = _finite(data.get("amount"))
            if amount is None:
                return None
            return USDANutrient(
                nutrient_id=nested.get("id"),
                number=str(nested.get("number", "")),
                name=nested.get("name", ""),
                amount=amount,
                unit=nested.get("unitName", ""),
            )

        amount = _finite(data.get("value", data.get("amount")))
        if amount is None:
            return None
        return USDANutrient(
            nutrient_id=data.get("nutrientId"),
            number=str(data.get("nutrientNumber", "")),
            name=data.get("nutrientName", ""),
            amount=amount,
            unit=data.get("unitName", ""),
        )

    @staticmethod
    def parse_food(food_data: dict[str, Any]) -> USDAFoodItem:
        """Parse a search hit or a ``/food/{id}`` payload.

        Raises:
            pydantic.ValidationError: If required fields are malformed

        Example:
            >>> food = USDAMapper.parse_food(
            ...     {
            ...         "fdcId": 1750340,
            ...         "description": "Apples, fuji, with skin, raw",
            ...         "dataType": "Foundation",
            ...         "foodNutrients": [
            ...             {"nutrientId": 1008, "nutrientNumber": "208", "value": 64.0}
            ...         ],
            ...     }
            ... )
            >>> assert food.fdc_id == "1750340"
        """
        nutrients = []
        for n in food_data.get("foodNutrients") or []:
            if isinstance(n, dict):
                parsed = USDAMapper.parse_nutrient(n)
                if parsed is not None:
                    nutrients.append(parsed)

        # Search hits carry a plain string, details an object
        category = food_data.get("foodCategory")
        if isinstance(category, dict):
            category = category.get("description")

        fdc_id = food_data.get("fdcId")

        return USDAFoodItem(
            fdc_id="" if fdc_id is None else str(fdc_id),
            description=food_data.get("description") or "",
            data_type=food_data.get("dataType"),
            nutrients=nutrients,
            food_category=category or None,
            brand_owner=food_data.get("brandOwner"),
            brand_name=food_data.get("brandName"),
            gtin_upc=food_data.get("gtinUpc"),
            ingredients=food_data.get("ingredients"),
            serving_size=food_data.get("servingSize"),
            serving_size_unit=food_data.get("servingSizeUnit"),
            household_serving_full_text=food_data.get("householdServingFullText"),
            package_weight=food_data.get("packageWeight"),
        )

    @staticmethod
    def to_nutrition(food: USDAFoodItem) -> NutritionInfo:
        """Round USDA nutrients into canonical units."""
        values = USDAMapper.map_nutrients_to_dict(food.nutrients)

        def grams(key: str) -> Optional[float]:
            value = values.get(key)
            return None if value is None else max(round_half_up(value, 1), 0.0)

        sodium = values.get("sodium")
        serving_size = None
        if food.serving_size and food.serving_size_unit:
            serving_size = f"{food.serving_size:g} {food.serving_size_unit}"

        return NutritionInfo(
            calories=max(int(round_half_up(values.get("calories", 0.0))), 0),
            protein=grams("protein") or 0.0,
            carbs=grams("carbs") or 0.0,
            fat=grams("fat") or 0.0,
            fiber=grams("fiber"),
            sugar=grams("sugar"),
            sodium=None if sodium is None else max(int(round_half_up(sodium)), 0),
            serving_size=serving_size,
        )

    @staticmethod
    def to_canonical(food: USDAFoodItem) -> Optional[CanonicalFoodItem]:
        """Convert a USDA food to a canonical item.

        Returns None for foods without a usable description. Relevance and
        completeness are left at 0 for the calling service to fill in.

        Example:
            >>> food = USDAFoodItem(fdc_id="1", description="Apple")
            >>> item = USDAMapper.to_canonical(food)
            >>> assert item.id == "usda-1"
            >>> assert item.category == "Other"
        """
        name = food.description.strip()
        if not name:
            return None

        return CanonicalFoodItem(
            id=f"{FoodSource.USDA.id_prefix}-{food.fdc_id}",
            name=name,
            normalized_name=normalize_name(name),
            category=food.food_category or "Other",
            nutrition=USDAMapper.to_nutrition(food),
            source=FoodSource.USDA,
            source_id=food.fdc_id,
            brand_owner=food.brand_owner,
            brand_name=food.brand_name,
            gtin_upc=food.gtin_upc,
            household_serving_full_text=food.household_serving_full_text,
            data_type=food.data_type,
            ingredients=food.ingredients,
            package_weight=food.package_weight,
        )
