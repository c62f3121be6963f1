"""
Rule-based ranking helpers.

Pure functions shared by every mapper and by the search and barcode
services: name normalization (the dedup key), query relevance and
record completeness.
"""

from __future__ import annotations

import math
import re
from typing import Iterable

from nutrilink.domain.food.models import CanonicalFoodItem

_WHITESPACE = re.compile(r"\s+")

# Completeness weights, summing to 100
MACRO_WEIGHT = 10  # calories, protein, carbs, fat (each, when > 0)
MICRO_WEIGHT = 5  # fiber, sugar, sodium (each, when present)
BRAND_WEIGHT = 10
IMAGE_WEIGHT = 10
INGREDIENTS_WEIGHT = 15
SERVING_WEIGHT = 10


def round_half_up(value: float, digits: int = 0) -> float:
    """Round .5 away from zero for positives (``round`` is banker's).

    Example:
        >>> round_half_up(2.5)
        3.0
        >>> round_half_up(0.25, 1)
        0.3
        >>> round_half_up(1e308, 1)
        1e+308
    """
    factor = 10**digits
    scaled = value * factor + 0.5
    if not math.isfinite(scaled):
        # too large to carry a fractional part
        return float(value)
    return math.floor(scaled) / factor


def normalize_name(name: str) -> str:
    """Lower-case, trim and collapse internal whitespace.

    Example:
        >>> normalize_name("  Granny   Smith APPLE ")
        'granny smith apple'
    """
    return _WHITESPACE.sub(" ", name.strip().lower())


def relevance_score(normalized_name: str, query: str) -> int:
    """Score how well an item name matches a search query.

    Args:
        normalized_name: Item's normalized name
        query: Raw or normalized query (normalized here)

    Returns:
        100 exact, 80 prefix, 60 whole-word, 40 substring, else 20

    Example:
        >>> relevance_score("apple", "Apple")
        100
        >>> relevance_score("apple pie", "apple")
        80
        >>> relevance_score("green apple pie", "apple")
        60
        >>> relevance_score("pineapple", "apple")
        40
        >>> relevance_score("banana", "apple")
        20
    """
    q = normalize_name(query)
    if not q:
        return 20
    if normalized_name == q:
        return 100
    if normalized_name.startswith(q):
        return 80
    if re.search(rf"(?<!\w){re.escape(q)}(?!\w)", normalized_name):
        return 60
    if q in normalized_name:
        return 40
    return 20


def data_completeness(item: CanonicalFoodItem) -> int:
    """Score how complete a record is, independent of any query.

    Example:
        >>> from nutrilink.domain.food.models import (
        ...     FoodSource,
        ...     NutritionInfo,
        ... )
        >>> item = CanonicalFoodItem(
        ...     id="usda-1",
        ...     name="Apple",
        ...     normalized_name="apple",
        ...     source=FoodSource.USDA,
        ...     source_id="1",
        ...     nutrition=NutritionInfo(calories=52, protein=0.3, carbs=13.8, fat=0.2),
        ... )
        >>> data_completeness(item)
        40
    """
    n = item.nutrition
    score = 0

    for macro in (n.calories, n.protein, n.carbs, n.fat):
        if macro > 0:
            score += MACRO_WEIGHT

    for micro in (n.fiber, n.sugar, n.sodium):
        if micro is not None:
            score += MICRO_WEIGHT

    if item.brand_owner or item.brand_name:
        score += BRAND_WEIGHT
    if item.image_url:
        score += IMAGE_WEIGHT
    if item.ingredients:
        score += INGREDIENTS_WEIGHT
    if n.serving_size or item.household_serving_full_text:
        score += SERVING_WEIGHT

    return min(score, 100)


def deduplicate(items: Iterable[CanonicalFoodItem]) -> list[CanonicalFoodItem]:
    """Keep the first item for each ``normalized_name``, preserving order."""
    seen: set[str] = set()
    unique: list[CanonicalFoodItem] = []
    for item in items:
        if item.normalized_name in seen:
            continue
        seen.add(item.normalized_name)
        unique.append(item)
    return unique
