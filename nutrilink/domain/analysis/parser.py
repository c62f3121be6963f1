"""
AI analysis response parser.

Turns the free-text reply of a vision model into normalized analysis
items. Every function here is total: bad input is corrected to a legal
value, never raised.

Numeric coercion follows the rules the reply format was designed around
(JavaScript ``Number()``): ``null`` is 0, booleans are 1/0, numeric
strings parse, the empty string is 0 and anything else is NaN. A missing
key is distinct from ``null``.
"""

from __future__ import annotations

import json
import math
import re
from typing import Any, Optional

import structlog

from nutrilink.domain.analysis.models import (
    AnalysisData,
    AnalysisItem,
    AnalysisParseResult,
    FoodCategory,
    QuantityUnit,
    StorageLocation,
)

logger = structlog.get_logger(__name__)


class _Missing:
    """Marker for an absent key."""

    def __repr__(self) -> str:
        return "MISSING"


MISSING: Any = _Missing()

DEFAULT_NAME = "Unknown Item"
DEFAULT_QUANTITY = 1
DEFAULT_SHELF_LIFE_DAYS = 7
DEFAULT_CONFIDENCE = 0.5
MIN_SHELF_LIFE_DAYS = 1
MAX_SHELF_LIFE_DAYS = 365

_CATEGORIES = {c.value for c in FoodCategory}
_UNITS = {u.value for u in QuantityUnit}
_LOCATIONS = {loc.value for loc in StorageLocation}

_CODE_FENCE = re.compile(r"^```[a-zA-Z]*\s*(.*?)\s*```$", re.DOTALL)


# ═══════════════════════════════════════════════════════════
# COERCION
# ═══════════════════════════════════════════════════════════


def to_number(value: Any) -> float:
    """Coerce like JavaScript ``Number()``.

    Example:
        >>> to_number("10"), to_number(None), to_number(True)
        (10.0, 0.0, 1.0)
        >>> math.isnan(to_number("not a number"))
        True
    """
    if value is MISSING:
        return math.nan
    if value is None:
        return 0.0
    if isinstance(value, bool):
        return 1.0 if value else 0.0
    if isinstance(value, (int, float)):
        try:
            return float(value)
        except OverflowError:
            # integer literal beyond float range
            return math.inf if value > 0 else -math.inf
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return 0.0
        try:
            return float(text)
        except ValueError:
            return math.nan
    return math.nan


def _is_plain_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


# ═══════════════════════════════════════════════════════════
# FIELD NORMALIZERS
# ═══════════════════════════════════════════════════════════


def normalize_name(value: Any = MISSING) -> str:
    """Non-blank strings pass through; numbers are stringified."""
    if isinstance(value, str) and value.strip():
        return value
    if _is_plain_number(value):
        number = to_number(value)
        if math.isfinite(number):
            return str(int(value)) if number.is_integer() else str(value)
    return DEFAULT_NAME


def _normalize_choice(value: Any, allowed: set[str], default: str) -> str:
    if isinstance(value, str):
        folded = value.strip().lower()
        if folded in allowed:
            return folded
    return default


def normalize_category(value: Any = MISSING) -> str:
    """Case-folded category, or ``"other"``.

    Example:
        >>> normalize_category("PRODUCE"), normalize_category(5)
        ('produce', 'other')
    """
    return _normalize_choice(value, _CATEGORIES, FoodCategory.OTHER.value)


def normalize_unit(value: Any = MISSING) -> str:
    """Case-folded quantity unit, or ``"items"``."""
    return _normalize_choice(value, _UNITS, QuantityUnit.ITEMS.value)


def normalize_storage_location(value: Any = MISSING) -> str:
    """Case-folded storage location, or ``"refrigerator"``."""
    return _normalize_choice(value, _LOCATIONS, StorageLocation.REFRIGERATOR.value)


def normalize_quantity(value: Any = MISSING) -> float:
    """Non-negative finite quantity.

    Negative clamps to 0; NaN, non-numeric and infinite become 1; ``null``
    coerces to 0.

    Example:
        >>> normalize_quantity("10"), normalize_quantity(-5), normalize_quantity(None)
        (10.0, 0, 0.0)
        >>> normalize_quantity(), normalize_quantity("not a number")
        (1, 1)
    """
    number = to_number(value)
    if not math.isfinite(number):
        return DEFAULT_QUANTITY
    if number < 0:
        return 0
    return number


def normalize_shelf_life(value: Any = MISSING) -> int:
    """Whole days in [1, 365].

    Rounds half up, then clamps. NaN and non-numeric become 7, while
    ``null`` coerces to 0 and so clamps to 1.

    Example:
        >>> normalize_shelf_life("14"), normalize_shelf_life(500)
        (14, 365)
        >>> normalize_shelf_life(None), normalize_shelf_life("soon")
        (1, 7)
    """
    number = to_number(value)
    if math.isnan(number):
        return DEFAULT_SHELF_LIFE_DAYS
    if math.isinf(number):
        return MAX_SHELF_LIFE_DAYS if number > 0 else MIN_SHELF_LIFE_DAYS
    days = math.floor(number + 0.5)
    return max(MIN_SHELF_LIFE_DAYS, min(MAX_SHELF_LIFE_DAYS, days))


def normalize_confidence(value: Any = MISSING) -> float:
    """Confidence clamped to [0, 1]; NaN and non-numeric become 0.5.

    Example:
        >>> normalize_confidence("0.8"), normalize_confidence(100), normalize_confidence(None)
        (0.8, 1.0, 0.0)
    """
    number = to_number(value)
    if math.isnan(number):
        return DEFAULT_CONFIDENCE
    return max(0.0, min(1.0, number))


# ═══════════════════════════════════════════════════════════
# ITEMS
# ═══════════════════════════════════════════════════════════


def _string_unchanged(raw: Any, result: str) -> bool:
    return isinstance(raw, str) and raw == result


def _number_unchanged(raw: Any, result: float) -> bool:
    return _is_plain_number(raw) and raw == result


def normalize_item(raw: Any) -> tuple[AnalysisItem, bool]:
    """Normalize one raw item.

    Args:
        raw: Decoded JSON value (non-objects are treated as empty objects)

    Returns:
        The item and whether any field had to be corrected
    """
    fields = raw if isinstance(raw, dict) else {}

    def get(key: str) -> Any:
        return fields.get(key, MISSING)

    name = normalize_name(get("name"))
    category = normalize_category(get("category"))
    quantity = normalize_quantity(get("quantity"))
    unit = normalize_unit(get("quantityUnit"))
    location = normalize_storage_location(get("storageLocation"))
    shelf_life = normalize_shelf_life(get("shelfLifeDays"))
    confidence = normalize_confidence(get("confidence"))

    unchanged = (
        isinstance(raw, dict)
        and _string_unchanged(get("name"), name)
        and _string_unchanged(get("category"), category)
        and _number_unchanged(get("quantity"), quantity)
        and _string_unchanged(get("quantityUnit"), unit)
        and _string_unchanged(get("storageLocation"), location)
        and _number_unchanged(get("shelfLifeDays"), shelf_life)
        and _number_unchanged(get("confidence"), confidence)
    )

    item = AnalysisItem(
        name=name,
        category=category,
        quantity=quantity,
        quantity_unit=unit,
        storage_location=location,
        shelf_life_days=shelf_life,
        confidence=confidence,
    )
    return item, not unchanged


def normalize_items(raw_items: Any) -> list[AnalysisItem]:
    """Normalize a raw ``items`` value; anything but a list yields ``[]``."""
    if not isinstance(raw_items, list):
        return []
    return [normalize_item(raw)[0] for raw in raw_items]


# ═══════════════════════════════════════════════════════════
# RESPONSE
# ═══════════════════════════════════════════════════════════


def _strip_code_fence(content: str) -> str:
    text = content.strip()
    match = _CODE_FENCE.match(text)
    return match.group(1) if match else text


def _optional_text(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None


def parse_analysis_response(content: Optional[str]) -> AnalysisParseResult:
    """Parse a vision model reply into normalized items.

    Args:
        content: Raw reply text, expected to decode to
            ``{"items": [...], "notes"?: str, "error"?: str}``

    Returns:
        AnalysisParseResult (``success=False`` with an error message when
        the reply is empty or not JSON)

    Example:
        >>> result = parse_analysis_response('{"items": [{"name": "Minimal Item"}]}')
        >>> assert result.success
        >>> assert result.data.items[0].shelf_life_days == 7
        >>> parse_analysis_response(None).error
        'No response content'
    """
    if content is None or not content.strip():
        return AnalysisParseResult(success=False, error="No response content")

    try:
        payload = json.loads(_strip_code_fence(content))
    except (ValueError, RecursionError) as e:
        logger.warning("Failed to parse analysis response", error=str(e))
        return AnalysisParseResult(
            success=False,
            error=f"Failed to parse AI response: {e}",
        )

    body = payload if isinstance(payload, dict) else {}
    raw_items = body.get("items")

    items: list[AnalysisItem] = []
    corrected = False
    if isinstance(raw_items, list):
        for raw in raw_items:
            item, changed = normalize_item(raw)
            items.append(item)
            corrected = corrected or changed

    if corrected:
        logger.info("Analysis items normalized", items=len(items))

    return AnalysisParseResult(
        success=True,
        normalized=corrected,
        data=AnalysisData(
            items=items,
            notes=_optional_text(body.get("notes")),
            error=_optional_text(body.get("error")),
        ),
    )
