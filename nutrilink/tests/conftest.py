"""
Shared fixtures for nutrilink tests.

Real-world samples: Nutella (barcode 3017620422003) and a USDA
Foundation apple.
"""

from typing import Any

import pytest

from nutrilink.domain.shared.value_objects import Barcode
from nutrilink.infrastructure.cache.ttl_cache import TTLCache
from nutrilink.tests.factories import FakeClock


# ═══════════════════════════════════════════════════════════
# DOMAIN FIXTURES
# ═══════════════════════════════════════════════════════════


@pytest.fixture
def sample_barcode() -> Barcode:
    """Sample barcode for Nutella."""
    return Barcode(value="3017620422003")


@pytest.fixture
def usda_apple_payload() -> dict[str, Any]:
    """USDA search hit for a raw apple."""
    return {
        "fdcId": 1750340,
        "description": "Apples, fuji, with skin, raw",
        "dataType": "Foundation",
        "foodCategory": "Fruits and Fruit Juices",
        "foodNutrients": [
            {"nutrientId": 1008, "nutrientNumber": "208", "nutrientName": "Energy", "unitName": "KCAL", "value": 63.6},
            {"nutrientId": 1003, "nutrientNumber": "203", "nutrientName": "Protein", "unitName": "G", "value": 0.148},
            {"nutrientId": 1005, "nutrientNumber": "205", "nutrientName": "Carbohydrate, by difference", "unitName": "G", "value": 15.7},
            {"nutrientId": 1004, "nutrientNumber": "204", "nutrientName": "Total lipid (fat)", "unitName": "G", "value": 0.162},
            {"nutrientId": 1079, "nutrientNumber": "291", "nutrientName": "Fiber, total dietary", "unitName": "G", "value": 2.1},
            {"nutrientId": 2000, "nutrientNumber": "269", "nutrientName": "Sugars, total", "unitName": "G", "value": 13.3},
            {"nutrientId": 1093, "nutrientNumber": "307", "nutrientName": "Sodium, Na", "unitName": "MG", "value": 1.4},
        ],
    }


@pytest.fixture
def usda_branded_payload() -> dict[str, Any]:
    """USDA Branded hit for Nutella."""
    return {
        "fdcId": 2099289,
        "description": "NUTELLA HAZELNUT SPREAD",
        "dataType": "Branded",
        "gtinUpc": "009800800056",
        "brandOwner": "Ferrero U.S.A., Incorporated",
        "brandName": "NUTELLA",
        "ingredients": "SUGAR, PALM OIL, HAZELNUTS, SKIM MILK, COCOA",
        "servingSize": 37.0,
        "servingSizeUnit": "g",
        "householdServingFullText": "2 Tbsp",
        "foodNutrients": [
            {"nutrientId": 1008, "value": 541},
            {"nutrientId": 1003, "value": 5.41},
            {"nutrientId": 1005, "value": 56.76},
            {"nutrientId": 1004, "value": 29.73},
            {"nutrientId": 1093, "value": 41},
        ],
    }


@pytest.fixture
def off_nutella_product() -> dict[str, Any]:
    """OpenFoodFacts product for Nutella."""
    return {
        "code": "3017620422003",
        "product_name": "Nutella",
        "brands": "Ferrero,Nutella",
        "categories": "en:Spreads,en:Sweet spreads",
        "quantity": "400 g",
        "serving_size": "15g",
        "image_url": "https://images.openfoodfacts.org/images/products/301/762/042/2003/front_en.633.400.jpg",
        "image_front_url": "https://images.openfoodfacts.org/images/products/301/762/042/2003/front_fr.jpg",
        "nutriscore_grade": "e",
        "nova_group": 4,
        "ingredients_text": "Sugar, palm oil, hazelnuts 13%, skimmed milk powder 8.7%, fat-reduced cocoa 7.4%",
        "nutriments": {
            "energy-kcal_100g": 539,
            "proteins_100g": 6.3,
            "carbohydrates_100g": 57.5,
            "fat_100g": 30.9,
            "fiber_100g": 0,
            "sugars_100g": 56.3,
            "sodium_100g": 0.0428,
        },
    }


# ═══════════════════════════════════════════════════════════
# INFRASTRUCTURE FIXTURES
# ═══════════════════════════════════════════════════════════


@pytest.fixture
def clock() -> FakeClock:
    """Manually advanced clock."""
    return FakeClock()


@pytest.fixture
def cache(clock: FakeClock) -> TTLCache:
    """Fresh cache on the fake clock."""
    return TTLCache(default_ttl_seconds=3600, clock=clock)
