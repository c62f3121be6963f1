"""Unit tests for OpenFoodFacts mapper."""

from typing import Any

import pytest

from nutrilink.domain.food.models import FoodSource
from nutrilink.domain.food.openfoodfacts_mapper import OpenFoodFactsMapper
from nutrilink.domain.food.openfoodfacts_models import NovaGroup, NutriscoreGrade
from nutrilink.domain.food.scoring import data_completeness


class TestParseProduct:
    """Test product parsing."""

    def test_parse_full_product(self, off_nutella_product: dict[str, Any]) -> None:
        """Test a real product payload."""
        product = OpenFoodFactsMapper.parse_product(off_nutella_product)

        assert product.code == "3017620422003"
        assert product.nutriscore_grade == NutriscoreGrade.E
        assert product.nova_group == NovaGroup.GROUP_4
        assert product.nutriments.energy_kcal == 539.0
        assert product.nutriments.sodium == pytest.approx(0.0428)

    def test_energy_key_underscore_spelling(self) -> None:
        """Test energy_kcal_100g is accepted too."""
        nutriments = OpenFoodFactsMapper.parse_nutriments({"energy_kcal_100g": "120"})

        assert nutriments.energy_kcal == 120.0

    def test_bad_nutriments_dropped(self) -> None:
        """Test negative, non-numeric and non-object nutriments."""
        nutriments = OpenFoodFactsMapper.parse_nutriments({"proteins_100g": -1, "fat_100g": "lots"})

        assert nutriments.proteins is None
        assert nutriments.fat is None
        assert OpenFoodFactsMapper.parse_nutriments(None).energy_kcal is None

    @pytest.mark.parametrize(
        "raw,expected",
        [("A", NutriscoreGrade.A), ("not-applicable", NutriscoreGrade.UNKNOWN), ("", None)],
    )
    def test_nutriscore(self, raw: str, expected: Any) -> None:
        """Test nutriscore normalization."""
        product = OpenFoodFactsMapper.parse_product({"code": "1", "nutriscore_grade": raw})

        assert product.nutriscore_grade == expected

    @pytest.mark.parametrize(
        "raw,expected",
        [(1, NovaGroup.GROUP_1), ("3", NovaGroup.GROUP_3), (7, NovaGroup.UNKNOWN), ("x", NovaGroup.UNKNOWN)],
    )
    def test_nova_group(self, raw: Any, expected: NovaGroup) -> None:
        """Test nova group normalization."""
        product = OpenFoodFactsMapper.parse_product({"code": "1", "nova_group": raw})

        assert product.nova_group == expected


class TestParseProductResponse:
    """Test product envelope parsing."""

    def test_found(self, off_nutella_product: dict[str, Any]) -> None:
        """Test status 1 with a product."""
        response = OpenFoodFactsMapper.parse_product_response(
            {"status": 1, "product": off_nutella_product}
        )

        assert response.is_found()
        assert response.product is not None

    @pytest.mark.parametrize(
        "payload",
        [
            {"status": 0, "status_verbose": "product not found"},
            {"status": 1},
            {"status": 1, "product": "oops"},
            {"status": "1", "product": {"code": "1"}},
        ],
    )
    def test_not_found(self, payload: dict[str, Any]) -> None:
        """Test every shape that means not found."""
        assert not OpenFoodFactsMapper.parse_product_response(payload).is_found()


class TestToCanonical:
    """Test canonical mapping."""

    def test_nutella(self, off_nutella_product: dict[str, Any]) -> None:
        """Test ids, labels and unit conversion."""
        item = OpenFoodFactsMapper.to_canonical(
            OpenFoodFactsMapper.parse_product(off_nutella_product)
        )

        assert item is not None
        assert item.id == "off-3017620422003"
        assert item.source == FoodSource.OPENFOODFACTS
        assert item.source_id == "3017620422003"
        assert item.gtin_upc == "3017620422003"
        assert item.name == "Nutella"
        assert item.brand_name == "Ferrero"
        assert item.category == "Spreads"
        assert item.package_weight == "400 g"
        assert item.image_url.endswith("front_fr.jpg")
        assert item.nutriscore_grade == "e"
        assert item.nova_group == 4
        assert item.nutrition.calories == 539
        assert item.nutrition.fiber == 0.0
        assert item.nutrition.sodium == 43
        assert item.nutrition.serving_size == "15g"
        assert data_completeness(item) == 100

    def test_name_fallbacks(self) -> None:
        """Test English and generic names are used when product_name is blank."""
        product = OpenFoodFactsMapper.parse_product(
            {"code": "1", "product_name": " ", "generic_name": "Hazelnut spread"}
        )

        item = OpenFoodFactsMapper.to_canonical(product)

        assert item is not None
        assert item.name == "Hazelnut spread"

    def test_nameless_product_is_unusable(self) -> None:
        """Test products without any name are dropped."""
        product = OpenFoodFactsMapper.parse_product({"code": "1"})

        assert OpenFoodFactsMapper.to_canonical(product) is None

    def test_unknown_labels_are_omitted(self) -> None:
        """Test UNKNOWN nutriscore and nova map to None."""
        product = OpenFoodFactsMapper.parse_product(
            {"code": "1", "product_name": "X", "nutriscore_grade": "zz", "nova_group": "?"}
        )

        item = OpenFoodFactsMapper.to_canonical(product)

        assert item is not None
        assert item.nutriscore_grade is None
        assert item.nova_group is None
        assert item.category == "Other"

    def test_sodium_beyond_milligram_range(self) -> None:
        """Test sodium whose milligram value overflows is dropped."""
        product = OpenFoodFactsMapper.parse_product(
            {"code": "1", "product_name": "X", "nutriments": {"sodium_100g": 1e307, "fat_100g": 1e308}}
        )

        item = OpenFoodFactsMapper.to_canonical(product)

        assert item is not None
        assert item.nutrition.sodium is None
        assert item.nutrition.fat == 1e308


class TestToEnrichment:
    """Test enrichment extraction."""

    def test_enrichment_fields(self, off_nutella_product: dict[str, Any]) -> None:
        """Test image and labels are extracted."""
        enrichment = OpenFoodFactsMapper.to_enrichment(
            OpenFoodFactsMapper.parse_product(off_nutella_product)
        )

        assert enrichment.image_url.endswith("front_fr.jpg")
        assert enrichment.nutriscore_grade == "e"
        assert enrichment.nova_group == 4

    def test_image_url_fallback(self) -> None:
        """Test image_url is used without a front image."""
        product = OpenFoodFactsMapper.parse_product({"code": "1", "image_url": "https://img"})

        assert OpenFoodFactsMapper.to_enrichment(product).image_url == "https://img"
