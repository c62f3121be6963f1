"""
Unit tests for the analysis response parser.

Covers the field normalizers one by one, then whole replies.
"""

import math

import pytest

from nutrilink.domain.analysis.parser import (
    MISSING,
    normalize_category,
    normalize_confidence,
    normalize_item,
    normalize_items,
    normalize_name,
    normalize_quantity,
    normalize_shelf_life,
    normalize_storage_location,
    normalize_unit,
    parse_analysis_response,
    to_number,
)


class TestToNumber:
    """Test numeric coercion."""

    @pytest.mark.parametrize(
        "value,expected",
        [(None, 0.0), (True, 1.0), (False, 0.0), (3, 3.0), ("2.5", 2.5), (" 10 ", 10.0), ("", 0.0)],
    )
    def test_coercible(self, value: object, expected: float) -> None:
        """Test values that coerce to a number."""
        assert to_number(value) == expected

    @pytest.mark.parametrize("value", [MISSING, "abc", [], {}])
    def test_not_a_number(self, value: object) -> None:
        """Test values that coerce to NaN."""
        assert math.isnan(to_number(value))

    def test_integer_beyond_float_range(self) -> None:
        """Test huge integer literals become signed infinity."""
        assert to_number(10**400) == math.inf
        assert to_number(-(10**400)) == -math.inf


class TestFieldNormalizers:
    """Test single-field normalizers."""

    def test_name(self) -> None:
        """Test name defaults and stringification."""
        assert normalize_name("Milk") == "Milk"
        assert normalize_name("  Milk ") == "  Milk "
        assert normalize_name("   ") == "Unknown Item"
        assert normalize_name(None) == "Unknown Item"
        assert normalize_name() == "Unknown Item"
        assert normalize_name(42) == "42"
        assert normalize_name(1.5) == "1.5"

    def test_name_integer_beyond_float_range(self) -> None:
        """Test a huge integer name is not a finite number."""
        assert normalize_name(10**400) == "Unknown Item"

    def test_category(self) -> None:
        """Test category folding and default."""
        assert normalize_category(" Dairy ") == "dairy"
        assert normalize_category("invalid_category") == "other"
        assert normalize_category(None) == "other"

    def test_unit(self) -> None:
        """Test quantity unit folding and default."""
        assert normalize_unit("LBS") == "lbs"
        assert normalize_unit("invalid_unit") == "items"
        assert normalize_unit() == "items"

    def test_storage_location(self) -> None:
        """Test storage location folding and default."""
        assert normalize_storage_location("Freezer") == "freezer"
        assert normalize_storage_location("invalid_location") == "refrigerator"
        assert normalize_storage_location(3) == "refrigerator"

    @pytest.mark.parametrize(
        "value,expected",
        [
            (2, 2.0),
            ("10", 10.0),
            (-5, 0),
            (None, 0.0),
            ("not a number", 1),
            (MISSING, 1),
            (float("inf"), 1),
        ],
    )
    def test_quantity(self, value: object, expected: float) -> None:
        """Test quantity coercion and clamping."""
        assert normalize_quantity(value) == expected

    @pytest.mark.parametrize(
        "value,expected",
        [
            (14, 14),
            ("14", 14),
            (2.5, 3),
            (2.4, 2),
            (0, 1),
            (-3, 1),
            (500, 365),
            (None, 1),
            ("soon", 7),
            (MISSING, 7),
            (float("inf"), 365),
            (float("-inf"), 1),
        ],
    )
    def test_shelf_life(self, value: object, expected: int) -> None:
        """Test shelf life rounding and clamping."""
        assert normalize_shelf_life(value) == expected

    @pytest.mark.parametrize(
        "value,expected",
        [
            (0.8, 0.8),
            ("0.8", 0.8),
            (1.5, 1.0),
            (-0.2, 0.0),
            (None, 0.0),
            ("sure", 0.5),
            (MISSING, 0.5),
        ],
    )
    def test_confidence(self, value: object, expected: float) -> None:
        """Test confidence clamping and default."""
        assert normalize_confidence(value) == pytest.approx(expected)


class TestNormalizeItem:
    """Test whole-item normalization."""

    def test_valid_item_is_unchanged(self) -> None:
        """Test a fully valid item is not flagged."""
        raw = {
            "name": "Milk",
            "category": "dairy",
            "quantity": 1,
            "quantityUnit": "bottle",
            "storageLocation": "refrigerator",
            "shelfLifeDays": 7,
            "confidence": 0.9,
        }

        item, changed = normalize_item(raw)

        assert not changed
        assert item.to_wire() == {
            "name": "Milk",
            "category": "dairy",
            "quantity": 1.0,
            "quantityUnit": "bottle",
            "storageLocation": "refrigerator",
            "shelfLifeDays": 7,
            "confidence": 0.9,
        }

    def test_defaults_for_minimal_item(self) -> None:
        """Test missing fields are filled and flagged."""
        item, changed = normalize_item({"name": "Minimal Item"})

        assert changed
        assert item.category == "other"
        assert item.quantity == 1
        assert item.quantity_unit == "items"
        assert item.storage_location == "refrigerator"
        assert item.shelf_life_days == 7
        assert item.confidence == 0.5

    def test_case_folding_counts_as_change(self) -> None:
        """Test upper-case enum values are corrected and flagged."""
        raw = {
            "name": "Milk",
            "category": "DAIRY",
            "quantity": 1,
            "quantityUnit": "bottle",
            "storageLocation": "refrigerator",
            "shelfLifeDays": 7,
            "confidence": 0.9,
        }

        item, changed = normalize_item(raw)

        assert changed
        assert item.category == "dairy"

    def test_numeric_string_counts_as_change(self) -> None:
        """Test string numbers are coerced and flagged."""
        raw = {
            "name": "Eggs",
            "category": "dairy",
            "quantity": "12",
            "quantityUnit": "items",
            "storageLocation": "refrigerator",
            "shelfLifeDays": 21,
            "confidence": 1,
        }

        item, changed = normalize_item(raw)

        assert changed
        assert item.quantity == 12.0

    def test_non_object_item(self) -> None:
        """Test non-object entries become a default item."""
        item, changed = normalize_item("milk")

        assert changed
        assert item.name == "Unknown Item"

    def test_normalize_items_requires_list(self) -> None:
        """Test non-list input yields no items."""
        assert normalize_items({"name": "Milk"}) == []
        assert len(normalize_items([{"name": "Milk"}, {}])) == 2


class TestParseAnalysisResponse:
    """Test whole-reply parsing."""

    def test_invalid_fields_are_corrected(self) -> None:
        """Test every invalid field is replaced and normalized is set."""
        content = (
            '{"items":[{"name":"Test Item","category":"invalid_category","quantity":-5,'
            '"quantityUnit":"invalid_unit","storageLocation":"invalid_location",'
            '"shelfLifeDays":0,"confidence":1.5}]}'
        )

        result = parse_analysis_response(content)

        assert result.success
        assert result.normalized
        assert result.data is not None
        assert [item.to_wire() for item in result.data.items] == [
            {
                "name": "Test Item",
                "category": "other",
                "quantity": 0,
                "quantityUnit": "items",
                "storageLocation": "refrigerator",
                "shelfLifeDays": 1,
                "confidence": 1,
            }
        ]

    def test_valid_reply_not_normalized(self) -> None:
        """Test a clean reply passes through untouched."""
        content = (
            '{"items":[{"name":"Apples","category":"produce","quantity":3,'
            '"quantityUnit":"items","storageLocation":"counter","shelfLifeDays":14,'
            '"confidence":0.95}],"notes":"Fresh produce"}'
        )

        result = parse_analysis_response(content)

        assert result.success
        assert not result.normalized
        assert result.data.notes == "Fresh produce"
        assert result.data.items[0].storage_location == "counter"

    def test_code_fence_is_stripped(self) -> None:
        """Test markdown-fenced JSON is accepted."""
        content = '```json\n{"items": [{"name": "Minimal Item"}]}\n```'

        result = parse_analysis_response(content)

        assert result.success
        assert result.data.items[0].name == "Minimal Item"

    def test_missing_items_yields_empty_list(self) -> None:
        """Test a reply without items is a success with no items."""
        result = parse_analysis_response('{"error": "No food visible"}')

        assert result.success
        assert not result.normalized
        assert result.data.items == []
        assert result.data.error == "No food visible"

    def test_non_string_notes_dropped(self) -> None:
        """Test notes and error pass only as strings."""
        result = parse_analysis_response('{"items": [], "notes": 5, "error": null}')

        assert result.data.notes is None
        assert result.data.error is None

    def test_non_object_body(self) -> None:
        """Test a JSON array body is treated as empty."""
        result = parse_analysis_response("[1, 2, 3]")

        assert result.success
        assert result.data.items == []

    @pytest.mark.parametrize("content", [None, "", "   \n"])
    def test_empty_content(self, content: object) -> None:
        """Test empty replies fail without raising."""
        result = parse_analysis_response(content)

        assert not result.success
        assert result.error == "No response content"
        assert result.data is None

    def test_invalid_json(self) -> None:
        """Test undecodable replies fail without raising."""
        result = parse_analysis_response("this is not json")

        assert not result.success
        assert result.error.startswith("Failed to parse AI response:")

    def test_oversized_numbers(self) -> None:
        """Test integer literals beyond float range are clamped, not raised."""
        huge = "1" + "0" * 400
        content = (
            '{"items": [{"name": ' + huge + ', "quantity": ' + huge
            + ', "shelfLifeDays": -' + huge + ', "confidence": ' + huge + "}]}"
        )

        result = parse_analysis_response(content)

        assert result.success
        assert result.normalized
        item = result.data.items[0]
        assert item.name == "Unknown Item"
        assert item.quantity == 1
        assert item.shelf_life_days == 1
        assert item.confidence == 1.0

    def test_deeply_nested_json(self) -> None:
        """Test nesting beyond the decoder's depth fails without raising."""
        result = parse_analysis_response("[" * 100000)

        assert not result.success
        assert result.error.startswith("Failed to parse AI response:")

    def test_wire_shape(self) -> None:
        """Test result serialization."""
        wire = parse_analysis_response('{"items": []}').to_wire()

        assert wire == {"success": True, "normalized": False, "data": {"items": []}}
