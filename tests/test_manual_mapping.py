import pytest

from menu_import.exceptions import InvalidMappingError
from menu_import.manual_mapping import apply_manual_mapping, detection_from_request
from menu_import.schemas import (
    ManualMappingRequest, PricingType, SemanticRole, UnitType, VariantType,
)
from menu_import.transformer import transform_rows

HEADERS = ["Item", "Q", "K", "Notes"]


class TestApplyManualMapping:

    def test_singular_roles(self):
        result = apply_manual_mapping(
            ["A", "B", "C"], {0: "product", 1: "price", 2: "description"}, PricingType.FIXED)
        assert result.mapping.product == 0
        assert result.mapping.price == 1
        assert result.mapping.description == 2
        assert result.confidence == 0.8
        assert result.headers == ["A", "B", "C"]

    def test_ignore(self):
        result = apply_manual_mapping(HEADERS, {0: "product", 3: "ignore"}, PricingType.FIXED)
        assert result.mapping.assigned_columns() == [0]

    def test_variant_roles_use_canonical_labels(self):
        result = apply_manual_mapping(
            HEADERS, {0: "product", 1: "weight_quarter", 2: "weight_kilo"},
            PricingType.VARIANTS)
        variants = result.mapping.variants
        assert [v.column_index for v in variants] == [1, 2]
        assert [v.role for v in variants] == [SemanticRole.WEIGHT_QUARTER, SemanticRole.WEIGHT_KILO]
        assert [v.name_ar for v in variants] == ["ربع كيلو", "كيلو"]
        assert [v.name_en for v in variants] == ["Quarter", "Kilo"]
        assert [v.multiplier for v in variants] == [0.25, 1.0]
        assert result.variant_type == VariantType.WEIGHT
        assert result.variant_group_id == "weights_restaurant"

    def test_kilo_with_coffee_weights_takes_coffee_label(self):
        result = apply_manual_mapping(
            HEADERS, {0: "product", 1: "weight_250g", 2: "weight_kilo"},
            PricingType.VARIANTS)
        variants = result.mapping.variants
        assert [v.name_en for v in variants] == ["250g", "1kg"]
        assert [v.variant_type for v in variants] == [VariantType.COFFEE_WEIGHT] * 2
        assert result.variant_type == VariantType.COFFEE_WEIGHT
        assert result.variant_group_id == "weights_coffee"

    def test_mixed_groups_follow_first_variant(self):
        result = apply_manual_mapping(
            HEADERS, {0: "product", 1: "size_small", 2: "weight_kilo"},
            PricingType.VARIANTS)
        variants = result.mapping.variants
        assert result.variant_group_id == "sizes"
        assert [v.name_en for v in variants] == ["Small", "Kilo"]
        assert [v.variant_type for v in variants] == [VariantType.SIZE, VariantType.WEIGHT]

    def test_explicit_variant_type(self):
        result = apply_manual_mapping(
            HEADERS, {0: "product", 1: "option_regular", 2: "option_large"},
            PricingType.VARIANTS, variant_type=VariantType.SIZE)
        assert result.variant_type == VariantType.SIZE
        assert all(v.variant_type == VariantType.SIZE for v in result.mapping.variants)

    def test_variant_columns_dropped_for_fixed_pricing(self):
        result = apply_manual_mapping(
            HEADERS, {0: "product", 1: "size_small", 2: "price"}, PricingType.FIXED)
        assert result.mapping.variants == []
        assert result.variant_type is None
        assert result.variant_group_id is None
        assert "1 variant columns ignored for fixed pricing" in result.suggestions

    def test_duplicate_singular_role(self):
        result = apply_manual_mapping(HEADERS, {0: "product", 3: "product"}, PricingType.FIXED)
        assert result.mapping.product == 0
        assert any('"Notes" ignored' in s for s in result.suggestions)

    def test_missing_product(self):
        result = apply_manual_mapping(HEADERS, {1: "price"}, PricingType.FIXED)
        assert result.confidence == 0.2
        assert "A product name column must be assigned" in result.suggestions

    def test_unit_type_passed_through(self):
        result = apply_manual_mapping(
            HEADERS, {0: "product", 1: "price"}, PricingType.PER_UNIT, unit_type=UnitType.KG)
        assert result.unit_type == UnitType.KG
        assert result.pricing_type == PricingType.PER_UNIT

    def test_unknown_role(self):
        with pytest.raises(InvalidMappingError, match="Unknown role"):
            apply_manual_mapping(HEADERS, {0: "sku"}, PricingType.FIXED)

    def test_column_out_of_range(self):
        with pytest.raises(InvalidMappingError, match="outside the header row"):
            apply_manual_mapping(HEADERS, {9: "product"}, PricingType.FIXED)


class TestManualMappingRequest:

    def test_string_keys_from_json(self):
        request = ManualMappingRequest.model_validate(
            {"assignments": {"0": "product", "1": "price"}, "pricing_type": "fixed"})
        result = detection_from_request(["Item", "Cost"], request)
        assert result.mapping.product == 0
        assert result.mapping.price == 1

    def test_transforms_like_detection(self, make_rows):
        request = ManualMappingRequest(
            assignments={0: "product", 1: "weight_quarter", 2: "weight_kilo"},
            pricing_type=PricingType.VARIANTS)
        detection = detection_from_request(HEADERS, request)
        rows = make_rows([["كفتة", "90", "330"]])
        data = transform_rows(rows, detection.mapping, detection.pricing_type,
                              variant_type=detection.variant_type)
        product = data.get_all_products()[0]
        assert product.price == 90.0
        assert [v.name_ar for v in product.variants] == ["ربع كيلو", "كيلو"]
