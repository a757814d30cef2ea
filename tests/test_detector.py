import pytest

from menu_import.detector import detect_columns
from menu_import.schemas import PricingType, SemanticRole, UnitType, VariantType


class TestSingularRoles:

    def test_exact_match_beats_substring(self):
        result = detect_columns(["السعر", "سعر البيع"])
        assert result.mapping.price == 0

    def test_left_most_matching_header_wins(self):
        result = detect_columns(["سعر البيع", "السعر"])
        assert result.mapping.price == 0

    def test_left_most_product_header_wins(self):
        result = detect_columns(["اسم المنتج بالعربي", "المنتج", "السعر"])
        assert result.mapping.product == 0
        assert result.mapping.price == 2

    def test_fixed_menu(self):
        result = detect_columns(["المنتج", "السعر"])
        assert result.mapping.product == 0
        assert result.mapping.price == 1
        assert result.mapping.variants == []
        assert result.pricing_type == PricingType.FIXED
        assert result.confidence == pytest.approx(0.4)

    def test_all_singular_roles(self):
        headers = ["القسم", "اسم المنتج", "English Name", "الوصف", "الوحدة", "رابط الصورة", "السعر"]
        mapping = detect_columns(headers).mapping
        assert mapping.category == 0
        assert mapping.product == 1
        assert mapping.name_en == 2
        assert mapping.description == 3
        assert mapping.unit == 4
        assert mapping.image_url == 5
        assert mapping.price == 6

    def test_english_name_header_is_not_the_product(self):
        result = detect_columns(["English Name", "اسم الوجبة"])
        assert result.mapping.name_en == 0
        assert result.mapping.product == 1

    def test_unit_price_header_is_the_price(self):
        mapping = detect_columns(["المنتج", "سعر الوحدة", "الوحدة"]).mapping
        assert mapping.price == 1
        assert mapping.unit == 2

    def test_headers_are_case_and_space_insensitive(self):
        mapping = detect_columns(["  Product   Name ", "PRICE"]).mapping
        assert mapping.product == 0
        assert mapping.price == 1


class TestProductGuess:

    def test_guess_first_text_column(self, make_rows):
        rows = make_rows([["كشري", "30"]])
        result = detect_columns(["الوجبة", "السعر"], rows)
        assert result.mapping.product == 0
        assert 'Guessed product column: "الوجبة"' in result.suggestions

    def test_guessed_product_is_not_counted_in_confidence(self, make_rows):
        rows = make_rows([["كشري", "30"]])
        result = detect_columns(["الوجبة", "السعر"], rows)
        assert result.confidence == pytest.approx(0.2)

    def test_no_product(self):
        result = detect_columns(["123", "456"])
        assert result.mapping.product is None
        assert not result.mapping.is_usable
        assert "Product name column not found" in result.suggestions

    def test_low_confidence_suggestion(self):
        result = detect_columns(["123", "456"])
        assert result.confidence == 0.0
        assert any("not recognized" in s for s in result.suggestions)


class TestVariantGroups:

    def test_size_columns(self):
        result = detect_columns(["المنتج", "صغير", "وسط", "كبير"])
        assert result.pricing_type == PricingType.VARIANTS
        assert result.variant_type == VariantType.SIZE
        assert result.variant_group_id == "sizes"
        assert result.mapping.price is None
        assert [v.column_index for v in result.mapping.variants] == [1, 2, 3]
        assert [v.name_ar for v in result.mapping.variants] == ["صغير", "وسط", "كبير"]
        assert result.confidence == pytest.approx(4 / 7)

    def test_restaurant_weights(self):
        result = detect_columns(["الصنف", "ربع", "نص", "كيلو"])
        assert result.variant_group_id == "weights_restaurant"
        assert result.variant_type == VariantType.WEIGHT
        assert [v.multiplier for v in result.mapping.variants] == [0.25, 0.5, 1.0]

    def test_exact_header_takes_its_own_role(self):
        variants = detect_columns(["الصنف", "ربع", "كيلو"]).mapping.variants
        assert [v.role for v in variants] == [
            SemanticRole.WEIGHT_QUARTER, SemanticRole.WEIGHT_KILO]

    def test_coffee_weights(self):
        result = detect_columns(["المنتج", "100 جرام", "250 جرام", "500 جرام"])
        assert result.variant_group_id == "weights_coffee"
        assert result.variant_type == VariantType.COFFEE_WEIGHT
        assert [v.multiplier for v in result.mapping.variants] == [0.1, 0.25, 0.5]

    def test_tie_goes_to_first_declared_group(self):
        # sizes and options both match two columns
        result = detect_columns(["المنتج", "صغير", "كبير", "عادي", "دابل"])
        assert result.variant_group_id == "sizes"

    def test_single_variant_column_is_not_a_group(self):
        result = detect_columns(["المنتج", "كبير", "السعر"])
        assert result.mapping.variants == []
        assert result.mapping.price == 2
        assert result.pricing_type == PricingType.FIXED

    def test_variant_group_replaces_price_column(self):
        result = detect_columns(["المنتج", "السعر", "صغير", "كبير"])
        assert result.pricing_type == PricingType.VARIANTS
        assert result.mapping.price is None


class TestNumericSniffing:

    def test_single_numeric_column_is_the_price(self, make_rows):
        rows = make_rows([["شاي", "10"], ["قهوة", 20]])
        result = detect_columns(["المنتج", "القيمة"], rows)
        assert result.mapping.price == 1
        assert result.pricing_type == PricingType.FIXED
        assert 'Using numeric column "القيمة" as the price' in result.suggestions

    def test_several_numeric_columns_are_variants(self, make_rows):
        rows = make_rows([["بن برازيلي", "150", "280"]])
        result = detect_columns(["المنتج", "200 جرام", "400 جرام"], rows)
        assert result.pricing_type == PricingType.VARIANTS
        assert result.variant_type == VariantType.WEIGHT
        assert result.variant_group_id is None
        assert [v.name_ar for v in result.mapping.variants] == ["200 جرام", "400 جرام"]
        assert all(v.role is None for v in result.mapping.variants)

    def test_unnamed_numeric_columns(self, make_rows):
        rows = make_rows([["عصير", 10, 15]])
        result = detect_columns(["المنتج", "", ""], rows)
        assert [v.name_ar for v in result.mapping.variants] == ["Column 2", "Column 3"]
        assert result.variant_type == VariantType.OPTION

    def test_no_sniffing_without_rows(self):
        result = detect_columns(["المنتج", "القيمة"])
        assert result.mapping.price is None


class TestSheetHints:

    def test_vegetable_sheet_is_per_unit(self):
        result = detect_columns(["المنتج", "السعر"], sheet_name="خضار")
        assert result.pricing_type == PricingType.PER_UNIT
        assert result.unit_type == UnitType.KG
        assert result.mapping.price == 1

    def test_grill_sheet_without_variant_columns(self):
        result = detect_columns(["المنتج", "السعر"], sheet_name="مشويات")
        assert result.pricing_type == PricingType.VARIANTS
        assert result.variant_type == VariantType.WEIGHT
        assert result.variant_group_id == "weights_restaurant"
        # kept as the fallback when a row has no variant prices
        assert result.mapping.price == 1
        assert any("weights_restaurant" in s for s in result.suggestions)

    def test_variant_columns_beat_sheet_hint(self):
        result = detect_columns(["المنتج", "صغير", "كبير"], sheet_name="خضار")
        assert result.pricing_type == PricingType.VARIANTS
        assert result.variant_type == VariantType.SIZE
        assert result.unit_type is None

    def test_sheet_unit_ignored_with_variant_columns(self):
        result = detect_columns(["المنتج", "صغير", "كبير"], sheet_name="سوبر ماركت")
        assert result.pricing_type == PricingType.VARIANTS
        assert result.unit_type is None

    def test_sheet_unit_used_for_fixed_pricing(self):
        result = detect_columns(["المنتج", "السعر"], sheet_name="سوبر ماركت")
        assert result.pricing_type == PricingType.FIXED
        assert result.unit_type == UnitType.PIECE


class TestDetectionResult:

    def test_headers_are_kept(self):
        result = detect_columns(["المنتج", None, "السعر"])
        assert result.headers == ["المنتج", "", "السعر"]

    def test_serializable(self):
        result = detect_columns(["المنتج", "صغير", "كبير"])
        assert '"variant_type":"size"' in result.model_dump_json()

    def test_pure(self, make_rows):
        headers = ["المنتج", "صغير", "وسط", "كبير"]
        rows = make_rows([["بيتزا", "80", "120", "160"]])
        assert detect_columns(headers, rows, "Pizza") == detect_columns(headers, rows, "Pizza")
