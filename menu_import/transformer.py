"""
Row Transformation Module
Applies a column mapping to data rows, producing categories of priced products.
No detection happens here: the mapping may come from the detector or a reviewer.
"""
import logging
from typing import Dict, List, Optional, Sequence, Tuple

from menu_import.cells import CellValue, cell_text, get_cell, parse_price
from menu_import.config import DEFAULT_CATEGORY_NAME, SOURCE_NOTE
from menu_import.schemas import (
    ColumnMapping, ExtractedCategory, ExtractedProduct, ExtractedVariant,
    ParsedExcelData, PricingType, UnitType, VariantColumn, VariantType,
)
from menu_import.units import quantity_rules, resolve_unit, suggest_unit

logger = logging.getLogger(__name__)

_URL_PREFIXES = ('http://', 'https://')


def transform_rows(
    rows: Sequence[Sequence[CellValue]],
    mapping: ColumnMapping,
    pricing_type: PricingType,
    variant_type: Optional[VariantType] = None,
    unit_type: Optional[UnitType] = None,
    first_data_row: int = 2,
    default_category: str = DEFAULT_CATEGORY_NAME,
) -> ParsedExcelData:
    """
    Turn data rows into categories of products.

    Rows without a product name are skipped. Rows that cannot be priced are
    kept, flagged for review and reported in the warnings.

    Args:
        rows: Data rows (header excluded)
        mapping: Column mapping for the sheet
        pricing_type: Pricing model for the sheet
        variant_type: Variant kind when pricing by variants
        unit_type: Default unit for the sheet; without one the category
            name suggests the unit
        first_data_row: Spreadsheet row number of rows[0], used in warnings
        default_category: Category for rows with no category cell
    """
    category_order: List[str] = []
    category_products: Dict[str, List[ExtractedProduct]] = {}
    warnings: List[str] = []

    for offset, row in enumerate(rows):
        row_number = first_data_row + offset
        name = cell_text(get_cell(row, mapping.product))
        if not name:
            continue

        category_name = cell_text(get_cell(row, mapping.category)) or default_category
        if category_name not in category_products:
            category_order.append(category_name)
            category_products[category_name] = []

        product, warning = _build_product(
            row, row_number, name, mapping, pricing_type, variant_type,
            unit_type or suggest_unit(category_name))
        if warning:
            logger.debug(warning)
            warnings.append(warning)
        category_products[category_name].append(product)

    categories = [
        ExtractedCategory(
            name_ar=name,
            display_order=order,
            products=category_products[name],
            default_pricing_type=pricing_type,
            default_unit_type=unit_type or suggest_unit(name),
            default_variant_type=variant_type,
        )
        for order, name in enumerate(category_order, start=1)
    ]
    total = sum(len(c.products) for c in categories)
    logger.info(
        f"Transformed {total} products in {len(categories)} categories "
        f"({len(warnings)} warnings)")

    return ParsedExcelData(
        categories=categories,
        totalProducts=total,
        warnings=warnings,
        pricing_type=pricing_type,
        variant_type=variant_type,
        unit_type=unit_type,
    )


def _optional_text(row: Sequence[CellValue], index: Optional[int]) -> Optional[str]:
    return cell_text(get_cell(row, index)) or None


def _image_url(row: Sequence[CellValue], index: Optional[int]) -> Optional[str]:
    """Only absolute http(s) links are kept"""
    url = cell_text(get_cell(row, index))
    if url.lower().startswith(_URL_PREFIXES):
        return url
    return None


def _parse_variants(row: Sequence[CellValue],
                    columns: Sequence[VariantColumn]) -> List[ExtractedVariant]:
    """Priced variants in mapping order; unpriced columns are skipped"""
    variants = []
    for column in columns:
        price = parse_price(get_cell(row, column.column_index))
        if price is None:
            continue
        variants.append(ExtractedVariant(
            name_ar=column.name_ar,
            name_en=column.name_en,
            price=price,
            is_default=not variants,
            display_order=len(variants) + 1,
            multiplier=column.multiplier,
        ))
    return variants


def _build_product(
    row: Sequence[CellValue],
    row_number: int,
    name: str,
    mapping: ColumnMapping,
    pricing_type: PricingType,
    variant_type: Optional[VariantType],
    unit_type: Optional[UnitType],
) -> Tuple[ExtractedProduct, Optional[str]]:
    """Build one product and the warning it raised, if any"""
    unit = resolve_unit(cell_text(get_cell(row, mapping.unit))) or unit_type
    fields = dict(
        name_ar=name,
        name_en=_optional_text(row, mapping.name_en),
        description_ar=_optional_text(row, mapping.description),
        unit_type=unit,
        image_url=_image_url(row, mapping.image_url),
        source_note=SOURCE_NOTE,
        source_row=row_number,
    )

    if pricing_type == PricingType.VARIANTS:
        variants = _parse_variants(row, mapping.variants)
        if variants:
            return ExtractedProduct(
                pricing_type=PricingType.VARIANTS,
                variant_type=variant_type,
                price=variants[0].price,
                variants=variants,
                **fields,
            ), None

        # Demote to a fixed price, keeping the single price column if there is one
        price = parse_price(get_cell(row, mapping.price))
        if price is None:
            warning = f"row {row_number}: no prices for product '{name}'"
        else:
            warning = f"row {row_number}: no prices for product '{name}', using the single price"
        return ExtractedProduct(
            pricing_type=PricingType.FIXED,
            price=price,
            needs_review=True,
            **fields,
        ), warning

    price = parse_price(get_cell(row, mapping.price))
    if pricing_type == PricingType.PER_UNIT:
        min_quantity, quantity_step = quantity_rules(unit)
    else:
        min_quantity, quantity_step = 1, 1

    warning = None
    if price is None:
        warning = f"row {row_number}: missing price for product '{name}'"

    return ExtractedProduct(
        pricing_type=pricing_type,
        price=price,
        min_quantity=min_quantity,
        quantity_step=quantity_step,
        needs_review=price is None,
        **fields,
    ), warning
