"""
Multi-Sheet Processing Module
Runs detection and transformation per sheet and merges the sheets' categories
into one catalog
"""
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, List, Mapping, Optional, Sequence

from menu_import.cells import Sheet
from menu_import.config import DEFAULT_CATEGORY_NAME, MAX_PARALLEL_SHEETS
from menu_import.detector import detect_columns
from menu_import.exceptions import NoUsableSheetsError
from menu_import.manual_mapping import detection_from_request
from menu_import.schemas import (
    DetectionResult, ExtractedCategory, ManualMappingRequest, MultiSheetResult,
    ParsedExcelData, SheetResult,
)
from menu_import.transformer import transform_rows

logger = logging.getLogger(__name__)


def sheet_category_label(sheet_name: str) -> str:
    """Category name derived from a sheet title: the text before the first '-'"""
    return sheet_name.split('-', 1)[0].strip()


def process_sheet(sheet: Sheet, detection: Optional[DetectionResult] = None) -> SheetResult:
    """
    Detect (unless a detection is supplied) and transform a single sheet.

    When the sheet has no category column its products are filed under a
    category named after the sheet.
    """
    if detection is None:
        detection = detect_columns(sheet.headers, sheet.rows, sheet_name=sheet.name)

    default_category = DEFAULT_CATEGORY_NAME
    if detection.mapping.category is None:
        default_category = sheet_category_label(sheet.name) or DEFAULT_CATEGORY_NAME

    data = transform_rows(
        sheet.rows,
        detection.mapping,
        detection.pricing_type,
        variant_type=detection.variant_type,
        unit_type=detection.unit_type,
        first_data_row=sheet.first_data_row,
        default_category=default_category,
    )

    logger.info(
        f"Sheet '{sheet.name}': {data.totalProducts} products, "
        f"{len(data.categories)} categories, confidence {detection.confidence:.2f}")
    return SheetResult(name=sheet.name, detection=detection, data=data)


def merge_sheet_results(results: Sequence[SheetResult]) -> ParsedExcelData:
    """
    Merge per-sheet catalogs by category name.

    The first occurrence of a category keeps its defaults, products are
    appended in sheet order and display order is renumbered.
    """
    order: List[str] = []
    first_seen: Dict[str, ExtractedCategory] = {}
    products: Dict[str, list] = {}
    warnings: List[str] = []
    total = 0

    for result in results:
        for category in result.data.categories:
            if category.name_ar not in first_seen:
                order.append(category.name_ar)
                first_seen[category.name_ar] = category
                products[category.name_ar] = []
            products[category.name_ar].extend(category.products)
        warnings.extend(result.data.warnings)
        total += result.data.totalProducts

    categories = [
        first_seen[name].model_copy(
            update={"display_order": position, "products": list(products[name])})
        for position, name in enumerate(order, start=1)
    ]

    first = results[0].data if results else ParsedExcelData()
    return ParsedExcelData(
        categories=categories,
        totalProducts=total,
        warnings=warnings,
        pricing_type=first.pricing_type,
        variant_type=first.variant_type,
        unit_type=first.unit_type,
    )


def extract_catalog(
    sheets: Sequence[Sheet],
    overrides: Optional[Mapping[str, ManualMappingRequest]] = None,
    parallel: bool = False,
    max_workers: int = MAX_PARALLEL_SHEETS,
) -> MultiSheetResult:
    """
    Extract a combined catalog from every usable sheet of a workbook.

    Args:
        sheets: Sheets as read from the workbook
        overrides: Reviewer mappings keyed by sheet name, used instead of detection
        parallel: Process sheets in a thread pool
        max_workers: Thread pool size when parallel

    Raises:
        NoUsableSheetsError: No sheet has a header row and a data row
    """
    overrides = overrides or {}
    usable = [s for s in sheets if s.has_data]
    skipped = [s.name for s in sheets if not s.has_data]
    for name in skipped:
        logger.warning(f"Skipping sheet '{name}': no data rows")

    if not usable:
        raise NoUsableSheetsError(
            "The workbook has no sheet with a header row and at least one data row")

    def run(sheet: Sheet) -> SheetResult:
        request = overrides.get(sheet.name)
        detection = detection_from_request(sheet.headers, request) if request else None
        return process_sheet(sheet, detection)

    if parallel and len(usable) > 1:
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            results = list(executor.map(run, usable))
    else:
        results = [run(sheet) for sheet in usable]

    combined = merge_sheet_results(results)
    logger.info(
        f"Extracted {combined.totalProducts} products in {len(combined.categories)} "
        f"categories from {len(results)} sheets")

    return MultiSheetResult(sheets=results, combined=combined, skipped_sheets=skipped)
