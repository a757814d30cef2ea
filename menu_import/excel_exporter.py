"""
Excel Export Module
Writes an extracted catalog to a styled review workbook using openpyxl
"""
import io
import logging
from typing import Any, List

from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter

from menu_import.schemas import ExtractedProduct, ParsedExcelData

logger = logging.getLogger(__name__)

PRODUCT_COLUMNS = [
    ("Category", 22),
    ("Product (AR)", 30),
    ("Product (EN)", 25),
    ("Description", 35),
    ("Pricing Type", 14),
    ("Price", 10),
    ("Unit", 10),
    ("Variants", 40),
    ("Needs Review", 14),
    ("Source Row", 12),
    ("Image URL", 35),
]


class ExcelExporter:
    """Exports an extracted catalog for human review"""

    def __init__(self):
        self.header_fill = PatternFill(
            start_color="4472C4", end_color="4472C4", fill_type="solid")
        self.header_font = Font(bold=True, color="FFFFFF", size=11)
        self.review_fill = PatternFill(
            start_color="FFF2CC", end_color="FFF2CC", fill_type="solid")
        self.border = Border(
            left=Side(style='thin'),
            right=Side(style='thin'),
            top=Side(style='thin'),
            bottom=Side(style='thin')
        )

    def export_catalog_to_excel(self, data: ParsedExcelData) -> bytes:
        """
        Export a catalog with one row per product.

        Products flagged for review are highlighted, and warnings are written
        to a second sheet.
        """
        wb = Workbook()
        ws = wb.active
        ws.title = "Products"
        ws.sheet_view.rightToLeft = True

        self._write_headers(ws, PRODUCT_COLUMNS)

        current_row = 2
        for category in data.categories:
            for product in category.products:
                values = self._product_values(category.name_ar, product)
                for col, value in enumerate(values, 1):
                    cell = ws.cell(row=current_row, column=col, value=value)
                    cell.alignment = Alignment(
                        horizontal='center', vertical='center', wrap_text=True)
                    cell.border = self.border
                    if product.needs_review:
                        cell.fill = self.review_fill
                current_row += 1

        warnings_ws = wb.create_sheet("Warnings")
        self._write_headers(warnings_ws, [("Warning", 80)])
        for row, warning in enumerate(data.warnings, 2):
            warnings_ws.cell(row=row, column=1, value=warning).border = self.border

        logger.info(
            f"Exported {current_row - 2} products and {len(data.warnings)} warnings")

        # Save to bytes
        output = io.BytesIO()
        wb.save(output)
        output.seek(0)

        return output.getvalue()

    def _write_headers(self, ws, columns):
        for col, (header, width) in enumerate(columns, 1):
            cell = ws.cell(row=1, column=col, value=header)
            cell.fill = self.header_fill
            cell.font = self.header_font
            cell.alignment = Alignment(horizontal='center', vertical='center')
            cell.border = self.border
            ws.column_dimensions[get_column_letter(col)].width = width

    def _product_values(self, category_name: str, product: ExtractedProduct) -> List[Any]:
        return [
            category_name,
            product.name_ar,
            product.name_en or '',
            product.description_ar or '',
            product.pricing_type.value,
            product.price if product.price is not None else '',
            product.unit_type.value if product.unit_type else '',
            self._format_variants(product),
            "yes" if product.needs_review else "",
            product.source_row or '',
            product.image_url or '',
        ]

    def _format_variants(self, product: ExtractedProduct) -> str:
        """Variants as 'label: price' pairs, default first"""
        if not product.variants:
            return ''
        return ' | '.join(f"{v.name_ar}: {v.price:g}" for v in product.variants)


def create_excel_export(data: ParsedExcelData) -> bytes:
    """
    Convenience function to create a review export.

    Args:
        data: Catalog for one sheet or the combined workbook

    Returns:
        Excel file as bytes
    """
    exporter = ExcelExporter()
    return exporter.export_catalog_to_excel(data)
