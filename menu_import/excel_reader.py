"""
Excel Reading Module
Loads .xlsx/.xls workbooks into typed sheets for column detection
"""
import io
import logging
from pathlib import Path
from typing import Any, List, Optional, Sequence

import xlrd
from openpyxl import load_workbook

from menu_import.cells import CellValue, Empty, Sheet, to_cell
from menu_import.exceptions import WorkbookReadError

logger = logging.getLogger(__name__)


class ExcelReader:
    """Reads every worksheet of a workbook as a header row plus data rows"""

    def __init__(self, header_row: Optional[int] = None):
        """
        Args:
            header_row: 1-based row number of the header row.
                        None = auto-detect (first non-empty row).
        """
        self.header_row = header_row

    def load_excel(self, file_path: Path) -> List[Sheet]:
        """Load a workbook from disk"""
        file_path = Path(file_path)
        logger.info(f"Loading Excel file: {file_path}")
        try:
            file_bytes = file_path.read_bytes()
        except OSError as e:
            logger.error(f"Failed to read Excel file: {e}")
            raise WorkbookReadError(f"Could not read {file_path}: {e}") from e
        return self.load_excel_from_bytes(file_bytes, file_path.name)

    def load_excel_from_bytes(self, file_bytes: bytes, file_name: str) -> List[Sheet]:
        """Load a workbook from bytes (e.g. an upload)"""
        logger.info(f"Loading Excel from bytes: {file_name}")

        is_xls = file_name.lower().endswith('.xls')

        try:
            if is_xls:
                return self._load_xls_from_bytes(file_bytes)
            return self._load_xlsx_from_bytes(file_bytes)
        except Exception as e:
            # If openpyxl fails, try xlrd as fallback
            if not is_xls and "zip" in str(e).lower():
                logger.warning(f"openpyxl failed, trying xlrd for: {file_name}")
                try:
                    return self._load_xls_from_bytes(file_bytes)
                except Exception as e2:
                    logger.error(f"Both openpyxl and xlrd failed: {e2}")
                    raise WorkbookReadError(
                        f"Could not load Excel file. Tried both .xlsx and .xls formats. Error: {e}") from e2
            logger.error(f"Failed to load Excel from bytes: {e}")
            raise WorkbookReadError(f"Could not load Excel file {file_name}: {e}") from e

    def _load_xlsx_from_bytes(self, file_bytes: bytes) -> List[Sheet]:
        """Load .xlsx file using openpyxl"""
        wb = load_workbook(io.BytesIO(file_bytes), data_only=True)
        try:
            sheets = []
            for ws in wb.worksheets:
                sheet_name = ws.title
                raw_rows = [list(row) for row in ws.iter_rows(values_only=True)]
                sheet = self._build_sheet(sheet_name, raw_rows)
                sheets.append(sheet)
                logger.info(
                    f"Loaded sheet '{sheet_name}': {sheet.total_rows} rows, {len(sheet.headers)} columns")
            return sheets
        finally:
            wb.close()

    def _load_xls_from_bytes(self, file_bytes: bytes) -> List[Sheet]:
        """Load .xls file using xlrd"""
        wb = xlrd.open_workbook(file_contents=file_bytes)
        sheets = []
        for sheet_name in wb.sheet_names():
            ws = wb.sheet_by_name(sheet_name)
            raw_rows = [ws.row_values(row_idx) for row_idx in range(ws.nrows)]
            sheet = self._build_sheet(sheet_name, raw_rows)
            sheets.append(sheet)
            logger.info(
                f"Loaded sheet '{sheet_name}': {sheet.total_rows} rows, {len(sheet.headers)} columns")
        return sheets

    def _build_sheet(self, sheet_name: str, raw_rows: Sequence[Sequence[Any]]) -> Sheet:
        """Split raw rows into header and typed data rows"""
        cells = [[to_cell(value) for value in row] for row in raw_rows]

        if self.header_row is not None and self.header_row > 0:
            header_idx = self.header_row - 1
        else:
            # Auto-detect: first non-empty row is the header
            header_idx = next(
                (i for i, row in enumerate(cells) if not _is_empty_row(row)), None)

        if header_idx is None or header_idx >= len(cells):
            return Sheet(name=sheet_name, headers=[], rows=[])

        headers = [_header_text(value) for value in raw_rows[header_idx]]
        rows = cells[header_idx + 1:]

        # Drop trailing blank rows left by formatting
        while rows and _is_empty_row(rows[-1]):
            rows.pop()

        return Sheet(
            name=sheet_name,
            headers=headers,
            rows=rows,
            first_data_row=header_idx + 2,  # 1-based, row after header
        )


def _is_empty_row(row: Sequence[CellValue]) -> bool:
    return all(isinstance(cell, Empty) for cell in row)


def _header_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def load_workbook_file(file_path: Path, header_row: Optional[int] = None) -> List[Sheet]:
    """Read all sheets of a workbook on disk"""
    return ExcelReader(header_row=header_row).load_excel(file_path)


def load_workbook_bytes(file_bytes: bytes, file_name: str,
                        header_row: Optional[int] = None) -> List[Sheet]:
    """Read all sheets of an uploaded workbook"""
    return ExcelReader(header_row=header_row).load_excel_from_bytes(file_bytes, file_name)
