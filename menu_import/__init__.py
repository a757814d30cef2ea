"""
Menu Import engine
Turns merchant product spreadsheets into a normalized menu catalog
"""
from menu_import.detector import detect_columns
from menu_import.excel_reader import load_workbook_bytes, load_workbook_file
from menu_import.manual_mapping import apply_manual_mapping
from menu_import.orchestrator import extract_catalog, process_sheet
from menu_import.transformer import transform_rows

__version__ = "0.1.0"

__all__ = [
    "apply_manual_mapping",
    "detect_columns",
    "extract_catalog",
    "load_workbook_bytes",
    "load_workbook_file",
    "process_sheet",
    "transform_rows",
]
