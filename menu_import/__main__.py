"""
CLI entry point for the Menu Import engine

Usage:
    python -m menu_import <workbook> [--output result.json] [--export review.xlsx]

Examples:
    python -m menu_import data/menu.xlsx
    python -m menu_import data/menu.xlsx --output data/menu.json
    python -m menu_import data/menu.xlsx --export data/menu_review.xlsx --parallel
"""
import argparse
import logging
import sys
from pathlib import Path

from menu_import.config import LOG_LEVEL
from menu_import.excel_exporter import create_excel_export
from menu_import.excel_reader import load_workbook_file
from menu_import.exceptions import MenuImportError
from menu_import.orchestrator import extract_catalog


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="menu_import",
        description="Extract a menu catalog from a merchant spreadsheet")
    parser.add_argument("workbook", type=Path, help="Path to the .xlsx/.xls file")
    parser.add_argument("--output", type=Path, help="Write the full result as JSON")
    parser.add_argument("--export", type=Path, help="Write a review workbook")
    parser.add_argument("--header-row", type=int, default=None,
                        help="1-based header row (default: first non-empty row)")
    parser.add_argument("--parallel", action="store_true", help="Process sheets in parallel")
    parser.add_argument("--log-level", default=LOG_LEVEL, help="Logging level")
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=args.log_level.upper(),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    try:
        sheets = load_workbook_file(args.workbook, header_row=args.header_row)
        result = extract_catalog(sheets, parallel=args.parallel)
    except MenuImportError as e:
        print(f"Error: {e}")
        return 1

    for sheet in result.sheets:
        print(f"{sheet.name}: {sheet.data.totalProducts} products, "
              f"pricing={sheet.detection.pricing_type.value}, "
              f"confidence={sheet.detection.confidence:.0%}")
        for suggestion in sheet.detection.suggestions:
            print(f"  - {suggestion}")
    combined = result.combined
    print(f"Total: {combined.totalProducts} products in {len(combined.categories)} categories, "
          f"{combined.products_needing_review} need review, {len(combined.warnings)} warnings")

    if args.output:
        args.output.write_text(result.model_dump_json(indent=2), encoding="utf-8")
        print(f"Saved result to {args.output}")
    if args.export:
        args.export.write_bytes(create_excel_export(combined))
        print(f"Saved review workbook to {args.export}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
