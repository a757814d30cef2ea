"""
Cell Parsing Module
Typed spreadsheet cells and the price/number parsing rules applied to them
"""
import math
import re
from dataclasses import dataclass, field
from datetime import date, datetime, time
from typing import Any, List, Optional, Sequence, Union

from menu_import.config import NUMERIC_COLUMN_RATIO, NUMERIC_SAMPLE_ROWS


@dataclass(frozen=True)
class Number:
    """Numeric cell"""
    value: float


@dataclass(frozen=True)
class Text:
    """Text cell, kept exactly as read"""
    value: str


@dataclass(frozen=True)
class Empty:
    """Blank or missing cell"""


EMPTY = Empty()

CellValue = Union[Number, Text, Empty]

_PRICE_STRIP_RE = re.compile(r'[^\d.,\-]')
_LEADING_NUMBER_RE = re.compile(r'-?(?:\d+(?:\.\d*)?|\.\d+)')

# Currency markers commonly typed next to prices
CURRENCY_TOKENS = ('ج.م', 'جنيه', 'جم', 'ر.س', 'ريال', 'egp', 'le', 'sar', 'usd', '$', '£', '€')


@dataclass
class Sheet:
    """One worksheet: header row plus data rows of typed cells"""
    name: str
    headers: List[str]
    rows: List[List[CellValue]] = field(default_factory=list)
    first_data_row: int = 2  # 1-based spreadsheet row of rows[0]

    @property
    def total_rows(self) -> int:
        return len(self.rows)

    @property
    def has_data(self) -> bool:
        return bool(self.headers) and bool(self.rows)


def to_cell(value: Any) -> CellValue:
    """Convert a raw reader value into a typed cell"""
    if value is None:
        return EMPTY
    if isinstance(value, bool):
        return Text(str(value))
    if isinstance(value, (int, float)):
        if isinstance(value, float) and math.isnan(value):
            return EMPTY
        return Number(float(value))
    if isinstance(value, (datetime, date, time)):
        return Text(value.isoformat())
    text = str(value)
    if not text.strip():
        return EMPTY
    return Text(text)


def get_cell(row: Sequence[CellValue], index: Optional[int]) -> CellValue:
    """Cell at index, treating short rows and unmapped columns as empty"""
    if index is None or index < 0 or index >= len(row):
        return EMPTY
    return row[index]


def cell_text(cell: CellValue) -> str:
    """Trimmed display string for a cell"""
    if isinstance(cell, Number):
        if math.isfinite(cell.value) and cell.value.is_integer():
            return str(int(cell.value))
        return str(cell.value)
    if isinstance(cell, Text):
        return cell.value.strip()
    return ""


def parse_price(cell: CellValue) -> Optional[float]:
    """
    Parse a positive price from a cell.

    Text is reduced to digits, '.', ',' and '-', commas become dots and the
    leading number is read, so "12.50 ج.م" gives 12.5. Anything that is not a
    positive number gives None.
    """
    if isinstance(cell, Number):
        if math.isfinite(cell.value) and cell.value > 0:
            return cell.value
        return None
    if isinstance(cell, Text):
        cleaned = _PRICE_STRIP_RE.sub('', cell.value).replace(',', '.')
        match = _LEADING_NUMBER_RE.match(cleaned)
        if not match:
            return None
        try:
            value = float(match.group())
        except ValueError:
            return None
        return value if value > 0 else None
    return None


def is_numeric_text(text: str) -> bool:
    """True if text is a plain number once currency markers are removed"""
    cleaned = text.strip().lower()
    for token in CURRENCY_TOKENS:
        cleaned = cleaned.replace(token, '')
    cleaned = re.sub(r'\s+', '', cleaned).replace(',', '.')
    if not cleaned:
        return False
    try:
        float(cleaned)
    except ValueError:
        return False
    return True


def is_probably_numeric_column(rows: Sequence[Sequence[CellValue]], col_index: int,
                               sample_size: int = NUMERIC_SAMPLE_ROWS) -> bool:
    """Check whether the sampled non-empty cells of a column are mostly numbers"""
    non_empty = 0
    numeric = 0
    for row in rows[:sample_size]:
        cell = get_cell(row, col_index)
        if isinstance(cell, Empty):
            continue
        non_empty += 1
        if isinstance(cell, Number) or (isinstance(cell, Text) and is_numeric_text(cell.value)):
            numeric += 1
    if non_empty == 0:
        return False
    return numeric / non_empty >= NUMERIC_COLUMN_RATIO
