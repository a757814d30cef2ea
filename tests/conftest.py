import pytest

from menu_import.cells import Sheet, to_cell


@pytest.fixture
def make_rows():
    """Build typed data rows from plain Python values"""
    def _make(raw_rows):
        return [[to_cell(value) for value in row] for row in raw_rows]
    return _make


@pytest.fixture
def make_sheet(make_rows):
    def _make(name, headers, raw_rows, first_data_row=2):
        return Sheet(name=name, headers=list(headers), rows=make_rows(raw_rows),
                     first_data_row=first_data_row)
    return _make
