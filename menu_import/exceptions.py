"""
Custom exceptions for the Menu Import engine
"""


class MenuImportError(Exception):
    """Base exception for menu import errors"""
    pass


class WorkbookReadError(MenuImportError):
    """Raised when an uploaded workbook cannot be opened or parsed"""
    pass


class NoUsableSheetsError(MenuImportError):
    """Raised when no sheet has a header row and at least one data row"""
    pass


class InvalidMappingError(MenuImportError):
    """Raised when a manual column assignment cannot be applied"""
    pass
