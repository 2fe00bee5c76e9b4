from .layout import (
    DEFAULT_MARK_SYMBOL,
    MARK_SYMBOLS,
    InvalidMarkSymbolError,
    PageLayout,
    build_pages,
)
from .workbook import XLSX_MIME_TYPE, build_workbook, export_filename, export_workbook_bytes, save_workbook

__all__ = [
    "DEFAULT_MARK_SYMBOL",
    "MARK_SYMBOLS",
    "InvalidMarkSymbolError",
    "PageLayout",
    "XLSX_MIME_TYPE",
    "build_pages",
    "build_workbook",
    "export_filename",
    "export_workbook_bytes",
    "save_workbook",
]
