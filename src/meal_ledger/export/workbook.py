from __future__ import annotations

import io
import logging
import re
from pathlib import Path

from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.page import PageMargins
from openpyxl.worksheet.worksheet import Worksheet

from meal_ledger.export.layout import (
    DEFAULT_MARK_SYMBOL,
    HEADER_ROWS,
    ROLE_BODY,
    ROLE_DAY_HEADER,
    ROLE_HEADER,
    ROLE_NAME,
    ROLE_QUOTA,
    ROLE_SIGNATURE,
    ROLE_SIGNATURE_DATE,
    ROLE_TITLE,
    ROLE_TOTAL,
    PageLayout,
    build_pages,
)
from meal_ledger.models import MonthlyLedger

logger = logging.getLogger(__name__)

XLSX_MIME_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

FONT_NAME = "Times New Roman"
HEADER_SUNDAY_FILL = "FFF3F4F6"
BODY_SUNDAY_FILL = "FFF9FAFB"

THIN = Side(style="thin")
CELL_BORDER = Border(left=THIN, right=THIN, top=THIN, bottom=THIN)
DIAGONAL_BORDER = Border(left=THIN, right=THIN, top=THIN, bottom=THIN, diagonal=THIN, diagonalDown=True)

CENTER = Alignment(horizontal="center", vertical="center")
CENTER_WRAP = Alignment(horizontal="center", vertical="center", wrap_text=True)

ROLE_STYLES: dict[str, tuple[Font, Alignment]] = {
    ROLE_TITLE: (Font(name=FONT_NAME, size=14, bold=True), CENTER),
    ROLE_HEADER: (Font(name=FONT_NAME, size=10, bold=True), CENTER_WRAP),
    ROLE_DAY_HEADER: (
        Font(name=FONT_NAME, size=10, bold=True),
        Alignment(horizontal="left", vertical="center", wrap_text=True),
    ),
    ROLE_BODY: (Font(name=FONT_NAME, size=11), CENTER),
    ROLE_NAME: (Font(name=FONT_NAME, size=11), Alignment(horizontal="left", vertical="center", indent=1)),
    ROLE_TOTAL: (Font(name=FONT_NAME, size=11, bold=True), CENTER),
    ROLE_QUOTA: (Font(name=FONT_NAME, size=10, italic=True), Alignment()),
    ROLE_SIGNATURE_DATE: (Font(name=FONT_NAME, size=11, italic=True), Alignment(horizontal="center")),
    ROLE_SIGNATURE: (Font(name=FONT_NAME, size=11, bold=True), Alignment(horizontal="center")),
}


def _apply_page_setup(sheet: Worksheet) -> None:
    sheet.page_setup.paperSize = sheet.PAPERSIZE_A4
    sheet.page_setup.orientation = sheet.ORIENTATION_LANDSCAPE
    sheet.sheet_properties.pageSetUpPr.fitToPage = True
    sheet.page_setup.fitToWidth = 1
    sheet.page_setup.fitToHeight = 0
    sheet.page_margins = PageMargins(left=0.25, right=0.25, top=0.25, bottom=0.25, header=0.1, footer=0.1)


def render_page(sheet: Worksheet, page: PageLayout) -> None:
    _apply_page_setup(sheet)

    for (row, column), value in page.values.items():
        sheet.cell(row=row, column=column, value=value)

    for start_row, start_column, end_row, end_column in page.merges:
        sheet.merge_cells(
            start_row=start_row,
            start_column=start_column,
            end_row=end_row,
            end_column=end_column,
        )

    for (row, column), role in page.roles.items():
        font, alignment = ROLE_STYLES[role]
        cell = sheet.cell(row=row, column=column)
        cell.font = font
        cell.alignment = alignment

    header_fill = PatternFill("solid", fgColor=HEADER_SUNDAY_FILL)
    body_fill = PatternFill("solid", fgColor=BODY_SUNDAY_FILL)
    for column in page.sunday_columns:
        for row in HEADER_ROWS:
            sheet.cell(row=row, column=column).fill = header_fill
        for row in page.data_rows:
            sheet.cell(row=row, column=column).fill = body_fill

    for row in page.bordered_rows:
        for column in range(1, page.column_count + 1):
            sheet.cell(row=row, column=column).border = CELL_BORDER
    sheet.cell(row=2, column=2).border = DIAGONAL_BORDER

    for row, height in page.row_heights.items():
        sheet.row_dimensions[row].height = height
    for column, width in page.column_widths.items():
        sheet.column_dimensions[get_column_letter(column)].width = width


def build_workbook(ledger: MonthlyLedger, *, mark_symbol: str = DEFAULT_MARK_SYMBOL) -> Workbook:
    pages = build_pages(ledger, mark_symbol=mark_symbol)

    workbook = Workbook()
    workbook.remove(workbook.active)
    for page in pages:
        render_page(workbook.create_sheet(page.title), page)
    return workbook


def export_workbook_bytes(ledger: MonthlyLedger, *, mark_symbol: str = DEFAULT_MARK_SYMBOL) -> bytes:
    buffer = io.BytesIO()
    build_workbook(ledger, mark_symbol=mark_symbol).save(buffer)
    logger.info(
        "Exported %d students for %s/%s", len(ledger.students), ledger.month + 1, ledger.year
    )
    return buffer.getvalue()


def export_filename(ledger: MonthlyLedger) -> str:
    class_token = re.sub(r'[<>:"/\\|?*\s]+', "_", ledger.class_name.strip()).strip("._")
    return f"So_Cham_Com_{class_token}_Thang_{ledger.month + 1}_{ledger.year}.xlsx"


def save_workbook(
    ledger: MonthlyLedger,
    directory: str | Path,
    *,
    mark_symbol: str = DEFAULT_MARK_SYMBOL,
) -> Path:
    target = Path(directory) / export_filename(ledger)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_bytes(export_workbook_bytes(ledger, mark_symbol=mark_symbol))
    return target
