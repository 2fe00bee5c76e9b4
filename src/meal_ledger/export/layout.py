from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from meal_ledger.models import MEAL_LABELS, MEALS, MonthlyLedger
from meal_ledger.services.totals import calculate_day_totals, calculate_student_totals
from meal_ledger.utils.calendar import first_half_days, second_half_days, weekday_label, SUNDAY

MARK_SYMBOLS = ("+", "x")
DEFAULT_MARK_SYMBOL = "+"

FIRST_PAGE_TITLE = "Trang 1"
SECOND_PAGE_TITLE = "Trang 2"

LEADING_COLUMNS = 2
SUMMARY_COLUMNS = 6
HEADER_ROWS = (2, 3, 4)
FIRST_DATA_ROW = 5

DAY_HEADER_TEXT = "                Ngày\n\nThứ"
SUMMARY_HEADER_TEXT = "Số ngày ăn trong tháng"
REPORTED_HEADER_TEXT = "Số ngày báo ăn"
NOT_REPORTED_HEADER_TEXT = "Số ngày không báo ăn"
TOTALS_LABEL = "CỘNG"
ROLE_LABEL = "GIÁO VIÊN CHỦ NHIỆM"

NUMBER_WIDTH = 5
NAME_WIDTH = 25
DAY_COLUMN_WIDTH = 4
SUMMARY_COLUMN_WIDTH = 6

TITLE_HEIGHT = 30
HEADER_HEIGHT = 25
DATA_HEIGHT = 20
TOTALS_HEIGHT = 25

# Cell roles understood by the workbook renderer.
ROLE_TITLE = "title"
ROLE_HEADER = "header"
ROLE_DAY_HEADER = "day_header"
ROLE_BODY = "body"
ROLE_NAME = "name"
ROLE_TOTAL = "total"
ROLE_QUOTA = "quota"
ROLE_SIGNATURE_DATE = "signature_date"
ROLE_SIGNATURE = "signature"


class InvalidMarkSymbolError(ValueError):
    pass


@dataclass(slots=True)
class PageLayout:
    """A fully positioned sheet: values, merges, roles and dimensions, 1-based."""

    title: str
    days: list[int]
    include_summary: bool
    column_count: int
    totals_row: int
    values: dict[tuple[int, int], Any] = field(default_factory=dict)
    roles: dict[tuple[int, int], str] = field(default_factory=dict)
    merges: list[tuple[int, int, int, int]] = field(default_factory=list)
    sunday_columns: list[int] = field(default_factory=list)
    row_heights: dict[int, int] = field(default_factory=dict)
    column_widths: dict[int, int] = field(default_factory=dict)

    @property
    def bordered_rows(self) -> range:
        return range(HEADER_ROWS[0], self.totals_row + 1)

    @property
    def data_rows(self) -> range:
        return range(FIRST_DATA_ROW, self.totals_row)

    def put(self, row: int, column: int, value: Any, role: str) -> None:
        if value is not None:
            self.values[(row, column)] = value
        self.roles[(row, column)] = role

    def value(self, row: int, column: int) -> Any:
        return self.values.get((row, column))

    def row_values(self, row: int) -> list[Any]:
        return [self.value(row, column) for column in range(1, self.column_count + 1)]


def day_column(index: int) -> int:
    """First sub-column of the ``index``-th day on a page."""
    return LEADING_COLUMNS + 1 + index * len(MEALS)


def title_text(ledger: MonthlyLedger, month: int, year: int) -> str:
    return f"SỔ CHẤM CƠM LỚP: {ledger.class_name} THÁNG {month + 1}/{year}"


def quota_text(ledger: MonthlyLedger) -> str:
    meals = ledger.standard_meals
    return f"Định mức ăn: S: {meals.S}, T: {meals.T1}, T: {meals.T2}"


def signature_text(ledger: MonthlyLedger) -> str:
    signed = ledger.signature_date
    return f"{ledger.location}, ngày {signed.day} tháng {signed.month} năm {signed.year}"


def _build_page(
    ledger: MonthlyLedger,
    month: int,
    year: int,
    title: str,
    days: list[int],
    include_summary: bool,
    mark_symbol: str,
) -> PageLayout:
    day_columns = len(days) * len(MEALS)
    column_count = LEADING_COLUMNS + day_columns + (SUMMARY_COLUMNS if include_summary else 0)
    summary_start = LEADING_COLUMNS + day_columns + 1
    totals_row = FIRST_DATA_ROW + len(ledger.students)

    page = PageLayout(
        title=title,
        days=list(days),
        include_summary=include_summary,
        column_count=column_count,
        totals_row=totals_row,
    )

    page.put(1, 1, title_text(ledger, month, year), ROLE_TITLE)
    page.merges.append((1, 1, 1, column_count))
    page.row_heights[1] = TITLE_HEIGHT

    page.put(2, 1, "STT", ROLE_HEADER)
    page.put(2, 2, DAY_HEADER_TEXT, ROLE_DAY_HEADER)
    page.put(4, 1, "Họ và tên", ROLE_HEADER)
    page.merges.extend([(2, 1, 3, 1), (2, 2, 3, 2), (4, 1, 4, 2)])

    for index, day in enumerate(days):
        start = day_column(index)
        page.put(2, start, str(day), ROLE_HEADER)
        page.put(3, start, weekday_label(day, month, year), ROLE_HEADER)
        for offset, meal in enumerate(MEALS):
            page.put(4, start + offset, MEAL_LABELS[meal], ROLE_HEADER)
        page.merges.extend([(2, start, 2, start + 2), (3, start, 3, start + 2)])
        if weekday_label(day, month, year) == SUNDAY:
            page.sunday_columns.extend(range(start, start + len(MEALS)))

    if include_summary:
        page.put(2, summary_start, SUMMARY_HEADER_TEXT, ROLE_HEADER)
        page.put(3, summary_start, REPORTED_HEADER_TEXT, ROLE_HEADER)
        page.put(3, summary_start + 3, NOT_REPORTED_HEADER_TEXT, ROLE_HEADER)
        for offset, meal in enumerate(MEALS * 2):
            page.put(4, summary_start + offset, MEAL_LABELS[meal], ROLE_HEADER)
        page.merges.extend(
            [
                (2, summary_start, 2, summary_start + 5),
                (3, summary_start, 3, summary_start + 2),
                (3, summary_start + 3, 3, summary_start + 5),
            ]
        )

    for row in HEADER_ROWS:
        page.row_heights[row] = HEADER_HEIGHT

    for position, student in enumerate(ledger.students):
        row = FIRST_DATA_ROW + position
        page.put(row, 1, position + 1, ROLE_BODY)
        page.put(row, 2, student.name, ROLE_NAME)
        for index, day in enumerate(days):
            marks = student.marks_for(day)
            for offset, meal in enumerate(MEALS):
                page.put(row, day_column(index) + offset, mark_symbol if marks.get(meal) else None, ROLE_BODY)
        if include_summary:
            totals = calculate_student_totals(student, ledger.standard_meals)
            for offset, amount in enumerate(totals.as_row()):
                page.put(row, summary_start + offset, amount, ROLE_BODY)
        page.row_heights[row] = DATA_HEIGHT

    page.put(totals_row, 1, TOTALS_LABEL, ROLE_TOTAL)
    page.merges.append((totals_row, 1, totals_row, 2))
    for index, day in enumerate(days):
        for offset, meal in enumerate(MEALS):
            headcount = calculate_day_totals(ledger, day, meal)
            page.put(totals_row, day_column(index) + offset, str(headcount), ROLE_TOTAL)
    if include_summary:
        for offset in range(SUMMARY_COLUMNS):
            page.put(totals_row, summary_start + offset, None, ROLE_TOTAL)
    page.row_heights[totals_row] = TOTALS_HEIGHT

    if include_summary:
        _add_signature_block(page, ledger)

    page.column_widths[1] = NUMBER_WIDTH
    page.column_widths[2] = NAME_WIDTH
    for column in range(LEADING_COLUMNS + 1, column_count + 1):
        page.column_widths[column] = DAY_COLUMN_WIDTH
    if include_summary:
        for column in range(summary_start, column_count + 1):
            page.column_widths[column] = SUMMARY_COLUMN_WIDTH

    return page


def _add_signature_block(page: PageLayout, ledger: MonthlyLedger) -> None:
    footer_row = page.totals_row + 2
    last_column = page.column_count
    first_column = last_column - 6

    page.put(footer_row, 2, quota_text(ledger), ROLE_QUOTA)

    page.put(footer_row, first_column, signature_text(ledger), ROLE_SIGNATURE_DATE)
    page.merges.append((footer_row, first_column, footer_row, last_column))

    role_row = footer_row + 1
    page.put(role_row, first_column, ROLE_LABEL, ROLE_SIGNATURE)
    page.merges.append((role_row, first_column, role_row, last_column))

    name_row = role_row + 4
    page.put(name_row, first_column, ledger.teacher_name, ROLE_SIGNATURE)
    page.merges.append((name_row, first_column, name_row, last_column))


def build_pages(
    ledger: MonthlyLedger,
    month: int | None = None,
    year: int | None = None,
    *,
    mark_symbol: str = DEFAULT_MARK_SYMBOL,
) -> tuple[PageLayout, PageLayout]:
    """Lay out the two half-month pages of the paper attendance book."""
    if mark_symbol not in MARK_SYMBOLS:
        raise InvalidMarkSymbolError(f"Mark symbol must be one of {MARK_SYMBOLS}, got {mark_symbol!r}.")

    month = ledger.month if month is None else month
    year = ledger.year if year is None else year

    first = _build_page(ledger, month, year, FIRST_PAGE_TITLE, first_half_days(), False, mark_symbol)
    second = _build_page(
        ledger, month, year, SECOND_PAGE_TITLE, second_half_days(month, year), True, mark_symbol
    )
    return first, second
