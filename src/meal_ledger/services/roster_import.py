from __future__ import annotations

import io
import logging
import zipfile
from pathlib import Path
from typing import Any, BinaryIO, Sequence

from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException

logger = logging.getLogger(__name__)

HEADER_KEYWORDS = ("họ và tên", "họ tên", "tên học sinh", "học sinh", "tên")
SKIP_KEYWORDS = ("stt", "tổng", "cộng", "lớp", "trường", "giáo viên", "năm học", "tháng")

HEADER_SCAN_ROWS = 20
COLUMN_SCAN_ROWS = 50
MIN_NAME_LENGTH = 3


class RosterImportError(RuntimeError):
    """Raised when a spreadsheet cannot be read as a roster."""


class AmbiguousImportError(RosterImportError):
    """Raised when no name column or no usable names can be found."""


Rows = Sequence[Sequence[Any]]


def _cell(row: Sequence[Any] | None, index: int) -> Any:
    if not row or index >= len(row):
        return None
    return row[index]


def _looks_numeric(text: str) -> bool:
    try:
        float(text.strip())
    except ValueError:
        return False
    return True


def _find_header_column(rows: Rows) -> tuple[int, int] | None:
    for row_index, row in enumerate(rows[:HEADER_SCAN_ROWS]):
        for column_index, cell in enumerate(row or ()):
            if isinstance(cell, str) and any(keyword in cell.lower() for keyword in HEADER_KEYWORDS):
                return column_index, row_index + 1
    return None


def _guess_name_column(rows: Rows) -> tuple[int, int] | None:
    counts: dict[int, int] = {}
    for row in rows[:COLUMN_SCAN_ROWS]:
        for column_index, cell in enumerate(row or ()):
            if isinstance(cell, str) and len(cell.strip()) > 3 and not _looks_numeric(cell):
                counts[column_index] = counts.get(column_index, 0) + 1

    if not counts:
        return None

    best_count = max(counts.values())
    column_index = min(index for index, count in counts.items() if count == best_count)
    start_row = next(
        (index for index, row in enumerate(rows) if isinstance(_cell(row, column_index), str)),
        0,
    )
    return column_index, start_row


def _accept_name(raw: Any) -> str | None:
    if not isinstance(raw, str):
        return None
    name = raw.strip()
    if len(name) < MIN_NAME_LENGTH:
        return None
    lowered = name.lower()
    if any(keyword in lowered for keyword in SKIP_KEYWORDS):
        return None
    return name


def extract_student_names(rows: Rows) -> list[str]:
    """Best-effort list of student names from raw spreadsheet rows.

    A header cell such as "Họ và tên" in the first rows marks the name column;
    without one, the column holding the most name-like strings is used.
    Raises AmbiguousImportError if nothing usable is found.
    """
    if not rows:
        raise AmbiguousImportError("File Excel không có dữ liệu.")

    located = _find_header_column(rows) or _guess_name_column(rows)
    if located is None:
        raise AmbiguousImportError(
            'Không tìm thấy cột chứa tên học sinh. Vui lòng đảm bảo file có cột "Họ và tên".'
        )

    column_index, start_row = located
    logger.debug("Reading names from column %d starting at row %d", column_index, start_row)

    names: list[str] = []
    for row_number, row in enumerate(rows[start_row:], start=start_row):
        raw = _cell(row, column_index)
        name = _accept_name(raw)
        if name is None:
            if raw is not None:
                logger.debug("Skipping row %d: %r is not a student name", row_number, raw)
            continue
        names.append(name)

    if not names:
        raise AmbiguousImportError("Không tìm thấy danh sách học sinh hợp lệ trong file.")
    return names


def read_workbook_rows(source: str | Path | bytes | BinaryIO) -> list[list[Any]]:
    """Rows of the first worksheet that contains any data."""
    if isinstance(source, (bytes, bytearray)):
        source = io.BytesIO(source)

    try:
        workbook = load_workbook(source, read_only=True, data_only=True)
    except (OSError, ValueError, KeyError, InvalidFileException, zipfile.BadZipFile) as exc:
        raise RosterImportError(f"Lỗi khi đọc file Excel: {exc}") from exc

    try:
        for worksheet in workbook.worksheets:
            rows = [list(row) for row in worksheet.iter_rows(values_only=True)]
            if any(any(cell is not None for cell in row) for row in rows):
                return rows
    finally:
        workbook.close()
    return []


def import_student_names(source: str | Path | bytes | BinaryIO) -> list[str]:
    return extract_student_names(read_workbook_rows(source))
