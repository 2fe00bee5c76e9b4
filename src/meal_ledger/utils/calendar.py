from __future__ import annotations

import calendar as _calendar
from datetime import date

# Vietnamese convention: Sunday is "CN", Monday is "2" ... Saturday is "7".
WEEKDAY_LABELS: tuple[str, ...] = ("CN", "2", "3", "4", "5", "6", "7")

SUNDAY = "CN"
FRIDAY = "6"
SATURDAY = "7"

FIRST_PAGE_LAST_DAY = 16


class InvalidMonthError(ValueError):
    pass


def _validate_month(month: int) -> None:
    if not 0 <= int(month) <= 11:
        raise InvalidMonthError(f"Month must be between 0 and 11, got {month!r}.")


def days_in_month(month: int, year: int) -> int:
    """Number of days in a 0-indexed month."""
    _validate_month(month)
    return _calendar.monthrange(int(year), int(month) + 1)[1]


def weekday_index(day: int, month: int, year: int) -> int:
    """Return 0 for Sunday through 6 for Saturday."""
    _validate_month(month)
    return (date(int(year), int(month) + 1, int(day)).weekday() + 1) % 7


def weekday_label(day: int, month: int, year: int) -> str:
    return WEEKDAY_LABELS[weekday_index(day, month, year)]


def is_sunday(day: int, month: int, year: int) -> bool:
    return weekday_label(day, month, year) == SUNDAY


def first_half_days() -> list[int]:
    return list(range(1, FIRST_PAGE_LAST_DAY + 1))


def second_half_days(month: int, year: int) -> list[int]:
    return list(range(FIRST_PAGE_LAST_DAY + 1, days_in_month(month, year) + 1))


def shift_month(month: int, year: int, delta: int) -> tuple[int, int]:
    """Move a 0-indexed (month, year) pair by ``delta`` months."""
    _validate_month(month)
    total = int(year) * 12 + int(month) + int(delta)
    return total % 12, total // 12
