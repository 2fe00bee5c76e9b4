from .calendar import (
    WEEKDAY_LABELS,
    InvalidMonthError,
    days_in_month,
    first_half_days,
    is_sunday,
    second_half_days,
    shift_month,
    weekday_label,
)
from .time import coerce_datetime, format_relative_time, utcnow

__all__ = [
    "WEEKDAY_LABELS",
    "InvalidMonthError",
    "days_in_month",
    "first_half_days",
    "second_half_days",
    "is_sunday",
    "shift_month",
    "weekday_label",
    "coerce_datetime",
    "format_relative_time",
    "utcnow",
]
