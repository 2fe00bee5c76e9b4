from __future__ import annotations

from typing import Mapping, Sequence

from meal_ledger.models import MealMarks, MonthlyLedger, validate_meal
from meal_ledger.utils.calendar import FRIDAY, SATURDAY, SUNDAY, weekday_label

RowClipboard = Mapping[int, MealMarks]
ColumnClipboard = Sequence[bool]


def _set_meal(ledger: MonthlyLedger, day: int, meal: str, values: Sequence[bool]) -> MonthlyLedger:
    day = ledger.validate_day(day)
    validate_meal(meal)
    return ledger.with_students(
        student.with_day(day, student.marks_for(day).with_meal(meal, value))
        for student, value in zip(ledger.students, values)
    )


def toggle_meal(ledger: MonthlyLedger, student_id: str, day: int, meal: str) -> MonthlyLedger:
    day = ledger.validate_day(day)
    validate_meal(meal)
    return ledger.with_students(
        student.with_day(day, student.marks_for(day).toggled(meal)) if student.id == student_id else student
        for student in ledger.students
    )


def copy_row(ledger: MonthlyLedger, student_id: str) -> dict[int, MealMarks] | None:
    student = ledger.find_student(student_id)
    if student is None:
        return None
    return dict(student.meals)


def paste_row(ledger: MonthlyLedger, student_id: str, clipboard: RowClipboard) -> MonthlyLedger:
    return ledger.with_students(
        student.with_meals(clipboard) if student.id == student_id else student
        for student in ledger.students
    )


def paste_row_to_all(ledger: MonthlyLedger, clipboard: RowClipboard) -> MonthlyLedger:
    return ledger.with_students(student.with_meals(clipboard) for student in ledger.students)


def copy_column(ledger: MonthlyLedger, day: int, meal: str) -> list[bool]:
    day = ledger.validate_day(day)
    validate_meal(meal)
    return [student.marks_for(day).get(meal) for student in ledger.students]


def paste_column(ledger: MonthlyLedger, day: int, meal: str, clipboard: ColumnClipboard) -> MonthlyLedger:
    """Apply a copied column by position; missing positions read as False."""
    values = [bool(clipboard[index]) if index < len(clipboard) else False for index in range(len(ledger.students))]
    return _set_meal(ledger, day, meal, values)


def fill_column(ledger: MonthlyLedger, day: int, meal: str) -> MonthlyLedger:
    return _set_meal(ledger, day, meal, [True] * len(ledger.students))


def clear_column(ledger: MonthlyLedger, day: int, meal: str) -> MonthlyLedger:
    return _set_meal(ledger, day, meal, [False] * len(ledger.students))


def clear_day(ledger: MonthlyLedger, day: int) -> MonthlyLedger:
    day = ledger.validate_day(day)
    return ledger.with_students(student.without_day(day) for student in ledger.students)


def clear_month(ledger: MonthlyLedger) -> MonthlyLedger:
    return ledger.with_students(student.with_meals({}) for student in ledger.students)


def auto_fill_month(ledger: MonthlyLedger) -> MonthlyLedger:
    """Mark weekday meals for everyone: no dinner on Fridays, weekends untouched."""
    pattern: dict[int, MealMarks] = {}
    for day in range(1, ledger.days_in_month + 1):
        label = weekday_label(day, ledger.month, ledger.year)
        if label in (SATURDAY, SUNDAY):
            continue
        pattern[day] = MealMarks(S=True, T1=True, T2=label != FRIDAY)

    return ledger.with_students(
        student.with_meals({**student.meals, **pattern}) for student in ledger.students
    )
