import pytest

from meal_ledger.models import InvalidDayError, InvalidMealError, MealMarks, MonthlyLedger, Student
from meal_ledger.services import (
    auto_fill_month,
    clear_column,
    clear_day,
    clear_month,
    copy_column,
    copy_row,
    fill_column,
    paste_column,
    paste_row,
    paste_row_to_all,
    toggle_meal,
)


def _ledger(*students: Student, month: int = 0, year: int = 2024) -> MonthlyLedger:
    return MonthlyLedger(owner_id="teacher-1", month=month, year=year, students=tuple(students))


def _roster() -> MonthlyLedger:
    return _ledger(
        Student(id="a", name="Linh", meals={1: MealMarks(S=True), 2: MealMarks(T1=True, T2=True)}),
        Student(id="b", name="Mai", meals={}),
        Student(id="c", name="Hoa", meals={1: MealMarks(S=True, T1=True, T2=True)}),
    )


def _column(ledger: MonthlyLedger, day: int, meal: str) -> list[bool]:
    return [student.marks_for(day).get(meal) for student in ledger.students]


def test_toggle_creates_entry_and_is_an_involution():
    ledger = _roster()

    once = toggle_meal(ledger, "b", 5, "T1")
    assert once.find_student("b").marks_for(5) == MealMarks(T1=True)

    twice = toggle_meal(once, "b", 5, "T1")
    assert twice.find_student("b").marks_for(5).get("T1") is False

    for student_id in ("a", "c"):
        for meal in ("S", "T1", "T2"):
            original = ledger.find_student(student_id).marks_for(1).get(meal)
            round_trip = toggle_meal(toggle_meal(ledger, student_id, 1, meal), student_id, 1, meal)
            assert round_trip.find_student(student_id).marks_for(1).get(meal) is original


def test_toggle_leaves_source_snapshot_untouched():
    ledger = _roster()
    toggle_meal(ledger, "a", 1, "S")
    assert ledger.find_student("a").marks_for(1).S is True


def test_toggle_rejects_unknown_meal_and_day():
    ledger = _roster()
    with pytest.raises(InvalidMealError):
        toggle_meal(ledger, "a", 1, "breakfast")
    with pytest.raises(InvalidDayError):
        toggle_meal(ledger, "a", 32, "S")


def test_fill_then_clear_column_is_all_false():
    ledger = _roster()

    filled = fill_column(ledger, 1, "T1")
    assert _column(filled, 1, "T1") == [True, True, True]
    assert filled.find_student("a").marks_for(1).S is True

    cleared = clear_column(filled, 1, "T1")
    assert _column(cleared, 1, "T1") == [False, False, False]
    assert _column(cleared, 1, "S") == _column(ledger, 1, "S")


def test_copy_then_paste_column_is_a_no_op():
    ledger = _roster()
    clipboard = copy_column(ledger, 1, "S")

    pasted = paste_column(ledger, 1, "S", clipboard)

    assert _column(pasted, 1, "S") == _column(ledger, 1, "S")
    assert [s.marks_for(1) for s in pasted.students] == [s.marks_for(1) for s in ledger.students]


def test_paste_column_is_positional_and_pads_with_false():
    ledger = _roster()
    clipboard = [True]

    pasted = paste_column(ledger, 3, "T2", clipboard)

    assert _column(pasted, 3, "T2") == [True, False, False]


def test_paste_column_after_reorder_applies_by_position():
    ledger = _roster()
    clipboard = copy_column(ledger, 1, "S")  # [True, False, True]
    reordered = ledger.with_students(reversed(ledger.students))  # c, b, a

    pasted = paste_column(reordered, 2, "S", clipboard)

    assert [s.id for s in pasted.students] == ["c", "b", "a"]
    assert _column(pasted, 2, "S") == [True, False, True]


def test_paste_row_replaces_all_marks():
    ledger = _roster()
    clipboard = copy_row(ledger, "a")

    pasted = paste_row(ledger, "c", clipboard)

    assert pasted.find_student("c").meals == ledger.find_student("a").meals
    assert pasted.find_student("b").meals == {}
    assert copy_row(ledger, "missing") is None


def test_paste_row_to_all_copies_into_every_student():
    ledger = _roster()
    clipboard = copy_row(ledger, "a")

    pasted = paste_row_to_all(ledger, clipboard)

    assert all(student.meals == clipboard for student in pasted.students)
    assert [student.id for student in pasted.students] == ["a", "b", "c"]


def test_clear_day_removes_entries():
    ledger = _roster()

    cleared = clear_day(ledger, 1)

    assert all(not student.has_day(1) for student in cleared.students)
    assert cleared.find_student("a").has_day(2)


def test_clear_month_keeps_names_and_order():
    cleared = clear_month(_roster())

    assert [student.name for student in cleared.students] == ["Linh", "Mai", "Hoa"]
    assert all(student.meals == {} for student in cleared.students)


def test_auto_fill_follows_week_pattern():
    # January 2024: the 5th is a Friday, 6th/7th the weekend, 8th a Monday.
    ledger = _ledger(Student(id="a", name="Linh", meals={8: MealMarks(S=False, T1=False, T2=False)}))

    filled = auto_fill_month(ledger).find_student("a")

    assert filled.marks_for(5) == MealMarks(S=True, T1=True, T2=False)
    assert not filled.has_day(6)
    assert not filled.has_day(7)
    assert filled.marks_for(8) == MealMarks(S=True, T1=True, T2=True)
    assert filled.marks_for(31) == MealMarks(S=True, T1=True, T2=True)
    assert len(filled.meals) == 23


def test_auto_fill_overwrites_existing_weekday_marks_only():
    ledger = _ledger(Student(id="a", name="Linh", meals={5: MealMarks(T2=True), 6: MealMarks(T2=True)}))

    filled = auto_fill_month(ledger).find_student("a")

    assert filled.marks_for(5).T2 is False
    assert filled.marks_for(6) == MealMarks(T2=True)
