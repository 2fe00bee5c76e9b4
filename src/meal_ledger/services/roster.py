from __future__ import annotations

from typing import Iterable

from meal_ledger.models import NEW_STUDENT_NAME, MonthlyLedger, Student


def add_student(ledger: MonthlyLedger, name: str = NEW_STUDENT_NAME) -> MonthlyLedger:
    return ledger.with_students([*ledger.students, Student.create(name)])


def remove_student(ledger: MonthlyLedger, student_id: str) -> MonthlyLedger:
    return ledger.with_students(student for student in ledger.students if student.id != student_id)


def rename_student(ledger: MonthlyLedger, student_id: str, name: str) -> MonthlyLedger:
    return ledger.with_students(
        Student(id=student.id, name=name, meals=dict(student.meals)) if student.id == student_id else student
        for student in ledger.students
    )


def clear_roster(ledger: MonthlyLedger) -> MonthlyLedger:
    """Drop every student, names and marks alike."""
    return ledger.with_students(())


def replace_roster(ledger: MonthlyLedger, names: Iterable[str]) -> MonthlyLedger:
    """Replace the roster with fresh students, discarding all existing marks."""
    return ledger.with_students(Student.create(name) for name in names)
