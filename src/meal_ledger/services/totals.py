from __future__ import annotations

from dataclasses import dataclass

from meal_ledger.models import MEALS, MonthlyLedger, StandardMeals, Student


@dataclass(frozen=True, slots=True)
class StudentTotals:
    S: int
    T1: int
    T2: int
    unfulfilled_S: int
    unfulfilled_T1: int
    unfulfilled_T2: int

    def as_row(self) -> tuple[int, int, int, int, int, int]:
        return (self.S, self.T1, self.T2, self.unfulfilled_S, self.unfulfilled_T1, self.unfulfilled_T2)


def calculate_student_totals(student: Student, standard_meals: StandardMeals) -> StudentTotals:
    counts = {meal: 0 for meal in MEALS}
    for marks in student.meals.values():
        for meal in MEALS:
            if marks.get(meal):
                counts[meal] += 1

    return StudentTotals(
        S=counts["S"],
        T1=counts["T1"],
        T2=counts["T2"],
        unfulfilled_S=standard_meals.S - counts["S"],
        unfulfilled_T1=standard_meals.T1 - counts["T1"],
        unfulfilled_T2=standard_meals.T2 - counts["T2"],
    )


def calculate_day_totals(ledger: MonthlyLedger, day: int, meal: str) -> int:
    """Headcount of students marked for ``meal`` on ``day``."""
    return sum(1 for student in ledger.students if student.marks_for(day).get(meal))


def calculate_ledger_totals(ledger: MonthlyLedger) -> dict[str, StudentTotals]:
    return {
        student.id: calculate_student_totals(student, ledger.standard_meals)
        for student in ledger.students
    }
