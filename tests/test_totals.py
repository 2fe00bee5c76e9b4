from meal_ledger.models import MealMarks, MonthlyLedger, StandardMeals, Student
from meal_ledger.services import calculate_day_totals, calculate_ledger_totals, calculate_student_totals


def test_student_totals_and_signed_shortfall():
    student = Student(
        id="a",
        name="Linh",
        meals={
            1: MealMarks(S=True, T1=True),
            2: MealMarks(S=True, T2=True),
            3: MealMarks(S=True),
        },
    )

    totals = calculate_student_totals(student, StandardMeals(S=2, T1=14, T2=12))

    assert (totals.S, totals.T1, totals.T2) == (3, 1, 1)
    assert (totals.unfulfilled_S, totals.unfulfilled_T1, totals.unfulfilled_T2) == (-1, 13, 11)
    assert totals.as_row() == (3, 1, 1, -1, 13, 11)


def test_totals_ignore_order_and_explicit_false_days():
    sparse = Student(id="a", name="Linh", meals={4: MealMarks(S=True), 1: MealMarks(T1=True)})
    dense = Student(
        id="a",
        name="Linh",
        meals={
            1: MealMarks(T1=True),
            2: MealMarks(),
            3: MealMarks(),
            4: MealMarks(S=True),
        },
    )
    quota = StandardMeals()

    assert calculate_student_totals(sparse, quota) == calculate_student_totals(dense, quota)


def test_day_totals_count_students_per_meal():
    ledger = MonthlyLedger(
        owner_id="x",
        month=0,
        year=2024,
        students=(
            Student(id="a", name="Linh", meals={1: MealMarks(S=True, T1=True)}),
            Student(id="b", name="Mai", meals={1: MealMarks(S=True)}),
            Student(id="c", name="Hoa", meals={}),
        ),
    )

    assert calculate_day_totals(ledger, 1, "S") == 2
    assert calculate_day_totals(ledger, 1, "T1") == 1
    assert calculate_day_totals(ledger, 1, "T2") == 0
    assert calculate_day_totals(ledger, 2, "S") == 0
    assert set(calculate_ledger_totals(ledger)) == {"a", "b", "c"}
