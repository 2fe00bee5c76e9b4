from meal_ledger.models import MealMarks, MonthlyLedger, StandardMeals, Student
from meal_ledger.services import seed_from_previous, sync_from_previous


def _previous() -> MonthlyLedger:
    return MonthlyLedger(
        owner_id="teacher-1",
        month=11,
        year=2023,
        school_name="TRƯỜNG PTDTBT TH&THCS SUỐI LỪ",
        class_name="8C1",
        teacher_name="Vũ Văn Hùng",
        location="Suối Lừ",
        standard_meals=StandardMeals(S=15, T1=15, T2=10),
        students=(Student(id="a", name="Linh", meals={4: MealMarks(S=True, T1=True)}),),
    )


def test_seed_copies_metadata_and_roster_without_marks():
    template = MonthlyLedger(owner_id="teacher-1", month=0, year=2024)

    seeded = seed_from_previous(_previous(), template)

    assert (seeded.month, seeded.year) == (0, 2024)
    assert seeded.students == (Student(id="a", name="Linh", meals={}),)
    assert seeded.school_name == "TRƯỜNG PTDTBT TH&THCS SUỐI LỪ"
    assert seeded.class_name == "8C1"
    assert seeded.teacher_name == "Vũ Văn Hùng"
    assert seeded.location == "Suối Lừ"
    assert seeded.standard_meals == StandardMeals(S=15, T1=15, T2=10)


def test_sync_renames_and_appends_without_touching_marks():
    current = MonthlyLedger(
        owner_id="teacher-1",
        month=0,
        year=2024,
        students=(Student(id="a", name="Linh", meals={1: MealMarks(S=True)}),),
    )
    previous = MonthlyLedger(
        owner_id="teacher-1",
        month=11,
        year=2023,
        students=(
            Student(id="a", name="Linh Nguyen", meals={9: MealMarks(T2=True)}),
            Student(id="b", name="Mai", meals={2: MealMarks(S=True)}),
        ),
    )

    result = sync_from_previous(current, previous)

    assert result.ledger.students == (
        Student(id="a", name="Linh Nguyen", meals={1: MealMarks(S=True)}),
        Student(id="b", name="Mai", meals={}),
    )
    assert result.added_ids == ("b",)
    assert result.renamed_ids == ("a",)
    assert result.changed


def test_sync_keeps_current_positions():
    current = MonthlyLedger(
        owner_id="x",
        month=0,
        year=2024,
        students=(Student(id="c", name="Hoa"), Student(id="a", name="Linh")),
    )
    previous = MonthlyLedger(
        owner_id="x", month=11, year=2023, students=(Student(id="a", name="Linh"), Student(id="c", name="Hoa"))
    )

    result = sync_from_previous(current, previous)

    assert [student.id for student in result.ledger.students] == ["c", "a"]
    assert not result.changed


def test_sync_without_previous_reports_missing_source():
    current = MonthlyLedger(owner_id="x", month=0, year=2024)

    result = sync_from_previous(current, None)

    assert result.source_found is False
    assert result.ledger is current
