from __future__ import annotations

import secrets
import string
from dataclasses import dataclass, field, replace
from datetime import date, datetime
from typing import Any, Iterable, Literal, Mapping, Optional

from meal_ledger.utils.calendar import days_in_month
from meal_ledger.utils.time import coerce_datetime

Meal = Literal["S", "T1", "T2"]

MEALS: tuple[str, ...] = ("S", "T1", "T2")

# S = Sáng (breakfast), T1 = Trưa (lunch), T2 = Tối (dinner)
MEAL_LABELS = {
    "S": "S",
    "T1": "T",
    "T2": "T",
}

NEW_STUDENT_NAME = "Học sinh mới"

_ID_ALPHABET = string.digits + string.ascii_lowercase
_ID_LENGTH = 9


class InvalidMealError(ValueError):
    """Raised for a meal code other than S, T1 or T2."""


class InvalidDayError(ValueError):
    """Raised for a day that does not exist in the ledger's month."""


def generate_student_id() -> str:
    return "".join(secrets.choice(_ID_ALPHABET) for _ in range(_ID_LENGTH))


def validate_meal(meal: str) -> str:
    if meal not in MEALS:
        raise InvalidMealError(f"Unknown meal {meal!r}; expected one of {', '.join(MEALS)}.")
    return meal


@dataclass(frozen=True, slots=True)
class MealMarks:
    """Marks for one student on one day."""

    S: bool = False
    T1: bool = False
    T2: bool = False

    def get(self, meal: str) -> bool:
        return bool(getattr(self, validate_meal(meal)))

    def with_meal(self, meal: str, value: bool) -> "MealMarks":
        return replace(self, **{validate_meal(meal): bool(value)})

    def toggled(self, meal: str) -> "MealMarks":
        return self.with_meal(meal, not self.get(meal))

    def to_dict(self) -> dict[str, bool]:
        return {"S": self.S, "T1": self.T1, "T2": self.T2}

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any] | None) -> "MealMarks":
        payload = payload or {}
        return cls(
            S=bool(payload.get("S", False)),
            T1=bool(payload.get("T1", False)),
            T2=bool(payload.get("T2", False)),
        )


NO_MEALS = MealMarks()

# Sparse: a missing day reads as NO_MEALS.
DayMarks = Mapping[int, MealMarks]


@dataclass(frozen=True, slots=True)
class Student:
    id: str
    name: str
    meals: DayMarks = field(default_factory=dict)

    def marks_for(self, day: int) -> MealMarks:
        return self.meals.get(int(day), NO_MEALS)

    def has_day(self, day: int) -> bool:
        return int(day) in self.meals

    def with_meals(self, meals: Mapping[int, MealMarks]) -> "Student":
        return replace(self, meals=dict(meals))

    def with_day(self, day: int, marks: MealMarks) -> "Student":
        meals = dict(self.meals)
        meals[int(day)] = marks
        return replace(self, meals=meals)

    def without_day(self, day: int) -> "Student":
        if int(day) not in self.meals:
            return self
        meals = dict(self.meals)
        del meals[int(day)]
        return replace(self, meals=meals)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "meals": {str(day): marks.to_dict() for day, marks in sorted(self.meals.items())},
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "Student":
        raw_meals = payload.get("meals") or {}
        meals = {int(day): MealMarks.from_dict(marks) for day, marks in raw_meals.items()}
        return cls(
            id=str(payload.get("id") or generate_student_id()),
            name=str(payload.get("name") or ""),
            meals=meals,
        )

    @classmethod
    def create(cls, name: str = NEW_STUDENT_NAME) -> "Student":
        return cls(id=generate_student_id(), name=name, meals={})


@dataclass(frozen=True, slots=True)
class StandardMeals:
    """Monthly quota per meal type."""

    S: int = 14
    T1: int = 14
    T2: int = 12

    def get(self, meal: str) -> int:
        return int(getattr(self, validate_meal(meal)))

    def to_dict(self) -> dict[str, int]:
        return {"S": self.S, "T1": self.T1, "T2": self.T2}

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any] | None, default: "StandardMeals | None" = None) -> "StandardMeals":
        base = default or cls()
        if not payload:
            return base
        return cls(
            S=int(payload.get("S", base.S)),
            T1=int(payload.get("T1", base.T1)),
            T2=int(payload.get("T2", base.T2)),
        )


@dataclass(frozen=True, slots=True)
class SignatureDate:
    day: int
    month: int  # 1-based, as written on the form
    year: int

    @classmethod
    def today(cls) -> "SignatureDate":
        current = date.today()
        return cls(day=current.day, month=current.month, year=current.year)


@dataclass(frozen=True, slots=True)
class MonthlyLedger:
    owner_id: str
    month: int  # 0-indexed
    year: int
    school_name: str = ""
    class_name: str = ""
    teacher_name: str = ""
    location: str = ""
    students: tuple[Student, ...] = ()
    standard_meals: StandardMeals = field(default_factory=StandardMeals)
    signature_date: SignatureDate = field(default_factory=SignatureDate.today)
    updated_at: Optional[datetime] = None

    @property
    def key(self) -> tuple[str, int, int]:
        return (self.owner_id, self.month, self.year)

    @property
    def days_in_month(self) -> int:
        return days_in_month(self.month, self.year)

    def validate_day(self, day: int) -> int:
        if not 1 <= int(day) <= self.days_in_month:
            raise InvalidDayError(
                f"Day {day} is outside {self.month + 1}/{self.year} (1-{self.days_in_month})."
            )
        return int(day)

    def find_student(self, student_id: str) -> Student | None:
        return next((student for student in self.students if student.id == student_id), None)

    def with_students(self, students: Iterable[Student]) -> "MonthlyLedger":
        return replace(self, students=tuple(students))

    def with_details(self, **changes: Any) -> "MonthlyLedger":
        return replace(self, **changes)

    def to_record(self) -> dict[str, Any]:
        return {
            "owner_id": self.owner_id,
            "month": self.month,
            "year": self.year,
            "class_name": self.class_name,
            "teacher_name": self.teacher_name,
            "school_name": self.school_name,
            "location": self.location,
            "students": [student.to_dict() for student in self.students],
            "standard_meals": self.standard_meals.to_dict(),
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }

    @classmethod
    def from_record(
        cls,
        record: Mapping[str, Any],
        *,
        defaults: "MonthlyLedger | None" = None,
    ) -> "MonthlyLedger":
        """Build a ledger from a storage record, filling blanks from ``defaults``."""
        base = defaults or cls(owner_id=str(record.get("owner_id", "")), month=0, year=1970)
        updated_raw = record.get("updated_at")
        return cls(
            owner_id=str(record.get("owner_id") or base.owner_id),
            month=int(record["month"]),
            year=int(record["year"]),
            school_name=record.get("school_name") or base.school_name,
            class_name=record.get("class_name") or base.class_name,
            teacher_name=record.get("teacher_name") or base.teacher_name,
            location=record.get("location") or base.location,
            students=tuple(Student.from_dict(item) for item in (record.get("students") or [])),
            standard_meals=StandardMeals.from_dict(record.get("standard_meals"), base.standard_meals),
            signature_date=base.signature_date,
            updated_at=coerce_datetime(updated_raw) if updated_raw else None,
        )
