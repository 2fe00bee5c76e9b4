from .ledger import (
    MEAL_LABELS,
    MEALS,
    NEW_STUDENT_NAME,
    NO_MEALS,
    DayMarks,
    InvalidDayError,
    InvalidMealError,
    Meal,
    MealMarks,
    MonthlyLedger,
    SignatureDate,
    StandardMeals,
    Student,
    generate_student_id,
    validate_meal,
)

__all__ = [
    "MEAL_LABELS",
    "MEALS",
    "NEW_STUDENT_NAME",
    "NO_MEALS",
    "DayMarks",
    "InvalidDayError",
    "InvalidMealError",
    "Meal",
    "MealMarks",
    "MonthlyLedger",
    "SignatureDate",
    "StandardMeals",
    "Student",
    "generate_student_id",
    "validate_meal",
]
