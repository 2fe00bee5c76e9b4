from .edit_operations import (
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
from .rollover import SyncResult, seed_from_previous, sync_from_previous
from .roster import add_student, clear_roster, remove_student, rename_student, replace_roster
from .roster_import import AmbiguousImportError, RosterImportError, extract_student_names, import_student_names
from .totals import StudentTotals, calculate_day_totals, calculate_ledger_totals, calculate_student_totals

__all__ = [
	"AmbiguousImportError",
	"RosterImportError",
	"StudentTotals",
	"SyncResult",
	"add_student",
	"auto_fill_month",
	"calculate_day_totals",
	"calculate_ledger_totals",
	"calculate_student_totals",
	"clear_column",
	"clear_day",
	"clear_month",
	"clear_roster",
	"copy_column",
	"copy_row",
	"extract_student_names",
	"fill_column",
	"import_student_names",
	"paste_column",
	"paste_row",
	"paste_row_to_all",
	"remove_student",
	"rename_student",
	"replace_roster",
	"seed_from_previous",
	"sync_from_previous",
	"toggle_meal",
]
