from __future__ import annotations

import functools
import logging
import threading
from dataclasses import replace
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, BinaryIO, Callable, Iterable, Mapping, Protocol

from meal_ledger.config.settings import Settings, current_settings, update_user_settings
from meal_ledger.data.ledger_store import LedgerStore, StorageFailure
from meal_ledger.export import MARK_SYMBOLS, InvalidMarkSymbolError, export_filename, export_workbook_bytes
from meal_ledger.models import MealMarks, MonthlyLedger, SignatureDate, StandardMeals
from meal_ledger.services import edit_operations, roster
from meal_ledger.services.rollover import SyncResult, seed_from_previous, sync_from_previous
from meal_ledger.services.roster_import import import_student_names
from meal_ledger.services.totals import StudentTotals, calculate_day_totals, calculate_student_totals
from meal_ledger.utils.calendar import shift_month
from meal_ledger.utils.time import format_relative_time, utcnow

logger = logging.getLogger(__name__)

EDITABLE_DETAILS = ("school_name", "class_name", "teacher_name", "location", "standard_meals", "signature_date")


class SaveState(str, Enum):
    CLEAN = "clean"
    DIRTY = "dirty"
    SAVING = "saving"


class NoLedgerOpenError(RuntimeError):
    """Raised when an edit is attempted before a month has been opened."""


class _Timer(Protocol):
    daemon: bool

    def start(self) -> None: ...

    def cancel(self) -> None: ...


TimerFactory = Callable[[float, Callable[[], None]], _Timer]


class LedgerSession:
    """Editing session for one owner's monthly ledgers.

    Holds the ledger of the selected month, the row and column clipboards and
    the save state. Every edit marks the ledger dirty and re-arms a debounced
    auto-save; switching months or logging out flushes pending changes first.
    """

    def __init__(
        self,
        store: LedgerStore,
        owner_id: str,
        *,
        settings: Settings | None = None,
        autosave_delay: float | None = None,
        timer_factory: TimerFactory = threading.Timer,
        on_error: Callable[[StorageFailure], None] | None = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._store = store
        self._owner_id = owner_id
        self._settings = settings or current_settings()
        self._autosave_delay = (
            self._settings.autosave_delay_seconds if autosave_delay is None else autosave_delay
        )
        self._timer_factory = timer_factory
        self._on_error = on_error
        self._clock = clock

        self._lock = threading.RLock()
        self._save_lock = threading.Lock()
        self._ledger: MonthlyLedger | None = None
        self._state = SaveState.CLEAN
        self._revision = 0
        self._timer: _Timer | None = None
        self._timer_generation = 0

        self._row_clipboard: dict[int, MealMarks] | None = None
        self._column_clipboard: list[bool] | None = None
        self._mark_symbol = self._settings.mark_symbol if self._settings.mark_symbol in MARK_SYMBOLS else "+"

        self.last_saved_at: datetime | None = None
        self.last_error: StorageFailure | None = None

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------
    @property
    def owner_id(self) -> str:
        return self._owner_id

    @property
    def ledger(self) -> MonthlyLedger:
        with self._lock:
            if self._ledger is None:
                raise NoLedgerOpenError("Open a month before editing.")
            return self._ledger

    @property
    def is_open(self) -> bool:
        return self._ledger is not None

    @property
    def state(self) -> SaveState:
        return self._state

    @property
    def is_dirty(self) -> bool:
        return self._state is not SaveState.CLEAN

    @property
    def has_row_clipboard(self) -> bool:
        return self._row_clipboard is not None

    @property
    def has_column_clipboard(self) -> bool:
        return self._column_clipboard is not None

    @property
    def mark_symbol(self) -> str:
        return self._mark_symbol

    def set_mark_symbol(self, symbol: str) -> None:
        if symbol not in MARK_SYMBOLS:
            raise InvalidMarkSymbolError(f"Mark symbol must be one of {MARK_SYMBOLS}, got {symbol!r}.")
        self._mark_symbol = symbol

    def describe_last_saved(self) -> str:
        if self.last_saved_at is None:
            return "Chưa lưu"
        return f"Đã lưu {format_relative_time(self.last_saved_at, now=self._clock())}"

    def update_preferences(self, **changes: Any) -> Settings:
        """Save user preferences; new defaults apply to months opened afterwards."""
        self._settings = update_user_settings(**changes)
        if self._settings.mark_symbol in MARK_SYMBOLS:
            self._mark_symbol = self._settings.mark_symbol
        return self._settings

    # ------------------------------------------------------------------
    # Loading and navigation
    # ------------------------------------------------------------------
    def _blank_ledger(self, month: int, year: int) -> MonthlyLedger:
        config = self._settings
        return MonthlyLedger(
            owner_id=self._owner_id,
            month=month,
            year=year,
            school_name=config.default_school_name,
            class_name=config.default_class_name,
            teacher_name=config.default_teacher_name,
            location=config.default_location,
            standard_meals=StandardMeals(
                S=config.default_standard_s,
                T1=config.default_standard_t1,
                T2=config.default_standard_t2,
            ),
            signature_date=SignatureDate.today(),
        )

    def open(self, month: int, year: int) -> MonthlyLedger:
        """Load (month, year), seeding it from the latest earlier month on a miss."""
        self.flush()
        blank = self._blank_ledger(month, year)

        record = self._store.fetch(self._owner_id, month, year)
        if record is not None:
            ledger = MonthlyLedger.from_record(record, defaults=blank)
            state = SaveState.CLEAN
        else:
            previous_record = self._store.latest_before(self._owner_id, month, year)
            if previous_record is not None:
                previous = MonthlyLedger.from_record(previous_record, defaults=blank)
                ledger = seed_from_previous(previous, blank)
                state = SaveState.DIRTY
            else:
                logger.info("No earlier ledger for %s/%s; starting empty", month + 1, year)
                ledger = blank
                state = SaveState.CLEAN

        with self._lock:
            self._cancel_timer()
            self._ledger = ledger
            self._state = state
            self._revision += 1
            if state is SaveState.DIRTY:
                self._schedule_autosave()
        return ledger

    def navigate(self, month: int, year: int) -> MonthlyLedger:
        return self.open(month, year)

    def previous_month(self) -> MonthlyLedger:
        month, year = shift_month(self.ledger.month, self.ledger.year, -1)
        return self.open(month, year)

    def next_month(self) -> MonthlyLedger:
        month, year = shift_month(self.ledger.month, self.ledger.year, 1)
        return self.open(month, year)

    def change_year(self, year: int) -> MonthlyLedger:
        return self.open(self.ledger.month, year)

    def close(self) -> None:
        """Flush pending edits and drop the in-memory ledger (logout)."""
        self.flush()
        with self._lock:
            self._cancel_timer()
            self._ledger = None
            self._state = SaveState.CLEAN

    logout = close

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------
    def save(self) -> None:
        """Persist the current ledger now, bypassing the debounce."""
        with self._save_lock:
            with self._lock:
                ledger = self.ledger
                self._cancel_timer()
                revision = self._revision
                self._state = SaveState.SAVING
                saved_at = self._clock()
                record = ledger.to_record()
                record["updated_at"] = saved_at.isoformat()

            try:
                self._store.upsert(record)
            except StorageFailure as exc:
                with self._lock:
                    self.last_error = exc
                    if self._ledger is not None and self._ledger.key == ledger.key:
                        self._state = SaveState.DIRTY
                logger.error("Saving %s/%s failed: %s", ledger.month + 1, ledger.year, exc)
                raise
            except Exception:
                with self._lock:
                    if self._ledger is not None and self._ledger.key == ledger.key:
                        self._state = SaveState.DIRTY
                logger.exception("Ledger store raised while saving %s/%s", ledger.month + 1, ledger.year)
                raise

            with self._lock:
                self.last_saved_at = saved_at
                self.last_error = None
                same_ledger = self._ledger is not None and self._ledger.key == ledger.key
                if same_ledger and self._revision == revision:
                    self._state = SaveState.CLEAN
                elif same_ledger:
                    self._state = SaveState.DIRTY
                    self._schedule_autosave()
            logger.debug("Saved ledger %s/%s", ledger.month + 1, ledger.year)

    def flush(self) -> None:
        """Save synchronously if there are unsaved edits."""
        if self._ledger is not None and self.is_dirty:
            self.save()

    def _autosave(self, generation: int) -> None:
        with self._lock:
            if generation != self._timer_generation or self._state is not SaveState.DIRTY:
                return
            self._timer = None
        try:
            self.save()
        except StorageFailure as exc:
            if self._on_error is not None:
                self._on_error(exc)
        except NoLedgerOpenError:
            logger.debug("Auto-save skipped: no ledger open")

    def _schedule_autosave(self) -> None:
        self._cancel_timer()
        if self._autosave_delay is None or self._autosave_delay < 0:
            return
        self._timer_generation += 1
        timer = self._timer_factory(
            self._autosave_delay, functools.partial(self._autosave, self._timer_generation)
        )
        timer.daemon = True
        self._timer = timer
        timer.start()

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        self._timer_generation += 1

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------
    def _apply(self, operation: Callable[..., MonthlyLedger], *args: Any) -> MonthlyLedger:
        with self._lock:
            current = self.ledger
            updated = operation(current, *args)
            if updated == current:
                return current
            self._ledger = updated
            self._revision += 1
            if self._state is SaveState.CLEAN:
                self._state = SaveState.DIRTY
            self._schedule_autosave()
            return updated

    def add_student(self, name: str | None = None) -> MonthlyLedger:
        if name is None:
            return self._apply(roster.add_student)
        return self._apply(roster.add_student, name)

    def remove_student(self, student_id: str) -> MonthlyLedger:
        return self._apply(roster.remove_student, student_id)

    def rename_student(self, student_id: str, name: str) -> MonthlyLedger:
        return self._apply(roster.rename_student, student_id, name)

    def clear_roster(self) -> MonthlyLedger:
        return self._apply(roster.clear_roster)

    def replace_roster(self, names: Iterable[str]) -> MonthlyLedger:
        return self._apply(roster.replace_roster, list(names))

    def preview_import(self, source: str | Path | bytes | BinaryIO) -> list[str]:
        """Candidate names from a spreadsheet; the roster is untouched until replace_roster."""
        return import_student_names(source)

    def update_details(self, **changes: Any) -> MonthlyLedger:
        unknown = set(changes) - set(EDITABLE_DETAILS)
        if unknown:
            raise TypeError(f"Cannot edit ledger fields: {', '.join(sorted(unknown))}")
        if isinstance(changes.get("standard_meals"), Mapping):
            changes["standard_meals"] = StandardMeals.from_dict(changes["standard_meals"], self.ledger.standard_meals)
        if isinstance(changes.get("signature_date"), Mapping):
            changes["signature_date"] = SignatureDate(**changes["signature_date"])
        return self._apply(lambda ledger: replace(ledger, **changes))

    def toggle(self, student_id: str, day: int, meal: str) -> MonthlyLedger:
        return self._apply(edit_operations.toggle_meal, student_id, day, meal)

    def copy_row(self, student_id: str) -> bool:
        clipboard = edit_operations.copy_row(self.ledger, student_id)
        if clipboard is None:
            return False
        self._row_clipboard = clipboard
        return True

    def paste_row(self, student_id: str) -> MonthlyLedger:
        if self._row_clipboard is None:
            return self.ledger
        return self._apply(edit_operations.paste_row, student_id, self._row_clipboard)

    def paste_row_to_all(self) -> MonthlyLedger:
        if self._row_clipboard is None:
            return self.ledger
        return self._apply(edit_operations.paste_row_to_all, self._row_clipboard)

    def copy_column(self, day: int, meal: str) -> list[bool]:
        self._column_clipboard = edit_operations.copy_column(self.ledger, day, meal)
        return list(self._column_clipboard)

    def paste_column(self, day: int, meal: str) -> MonthlyLedger:
        if self._column_clipboard is None:
            return self.ledger
        return self._apply(edit_operations.paste_column, day, meal, self._column_clipboard)

    def fill_column(self, day: int, meal: str) -> MonthlyLedger:
        return self._apply(edit_operations.fill_column, day, meal)

    def clear_column(self, day: int, meal: str) -> MonthlyLedger:
        return self._apply(edit_operations.clear_column, day, meal)

    def clear_day(self, day: int) -> MonthlyLedger:
        return self._apply(edit_operations.clear_day, day)

    def clear_month(self) -> MonthlyLedger:
        return self._apply(edit_operations.clear_month)

    def auto_fill_month(self) -> MonthlyLedger:
        return self._apply(edit_operations.auto_fill_month)

    def sync_from_previous(self) -> SyncResult:
        """Pull new students and renamed entries from the latest earlier month."""
        current = self.ledger
        record = self._store.latest_before(self._owner_id, current.month, current.year)
        if record is None:
            return SyncResult(ledger=current, source_found=False)

        previous = MonthlyLedger.from_record(record, defaults=current)
        with self._lock:
            result = sync_from_previous(self.ledger, previous)
            self._apply(lambda _ledger: result.ledger)
        return result

    # ------------------------------------------------------------------
    # Derived values and export
    # ------------------------------------------------------------------
    def student_totals(self, student_id: str) -> StudentTotals:
        ledger = self.ledger
        student = ledger.find_student(student_id)
        if student is None:
            raise KeyError(student_id)
        return calculate_student_totals(student, ledger.standard_meals)

    def day_total(self, day: int, meal: str) -> int:
        return calculate_day_totals(self.ledger, day, meal)

    def export_filename(self) -> str:
        return export_filename(self.ledger)

    def export_workbook(self) -> bytes:
        return export_workbook_bytes(self.ledger, mark_symbol=self._mark_symbol)
