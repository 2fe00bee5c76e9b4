from __future__ import annotations

import json
import sqlite3
from typing import Any, Mapping, Protocol

from meal_ledger.data.database import Database
from meal_ledger.utils.time import utcnow

CONFLICT_KEY = ("owner_id", "month", "year")


class StorageFailure(RuntimeError):
    """Raised when the storage collaborator cannot read or write a ledger."""


class LedgerStore(Protocol):
    def fetch(self, owner_id: str, month: int, year: int) -> dict[str, Any] | None:
        """Return the record for the key, or None when it does not exist."""

    def latest_before(self, owner_id: str, month: int, year: int) -> dict[str, Any] | None:
        """Return the most recent record strictly before (month, year)."""

    def upsert(self, record: Mapping[str, Any]) -> None:
        """Insert the record, or overwrite the one sharing its conflict key."""


_COLUMNS = (
    "owner_id",
    "month",
    "year",
    "class_name",
    "teacher_name",
    "school_name",
    "location",
    "students",
    "standard_meals",
    "updated_at",
)


class SqliteLedgerStore:
    def __init__(self, database: Database) -> None:
        self._database = database

    def initialize(self) -> None:
        try:
            self._database.initialize()
        except sqlite3.Error as exc:
            raise StorageFailure(f"Could not prepare ledger database: {exc}") from exc

    def fetch(self, owner_id: str, month: int, year: int) -> dict[str, Any] | None:
        try:
            with self._database.connect() as connection:
                row = connection.execute(
                    f"""
                    SELECT {", ".join(_COLUMNS)}
                      FROM monthly_ledgers
                     WHERE owner_id = ?
                       AND month = ?
                       AND year = ?
                    """,
                    (owner_id, month, year),
                ).fetchone()
        except sqlite3.Error as exc:
            raise StorageFailure(f"Could not load ledger {month + 1}/{year}: {exc}") from exc

        return self._row_to_record(row) if row else None

    def latest_before(self, owner_id: str, month: int, year: int) -> dict[str, Any] | None:
        try:
            with self._database.connect() as connection:
                row = connection.execute(
                    f"""
                    SELECT {", ".join(_COLUMNS)}
                      FROM monthly_ledgers
                     WHERE owner_id = ?
                       AND (year < ? OR (year = ? AND month < ?))
                  ORDER BY year DESC, month DESC
                     LIMIT 1
                    """,
                    (owner_id, year, year, month),
                ).fetchone()
        except sqlite3.Error as exc:
            raise StorageFailure(f"Could not look up the previous ledger: {exc}") from exc

        return self._row_to_record(row) if row else None

    def upsert(self, record: Mapping[str, Any]) -> None:
        updated_at = record.get("updated_at") or utcnow().isoformat()
        params = (
            record["owner_id"],
            int(record["month"]),
            int(record["year"]),
            record.get("class_name"),
            record.get("teacher_name"),
            record.get("school_name"),
            record.get("location"),
            json.dumps(record.get("students") or [], ensure_ascii=False),
            json.dumps(record.get("standard_meals") or {}, ensure_ascii=False),
            updated_at,
        )
        try:
            with self._database.connect() as connection:
                connection.execute(
                    f"""
                    INSERT INTO monthly_ledgers ({", ".join(_COLUMNS)})
                    VALUES ({", ".join("?" for _ in _COLUMNS)})
                    ON CONFLICT ({", ".join(CONFLICT_KEY)}) DO UPDATE SET
                        class_name = excluded.class_name,
                        teacher_name = excluded.teacher_name,
                        school_name = excluded.school_name,
                        location = excluded.location,
                        students = excluded.students,
                        standard_meals = excluded.standard_meals,
                        updated_at = excluded.updated_at
                    """,
                    params,
                )
        except sqlite3.Error as exc:
            raise StorageFailure(
                f"Could not save ledger {int(record['month']) + 1}/{record['year']}: {exc}"
            ) from exc

    @staticmethod
    def _row_to_record(row: sqlite3.Row) -> dict[str, Any]:
        record = dict(row)
        record["students"] = json.loads(record.get("students") or "[]")
        record["standard_meals"] = json.loads(record.get("standard_meals") or "{}")
        return record
