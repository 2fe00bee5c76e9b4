from __future__ import annotations

import logging
from typing import Any, Mapping

import requests

from meal_ledger.data.ledger_store import StorageFailure
from meal_ledger.utils.time import utcnow

logger = logging.getLogger(__name__)

DEFAULT_TABLE = "monthly_sheets"
DEFAULT_OWNER_COLUMN = "user_id"
REQUEST_TIMEOUT_SECONDS = 15


class RestLedgerStore:
    """Ledger store backed by a PostgREST table such as Supabase's ``monthly_sheets``."""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        *,
        access_token: str | None = None,
        table: str = DEFAULT_TABLE,
        owner_column: str = DEFAULT_OWNER_COLUMN,
        session: requests.Session | None = None,
        timeout: float = REQUEST_TIMEOUT_SECONDS,
    ) -> None:
        self._endpoint = f"{base_url.rstrip('/')}/rest/v1/{table}"
        self._owner_column = owner_column
        self._timeout = timeout
        self._session = session or requests.Session()
        self._session.headers.update(
            {
                "apikey": api_key,
                "Authorization": f"Bearer {access_token or api_key}",
                "Content-Type": "application/json",
            }
        )

    def fetch(self, owner_id: str, month: int, year: int) -> dict[str, Any] | None:
        rows = self._get(
            {
                "select": "*",
                self._owner_column: f"eq.{owner_id}",
                "month": f"eq.{month}",
                "year": f"eq.{year}",
                "limit": "1",
            }
        )
        return self._to_record(rows[0]) if rows else None

    def latest_before(self, owner_id: str, month: int, year: int) -> dict[str, Any] | None:
        rows = self._get(
            {
                "select": "*",
                self._owner_column: f"eq.{owner_id}",
                "or": f"(year.lt.{year},and(year.eq.{year},month.lt.{month}))",
                "order": "year.desc,month.desc",
                "limit": "1",
            }
        )
        return self._to_record(rows[0]) if rows else None

    def upsert(self, record: Mapping[str, Any]) -> None:
        payload = dict(record)
        payload[self._owner_column] = payload.pop("owner_id")
        payload["updated_at"] = payload.get("updated_at") or utcnow().isoformat()

        try:
            response = self._session.post(
                self._endpoint,
                params={"on_conflict": f"{self._owner_column},month,year"},
                json=payload,
                headers={"Prefer": "resolution=merge-duplicates,return=minimal"},
                timeout=self._timeout,
            )
            response.raise_for_status()
        except requests.RequestException as exc:
            logger.error("Upsert of %s/%s failed: %s", int(record["month"]) + 1, record["year"], exc)
            raise StorageFailure(f"Lỗi khi lưu dữ liệu: {exc}") from exc

    def _get(self, params: dict[str, str]) -> list[dict[str, Any]]:
        try:
            response = self._session.get(self._endpoint, params=params, timeout=self._timeout)
            response.raise_for_status()
            return list(response.json())
        except (requests.RequestException, ValueError) as exc:
            logger.error("Ledger query failed: %s", exc)
            raise StorageFailure(f"Lỗi khi tải dữ liệu: {exc}") from exc

    def _to_record(self, row: Mapping[str, Any]) -> dict[str, Any]:
        record = dict(row)
        record["owner_id"] = record.pop(self._owner_column, record.get("owner_id"))
        return record
