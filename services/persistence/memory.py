from __future__ import annotations

import copy
import threading
import uuid
from collections.abc import Iterable
from datetime import datetime, timezone
from typing import Any

from core.errors import PersistenceError
from services.persistence.base import Filter, Row, is_membership


def _matches(row: Row, filters: Filter | None) -> bool:
    for column, expected in (filters or {}).items():
        value = row.get(column)
        if is_membership(expected):
            if value not in expected:
                return False
        elif value != expected:
            return False
    return True


class InMemoryRecordStore:
    """
    Process-local record store (RECORD_STORE=memory and tests).
    Mirrors the Postgres store: generated ids, UTC created_at, one lock per call.
    """

    def __init__(self, tables: Iterable[str] | None = None) -> None:
        self._tables: dict[str, list[Row]] = {t: [] for t in (tables or [])}
        self._lock = threading.Lock()
        self.writes = 0

    def _table(self, table: str) -> list[Row]:
        return self._tables.setdefault(table, [])

    def insert(self, table: str, rows: Iterable[Row]) -> list[Row]:
        created: list[Row] = []
        with self._lock:
            for row in rows:
                if not isinstance(row, dict):
                    raise PersistenceError(f"{table}: row must be a mapping")
                record = {"id": str(uuid.uuid4()), "created_at": datetime.now(timezone.utc)}
                record.update({k: v for k, v in row.items() if k not in {"id", "created_at"}})
                self._table(table).append(record)
                created.append(copy.deepcopy(record))
            self.writes += 1
        return created

    def select(
        self,
        table: str,
        filters: Filter | None = None,
        order_by: str | None = None,
        descending: bool = False,
    ) -> list[Row]:
        with self._lock:
            rows = [copy.deepcopy(r) for r in self._table(table) if _matches(r, filters)]
        if order_by:
            rows.sort(key=lambda r: _sort_key(r.get(order_by)), reverse=descending)
        return rows

    def update(self, table: str, filters: Filter, patch: Row) -> int:
        count = 0
        with self._lock:
            for row in self._table(table):
                if _matches(row, filters):
                    row.update({k: v for k, v in patch.items() if k not in {"id", "created_at"}})
                    count += 1
            self.writes += 1
        return count

    def delete(self, table: str, filters: Filter) -> int:
        with self._lock:
            rows = self._table(table)
            keep = [r for r in rows if not _matches(r, filters)]
            count = len(rows) - len(keep)
            self._tables[table] = keep
            self.writes += 1
        return count


def _sort_key(value: Any) -> tuple[bool, Any]:
    # NULLs last, like Postgres ascending order
    return (value is None, value if value is not None else 0)
