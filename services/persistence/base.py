from __future__ import annotations

from collections.abc import Iterable
from typing import Any, Protocol

Row = dict[str, Any]
# {column: value} means equality, {column: [v1, v2]} means set-membership
Filter = dict[str, Any]


class RecordStore(Protocol):
    """Table-scoped row operations. No cross-table transaction is offered."""

    def insert(self, table: str, rows: Iterable[Row]) -> list[Row]:
        """Insert rows; returns them with generated ``id`` and ``created_at``."""
        ...

    def select(
        self,
        table: str,
        filters: Filter | None = None,
        order_by: str | None = None,
        descending: bool = False,
    ) -> list[Row]: ...

    def update(self, table: str, filters: Filter, patch: Row) -> int: ...

    def delete(self, table: str, filters: Filter) -> int: ...


def is_membership(value: Any) -> bool:
    return isinstance(value, (list, tuple, set, frozenset))
