from __future__ import annotations

import asyncio
import datetime as dt
import uuid
from typing import Any, Callable, Mapping, Sequence

from ..base import QuotaGuardError, RecordStore, Row


def _matches(row: Row, filters: Mapping[str, Any] | None) -> bool:
    if not filters:
        return True
    return all(row.get(k) == v for k, v in filters.items())


class MemoryRecordStore(RecordStore):
    """Tabular record store held in process memory.

    Rows are plain dicts. ``id`` and ``created_at`` are assigned on insert,
    mirroring a hosted table with server-side defaults.
    """

    def __init__(self, clock: Callable[[], dt.datetime] | None = None):
        self._tables: dict[str, list[Row]] = {}
        self._lock = asyncio.Lock()
        self._clock = clock or (lambda: dt.datetime.now(dt.timezone.utc))

    def _table(self, table: str) -> list[Row]:
        return self._tables.setdefault(table, [])

    def _insert_now(self, table: str, row: Mapping[str, Any]) -> Row:
        stored = {**row, "id": str(uuid.uuid4()), "created_at": self._clock()}
        self._table(table).append(stored)
        return dict(stored)

    async def insert(self, table: str, row: Mapping[str, Any]) -> Row:
        return self._insert_now(table, row)

    async def select_all(
        self,
        table: str,
        filters: Mapping[str, Any] | None = None,
        order_by: str | None = None,
        descending: bool = False,
    ) -> Sequence[Row]:
        rows = [dict(r) for r in self._table(table) if _matches(r, filters)]
        if order_by:
            rows.sort(key=lambda r: r[order_by], reverse=descending)
        return rows

    async def delete_by_id(self, table: str, id: str) -> int:
        rows = self._table(table)
        kept = [r for r in rows if r["id"] != id]
        removed = len(rows) - len(kept)
        self._tables[table] = kept
        return removed

    async def count(self, table: str, filters: Mapping[str, Any] | None = None) -> int:
        return sum(1 for r in self._table(table) if _matches(r, filters))

    async def insert_within_quota(
        self,
        table: str,
        row: Mapping[str, Any],
        *,
        owner_field: str,
        limit: int,
    ) -> Row:
        async with self._lock:
            current = await self.count(table, {owner_field: row[owner_field]})
            if current >= limit:
                raise QuotaGuardError(
                    f"{owner_field}={row[owner_field]} already has {current} rows",
                    current=current,
                    limit=limit,
                )
            return self._insert_now(table, row)

    def update(self, table: str, id: str, **values: Any) -> None:
        """Patch a stored row in place (stands in for downstream writers such as text extraction)."""
        for r in self._table(table):
            if r["id"] == id:
                r.update(values)
                return
        raise KeyError(id)
