from __future__ import annotations

import datetime as dt
import logging
import uuid
from typing import Any, Mapping, Sequence

from sqlalchemy.exc import SQLAlchemyError

from docscan.db.base import Base
from docscan.db.engine import DBEngine
from docscan.db.models import TABLES
from docscan.db.uow import UnitOfWork

from ..base import BackendError, QuotaGuardError, RecordStore, Row

logger = logging.getLogger(__name__)


def _to_row(obj: Base) -> Row:
    row: Row = {}
    for column in obj.__table__.columns:  # type: ignore[attr-defined]
        value = getattr(obj, column.name)
        if isinstance(value, uuid.UUID):
            value = str(value)
        elif isinstance(value, dt.datetime) and value.tzinfo is None:
            # sqlite drops tzinfo; stored values are UTC
            value = value.replace(tzinfo=dt.timezone.utc)
        row[column.name] = value
    return row


def _coerce_id(id: Any) -> Any:
    if isinstance(id, uuid.UUID):
        return id
    try:
        return uuid.UUID(str(id))
    except ValueError:
        return None


class SqlRecordStore(RecordStore):
    """Record store over an async SQLAlchemy database.

    Table names map to declarative models through ``docscan.db.models.TABLES``.
    """

    def __init__(self, engine: DBEngine, tables: Mapping[str, type[Base]] | None = None):
        self._engine = engine
        self._tables = dict(tables or TABLES)

    def _model(self, table: str) -> type[Base]:
        try:
            return self._tables[table]
        except KeyError:
            raise BackendError(f"Unknown table: {table}", operation="resolve_table")

    async def insert(self, table: str, row: Mapping[str, Any]) -> Row:
        model = self._model(table)
        try:
            async with UnitOfWork(self._engine) as uow:
                obj = await uow.repo(model).create(**row)
                return _to_row(obj)
        except SQLAlchemyError as exc:
            raise BackendError(f"Insert into {table} failed: {exc}", operation="insert") from exc

    async def select_all(
        self,
        table: str,
        filters: Mapping[str, Any] | None = None,
        order_by: str | None = None,
        descending: bool = False,
    ) -> Sequence[Row]:
        model = self._model(table)
        where = dict(filters or {})
        if "id" in where:
            where["id"] = _coerce_id(where["id"])
            if where["id"] is None:
                return []
        order = None
        if order_by:
            col = getattr(model, order_by)
            order = col.desc() if descending else col.asc()
        try:
            async with UnitOfWork(self._engine, commit_on_success=False) as uow:
                objs = await uow.repo(model).list(where=where, order_by=order)
                return [_to_row(o) for o in objs]
        except SQLAlchemyError as exc:
            raise BackendError(f"Select from {table} failed: {exc}", operation="select_all") from exc

    async def delete_by_id(self, table: str, id: str) -> int:
        model = self._model(table)
        key = _coerce_id(id)
        if key is None:
            return 0
        try:
            async with UnitOfWork(self._engine) as uow:
                return await uow.repo(model).delete(key)
        except SQLAlchemyError as exc:
            raise BackendError(f"Delete from {table} failed: {exc}", operation="delete_by_id") from exc

    async def count(self, table: str, filters: Mapping[str, Any] | None = None) -> int:
        model = self._model(table)
        try:
            async with UnitOfWork(self._engine, commit_on_success=False) as uow:
                return await uow.repo(model).count(where=dict(filters or {}))
        except SQLAlchemyError as exc:
            raise BackendError(f"Count on {table} failed: {exc}", operation="count") from exc

    async def insert_within_quota(
        self,
        table: str,
        row: Mapping[str, Any],
        *,
        owner_field: str,
        limit: int,
    ) -> Row:
        model = self._model(table)
        try:
            async with UnitOfWork(self._engine) as uow:
                obj = await uow.repo(model).create_if_below(owner_field, limit, **row)
                if obj is not None:
                    return _to_row(obj)
                current = await uow.repo(model).count(where={owner_field: row[owner_field]})
        except SQLAlchemyError as exc:
            raise BackendError(f"Insert into {table} failed: {exc}", operation="insert_within_quota") from exc
        raise QuotaGuardError(
            f"{owner_field}={row[owner_field]} already has {current} rows",
            current=current,
            limit=limit,
        )

    async def close(self) -> None:
        await self._engine.dispose()
