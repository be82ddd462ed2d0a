from __future__ import annotations

from typing import Any, Generic, Optional, Sequence, Type, TypeVar, cast

from sqlalchemy import and_, delete, func, insert, literal, select
from sqlalchemy.ext.asyncio import AsyncSession

T = TypeVar("T")


def apply_filters(stmt, model, where: dict[str, Any] | None):
    if not where:
        return stmt
    return stmt.where(and_(*[(getattr(model, k) == v) for k, v in where.items()]))


class Repository(Generic[T]):
    """Generic async SQLAlchemy repository.

    - Exposes get, list, count, create and delete over an AsyncSession.
    - ``create_if_below`` is the conditional insert used for per-owner quotas.
    """

    def __init__(self, session: AsyncSession, model: Type[T]):
        self.session = session
        self.model = model

    async def get(self, id: Any) -> Optional[T]:
        return await self.session.get(self.model, id)

    async def list(
        self,
        *,
        where: Optional[dict[str, Any]] = None,
        order_by: Any | None = None,
        limit: int | None = None,
        offset: int | None = None,
    ) -> Sequence[T]:
        stmt = apply_filters(select(self.model), self.model, where)
        if order_by is not None:
            stmt = stmt.order_by(order_by)
        if limit:
            stmt = stmt.limit(limit)
        if offset:
            stmt = stmt.offset(offset)
        return (await self.session.execute(stmt)).scalars().all()

    async def count(self, where: Optional[dict[str, Any]] = None) -> int:
        stmt = apply_filters(select(func.count()).select_from(self.model), self.model, where)
        return int((await self.session.execute(stmt)).scalar_one())

    async def create(self, **data) -> T:
        obj = self.model(**data)
        self.session.add(obj)
        await self.session.flush()
        return obj

    async def lock_owner(self, owner_key: str) -> None:
        """Serialise writers for one owner until the transaction ends.

        PostgreSQL takes a transaction-scoped advisory lock keyed on the owner.
        SQLite already serialises writers, so nothing is issued there.
        """
        if self.session.get_bind().dialect.name != "postgresql":
            return
        await self.session.execute(select(func.pg_advisory_xact_lock(func.hashtext(owner_key))))

    async def create_if_below(self, owner_field: str, limit: int, **data) -> Optional[T]:
        """Insert ``data`` in one statement only if the owner has fewer than ``limit`` rows.

        Returns the new object, or None when the guard refused the insert.
        Column defaults are resolved in Python first so the INSERT ... SELECT
        carries every value explicitly. The owner lock is taken first, so two
        transactions never evaluate the count against the same snapshot.
        """
        table = self.model.__table__  # type: ignore[attr-defined]
        await self.lock_owner(f"{table.name}:{data[owner_field]}")
        values = dict(data)
        for column in table.columns:
            if column.name not in values and column.default is not None and column.default.is_callable:
                values[column.name] = column.default.arg(None)
            elif column.name not in values and column.default is not None and column.default.is_scalar:
                values[column.name] = column.default.arg

        owner_col = table.c[owner_field]
        current = (
            select(func.count())
            .select_from(table)
            .where(owner_col == values[owner_field])
            .correlate(None)
            .scalar_subquery()
        )
        names = list(values)
        source = select(
            *[literal(values[n], type_=table.c[n].type).label(n) for n in names]
        ).where(current < limit)
        res = await self.session.execute(insert(table).from_select(names, source))
        if not res.rowcount:
            return None
        return await self.get(values["id"])

    async def delete(self, id: Any) -> int:
        cond = cast(Any, self.model.id == id)  # type: ignore[attr-defined]
        res = await self.session.execute(delete(self.model).where(cond))
        return int(res.rowcount or 0)
