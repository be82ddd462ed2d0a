from __future__ import annotations

from typing import Type, TypeVar

from sqlalchemy.ext.asyncio import AsyncSession

from .engine import DBEngine
from .repository import Repository

T = TypeVar("T")


class UnitOfWork:
    """One session per ``async with`` block.

    The block's writes are committed when it exits cleanly (unless
    ``commit_on_success`` is off, as for reads) and rolled back otherwise.
    """

    def __init__(self, engine: DBEngine, *, commit_on_success: bool = True):
        self._factory = engine.session_factory
        self._commit_on_success = commit_on_success
        self.session: AsyncSession | None = None

    async def __aenter__(self) -> "UnitOfWork":
        self.session = self._factory()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        session, self.session = self.session, None
        try:
            if exc_type is None and self._commit_on_success:
                await session.commit()
            else:
                await session.rollback()
        finally:
            await session.close()

    def repo(self, model: Type[T]) -> Repository[T]:
        if self.session is None:
            raise RuntimeError("UnitOfWork.repo() used outside 'async with'")
        return Repository[T](self.session, model)
