from __future__ import annotations

from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from .base import Base
from .settings import DBSettings


def _is_sqlite_memory(url: str) -> bool:
    return url.startswith("sqlite+aiosqlite://") and (
        ":memory:" in url or url.rstrip("/").endswith("aiosqlite:")
    )


def engine_options(url: str, settings: DBSettings) -> dict[str, Any]:
    """create_async_engine kwargs for the given driver URL.

    In-memory sqlite shares one connection (StaticPool) so every session sees
    the same database; server databases get a sized, recycled pool.
    """
    options: dict[str, Any] = {"echo": settings.echo, "pool_pre_ping": True}
    if _is_sqlite_memory(url):
        options["poolclass"] = StaticPool
        options["connect_args"] = {"check_same_thread": False}
        return options
    if url.startswith("sqlite+aiosqlite://"):
        return options

    options.update(
        pool_size=settings.pool_size,
        max_overflow=settings.max_overflow,
        pool_recycle=settings.pool_recycle,
        pool_timeout=30,
    )
    return options


class DBEngine:
    """Async engine plus the session factory the unit of work draws from."""

    def __init__(self, settings: DBSettings):
        url = settings.resolved_database_url
        self._engine = create_async_engine(url, **engine_options(url, settings))
        self._session_factory: async_sessionmaker[AsyncSession] = async_sessionmaker(
            bind=self._engine, expire_on_commit=False
        )

    @property
    def session_factory(self) -> async_sessionmaker[AsyncSession]:
        return self._session_factory

    async def create_all(self) -> None:
        # models must be imported so their tables exist on Base.metadata
        from . import models  # noqa: F401

        async with self._engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def dispose(self) -> None:
        await self._engine.dispose()
