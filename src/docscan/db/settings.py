from __future__ import annotations

import os
from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from docscan.app.core.env import get_env_flags

# hosted providers hand out sync driver URLs; the record store needs async ones
ASYNC_DRIVERS = {
    "postgres://": "postgresql+asyncpg://",
    "postgresql://": "postgresql+asyncpg://",
    "sqlite://": "sqlite+aiosqlite://",
}


def to_async_url(url: str) -> str:
    for prefix, driver in ASYNC_DRIVERS.items():
        if url.startswith(prefix):
            return driver + url[len(prefix):]
    return url


class DBSettings(BaseSettings):
    """Where the SQL record store keeps the ``documents`` table.

    ``DB_DATABASE_URL`` wins, then ``DATABASE_URL``. Outside prod a sqlite
    file at ``DB_SQLITE_PATH`` is used when neither is set.
    """

    database_url: Optional[str] = None
    sqlite_path: str = "docscan.db"
    echo: bool = False
    pool_size: int = Field(default=5, ge=1)
    max_overflow: int = Field(default=10, ge=0)
    pool_recycle: int = Field(default=1800, gt=0)

    model_config = SettingsConfigDict(env_prefix="DB_", env_file=".env", extra="ignore")

    @property
    def resolved_database_url(self) -> str:
        url = self.database_url or os.getenv("DATABASE_URL")
        if url:
            return to_async_url(url)
        if get_env_flags().is_prod:
            raise ValueError("DB_DATABASE_URL or DATABASE_URL must be set for the SQL record store in prod")
        return f"sqlite+aiosqlite:///{self.sqlite_path}"


@lru_cache
def get_db_settings() -> DBSettings:
    return DBSettings()
