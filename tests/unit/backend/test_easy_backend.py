"""Tests for easy_backend and BackendSettings."""

from __future__ import annotations

from unittest.mock import patch

import pytest

from docscan.backend import (
    BackendSettings,
    JwtIdentity,
    MemoryIdentity,
    MemoryRecordStore,
    MemoryStorage,
    easy_backend,
)


class TestBackendSettings:
    """Tests for BackendSettings env loading."""

    def test_defaults_are_in_memory(self, monkeypatch):
        for name in ("BACKEND_IDENTITY", "BACKEND_STORAGE", "BACKEND_RECORDS"):
            monkeypatch.delenv(name, raising=False)

        settings = BackendSettings(_env_file=None)

        assert (settings.identity, settings.storage, settings.records) == ("memory", "memory", "memory")

    def test_env_prefix(self, monkeypatch):
        monkeypatch.setenv("BACKEND_IDENTITY", "jwt")
        monkeypatch.setenv("BACKEND_JWT_SECRET", "s3cr3t")
        monkeypatch.setenv("BACKEND_S3_BUCKET_MAP", '{"documents": "prod-docs"}')

        settings = BackendSettings(_env_file=None)

        assert settings.identity == "jwt"
        assert settings.jwt_secret.get_secret_value() == "s3cr3t"
        assert settings.s3_bucket_map == {"documents": "prod-docs"}

    def test_rejects_unknown_backend(self):
        with pytest.raises(ValueError):
            BackendSettings(storage="ftp", _env_file=None)

    def test_jwt_identity_requires_secret(self):
        with pytest.raises(ValueError, match="BACKEND_JWT_SECRET"):
            easy_backend(BackendSettings(identity="jwt", _env_file=None))


@pytest.mark.asyncio
class TestEasyBackend:
    """Tests for easy_backend."""

    async def test_memory_backend(self):
        backend = easy_backend(BackendSettings(_env_file=None))

        assert isinstance(backend.identity, MemoryIdentity)
        assert isinstance(backend.storage, MemoryStorage)
        assert isinstance(backend.records, MemoryRecordStore)
        await backend.close()

    async def test_jwt_identity(self):
        backend = easy_backend(BackendSettings(identity="jwt", jwt_secret="s", _env_file=None))

        assert isinstance(backend.identity, JwtIdentity)

    async def test_s3_storage(self):
        from docscan.backend.storage.s3 import S3Storage

        with patch("docscan.backend.storage.s3.aioboto3.Session"):
            backend = easy_backend(
                BackendSettings(storage="s3", s3_region="eu-west-1", _env_file=None)
            )

        assert isinstance(backend.storage, S3Storage)

    async def test_sql_records(self, monkeypatch):
        from docscan.backend.records.sql import SqlRecordStore
        from docscan.db.settings import get_db_settings

        monkeypatch.setenv("DB_DATABASE_URL", "sqlite+aiosqlite:///:memory:")
        get_db_settings.cache_clear()
        try:
            backend = easy_backend(BackendSettings(records="sql", _env_file=None))
            assert isinstance(backend.records, SqlRecordStore)
            await backend.close()
        finally:
            get_db_settings.cache_clear()
