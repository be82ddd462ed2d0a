"""Backend client: identity, object storage and record store implementations."""

from __future__ import annotations

import logging

from .base import (
    BackendClient,
    BackendError,
    IdentityProvider,
    ObjectNotFoundError,
    ObjectStorage,
    QuotaGuardError,
    RecordStore,
    Row,
    Session,
)
from .identity import JwtIdentity, MemoryIdentity
from .records import MemoryRecordStore
from .settings import BackendSettings, get_backend_settings
from .storage import MemoryStorage

logger = logging.getLogger(__name__)


def _identity(settings: BackendSettings) -> IdentityProvider:
    if settings.identity == "jwt":
        if settings.jwt_secret is None:
            raise ValueError("BACKEND_JWT_SECRET must be set when BACKEND_IDENTITY=jwt")
        return JwtIdentity(
            settings.jwt_secret.get_secret_value(),
            algorithm=settings.jwt_algorithm,
            audience=settings.jwt_audience,
            leeway=settings.jwt_leeway_seconds,
        )
    return MemoryIdentity()


def _storage(settings: BackendSettings) -> ObjectStorage:
    if settings.storage == "s3":
        from .storage.s3 import S3Storage

        return S3Storage(
            region=settings.s3_region,
            endpoint_url=settings.s3_endpoint_url,
            access_key=settings.s3_access_key,
            secret_key=settings.s3_secret_key.get_secret_value() if settings.s3_secret_key else None,
            bucket_map=settings.s3_bucket_map,
        )
    return MemoryStorage(signing_secret=settings.memory_signing_secret.get_secret_value())


def _records(settings: BackendSettings) -> RecordStore:
    if settings.records == "sql":
        from docscan.db.engine import DBEngine
        from docscan.db.settings import get_db_settings

        from .records.sql import SqlRecordStore

        return SqlRecordStore(DBEngine(get_db_settings()))
    return MemoryRecordStore()


def easy_backend(settings: BackendSettings | None = None) -> BackendClient:
    """Build a BackendClient from settings (env-driven by default).

    Example:
        >>> backend = easy_backend()                          # all in-memory
        >>> backend = easy_backend(BackendSettings(identity="jwt", jwt_secret="s", storage="s3", records="sql"))
    """
    settings = settings or get_backend_settings()
    client = BackendClient(
        identity=_identity(settings),
        storage=_storage(settings),
        records=_records(settings),
    )
    logger.info(
        "Backend ready: identity=%s storage=%s records=%s",
        settings.identity,
        settings.storage,
        settings.records,
    )
    return client


__all__ = [
    "BackendClient",
    "BackendError",
    "BackendSettings",
    "IdentityProvider",
    "JwtIdentity",
    "MemoryIdentity",
    "MemoryRecordStore",
    "MemoryStorage",
    "ObjectNotFoundError",
    "ObjectStorage",
    "QuotaGuardError",
    "RecordStore",
    "Row",
    "Session",
    "easy_backend",
    "get_backend_settings",
]
