from __future__ import annotations

from typing import Literal, Optional

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class BackendSettings(BaseSettings):
    """Which backend implementation serves each capability group, and how to reach it."""

    identity: Literal["memory", "jwt"] = "memory"
    storage: Literal["memory", "s3"] = "memory"
    records: Literal["memory", "sql"] = "memory"

    # Identity (jwt)
    jwt_secret: Optional[SecretStr] = None
    jwt_algorithm: str = "HS256"
    jwt_audience: Optional[str] = "authenticated"
    jwt_leeway_seconds: int = 0

    # Storage (s3)
    s3_region: Optional[str] = None
    s3_endpoint_url: Optional[str] = None
    s3_access_key: Optional[str] = None
    s3_secret_key: Optional[SecretStr] = None
    s3_bucket_map: dict[str, str] = Field(default_factory=dict)

    # Storage (memory)
    memory_signing_secret: SecretStr = SecretStr("docscan-memory")

    model_config = SettingsConfigDict(
        env_prefix="BACKEND_",        # BACKEND_IDENTITY, BACKEND_JWT_SECRET, ...
        env_file=".env",
        extra="ignore",
    )


_settings: BackendSettings | None = None


def get_backend_settings() -> BackendSettings:
    global _settings
    if _settings is None:
        _settings = BackendSettings()
    return _settings
