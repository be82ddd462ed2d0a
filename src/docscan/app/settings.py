from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    # flat = easy env overrides
    name: str = "DocScan"
    version: str = "0.1.0"

    # Documents
    quota: int = Field(default=7, ge=0, description="Maximum documents per user, all types")
    bucket: str = "documents"
    table: str = "documents"
    preview_ttl_seconds: int = Field(default=60 * 5, gt=0)
    accepted_extensions: list[str] = Field(
        default_factory=lambda: ["pdf", "doc", "docx", "txt", "jpg", "jpeg", "png"]
    )
    image_extensions: list[str] = Field(
        default_factory=lambda: ["jpg", "jpeg", "png", "webp", "gif"]
    )

    # API
    max_request_bytes: int = 25 * 1024 * 1024
    cors_origins: list[str] = Field(default_factory=lambda: ["http://localhost:5173"])

    model_config = SettingsConfigDict(
        env_prefix="DOCSCAN_",        # DOCSCAN_QUOTA, DOCSCAN_BUCKET, ...
        env_file=".env",
        extra="ignore",
    )


@lru_cache
def get_app_settings(**kwargs) -> AppSettings:
    # Only include kwargs that are not None, so defaults in AppSettings are used
    filtered_kwargs = {k: v for k, v in kwargs.items() if v is not None}
    return AppSettings(**filtered_kwargs)
