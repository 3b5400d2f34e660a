"""
Configuration and settings for the project API.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-backed settings for the FastAPI service."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="PROJECT_API_",
        extra="ignore",
        populate_by_name=True,
    )

    api_prefix: str = Field(default="")

    # Key-value store (Redis expected)
    redis_url: Optional[str] = Field(default=None, validation_alias="REDIS_URL")
    redis_key_namespace: str = Field(default="")

    # S3-compatible blob storage (R2, MinIO, COS, AWS)
    s3_endpoint: Optional[str] = Field(default=None, validation_alias="S3_ENDPOINT")
    s3_region: Optional[str] = Field(default=None, validation_alias="S3_REGION")
    s3_bucket: Optional[str] = Field(default=None, validation_alias="S3_BUCKET")
    aws_access_key_id: Optional[str] = Field(
        default=None, validation_alias="AWS_ACCESS_KEY_ID"
    )
    aws_secret_access_key: Optional[str] = Field(
        default=None, validation_alias="AWS_SECRET_ACCESS_KEY"
    )

    # Development toggles
    use_in_memory_backends: bool = Field(default=False)

    # Handler behaviour
    cascade_delete: bool = Field(default=True)
    link_lyrics_to_project: bool = Field(default=False)

    # HTTP
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8000)

    log_level: str = Field(default="INFO")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
