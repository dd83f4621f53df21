"""
Configuration and settings for the spot map client.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-backed settings (SPOTMAP_* variables or a .env file)."""

    model_config = SettingsConfigDict(
        env_prefix="SPOTMAP_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Firebase project
    firebase_project_id: Optional[str] = Field(default=None)
    firebase_storage_bucket: Optional[str] = Field(default=None)
    # Service account JSON; application default credentials when unset.
    firebase_credentials_path: Optional[str] = Field(default=None)
    firebase_app_name: str = Field(default="spot-map")

    # Development toggles
    use_in_memory_backends: bool = Field(default=False)

    # Uploads and deletes of one create/delete call run on this many threads.
    max_parallel_transfers: int = Field(default=8, ge=1)

    # Re-encode non-PNG payloads before upload; blob paths always end in .png.
    normalize_images: bool = Field(default=True)
    image_content_type: str = Field(default="image/png")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
