# app/core/config.py
import math
import os
from typing import Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_MAX_BUCKET_PHOTOS = 1200
DEFAULT_MAX_BUCKET_BYTES = 4 * 1024 * 1024 * 1024  # 4 GiB


def _positive_int_or(raw, fallback: int) -> int:
    """Parse an env override; anything empty, non-numeric or <= 0 keeps the default."""
    if raw is None or raw == "":
        return fallback
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return fallback
    if not math.isfinite(value) or value <= 0:
        return fallback
    return int(math.floor(value))


class Settings(BaseSettings):
    # Folder holding loose images and the numbered bucket subfolders
    IMAGE_ROOT: Optional[str] = None

    # Bucket caps
    MAX_BUCKET_PHOTOS: int = DEFAULT_MAX_BUCKET_PHOTOS
    MAX_BUCKET_BYTES: int = DEFAULT_MAX_BUCKET_BYTES

    # Server
    API_TITLE: str = "Image Bucket Sorter API"
    HOST: str = "0.0.0.0"
    PORT: int = 5174
    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    @field_validator("MAX_BUCKET_PHOTOS", mode="before")
    @classmethod
    def _max_photos(cls, v):
        return _positive_int_or(v, DEFAULT_MAX_BUCKET_PHOTOS)

    @field_validator("MAX_BUCKET_BYTES", mode="before")
    @classmethod
    def _max_bytes(cls, v):
        return _positive_int_or(v, DEFAULT_MAX_BUCKET_BYTES)

    @field_validator("IMAGE_ROOT", mode="before")
    @classmethod
    def _empty_root_is_unset(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    def image_root(self) -> Optional[str]:
        """Absolute path of the configured root, or None when it is not set."""
        if not self.IMAGE_ROOT:
            return None
        return os.path.abspath(os.path.expanduser(self.IMAGE_ROOT))


# Global instance shared by the whole app
settings = Settings()
