from __future__ import annotations

from pathlib import Path

from pydantic import AnyHttpUrl, Field, PositiveFloat, PositiveInt, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .cache.memory import DEFAULT_COUNT_LIMIT, DEFAULT_TTL_SECONDS

DEFAULT_TMDB_BASE_URL = "https://api.themoviedb.org/3"
DEFAULT_CACHE_DIR = Path.home() / ".cache" / "tellysearch"


class Settings(BaseSettings):
    """Application configuration settings."""

    tmdb_api_key: str | None = Field(default=None, validation_alias="TMDB_API_KEY")
    tmdb_base_url: AnyHttpUrl = Field(
        default=DEFAULT_TMDB_BASE_URL,
        validation_alias="TMDB_BASE_URL",
        validate_default=True,
    )
    tmdb_language: str = Field(default="en-US", validation_alias="TMDB_LANGUAGE")
    tmdb_timeout: PositiveFloat = Field(default=10.0, validation_alias="TMDB_TIMEOUT")
    cache_dir: Path = Field(default=DEFAULT_CACHE_DIR, validation_alias="CACHE_DIR")
    cache_disk_enabled: bool = Field(default=True, validation_alias="CACHE_DISK_ENABLED")
    cache_ttl_seconds: PositiveFloat = Field(
        default=float(DEFAULT_TTL_SECONDS), validation_alias="CACHE_TTL_SECONDS"
    )
    cache_count_limit: PositiveInt = Field(
        default=DEFAULT_COUNT_LIMIT, validation_alias="CACHE_COUNT_LIMIT"
    )

    @field_validator("cache_dir", mode="after")
    @classmethod
    def _expand_cache_dir(cls, value: Path) -> Path:
        return value.expanduser()

    @property
    def disk_cache_dir(self) -> Path | None:
        """Directory for the disk tier, or ``None`` when disk caching is off."""

        return self.cache_dir if self.cache_disk_enabled else None

    @property
    def tmdb_base(self) -> str:
        return str(self.tmdb_base_url).rstrip("/")

    model_config = SettingsConfigDict(case_sensitive=False)
