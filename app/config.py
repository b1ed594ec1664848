"""Application configuration models."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, HttpUrl, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .categories import (
    LISTING_CATEGORIES,
    NOW_PLAYING,
    POPULAR,
    TOP_RATED,
    UPCOMING,
    ListingCategory,
)


class Settings(BaseSettings):
    """Settings loaded from environment variables or a .env file."""

    app_name: str = Field(default="TMDb Trailers", alias="APP_NAME")
    server_host: str = Field(default="0.0.0.0", alias="HOST")
    server_port: int = Field(default=3000, alias="PORT")

    tmdb_api_key: str | None = Field(default=None, alias="TMDB_API_KEY")
    tmdb_api_url: HttpUrl = Field(
        default="https://api.themoviedb.org/3", alias="TMDB_API_URL"
    )
    language: str = Field(default="en-US", alias="TMDB_LANGUAGE")
    region: str | None = Field(default=None, alias="TMDB_REGION")

    enable_trailers_upcoming: bool = Field(
        default=True, alias="ENABLE_TRAILERS_UPCOMING"
    )
    enable_trailers_now_playing: bool = Field(
        default=True, alias="ENABLE_TRAILERS_NOW_PLAYING"
    )
    enable_trailers_popular: bool = Field(
        default=False, alias="ENABLE_TRAILERS_POPULAR"
    )
    enable_trailers_top_rated: bool = Field(
        default=False, alias="ENABLE_TRAILERS_TOP_RATED"
    )

    trailer_limit: int = Field(default=20, alias="TRAILER_LIMIT", ge=1, le=500)
    intro_count: int = Field(default=1, alias="INTRO_COUNT", ge=0, le=50)

    cache_path: Path = Field(
        default=Path("./cache/tmdb-intro-trailers"), alias="CACHE_PATH"
    )
    ffmpeg_path: str | None = Field(default=None, alias="FFMPEG_PATH")

    metadata_cache_seconds: int = Field(
        default=86_400, alias="METADATA_CACHE_TTL", ge=60
    )
    all_trailers_cache_seconds: int | None = Field(
        default=None, alias="ALL_TRAILERS_CACHE_TTL", ge=60
    )
    intro_refresh_interval_seconds: int = Field(
        default=86_400, alias="INTRO_REFRESH_INTERVAL", ge=3_600
    )
    register_failed_downloads: bool = Field(
        default=True, alias="REGISTER_FAILED_DOWNLOADS"
    )
    download_timeout_seconds: int = Field(
        default=600, alias="DOWNLOAD_TIMEOUT", ge=30
    )

    database_url: str = Field(
        default="sqlite+aiosqlite:///./tmdb_trailers.db", alias="DATABASE_URL"
    )

    environment: Literal["development", "production"] = Field(
        default="development", alias="ENVIRONMENT"
    )

    @field_validator("region", "tmdb_api_key", "ffmpeg_path", mode="before")
    @classmethod
    def _strip_blank(cls, value: object) -> object:
        if isinstance(value, str):
            stripped = value.strip()
            return stripped or None
        return value

    @field_validator("all_trailers_cache_seconds", mode="before")
    @classmethod
    def _parse_optional_ttl(cls, value: object) -> object:
        """Treat blank or non-positive values as "never expire"."""

        if value is None:
            return None
        if isinstance(value, str):
            value = value.strip()
            if not value:
                return None
        try:
            seconds = int(value)  # type: ignore[arg-type]
        except (TypeError, ValueError):
            return value
        return seconds if seconds > 0 else None

    @field_validator("language", mode="before")
    @classmethod
    def _normalize_language(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip() or "en-US"
        return value

    @property
    def enabled_categories(self) -> tuple[ListingCategory, ...]:
        """Return the categories feeding the intro reel, in canonical order."""

        flags = {
            UPCOMING.key: self.enable_trailers_upcoming,
            NOW_PLAYING.key: self.enable_trailers_now_playing,
            POPULAR.key: self.enable_trailers_popular,
            TOP_RATED.key: self.enable_trailers_top_rated,
        }
        return tuple(
            category for category in LISTING_CATEGORIES if flags[category.key]
        )

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")


@lru_cache
def get_settings() -> Settings:
    """Return a cached settings instance."""

    return Settings()  # type: ignore[call-arg]


settings = get_settings()
