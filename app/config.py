"""Application configuration models."""

from __future__ import annotations

from functools import lru_cache
from typing import Annotated, Iterable, Literal

from pydantic import Field, HttpUrl, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from .feed_sources import FEED_SOURCES, FeedSourceDefinition


DEFAULT_FEED_SOURCE_KEYS: tuple[str, ...] = tuple(
    definition.key for definition in FEED_SOURCES
)


class Settings(BaseSettings):
    """Settings loaded from environment variables or a .env file."""

    app_name: str = Field(default="Trailer Feed", alias="APP_NAME")
    server_host: str = Field(default="0.0.0.0", alias="HOST")
    server_port: int = Field(default=3000, alias="PORT")

    tmdb_api_url: HttpUrl = Field(
        default="https://api.themoviedb.org/3", alias="TMDB_API_URL"
    )
    tmdb_api_key: str | None = Field(default=None, alias="TMDB_API_KEY")
    tmdb_image_url: str = Field(
        default="https://image.tmdb.org/t/p", alias="TMDB_IMAGE_URL"
    )
    tmdb_language: str = Field(default="en-US", alias="TMDB_LANGUAGE")

    request_max_attempts: int = Field(
        default=3, alias="REQUEST_MAX_ATTEMPTS", ge=1, le=10
    )
    request_timeout_seconds: float = Field(
        default=10.0, alias="REQUEST_TIMEOUT", gt=0, le=120
    )
    backoff_base_seconds: float = Field(
        default=1.0, alias="BACKOFF_BASE_SECONDS", ge=0, le=60
    )

    feed_max_results: int = Field(default=24, alias="FEED_MAX_RESULTS", ge=1, le=200)
    movie_source_limit: int = Field(
        default=30, alias="MOVIE_SOURCE_LIMIT", ge=1, le=100
    )
    series_source_limit: int = Field(
        default=15, alias="SERIES_SOURCE_LIMIT", ge=1, le=100
    )
    video_site: str = Field(default="YouTube", alias="VIDEO_SITE")
    video_fetch_concurrency: int = Field(
        default=8, alias="VIDEO_FETCH_CONCURRENCY", ge=1, le=64
    )

    feed_source_keys: Annotated[tuple[str, ...], NoDecode] = Field(
        default=DEFAULT_FEED_SOURCE_KEYS,
        alias="FEED_SOURCES",
    )

    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    environment: Literal["development", "production"] = Field(
        default="development", alias="ENVIRONMENT"
    )

    @field_validator("feed_source_keys", mode="before")
    @classmethod
    def _parse_feed_source_keys(cls, value: object) -> tuple[str, ...]:
        """Normalise feed source selections from environment values."""

        if value is None:
            return DEFAULT_FEED_SOURCE_KEYS
        if isinstance(value, str):
            raw_values = [part.strip() for part in value.split(",")]
        elif isinstance(value, Iterable):
            raw_values = [str(part).strip() for part in value]
        else:
            raise TypeError("FEED_SOURCES must be a string or iterable of strings")

        cleaned: list[str] = []
        for entry in raw_values:
            if not entry:
                continue
            slug = entry.replace("_", "-").replace(" ", "-").lower()
            slug = "-".join(filter(None, slug.split("-")))
            if not slug:
                continue
            if slug not in DEFAULT_FEED_SOURCE_KEYS:
                raise ValueError("Unknown feed sources configured")
            if slug not in cleaned:
                cleaned.append(slug)
        if not cleaned:
            return DEFAULT_FEED_SOURCE_KEYS
        return tuple(cleaned)

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalise_log_level(cls, value: object) -> str:
        if value is None:
            return "INFO"
        return str(value).strip().upper() or "INFO"

    @property
    def feed_sources(self) -> tuple[FeedSourceDefinition, ...]:
        """Return ordered feed source definitions for the selected keys."""

        definition_map = {definition.key: definition for definition in FEED_SOURCES}
        return tuple(definition_map[key] for key in self.feed_source_keys)

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")


@lru_cache
def get_settings() -> Settings:
    """Return a cached settings instance."""

    return Settings()  # type: ignore[call-arg]


settings = get_settings()
