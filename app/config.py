"""Application configuration models."""

from __future__ import annotations

from functools import lru_cache
from typing import Annotated, Iterable, Literal

from pydantic import Field, HttpUrl, field_validator, model_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


DEFAULT_PREFERRED_LANGUAGES: tuple[str, ...] = ("hi", "ta", "te", "ml", "kn")


class Settings(BaseSettings):
    """Settings loaded from environment variables or a .env file."""

    app_name: str = Field(default="Vegamovies", alias="APP_NAME")
    server_host: str = Field(default="0.0.0.0", alias="HOST")
    server_port: int = Field(default=3000, alias="PORT")

    tmdb_api_key: str | None = Field(default=None, alias="TMDB_API_KEY")
    tmdb_api_url: HttpUrl = Field(
        default="https://api.themoviedb.org/3", alias="TMDB_API_URL"
    )
    poster_base_url: str = Field(
        default="https://image.tmdb.org/t/p/w500", alias="POSTER_BASE_URL"
    )
    placeholder_poster_url: str = Field(
        default="https://via.placeholder.com/500x750?text=No+Image",
        alias="PLACEHOLDER_POSTER_URL",
    )

    max_concurrent_requests: int = Field(
        default=4, alias="MAX_CONCURRENT_REQUESTS", ge=1, le=32
    )
    fetch_retries: int = Field(default=3, alias="FETCH_RETRIES", ge=0, le=10)
    fetch_backoff_seconds: float = Field(
        default=0.5, alias="FETCH_BACKOFF_SECONDS", ge=0
    )
    ingest_timeout_seconds: float = Field(
        default=300.0, alias="INGEST_TIMEOUT_SECONDS", gt=0
    )

    year_start: int = Field(default=2000, alias="YEAR_START", ge=1900)
    full_load_year_start: int = Field(
        default=2015, alias="FULL_LOAD_YEAR_START", ge=1900
    )
    pages_per_year: int = Field(default=3, alias="PAGES_PER_YEAR", ge=1, le=20)

    preferred_languages: Annotated[tuple[str, ...], NoDecode] = Field(
        default=DEFAULT_PREFERRED_LANGUAGES, alias="PREFERRED_LANGUAGES"
    )
    include_hindi_hollywood: bool = Field(
        default=True, alias="INCLUDE_HINDI_HOLLYWOOD"
    )

    cache_key: str = Field(default="vega_cached_movies_v1", alias="CACHE_KEY")
    cache_ttl_hours: float = Field(default=24.0, alias="CACHE_TTL_HOURS", gt=0)
    database_url: str = Field(
        default="sqlite+aiosqlite:///./vegacatalog.db", alias="DATABASE_URL"
    )

    static_movies_url: str | None = Field(
        default="./movies.json", alias="STATIC_MOVIES_URL"
    )
    snapshot_output: str = Field(default="movies.json", alias="SNAPSHOT_OUTPUT")

    environment: Literal["development", "production"] = Field(
        default="development", alias="ENVIRONMENT"
    )

    @field_validator("preferred_languages", mode="before")
    @classmethod
    def _parse_preferred_languages(cls, value: object) -> tuple[str, ...]:
        """Normalise language code selections from environment values."""

        if value is None:
            return DEFAULT_PREFERRED_LANGUAGES
        if isinstance(value, str):
            raw_values = [part.strip() for part in value.split(",")]
        elif isinstance(value, Iterable):
            raw_values = [str(part).strip() for part in value]
        else:
            raise TypeError(
                "PREFERRED_LANGUAGES must be a string or iterable of strings"
            )

        cleaned: list[str] = []
        for entry in raw_values:
            code = entry.lower()
            if code and code not in cleaned:
                cleaned.append(code)
        if not cleaned:
            return DEFAULT_PREFERRED_LANGUAGES
        return tuple(cleaned)

    @field_validator("tmdb_api_key", "static_movies_url", mode="before")
    @classmethod
    def _strip_blank(cls, value: object) -> object:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @model_validator(mode="after")
    def _check_year_range(self) -> "Settings":
        """Ensure the limited-load range ends before the full-load range."""

        if self.year_start > self.full_load_year_start:
            raise ValueError("YEAR_START must not be after FULL_LOAD_YEAR_START")
        return self

    @property
    def cache_ttl_ms(self) -> int:
        return int(self.cache_ttl_hours * 60 * 60 * 1000)

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")


@lru_cache
def get_settings() -> Settings:
    """Return a cached settings instance."""

    return Settings()  # type: ignore[call-arg]


settings = get_settings()
