"""Data models describing raw API movies and normalized catalog records."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, Field, field_validator


def coerce_popularity(value: Any) -> float:
    """Return a finite popularity score, defaulting to ``0``."""

    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0.0
    if not math.isfinite(value):
        return 0.0
    return float(value)


def _optional_text(value: Any) -> str | None:
    if isinstance(value, str):
        return value
    return None


@dataclass(slots=True)
class RawMovie:
    """Untrusted movie entry as returned by the discover endpoint."""

    id: int | str | None
    title: str | None = None
    poster_path: str | None = None
    release_date: str | None = None
    popularity: float = 0.0
    original_language: str = ""
    overview: str | None = None
    genre_ids: list[int] = field(default_factory=list)

    @classmethod
    def from_payload(cls, data: Any) -> "RawMovie":
        """Build a raw movie from an arbitrary JSON object without raising."""

        if not isinstance(data, Mapping):
            return cls(id=None)

        raw_id = data.get("id")
        if isinstance(raw_id, bool) or not isinstance(raw_id, (int, str)):
            raw_id = None

        raw_genres = data.get("genre_ids")
        genre_ids: list[int] = []
        if isinstance(raw_genres, (list, tuple)):
            genre_ids = [
                genre
                for genre in raw_genres
                if isinstance(genre, int) and not isinstance(genre, bool)
            ]

        language = data.get("original_language")

        return cls(
            id=raw_id,
            title=_optional_text(data.get("title")),
            poster_path=_optional_text(data.get("poster_path")),
            release_date=_optional_text(data.get("release_date")),
            popularity=coerce_popularity(data.get("popularity")),
            original_language=language if isinstance(language, str) else "",
            overview=_optional_text(data.get("overview")),
            genre_ids=genre_ids,
        )


class DisplayRecord(BaseModel):
    """Canonical movie card rendered by the catalog."""

    model_config = ConfigDict(frozen=True)

    id: int | str
    title: str = ""
    poster: str = ""
    details: str = ""
    date: str = ""
    popularity: float = 0.0
    language: str = ""
    overview: str = ""
    category: str = "hollywood"
    genres: list[str] = Field(default_factory=list)
    link: str = ""

    @field_validator("title", "poster", "details", "date", "overview", "link", mode="before")
    @classmethod
    def _text_or_blank(cls, value: object) -> object:
        if value is None:
            return ""
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("popularity", mode="before")
    @classmethod
    def _popularity_default(cls, value: object) -> float:
        return coerce_popularity(value)

    @field_validator("language", "category", mode="before")
    @classmethod
    def _lowercase(cls, value: object) -> object:
        if value is None:
            return ""
        if isinstance(value, str):
            return value.lower()
        return value

    @field_validator("genres", mode="before")
    @classmethod
    def _genre_labels(cls, value: object) -> object:
        if value is None:
            return []
        if isinstance(value, (list, tuple)):
            return [str(entry) for entry in value if entry]
        return value


class CacheEntry(BaseModel):
    """Persisted cache payload: epoch-millisecond timestamp plus records."""

    timestamp: int
    movies: list[DisplayRecord] = Field(default_factory=list)
