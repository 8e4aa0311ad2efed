"""Conversion of raw discover results into display records."""

from __future__ import annotations

import re
from datetime import date, datetime
from typing import Any, Mapping

from .models import DisplayRecord, RawMovie

POSTER_BASE_URL = "https://image.tmdb.org/t/p/w500"
PLACEHOLDER_POSTER_URL = "https://via.placeholder.com/500x750?text=No+Image"

SENTINEL_DATE = "0000-01-01"
OVERVIEW_PREVIEW_LENGTH = 80
NO_DESCRIPTION = "No description"
UNKNOWN_GENRE = "Movie"
FALLBACK_CATEGORY = "hollywood"

YEAR_RE = re.compile(r"^\d{4}$")
FULL_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
WHITESPACE_RE = re.compile(r"\s+")


def normalize_date_for_sort(raw: object) -> str:
    """Return ``YYYY-MM-DD`` for a sortable date or the sentinel otherwise."""

    if not isinstance(raw, str) or not raw:
        return SENTINEL_DATE
    if YEAR_RE.match(raw):
        candidate = f"{raw}-01-01"
    elif FULL_DATE_RE.match(raw):
        candidate = raw
    else:
        return SENTINEL_DATE
    try:
        datetime.strptime(candidate, "%Y-%m-%d")
    except ValueError:
        return SENTINEL_DATE
    return candidate


def is_released(raw: object, today: date) -> bool:
    """Whether ``raw`` is a valid date on or before ``today``."""

    normalized = normalize_date_for_sort(raw)
    if normalized == SENTINEL_DATE:
        return False
    return normalized <= today.isoformat()


def format_display_date(raw: object) -> str:
    if isinstance(raw, str) and (FULL_DATE_RE.match(raw) or YEAR_RE.match(raw)):
        return raw
    return "Unknown"


def truncate_overview(overview: str | None) -> str:
    if not overview:
        return NO_DESCRIPTION
    if len(overview) > OVERVIEW_PREVIEW_LENGTH:
        return f"{overview[:OVERVIEW_PREVIEW_LENGTH]}..."
    return overview


def movie_link(title: str) -> str:
    return f"/movie/{WHITESPACE_RE.sub('-', title.lower())}"


def build_poster_url(
    path: str | None,
    *,
    base_url: str = POSTER_BASE_URL,
    placeholder: str = PLACEHOLDER_POSTER_URL,
) -> str:
    if not path:
        return placeholder
    if path.startswith("http"):
        return path
    return f"{base_url}{path}"


def resolve_genres(genre_ids: list[int], genre_map: Mapping[int, str] | None) -> list[str]:
    lookup = genre_map or {}
    return [lookup.get(genre_id) or UNKNOWN_GENRE for genre_id in genre_ids]


def parse_genre_map(payload: Any) -> dict[int, str]:
    """Build a genre id to name map from a ``/genre/movie/list`` response."""

    if not isinstance(payload, Mapping):
        return {}
    genres = payload.get("genres")
    if not isinstance(genres, list):
        return {}
    mapping: dict[int, str] = {}
    for entry in genres:
        if not isinstance(entry, Mapping):
            continue
        genre_id = entry.get("id")
        name = entry.get("name")
        if isinstance(genre_id, int) and isinstance(name, str) and name:
            mapping[genre_id] = name
    return mapping


def normalize(
    raw: RawMovie | Mapping[str, Any],
    fallback_year: str | int | None = None,
    *,
    genre_map: Mapping[int, str] | None = None,
    poster_base_url: str = POSTER_BASE_URL,
    placeholder_poster_url: str = PLACEHOLDER_POSTER_URL,
) -> DisplayRecord:
    """Convert a raw discover result into a :class:`DisplayRecord`.

    Every field degrades to a safe default so malformed payloads never raise.
    Records without a usable identifier receive an empty string id and are
    expected to be discarded by the caller's release filter or deduplication.
    """

    movie = raw if isinstance(raw, RawMovie) else RawMovie.from_payload(raw)

    title = movie.title or ""
    genres = resolve_genres(movie.genre_ids, genre_map)
    category = genres[0].lower() if genres else FALLBACK_CATEGORY

    fallback = "" if fallback_year is None else str(fallback_year).strip()
    record_date = movie.release_date or fallback

    return DisplayRecord(
        id=movie.id if movie.id is not None else "",
        title=title,
        poster=build_poster_url(
            movie.poster_path,
            base_url=poster_base_url,
            placeholder=placeholder_poster_url,
        ),
        details=f"{', '.join(genres)} | {truncate_overview(movie.overview)}",
        date=record_date,
        popularity=movie.popularity,
        language=movie.original_language.lower(),
        overview=movie.overview or "",
        category=category,
        genres=genres,
        link=movie_link(title),
    )


def normalize_results(
    payload: Any,
    *,
    today: date,
    genre_map: Mapping[int, str] | None = None,
    poster_base_url: str = POSTER_BASE_URL,
    placeholder_poster_url: str = PLACEHOLDER_POSTER_URL,
) -> list[DisplayRecord]:
    """Normalize the ``results`` of a discover page, keeping released movies only."""

    if not isinstance(payload, Mapping):
        return []
    results = payload.get("results")
    if not isinstance(results, list):
        return []

    records: list[DisplayRecord] = []
    for entry in results:
        movie = RawMovie.from_payload(entry)
        if movie.id is None or not is_released(movie.release_date, today):
            continue
        records.append(
            normalize(
                movie,
                (movie.release_date or "")[:4],
                genre_map=genre_map,
                poster_base_url=poster_base_url,
                placeholder_poster_url=placeholder_poster_url,
            )
        )
    return records
