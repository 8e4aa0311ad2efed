"""Pure predicates used to derive the active catalog view."""

from __future__ import annotations

import re
from typing import Callable, Iterable

from .models import DisplayRecord

Predicate = Callable[[DisplayRecord], bool]

CATEGORY_KEYS = {
    "BOLLYWOOD MOVIES": "bollywood",
    "HOLLYWOOD MOVIES": "hollywood",
    "DUAL JUNCTION": "dual",
    "BOLLYWOOD MOVIES [NEW]": "bollywood-new",
}
DUAL_AUDIO_FACETS = {
    "Hindi-English": ("hindi", "english"),
    "Hindi-Japanese": ("hindi", "japanese"),
    "Hindi-Korean": ("hindi", "korean"),
}
GENRE_FACETS = ("Action", "Comedy", "Drama", "Romance", "Thriller", "Animation")
YEAR_FACET_RE = re.compile(r"^\d{4}$")


def search_predicate(term: str | None) -> Predicate | None:
    """Match titles or details containing ``term``; ``None`` for a blank term."""

    needle = (term or "").strip().lower()
    if not needle:
        return None

    def _matches(record: DisplayRecord) -> bool:
        return needle in record.title.lower() or needle in record.details.lower()

    return _matches


def category_predicate(label: str | None, *, year: int) -> Predicate | None:
    """Predicate for one of the category buttons.

    ``year`` is the release year the "new" Bollywood category matches against.
    Unknown labels select the default view.
    """

    key = CATEGORY_KEYS.get((label or "").strip().upper())
    if key is None:
        return None
    if key == "dual":
        return lambda record: "dual audio" in record.details.lower()
    if key == "bollywood-new":
        year_text = str(year)
        return lambda record: (
            "hindi" in record.details.lower() and year_text in record.date
        )
    return lambda record: record.category == key


def tags_predicate(tags: Iterable[str] | None) -> Predicate | None:
    """All active tags must appear in the details or the category."""

    active = [tag.strip().lower() for tag in tags or () if tag and tag.strip()]
    if not active:
        return None

    def _matches(record: DisplayRecord) -> bool:
        details = record.details.lower()
        category = record.category.lower()
        return all(tag in details or tag in category for tag in active)

    return _matches


def facet_predicate(label: str | None) -> Predicate | None:
    """Predicate for the dropdown facets (dual audio, genre, year)."""

    facet = (label or "").strip()
    if facet in DUAL_AUDIO_FACETS:
        first, second = DUAL_AUDIO_FACETS[facet]
        return lambda record: (
            first in record.details.lower() and second in record.details.lower()
        )
    if facet == "Multi Audio":
        return lambda record: (
            "multi" in record.details.lower() or "dual" in record.details.lower()
        )
    if facet in GENRE_FACETS:
        genre = facet.lower()
        return lambda record: (
            genre in record.details.lower()
            or record.category == genre
            or any(entry.lower() == genre for entry in record.genres)
        )
    if YEAR_FACET_RE.match(facet):
        return lambda record: facet in record.date
    return None
