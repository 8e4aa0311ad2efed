"""Deduplication and canonical ordering of display records."""

from __future__ import annotations

from typing import Iterable

from .models import DisplayRecord
from .normalizer import normalize_date_for_sort

LANGUAGE_RANKS = {"hi": 0, "en": 1}
OTHER_LANGUAGE_RANK = 2


def language_rank(language: str | None) -> int:
    return LANGUAGE_RANKS.get((language or "").lower(), OTHER_LANGUAGE_RANK)


def dedupe(records: Iterable[DisplayRecord]) -> list[DisplayRecord]:
    """Keep the first record seen for every id, preserving input order."""

    unique: dict[int | str, DisplayRecord] = {}
    for record in records:
        if record.id not in unique:
            unique[record.id] = record
    return list(unique.values())


def sort_key(record: DisplayRecord) -> tuple[int, int, int, float, int, str]:
    """Ascending sort key matching the catalog's display order.

    Newest dates come first, then higher popularity, then the Hindi/English
    language preference and finally the case-insensitive title. Sentinel
    dates (``0000-01-01``) negate to zero and therefore sort after every
    real date.
    """

    year, month, day = (int(part) for part in normalize_date_for_sort(record.date).split("-"))
    return (
        -year,
        -month,
        -day,
        -record.popularity,
        language_rank(record.language),
        record.title.casefold(),
    )


def rank(records: Iterable[DisplayRecord]) -> list[DisplayRecord]:
    """Deduplicate ``records`` and return them in canonical order."""

    return sorted(dedupe(records), key=sort_key)
