"""Selection and overlay of the pinned first-page subset."""

from __future__ import annotations

from typing import Iterable, Sequence

from .models import DisplayRecord
from .ranking import rank

FIRST_PAGE_SIZE = 40
DOMESTIC_MARKERS: tuple[str, ...] = ("hindi", "dubbed")


def is_preferred(
    record: DisplayRecord,
    preferred_languages: Iterable[str],
    *,
    include_hindi_hollywood: bool = True,
) -> bool:
    """Whether a record belongs to the preferred first-page audience."""

    language = record.language.lower()
    if language in preferred_languages:
        return True
    if not include_hindi_hollywood or language != "en":
        return False
    text = f"{record.title} {record.overview} {record.details}".lower()
    return any(marker in text for marker in DOMESTIC_MARKERS)


def select_pinned(
    records: Sequence[DisplayRecord],
    preferred_languages: Iterable[str],
    *,
    include_hindi_hollywood: bool = True,
    limit: int = FIRST_PAGE_SIZE,
) -> list[int | str]:
    """Return the ordered ids pinned to the front of the default first page.

    Falls back to the head of the full ranking when no record qualifies.
    """

    languages = {code.lower() for code in preferred_languages}
    preferred = [
        record
        for record in records
        if is_preferred(
            record, languages, include_hindi_hollywood=include_hindi_hollywood
        )
    ]
    base = rank(preferred) if preferred else rank(records)
    return [record.id for record in base[:limit]]


def apply_pinned_order(
    records: Sequence[DisplayRecord], pinned_ids: Sequence[int | str]
) -> list[DisplayRecord]:
    """Move pinned records to the front without duplicating any record."""

    if not pinned_ids:
        return list(records)
    by_id = {record.id: record for record in records}
    pinned = [by_id[record_id] for record_id in pinned_ids if record_id in by_id]
    pinned_set = set(pinned_ids)
    rest = [record for record in records if record.id not in pinned_set]
    return [*pinned, *rest]
