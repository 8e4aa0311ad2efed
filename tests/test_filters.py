"""Predicate behaviour tests for search, categories, tags and facets."""

from __future__ import annotations

import pytest

from app.filters import (
    category_predicate,
    facet_predicate,
    search_predicate,
    tags_predicate,
)
from app.models import DisplayRecord


def make_record(**overrides: object) -> DisplayRecord:
    data: dict[str, object] = {
        "id": 1,
        "title": "Sample Movie",
        "date": "2025-03-01",
        "details": "Drama | A quiet story",
        "category": "drama",
        "genres": ["Drama"],
    }
    data.update(overrides)
    return DisplayRecord.model_validate(data)


@pytest.mark.parametrize("term", ["", "   ", None])
def test_blank_search_selects_default_view(term: str | None) -> None:
    assert search_predicate(term) is None


def test_search_matches_title_or_details_case_insensitively() -> None:
    predicate = search_predicate("QUIET")
    assert predicate is not None

    assert predicate(make_record())
    assert predicate(make_record(title="Quiet Place", details="Horror | x"))
    assert not predicate(make_record(title="Loud", details="Action | bang"))


def test_category_predicates() -> None:
    hollywood = category_predicate("HOLLYWOOD MOVIES", year=2025)
    dual = category_predicate("DUAL JUNCTION", year=2025)
    new_bollywood = category_predicate("BOLLYWOOD MOVIES [NEW]", year=2025)
    assert hollywood and dual and new_bollywood

    assert hollywood(make_record(category="hollywood"))
    assert not hollywood(make_record())
    assert dual(make_record(details="Action | dual audio release"))
    assert new_bollywood(make_record(details="Drama | Hindi film"))
    assert not new_bollywood(make_record(details="Drama | Hindi film", date="2024-01-01"))
    assert category_predicate("ALL MOVIES", year=2025) is None


def test_tags_predicate_is_conjunctive() -> None:
    predicate = tags_predicate(["drama", " quiet "])
    assert predicate is not None

    assert predicate(make_record())
    assert not predicate(make_record(details="Drama | loud story"))
    assert tags_predicate([]) is None
    assert tags_predicate(None) is None


def test_facets() -> None:
    hindi_english = facet_predicate("Hindi-English")
    multi = facet_predicate("Multi Audio")
    genre = facet_predicate("Action")
    year = facet_predicate("2025")
    assert hindi_english and multi and genre and year

    assert hindi_english(make_record(details="Hindi, English | story"))
    assert not hindi_english(make_record(details="Hindi | story"))
    assert multi(make_record(details="Multi audio | story"))
    assert genre(make_record(genres=["Action"], details="x", category="x"))
    assert genre(make_record(category="action", details="x", genres=[]))
    assert not genre(make_record())
    assert year(make_record())
    assert not year(make_record(date="2024-12-31"))
    assert facet_predicate("Everything") is None
