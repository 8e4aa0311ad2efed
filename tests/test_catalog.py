"""Catalog store, filtering and pagination tests."""

from __future__ import annotations

from datetime import date

import pytest

from app.catalog import CatalogStore, CatalogView, page_bounds, total_pages
from app.filters import search_predicate, tags_predicate
from app.models import DisplayRecord

TODAY = date(2025, 6, 15)
PREFERRED = ("hi", "ta", "te", "ml", "kn")


def make_record(record_id: int | str, **overrides: object) -> DisplayRecord:
    data: dict[str, object] = {
        "id": record_id,
        "title": f"Movie {record_id}",
        "date": "2024-01-01",
        "language": "en",
    }
    data.update(overrides)
    return DisplayRecord.model_validate(data)


def numbered_records(count: int) -> list[DisplayRecord]:
    # Descending popularity keeps rank order equal to index order.
    return [make_record(index, popularity=count - index) for index in range(count)]


def test_page_bounds_and_total_pages() -> None:
    assert page_bounds(1) == (0, 40)
    assert page_bounds(2) == (40, 55)
    assert page_bounds(3) == (55, 70)
    assert total_pages(100) == 5
    assert total_pages(40) == 1
    assert total_pages(41) == 2
    assert total_pages(0) == 1
    with pytest.raises(ValueError):
        page_bounds(0)


def test_view_slices_pages_from_ranked_records() -> None:
    view = CatalogView(records=tuple(numbered_records(100)))

    assert [record.id for record in view.page(1)] == list(range(0, 40))
    assert [record.id for record in view.page(2)] == list(range(40, 55))
    assert [record.id for record in view.page(3)] == list(range(55, 70))
    assert view.page(9) == []
    assert view.total_pages == 5


def test_replace_canonical_filters_ranks_and_pins() -> None:
    store = CatalogStore(preferred_languages=PREFERRED)
    records = [
        make_record("future", date="2030-01-01"),
        make_record("invalid", date="n/a"),
        make_record("en", date="2025-01-01", popularity=90),
        make_record("hi", language="hi", date="2020-01-01"),
        make_record("en", date="2019-01-01", title="Duplicate"),
    ]

    store.replace_canonical(records, today=TODAY, source="test")

    assert [record.id for record in store.canonical] == ["en", "hi"]
    assert store.canonical[0].title == "Movie en"
    assert list(store.pinned_ids) == ["hi"]
    assert [record.id for record in store.current_page()] == ["hi", "en"]
    assert store.source == "test"


def test_filters_replace_view_and_suppress_pins() -> None:
    store = CatalogStore(preferred_languages=PREFERRED)
    store.replace_canonical(
        [
            make_record(1, title="Dark Night", date="2025-01-01"),
            make_record(2, title="Bright Day", date="2024-01-01"),
            make_record(3, title="Night Shift", language="hi", date="2023-01-01"),
        ],
        today=TODAY,
    )
    store.set_page(2)

    view = store.apply_filter(search_predicate("night"))

    assert view.active_page == 1
    assert view.is_default is False
    assert [record.id for record in store.current_page()] == [1, 3]

    view = store.apply_filter(search_predicate("bright"))
    assert [record.id for record in view.page()] == [2]

    view = store.apply_filter(None)
    assert view.is_default is True
    assert [record.id for record in view.page()] == [3, 1, 2]


def test_tag_filter_requires_every_tag() -> None:
    store = CatalogStore(preferred_languages=PREFERRED)
    store.replace_canonical(
        [
            make_record(1, details="Action, Drama | story"),
            make_record(2, details="Action | story"),
            make_record(3, details="Drama | story", category="action"),
        ],
        today=TODAY,
    )

    view = store.apply_filter(tags_predicate(["action", "drama"]))

    assert sorted(record.id for record in view.records) == [1, 3]


def test_empty_filter_result_stays_empty() -> None:
    store = CatalogStore(preferred_languages=PREFERRED)
    store.replace_canonical(numbered_records(5), today=TODAY)

    view = store.apply_filter(search_predicate("no such title"))

    assert view.page() == []
    assert view.total_pages == 1


def test_set_page_rejects_zero() -> None:
    store = CatalogStore(preferred_languages=PREFERRED)

    with pytest.raises(ValueError):
        store.set_page(0)
