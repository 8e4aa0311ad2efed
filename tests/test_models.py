from app.models import CacheEntry, DisplayRecord, RawMovie


def test_raw_movie_from_payload_coerces_fields():
    movie = RawMovie.from_payload(
        {
            "id": 10,
            "title": "Example",
            "popularity": float("nan"),
            "original_language": 3,
            "genre_ids": [1, "2", True, 3],
        }
    )

    assert movie.id == 10
    assert movie.popularity == 0.0
    assert movie.original_language == ""
    assert movie.genre_ids == [1, 3]


def test_raw_movie_from_non_mapping():
    assert RawMovie.from_payload("nope").id is None


def test_display_record_defaults_from_snapshot_shape():
    record = DisplayRecord.model_validate(
        {
            "id": 5,
            "title": "Snapshot",
            "date": None,
            "popularity": "high",
            "language": "EN",
            "platform": "netflix",
        }
    )

    assert record.date == ""
    assert record.popularity == 0.0
    assert record.language == "en"
    assert record.category == "hollywood"
    assert record.genres == []


def test_cache_entry_round_trips_records():
    entry = CacheEntry(timestamp=1, movies=[DisplayRecord(id=1, title="A")])
    data = entry.model_dump(mode="json")

    assert data["timestamp"] == 1
    assert CacheEntry.model_validate(data) == entry
