"""Tests for the TMDB discovery client."""

from __future__ import annotations

from datetime import date
from typing import Any, cast

import httpx
import pytest

from app.config import Settings
from app.services.fetcher import RateLimitedFetcher
from app.services.tmdb import MissingCredentialError, TMDBDiscoveryClient

TODAY = date(2025, 6, 15)


@pytest.fixture
def anyio_backend() -> str:
    """Force AnyIO tests to run on asyncio without requiring trio."""

    return "asyncio"


def build_settings(**overrides: Any) -> Settings:
    """Return a settings object with defaults suitable for tests."""

    base: dict[str, Any] = {
        "TMDB_API_KEY": "tmdb-key",
        "TMDB_API_URL": "https://api.example.com/3",
    }
    base.update(overrides)
    return Settings(_env_file=None, **base)  # type: ignore[arg-type]


def build_client(handler, **overrides: Any) -> tuple[TMDBDiscoveryClient, httpx.AsyncClient]:
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    fetcher = RateLimitedFetcher(http_client, backoff_seconds=0)
    return TMDBDiscoveryClient(build_settings(**overrides), fetcher), http_client


def offline_client(**overrides: Any) -> TMDBDiscoveryClient:
    """Client for URL-building tests that never performs requests."""

    return TMDBDiscoveryClient(
        build_settings(**overrides), cast(RateLimitedFetcher, object())
    )


def test_client_requires_api_key() -> None:
    with pytest.raises(MissingCredentialError):
        offline_client(TMDB_API_KEY="")


def test_catalog_url_plan_covers_full_and_limited_years() -> None:
    client = offline_client()

    urls = client.build_catalog_urls(TODAY)
    params = [httpx.URL(url).params for url in urls]

    assert len(urls) == 11 * 3 + 15
    assert (params[0]["primary_release_year"], params[0]["page"]) == ("2025", "1")
    assert (params[2]["primary_release_year"], params[2]["page"]) == ("2025", "3")
    assert [p["primary_release_year"] for p in params[33:]] == [
        str(year) for year in range(2014, 1999, -1)
    ]
    assert all(p["page"] == "1" for p in params[33:])
    assert all(p["release_date.lte"] == "2025-06-15" for p in params)
    assert all(p["api_key"] == "tmdb-key" for p in params)
    assert all(p["sort_by"] == "popularity.desc" for p in params)
    assert httpx.URL(urls[0]).path == "/3/discover/movie"


def test_preferred_urls_target_regional_languages() -> None:
    client = offline_client(PREFERRED_LANGUAGES="hi,ta")

    params = [httpx.URL(url).params for url in client.build_preferred_urls(TODAY)]

    assert [p["with_original_language"] for p in params] == ["hi", "ta"]
    assert all(p["region"] == "IN" for p in params)
    assert all("primary_release_year" not in p for p in params)


@pytest.mark.anyio("asyncio")
async def test_fetch_catalog_normalizes_released_results() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith("/genre/movie/list"):
            return httpx.Response(200, json={"genres": [{"id": 18, "name": "Drama"}]})
        year = request.url.params.get("primary_release_year")
        page = request.url.params.get("page")
        if year == "2025" and page == "1":
            return httpx.Response(
                200,
                json={
                    "page": 1,
                    "results": [
                        {
                            "id": 1,
                            "title": "Released",
                            "release_date": "2025-02-01",
                            "genre_ids": [18],
                            "original_language": "hi",
                        },
                        {"id": 2, "title": "Upcoming", "release_date": "2025-09-01"},
                    ],
                },
            )
        if year == "2024" and page == "2":
            return httpx.Response(404, json={"status_message": "not found"})
        return httpx.Response(200, json={"page": 1, "results": []})

    client, http_client = build_client(handler)
    async with http_client:
        movies = await client.fetch_catalog(today=TODAY)

    assert [movie.id for movie in movies] == [1]
    assert movies[0].genres == ["Drama"]
    assert movies[0].category == "drama"


@pytest.mark.anyio("asyncio")
async def test_genre_map_failure_returns_empty_map() -> None:
    client, http_client = build_client(lambda _: httpx.Response(401, json={}))
    async with http_client:
        assert await client.fetch_genre_map() == {}
