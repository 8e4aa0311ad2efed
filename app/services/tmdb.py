"""Utilities for discovering movies through The Movie Database (TMDB)."""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Iterable
from urllib.parse import urlencode

import httpx

from ..config import Settings
from ..models import DisplayRecord
from ..normalizer import normalize_results, parse_genre_map
from .fetcher import FetchFailedError, RateLimitedFetcher

logger = logging.getLogger(__name__)

PREFERRED_REGION = "IN"


class MissingCredentialError(RuntimeError):
    """Raised when a TMDB API key is required but not configured."""


class TMDBDiscoveryClient:
    """Builds discover requests and turns their pages into display records."""

    def __init__(self, settings: Settings, fetcher: RateLimitedFetcher):
        if not settings.tmdb_api_key:
            raise MissingCredentialError(
                "TMDB API key is required when initialising TMDBDiscoveryClient"
            )
        self._settings = settings
        self._fetcher = fetcher
        self._base_url = str(settings.tmdb_api_url).rstrip("/")

    def _url(self, path: str, params: dict[str, Any]) -> str:
        query = {"api_key": self._settings.tmdb_api_key, **params}
        return f"{self._base_url}{path}?{urlencode(query)}"

    def discover_url(
        self,
        *,
        today: date,
        page: int = 1,
        year: int | None = None,
        language: str | None = None,
        region: str | None = None,
    ) -> str:
        params: dict[str, Any] = {}
        if region:
            params["region"] = region
        if language:
            params["with_original_language"] = language
        if year is not None:
            params["primary_release_year"] = year
        params["sort_by"] = "popularity.desc"
        params["release_date.lte"] = today.isoformat()
        params["page"] = page
        return self._url("/discover/movie", params)

    def build_catalog_urls(self, today: date) -> list[str]:
        """Return the full-load request plan, newest years first.

        Years from the current one down to ``FULL_LOAD_YEAR_START`` fetch
        ``PAGES_PER_YEAR`` pages each; older years down to ``YEAR_START``
        fetch only their first page.
        """

        urls: list[str] = []
        full_start = self._settings.full_load_year_start
        for year in range(today.year, full_start - 1, -1):
            for page in range(1, self._settings.pages_per_year + 1):
                urls.append(self.discover_url(today=today, year=year, page=page))
        for year in range(min(full_start - 1, today.year), self._settings.year_start - 1, -1):
            urls.append(self.discover_url(today=today, year=year, page=1))
        return urls

    def build_preferred_urls(self, today: date) -> list[str]:
        return [
            self.discover_url(today=today, language=code, region=PREFERRED_REGION)
            for code in self._settings.preferred_languages
        ]

    async def fetch_genre_map(self) -> dict[int, str]:
        """Return the genre id to name map, or an empty map on failure."""

        url = self._url("/genre/movie/list", {"language": "en-US"})
        try:
            response = await self._fetcher.get_with_retry(url)
        except FetchFailedError as exc:
            logger.warning("Genre list unavailable: %s", exc)
            return {}
        if response.status_code >= 400:
            logger.warning("TMDB genre list failed: %s", response.text)
            return {}
        try:
            return parse_genre_map(response.json())
        except ValueError:
            logger.warning("Unexpected non-JSON TMDB genre response")
            return {}

    async def collect(
        self,
        urls: Iterable[str],
        *,
        today: date,
        genre_map: dict[int, str] | None = None,
    ) -> list[DisplayRecord]:
        """Fetch ``urls`` through the pool and normalize released results.

        The returned list is in completion order and may contain duplicates.
        """

        url_list = list(urls)
        movies: list[DisplayRecord] = []

        def _handle(payload: Any, _url: str) -> None:
            movies.extend(
                normalize_results(
                    payload,
                    today=today,
                    genre_map=genre_map,
                    poster_base_url=self._settings.poster_base_url,
                    placeholder_poster_url=self._settings.placeholder_poster_url,
                )
            )

        await self._fetcher.fetch_all(
            url_list,
            _handle,
            timeout=self._settings.ingest_timeout_seconds,
        )
        logger.info(
            "Collected %s released movies from %s discover requests",
            len(movies),
            len(url_list),
        )
        return movies

    async def fetch_catalog(
        self, *, today: date, genre_map: dict[int, str] | None = None
    ) -> list[DisplayRecord]:
        if genre_map is None:
            genre_map = await self.fetch_genre_map()
        return await self.collect(
            self.build_catalog_urls(today), today=today, genre_map=genre_map
        )

    async def fetch_preferred(
        self, *, today: date, genre_map: dict[int, str] | None = None
    ) -> list[DisplayRecord]:
        if genre_map is None:
            genre_map = await self.fetch_genre_map()
        return await self.collect(
            self.build_preferred_urls(today), today=today, genre_map=genre_map
        )


def create_fetcher(settings: Settings, http_client: httpx.AsyncClient) -> RateLimitedFetcher:
    return RateLimitedFetcher(
        http_client,
        concurrency=settings.max_concurrent_requests,
        max_retries=settings.fetch_retries,
        backoff_seconds=settings.fetch_backoff_seconds,
    )
