"""High level orchestration of catalog loading and live ingestion."""

from __future__ import annotations

import asyncio
import logging
from contextlib import suppress
from datetime import date
from typing import Any

from ..catalog import CatalogStore
from ..config import Settings
from ..models import DisplayRecord
from .cache import CacheGateway
from .snapshot import SnapshotLoader
from .tmdb import TMDBDiscoveryClient

logger = logging.getLogger(__name__)


class CatalogService:
    """Coordinates the cache, the static snapshot and live TMDB ingestion.

    Startup installs any fresh cached list immediately, then loads the static
    snapshot in the background and falls back to a live fetch when the
    snapshot is unavailable. ``today`` is fixed when the service is created
    and used for every release-date check.
    """

    def __init__(
        self,
        settings: Settings,
        cache: CacheGateway,
        snapshot: SnapshotLoader,
        discovery: TMDBDiscoveryClient | None,
        *,
        today: date | None = None,
        store: CatalogStore | None = None,
    ):
        self._settings = settings
        self._cache = cache
        self._snapshot = snapshot
        self._discovery = discovery
        self._today = today or date.today()
        self.store = store or CatalogStore(
            preferred_languages=settings.preferred_languages,
            include_hindi_hollywood=settings.include_hindi_hollywood,
        )
        self._bootstrap_task: asyncio.Task[None] | None = None
        self._refresh_task: asyncio.Task[bool] | None = None
        self._last_error: str | None = None

    @property
    def today(self) -> date:
        return self._today

    @property
    def is_refreshing(self) -> bool:
        return any(
            task is not None and not task.done()
            for task in (self._bootstrap_task, self._refresh_task)
        )

    async def start(self) -> None:
        """Install cached movies and launch the background bootstrap."""

        cached = await self._cache.load()
        if cached:
            self._replace(cached, source="cache")
        if self._bootstrap_task is None:
            self._bootstrap_task = asyncio.create_task(self._run_bootstrap())

    async def stop(self) -> None:
        """Cancel any outstanding background work."""

        for task in (self._bootstrap_task, self._refresh_task):
            if task is None or task.done():
                continue
            task.cancel()
            with suppress(asyncio.CancelledError):
                await task
        self._bootstrap_task = None
        self._refresh_task = None

    async def _run_bootstrap(self) -> None:
        try:
            await self.bootstrap()
        except Exception as exc:  # pragma: no cover - background safety net
            self._last_error = str(exc)
            logger.exception("Catalog bootstrap failed: %s", exc)

    async def bootstrap(self) -> None:
        """Load the static snapshot, or ingest live data when it is unusable."""

        snapshot = await self._snapshot.load()
        if snapshot:
            self._replace(snapshot, source="snapshot")
            logger.info("Static movies loaded: %s", len(snapshot))
            return
        await self.ingest()

    async def ingest(self) -> bool:
        """Run a live ingestion pass and cache the result.

        Returns ``True`` when the canonical list was replaced with API data.
        """

        if self._discovery is None:
            logger.warning("TMDB_API_KEY not configured; skipping live fetch")
            return False

        logger.info("Fetching movies from TMDB")
        genre_map = await self._discovery.fetch_genre_map()

        preferred = await self._discovery.fetch_preferred(
            today=self._today, genre_map=genre_map
        )
        if preferred:
            self._replace(preferred, source="preferred")

        catalog = await self._discovery.fetch_catalog(
            today=self._today, genre_map=genre_map
        )
        if not catalog:
            logger.warning("Live fetch returned no movies; keeping current catalog")
            return False

        self._replace([*catalog, *preferred], source="api")
        await self._cache.save(self.store.canonical)
        self._last_error = None
        return True

    def request_refresh(self) -> bool:
        """Schedule a live ingestion pass unless one is already running."""

        if self._refresh_task is not None and not self._refresh_task.done():
            return False

        async def _runner() -> bool:
            try:
                return await self.ingest()
            except Exception as exc:  # pragma: no cover - background safety net
                self._last_error = str(exc)
                logger.exception("Background refresh failed: %s", exc)
                return False

        self._refresh_task = asyncio.create_task(_runner())
        return True

    def status(self) -> dict[str, Any]:
        view = self.store.view
        return {
            "source": self.store.source,
            "total": len(self.store.canonical),
            "pinned": len(view.pinned_ids),
            "refreshing": self.is_refreshing,
            "live_fetch_enabled": self._discovery is not None,
            "today": self._today.isoformat(),
            "last_error": self._last_error,
        }

    def _replace(self, records: list[DisplayRecord], *, source: str) -> None:
        self.store.replace_canonical(records, today=self._today, source=source)
