"""TTL-bounded local cache for the normalized movie list."""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, Sequence

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ..db_models import CacheEntryRecord
from ..models import CacheEntry, DisplayRecord

logger = logging.getLogger(__name__)

CACHE_KEY = "vega_cached_movies_v1"
CACHE_TTL_MS = 1000 * 60 * 60 * 24


def epoch_ms() -> int:
    return int(time.time() * 1000)


def parse_records(raw_records: Any) -> list[DisplayRecord]:
    """Validate a JSON array of display records, skipping malformed entries."""

    if not isinstance(raw_records, list):
        return []
    records: list[DisplayRecord] = []
    skipped = 0
    for entry in raw_records:
        try:
            records.append(DisplayRecord.model_validate(entry))
        except ValidationError:
            skipped += 1
    if skipped:
        logger.debug("Skipped %s malformed movie records", skipped)
    return records


class CacheGateway:
    """Reads and writes the movie list under a single cache key.

    Storage failures never propagate: reads degrade to a cache miss and
    writes become no-ops, both reported through the module logger.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        *,
        key: str = CACHE_KEY,
        ttl_ms: int = CACHE_TTL_MS,
        clock: Callable[[], int] = epoch_ms,
    ):
        self._session_factory = session_factory
        self._key = key
        self._ttl_ms = ttl_ms
        self._clock = clock

    @property
    def key(self) -> str:
        return self._key

    async def load(self) -> list[DisplayRecord] | None:
        """Return cached records, or ``None`` on a miss, expiry or corruption."""

        try:
            async with self._session_factory() as session:
                row = await session.get(CacheEntryRecord, self._key)
                payload = row.payload if row is not None else None
        except (SQLAlchemyError, ValueError) as exc:
            logger.warning("Cache read failed: %s", exc)
            return None

        if payload is None:
            return None
        if not isinstance(payload, dict) or not isinstance(payload.get("movies"), list):
            logger.warning("Ignoring malformed cache entry %s", self._key)
            return None
        timestamp = payload.get("timestamp")
        if isinstance(timestamp, bool) or not isinstance(timestamp, (int, float)) or not timestamp:
            logger.warning("Ignoring cache entry %s without a timestamp", self._key)
            return None
        if self._clock() - timestamp > self._ttl_ms:
            logger.info("Cache entry %s expired", self._key)
            return None
        return parse_records(payload["movies"])

    async def save(self, records: Sequence[DisplayRecord]) -> None:
        """Overwrite the cache entry with ``records`` stamped with the current time."""

        entry = CacheEntry(timestamp=self._clock(), movies=list(records))
        payload = entry.model_dump(mode="json")
        try:
            async with self._session_factory() as session:
                await session.merge(
                    CacheEntryRecord(
                        key=self._key, timestamp=entry.timestamp, payload=payload
                    )
                )
                await session.commit()
        except SQLAlchemyError as exc:
            logger.warning("Cache write failed: %s", exc)
            return
        logger.info("Cached %s movies under %s", len(entry.movies), self._key)
