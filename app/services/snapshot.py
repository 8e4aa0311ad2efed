"""Loading and writing of the pre-built ``movies.json`` snapshot."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Sequence

import httpx

from ..models import DisplayRecord
from .cache import parse_records

logger = logging.getLogger(__name__)

NO_STORE_HEADERS = {"Cache-Control": "no-store", "Pragma": "no-cache"}


class SnapshotLoader:
    """Reads the static snapshot from an http(s) URL or a local file."""

    def __init__(self, source: str | None, http_client: httpx.AsyncClient | None = None):
        self._source = (source or "").strip() or None
        self._client = http_client

    @property
    def source(self) -> str | None:
        return self._source

    async def load(self) -> list[DisplayRecord] | None:
        """Return snapshot records, or ``None`` when the snapshot is unusable."""

        if self._source is None:
            return None
        if self._source.startswith(("http://", "https://")):
            data = await self._load_remote(self._source)
        else:
            data = self._load_local(Path(self._source))
        if not isinstance(data, list) or not data:
            return None
        records = parse_records(data)
        return records or None

    async def _load_remote(self, url: str) -> Any:
        if self._client is None:
            logger.warning("No HTTP client configured for snapshot %s", url)
            return None
        try:
            response = await self._client.get(url, headers=NO_STORE_HEADERS)
        except httpx.HTTPError as exc:
            logger.info("Static snapshot unavailable at %s: %s", url, exc)
            return None
        if response.status_code != 200:
            logger.info(
                "Static snapshot request to %s returned %s", url, response.status_code
            )
            return None
        try:
            return response.json()
        except ValueError:
            logger.warning("Static snapshot at %s is not valid JSON", url)
            return None

    @staticmethod
    def _load_local(path: Path) -> Any:
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            logger.info("Static snapshot %s not found", path)
        except (OSError, ValueError) as exc:
            logger.warning("Static snapshot %s unreadable: %s", path, exc)
        return None


def dump_records(records: Sequence[DisplayRecord]) -> list[dict[str, Any]]:
    return [record.model_dump(mode="json") for record in records]


def write_snapshot(path: Path, records: Sequence[DisplayRecord]) -> None:
    payload = json.dumps(dump_records(records), indent=2, ensure_ascii=False)
    path.write_text(payload, encoding="utf-8")
