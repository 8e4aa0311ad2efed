"""Offline generation of the static ``movies.json`` snapshot."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from datetime import date
from pathlib import Path
from typing import Sequence

import httpx

from .config import Settings, get_settings
from .models import DisplayRecord
from .normalizer import is_released
from .ranking import rank
from .services.snapshot import write_snapshot
from .services.tmdb import MissingCredentialError, TMDBDiscoveryClient, create_fetcher

logger = logging.getLogger(__name__)


async def generate_snapshot(
    settings: Settings,
    http_client: httpx.AsyncClient,
    output: Path,
    *,
    today: date | None = None,
) -> list[DisplayRecord]:
    """Fetch, normalize and rank the full catalog, then write it to ``output``."""

    resolved_today = today or date.today()
    discovery = TMDBDiscoveryClient(settings, create_fetcher(settings, http_client))
    movies = await discovery.fetch_catalog(today=resolved_today)
    ranked = rank(movie for movie in movies if is_released(movie.date, resolved_today))
    write_snapshot(output, ranked)
    logger.info("Saved %s movies to %s", len(ranked), output)
    return ranked


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="vegacatalog generate",
        description="Pre-generate the static movies.json snapshot from TMDB.",
    )
    parser.add_argument(
        "-o",
        "--output",
        type=Path,
        default=None,
        help="Destination file (defaults to SNAPSHOT_OUTPUT)",
    )
    return parser.parse_args(argv)


async def _run(settings: Settings, output: Path) -> None:
    async with httpx.AsyncClient(timeout=httpx.Timeout(20.0, connect=10.0)) as client:
        await generate_snapshot(settings, client, output)


def main(argv: Sequence[str] | None = None, *, settings: Settings | None = None) -> int:
    """Command-line entry point; returns the process exit status."""

    args = _parse_args(argv)
    resolved = settings or get_settings()
    if not resolved.tmdb_api_key:
        print("Missing TMDB_API_KEY env var.", file=sys.stderr)
        return 1

    logging.basicConfig(level=logging.INFO)
    output = args.output or Path(resolved.snapshot_output)
    try:
        asyncio.run(_run(resolved, output))
    except MissingCredentialError as exc:
        print(str(exc), file=sys.stderr)
        return 1
    except OSError as exc:
        logger.error("Could not write snapshot to %s: %s", output, exc)
        return 1
    return 0


if __name__ == "__main__":  # pragma: no cover - runtime entrypoint
    sys.exit(main())
