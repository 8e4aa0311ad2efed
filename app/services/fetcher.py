"""Bounded-concurrency JSON fetching with retry and exponential backoff."""

from __future__ import annotations

import asyncio
import logging
from contextlib import suppress
from dataclasses import dataclass
from typing import Any, AsyncIterator, Awaitable, Callable, Sequence

import httpx

logger = logging.getLogger(__name__)

DEFAULT_CONCURRENCY = 4
DEFAULT_RETRIES = 3
DEFAULT_BACKOFF_SECONDS = 0.5

ResultHandler = Callable[[Any, str], Awaitable[None] | None]


class FetchFailedError(RuntimeError):
    """Raised when a request keeps failing after every retry."""

    def __init__(self, url: str, reason: str):
        super().__init__(f"Fetch failed after retries: {url} ({reason})")
        self.url = url
        self.reason = reason


@dataclass(slots=True)
class FetchResult:
    """A successfully fetched and parsed response."""

    url: str
    payload: Any


def is_transient_status(status_code: int) -> bool:
    return status_code == 429 or 500 <= status_code < 600


class RateLimitedFetcher:
    """Runs GET requests through a fixed-size worker pool.

    Transient failures (network errors, HTTP 429 and 5xx) are retried with
    ``backoff * 2 ** attempt`` delays. Any other non-success status is
    returned as-is by :meth:`get_with_retry` and dropped by the pool.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        *,
        concurrency: int = DEFAULT_CONCURRENCY,
        max_retries: int = DEFAULT_RETRIES,
        backoff_seconds: float = DEFAULT_BACKOFF_SECONDS,
        headers: dict[str, str] | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self._client = http_client
        self._concurrency = max(1, concurrency)
        self._max_retries = max(0, max_retries)
        self._backoff_seconds = max(0.0, backoff_seconds)
        self._headers = headers or {}
        self._sleep = sleep

    @property
    def concurrency(self) -> int:
        return self._concurrency

    async def get_with_retry(self, url: str) -> httpx.Response:
        """Fetch ``url`` retrying transient failures.

        Raises :class:`FetchFailedError` once every attempt has failed.
        """

        reason = "no attempts made"
        for attempt in range(self._max_retries + 1):
            try:
                response = await self._client.get(url, headers=self._headers)
            except httpx.HTTPError as exc:
                reason = exc.__class__.__name__
            else:
                if response.is_success or not is_transient_status(response.status_code):
                    return response
                reason = f"HTTP {response.status_code}"

            if attempt < self._max_retries:
                delay = self._backoff_seconds * 2**attempt
                logger.info(
                    "Transient error fetching %s (%s). Retrying in %.1fs",
                    url,
                    reason,
                    delay,
                )
                await self._sleep(delay)
        raise FetchFailedError(url, reason)

    async def _fetch_json(self, url: str) -> FetchResult | None:
        try:
            response = await self.get_with_retry(url)
        except FetchFailedError as exc:
            logger.warning("Fetch failed: %s", exc)
            return None
        if not response.is_success:
            logger.warning(
                "Dropping %s after non-retryable HTTP %s", url, response.status_code
            )
            return None
        try:
            payload = response.json()
        except ValueError:
            logger.warning("Unexpected non-JSON response from %s", url)
            return None
        return FetchResult(url=url, payload=payload)

    async def iter_results(
        self,
        urls: Sequence[str],
        handler: ResultHandler | None = None,
        *,
        limit: int | None = None,
    ) -> AsyncIterator[FetchResult]:
        """Yield fetch results in completion order.

        Each worker pulls the next URL from a shared index, fetches it,
        invokes ``handler(payload, url)`` and hands the result to the
        consumer. A failing request or handler never stops the others.
        """

        pending = list(urls)
        if not pending:
            return

        worker_count = min(max(1, limit or self._concurrency), len(pending))
        results: asyncio.Queue[FetchResult | None] = asyncio.Queue()
        next_index = 0

        async def _worker() -> None:
            nonlocal next_index
            try:
                while next_index < len(pending):
                    url = pending[next_index]
                    next_index += 1
                    try:
                        result = await self._fetch_json(url)
                    except Exception:  # pragma: no cover - unexpected client errors
                        logger.exception("Unexpected failure fetching %s", url)
                        continue
                    if result is None:
                        continue
                    if handler is not None:
                        try:
                            outcome = handler(result.payload, url)
                            if asyncio.iscoroutine(outcome):
                                await outcome
                        except Exception:
                            logger.exception("Result handler failed for %s", url)
                            continue
                    results.put_nowait(result)
            finally:
                results.put_nowait(None)

        workers = [asyncio.create_task(_worker()) for _ in range(worker_count)]
        finished = 0
        try:
            while finished < worker_count:
                item = await results.get()
                if item is None:
                    finished += 1
                    continue
                yield item
        finally:
            for task in workers:
                task.cancel()
            for task in workers:
                with suppress(asyncio.CancelledError):
                    await task

    async def fetch_all(
        self,
        urls: Sequence[str],
        handler: ResultHandler | None = None,
        *,
        limit: int | None = None,
        timeout: float | None = None,
    ) -> list[FetchResult]:
        """Fetch every URL and return the successful results.

        ``timeout`` bounds the whole run. When it expires the outstanding
        requests are cancelled and the results gathered so far are returned.
        """

        collected: list[FetchResult] = []

        async def _drain() -> None:
            stream = self.iter_results(urls, handler, limit=limit)
            try:
                async for result in stream:
                    collected.append(result)
            finally:
                await stream.aclose()

        try:
            await asyncio.wait_for(_drain(), timeout=timeout)
        except asyncio.TimeoutError:
            logger.warning(
                "Fetch run timed out after %.0fs with %s of %s responses",
                timeout,
                len(collected),
                len(urls),
            )
        return collected
