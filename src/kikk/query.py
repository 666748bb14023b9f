"""Query cache for store reads.

Reads are keyed by tuples such as ``("observations", user_id)``. The policy:

- fresh entry (younger than the stale time): returned as-is, no request;
- stale entry: returned immediately while a background refetch runs;
- missing or invalidated entry: the caller waits for a fetch;
- concurrent reads of one key share a single in-flight fetch;
- ``invalidate(prefix)`` after a mutation forces the next read to refetch.

Staleness is purely time based. There is no eviction, LRU or size bound.
Failed fetches are not cached; the error reaches every waiter.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable, Hashable
from dataclasses import dataclass
from typing import Any, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")
QueryKey = tuple[Hashable, ...]

DEFAULT_STALE_TIME = 5 * 60.0  # seconds


@dataclass
class _Entry:
    data: Any
    fetched_at: float
    invalidated: bool = False


class QueryClient:
    """Per-key cache with in-flight deduplication. Use from one event loop."""

    def __init__(
        self,
        stale_time: float = DEFAULT_STALE_TIME,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.stale_time = stale_time
        self._clock = clock
        self._cache: dict[QueryKey, _Entry] = {}
        self._inflight: dict[QueryKey, asyncio.Task[Any]] = {}

    async def fetch_query(
        self,
        key: QueryKey,
        fn: Callable[[], Awaitable[T]],
        *,
        stale_time: float | None = None,
    ) -> T:
        """Return data for ``key``, fetching with ``fn`` when needed."""
        entry = self._cache.get(key)
        if entry is not None and not entry.invalidated:
            if self._is_fresh(entry, stale_time):
                return entry.data  # type: ignore[no-any-return]
            self._start(key, fn)
            return entry.data  # type: ignore[no-any-return]

        task = self._start(key, fn)
        return await asyncio.shield(task)  # type: ignore[no-any-return]

    def get_query_data(self, key: QueryKey) -> Any | None:
        """Cached data for ``key`` (fresh or not) without fetching."""
        entry = self._cache.get(key)
        return entry.data if entry is not None else None

    def set_query_data(self, key: QueryKey, data: Any) -> None:
        self._cache[key] = _Entry(data=data, fetched_at=self._clock())

    def invalidate(self, prefix: QueryKey = ()) -> None:
        """Mark every key starting with ``prefix`` for refetch on next read.

        In-flight fetches for those keys are detached: they still complete for
        their current waiters, but their result is not cached.
        """
        for key, entry in self._cache.items():
            if key[: len(prefix)] == prefix:
                entry.invalidated = True
        for key in [k for k in self._inflight if k[: len(prefix)] == prefix]:
            del self._inflight[key]

    def is_fetching(self, key: QueryKey) -> bool:
        return key in self._inflight

    def _is_fresh(self, entry: _Entry, stale_time: float | None) -> bool:
        window = self.stale_time if stale_time is None else stale_time
        return self._clock() - entry.fetched_at < window

    def _start(self, key: QueryKey, fn: Callable[[], Awaitable[Any]]) -> asyncio.Task[Any]:
        task = self._inflight.get(key)
        if task is None:
            task = asyncio.ensure_future(self._run(key, fn))
            task.add_done_callback(_log_background_error)
            self._inflight[key] = task
        return task

    async def _run(self, key: QueryKey, fn: Callable[[], Awaitable[Any]]) -> Any:
        task = asyncio.current_task()
        try:
            data = await fn()
            if self._inflight.get(key) is task:
                self._cache[key] = _Entry(data=data, fetched_at=self._clock())
            return data
        finally:
            if self._inflight.get(key) is task:
                del self._inflight[key]


def _log_background_error(task: asyncio.Task[Any]) -> None:
    # Retrieve the exception so unawaited background refetches don't warn.
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.warning("Query fetch failed: %s", exc)
