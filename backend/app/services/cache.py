"""In-process TTL cache for assembled analytics results.

Entries are keyed by the exact (account, window start, window end) triple and
expire lazily on lookup. There is no locking: two concurrent misses on the same
key both compute and the last writer wins, which is harmless because the
pipeline is pure.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from datetime import date
from typing import Callable, Generic, NamedTuple, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_TTL_SECONDS = 300


class AnalyticsCacheKey(NamedTuple):
    account_id: str
    start: date
    end: date


@dataclass(frozen=True)
class CacheEntry(Generic[T]):
    value: T
    computed_at: float


class AnalyticsCache(Generic[T]):
    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[AnalyticsCacheKey, CacheEntry[T]] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def _is_fresh(self, entry: CacheEntry[T]) -> bool:
        return self._clock() - entry.computed_at < self.ttl_seconds

    def get(self, key: AnalyticsCacheKey) -> T | None:
        """Return the fresh value for key, dropping it if it has expired."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        if not self._is_fresh(entry):
            logger.debug("Analytics cache EXPIRED for %s", key)
            del self._entries[key]
            return None
        return entry.value

    def get_or_compute(self, key: AnalyticsCacheKey, compute_fn: Callable[[], T]) -> T:
        cached = self.get(key)
        if cached is not None:
            logger.debug("Analytics cache HIT for %s", key)
            return cached

        logger.debug("Analytics cache MISS for %s", key)
        # compute_fn errors propagate; nothing is stored for a failed run.
        value = compute_fn()
        self._entries[key] = CacheEntry(value=value, computed_at=self._clock())
        return value

    def clear_cache(self) -> None:
        count = len(self._entries)
        self._entries.clear()
        logger.info("Cleared %d analytics cache entries", count)
