"""Time-bounded in-memory caches owned by the portal client."""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Callable, Dict, Generic, Optional, TypeVar

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")

Clock = Callable[[], float]


@dataclass(frozen=True)
class CacheEntry(Generic[T]):
    value: T
    fetched_at: float


class TTLCache(Generic[T]):
    """Key/value map whose entries go stale ``ttl`` seconds after they were stored.

    Staleness is only checked on read and reads never mutate; a stale entry
    stays until ``set`` overwrites it or ``clear`` drops it. There is no
    size-based eviction. The ``lock`` serialises check-then-write sequences
    and must never be held across a network call.
    """

    def __init__(self, name: str, ttl: float, clock: Clock = time.monotonic) -> None:
        self.name = name
        self.ttl = ttl
        self._clock = clock
        self._entries: Dict[str, CacheEntry[T]] = {}
        self.lock = asyncio.Lock()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        entry = self._entries.get(key)  # type: ignore[arg-type]
        return entry is not None and self._is_fresh(entry)

    def _is_fresh(self, entry: CacheEntry[T]) -> bool:
        return self._clock() - entry.fetched_at < self.ttl

    def entry(self, key: str) -> Optional[CacheEntry[T]]:
        return self._entries.get(key)

    def get(self, key: str) -> Optional[T]:
        """Return the fresh value for ``key``, or ``None`` if missing or stale."""

        entry = self._entries.get(key)
        if entry is None:
            LOGGER.debug("%s cache miss: %s", self.name, key)
            return None
        if not self._is_fresh(entry):
            LOGGER.debug("%s cache stale: %s", self.name, key)
            return None
        LOGGER.debug("%s cache hit: %s", self.name, key)
        return entry.value

    def set(self, key: str, value: T) -> CacheEntry[T]:
        entry = CacheEntry(value=value, fetched_at=self._clock())
        self._entries[key] = entry
        return entry

    def clear(self) -> None:
        self._entries.clear()
