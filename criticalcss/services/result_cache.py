"""In-memory result cache for extracted critical CSS."""

from __future__ import annotations

import time
from dataclasses import dataclass
from threading import Lock
from typing import Callable, Dict, Optional

from criticalcss.core.config import settings


@dataclass(frozen=True)
class CacheEntry:
    value: str
    expires_at: float


class ResultCache:
    """Thread-safe, size-bounded store with lazy TTL expiry.

    Eviction is first-in-first-out by insertion order, not by recency of
    reads. Entries live for the lifetime of the process only.
    """

    def __init__(
        self,
        max_items: int = 200,
        ttl_seconds: float = 60 * 30,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_items < 1:
            raise ValueError("max_items must be at least 1")
        self.max_items = max_items
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._lock = Lock()
        self._entries: Dict[str, CacheEntry] = {}

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if self._clock() >= entry.expires_at:
                del self._entries[key]
                return None
            return entry.value

    def set(self, key: str, value: str) -> None:
        with self._lock:
            if key not in self._entries and len(self._entries) >= self.max_items:
                oldest = next(iter(self._entries))
                del self._entries[oldest]
            self._entries[key] = CacheEntry(value=value, expires_at=self._clock() + self.ttl_seconds)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


result_cache = ResultCache(max_items=settings.cache_max_items, ttl_seconds=settings.cache_ttl_seconds)
