"""In-memory implementation of TimedCache (server-side tier).

Entries live for the process lifetime unless they expire; expired entries
are evicted lazily on read.  There is no size bound and no background sweep.
Single-key dict operations are atomic under the event loop, which is the only
consistency the cache promises: the last put() to a key wins.
"""

from __future__ import annotations

from datetime import timedelta
from typing import Generic, TypeVar

from fundscope.domain.models.cache import DEFAULT_TTL, CacheEntry, Clock, utc_now
from fundscope.domain.repositories.base import TimedCache

T = TypeVar("T")


class InMemoryTimedCache(TimedCache[T], Generic[T]):
    def __init__(self, ttl: timedelta = DEFAULT_TTL, clock: Clock = utc_now) -> None:
        self._ttl = ttl
        self._clock = clock
        self._entries: dict[str, CacheEntry[T]] = {}

    async def get(self, key: str) -> T | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.is_expired(self._clock(), self._ttl):
            self._entries.pop(key, None)
            return None
        return entry.data

    async def put(self, key: str, value: T) -> None:
        self._entries[key] = CacheEntry(data=value, created_at=self._clock())

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def stats(self) -> dict:
        """Entry count and per-key age in whole minutes (expired entries included until read)."""
        now = self._clock()
        return {
            "size": len(self._entries),
            "entries": [
                {"key": key, "ageMinutes": int((now - entry.created_at).total_seconds() // 60)}
                for key, entry in list(self._entries.items())
            ],
        }
