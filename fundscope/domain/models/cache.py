"""Timed cache entry and key conventions.

Both cache tiers (server in-memory, client durable) use the same keys so a
payload can be recognised wherever it is stored.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Generic, TypeVar

T = TypeVar("T")

DEFAULT_TTL = timedelta(hours=24)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def composition_key(identifier: str) -> str:
    return f"composition:{identifier}"


def ratio_key(name: str) -> str:
    return f"ratio:{name.strip().lower()}"


@dataclass(frozen=True)
class CacheEntry(Generic[T]):
    """A cached payload and the time it was written."""

    data: T
    created_at: datetime

    def is_expired(self, now: datetime, ttl: timedelta) -> bool:
        return now - self.created_at > ttl
