"""Timed cache base interface.

TimedCache[T] is the root abstraction for both cache tiers.  Concrete
implementations live in fundscope/infrastructure/ (in-memory for the server,
SQL-backed for the durable client cache) and are wired at the application
boundary.

Design notes:
  - All methods are async to accommodate async database drivers.
  - T is the domain model type (never an ORM row or JSON envelope).
  - Expiry is relative to the last put(); an expired entry reads as a miss.
  - get() never raises for a stored entry it cannot decode; it reports a miss.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Generic, TypeVar

T = TypeVar("T")


class TimedCache(ABC, Generic[T]):
    """Key → value store with a fixed time-to-live."""

    @abstractmethod
    async def get(self, key: str) -> T | None:
        """Return the live value for key, or None on miss, expiry or corruption."""

    @abstractmethod
    async def put(self, key: str, value: T) -> None:
        """Store value under key, restarting its time-to-live."""
