"""SQLAlchemy implementation of TimedCache (durable client-side tier).

Each entry is one cache_entries row holding a JSON envelope
{"data": <payload>, "createdAt": <ISO-8601>}.  Payloads are pydantic models
and are decoded through the model type the cache was built for.  An envelope
that cannot be decoded is treated as a miss and deleted.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timedelta, timezone
from typing import Generic, TypeVar

from pydantic import BaseModel
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from fundscope.domain.models.cache import DEFAULT_TTL, CacheEntry, Clock, utc_now
from fundscope.domain.repositories.base import TimedCache
from fundscope.infrastructure.persistence.models.cache import CacheEntryRow

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


def encode_envelope(value: BaseModel, created_at: datetime) -> str:
    return json.dumps(
        {
            "data": value.model_dump(mode="json", by_alias=True),
            "createdAt": created_at.isoformat(),
        }
    )


def decode_envelope(envelope: str, model: type[M]) -> CacheEntry[M]:
    """Parse an envelope; raises ValueError, TypeError or KeyError when malformed."""
    raw = json.loads(envelope)
    data = model.model_validate(raw["data"])
    created_at = datetime.fromisoformat(raw["createdAt"])
    if created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=timezone.utc)
    return CacheEntry(data=data, created_at=created_at)


class SqlTimedCache(TimedCache[M], Generic[M]):
    """Durable cache; every call runs in its own short transaction."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        model: type[M],
        ttl: timedelta = DEFAULT_TTL,
        clock: Clock = utc_now,
    ) -> None:
        self._session_factory = session_factory
        self._model = model
        self._ttl = ttl
        self._clock = clock

    async def get(self, key: str) -> M | None:
        async with self._session_factory.begin() as session:
            row = await session.get(CacheEntryRow, key)
            if row is None:
                return None
            try:
                entry = decode_envelope(row.envelope, self._model)
            except (ValueError, TypeError, KeyError) as exc:
                logger.warning("Discarding unreadable cache entry %s: %s", key, exc)
                await session.delete(row)
                return None
            if entry.is_expired(self._clock(), self._ttl):
                await session.delete(row)
                return None
            return entry.data

    async def put(self, key: str, value: M) -> None:
        envelope = encode_envelope(value, self._clock())
        async with self._session_factory.begin() as session:
            insert = pg_insert if session.bind.dialect.name == "postgresql" else sqlite_insert
            stmt = insert(CacheEntryRow).values(key=key, envelope=envelope)
            # Single-statement upsert: concurrent writers to one key never collide.
            stmt = stmt.on_conflict_do_update(
                index_elements=["key"],
                set_={"envelope": stmt.excluded.envelope},
            )
            await session.execute(stmt)
