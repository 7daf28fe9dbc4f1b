"""Durable client-side caches and the wiring that puts them in front of the API."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta

from sqlalchemy.ext.asyncio import AsyncEngine

from fundscope.domain.models.composition import Composition
from fundscope.domain.models.ratios import RatioQuote
from fundscope.infrastructure.config import Settings
from fundscope.infrastructure.database import create_schema, make_engine, make_session_factory
from fundscope.infrastructure.persistence.repositories.cache import SqlTimedCache

from .api_client import FundscopeClient
from .scheduler import Timer, VisibilityScheduler


@dataclass
class DurableCaches:
    engine: AsyncEngine
    compositions: SqlTimedCache[Composition]
    ratios: SqlTimedCache[RatioQuote]

    async def dispose(self) -> None:
        await self.engine.dispose()


async def open_durable_caches(settings: Settings) -> DurableCaches:
    """Open (creating if needed) the SQLite-backed Composition and Ratio caches."""
    engine = make_engine(settings.database_url)
    await create_schema(engine)
    session_factory = make_session_factory(engine)
    ttl = timedelta(hours=settings.cache_ttl_hours)
    return DurableCaches(
        engine=engine,
        compositions=SqlTimedCache(session_factory, Composition, ttl=ttl),
        ratios=SqlTimedCache(session_factory, RatioQuote, ttl=ttl),
    )


def make_client(settings: Settings, caches: DurableCaches | None = None) -> FundscopeClient:
    return FundscopeClient(
        settings.api_base_url,
        compositions=caches.compositions if caches else None,
        ratios=caches.ratios if caches else None,
    )


def scheduler_for(
    client: FundscopeClient,
    composition: Composition,
    timer: Timer | None = None,
) -> VisibilityScheduler:
    """Scheduler for one detail view, fetching through client and persisting to its cache.

    Enrichment starts enabled when the composition already carries ratios
    (a previously enriched cached copy); otherwise the caller enables it.
    """
    scheduler = VisibilityScheduler(
        composition,
        fetch_batch=client.fetch_ratios,
        persist=client.save_composition,
        timer=timer,
    )
    if any(c.ratio is not None for c in composition.constituents):
        scheduler.enable()
    return scheduler
