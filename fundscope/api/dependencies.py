"""Service wiring for the HTTP layer."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta

from fastapi import Request

from fundscope.domain.models.composition import Composition
from fundscope.domain.models.ratios import RatioQuote
from fundscope.domain.services.aggregation import AggregationService
from fundscope.domain.services.ratios import RatioEnricher
from fundscope.domain.services.resolver import CompositionResolver
from fundscope.infrastructure.cache.memory import InMemoryTimedCache
from fundscope.infrastructure.config import Settings
from fundscope.infrastructure.providers import (
    HttpClient,
    MfapiRegistry,
    NseTickerSource,
    ScreenerRatioSource,
    default_sources,
)


@dataclass
class Services:
    """All server-side services bound to one pair of in-memory caches."""

    resolver: CompositionResolver
    enricher: RatioEnricher
    aggregator: AggregationService
    composition_cache: InMemoryTimedCache[Composition]
    ratio_cache: InMemoryTimedCache[RatioQuote]


def build_services(settings: Settings, http: HttpClient | None = None) -> Services:
    """Construct the production service graph.

    Intended to run once per process; the caches it creates live as long as
    the returned Services object.
    """
    http = http or HttpClient(timeout=settings.provider_timeout_seconds)
    ttl = timedelta(hours=settings.cache_ttl_hours)
    composition_cache: InMemoryTimedCache[Composition] = InMemoryTimedCache(ttl=ttl)
    ratio_cache: InMemoryTimedCache[RatioQuote] = InMemoryTimedCache(ttl=ttl)

    resolver = CompositionResolver(
        sources=default_sources(http),
        registry=MfapiRegistry(http),
        cache=composition_cache,
    )
    enricher = RatioEnricher(
        primary=ScreenerRatioSource(http),
        secondary=NseTickerSource(http),
        cache=ratio_cache,
        chunk_size=settings.enrich_chunk_size,
        pacing_seconds=settings.enrich_pacing_seconds,
        batch_limit=settings.ratio_batch_limit,
    )
    aggregator = AggregationService(resolver, concurrency=settings.aggregate_concurrency)
    return Services(
        resolver=resolver,
        enricher=enricher,
        aggregator=aggregator,
        composition_cache=composition_cache,
        ratio_cache=ratio_cache,
    )


def get_services(request: Request) -> Services:
    """FastAPI dependency returning the app's Services."""
    return request.app.state.services
