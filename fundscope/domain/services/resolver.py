"""Composition resolver: cache, registry overlay and ordered source fallback.

Pipeline for one fund:
    resolve
        → cache lookup by identifier             (hit: return as-is)
        → registry lookup, started concurrently  (failure leaves fields unset)
        → sources in fixed priority order        (first non-empty wins)
        → overlay registry metadata              (provider values win)
        → cache the success / build the empty result (never cached)

There is no scoring across sources and no merging of partial results: the
first source that yields at least one constituent is final, even when its
sector or asset-class lists are empty.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence

from fundscope.domain.models.cache import Clock, composition_key, utc_now
from fundscope.domain.models.composition import Composition, RegistryInfo
from fundscope.domain.repositories.base import TimedCache
from fundscope.domain.repositories.sources import CompositionSource, RegistrySource

logger = logging.getLogger(__name__)


class CompositionResolver:
    """Resolves a fund's composition from the first source that has it.

    resolve() always returns a Composition and never raises.
    """

    def __init__(
        self,
        sources: Sequence[CompositionSource],
        registry: RegistrySource | None,
        cache: TimedCache[Composition],
        clock: Clock = utc_now,
    ) -> None:
        self._sources = list(sources)
        self._registry = registry
        self._cache = cache
        self._clock = clock

    @property
    def source_labels(self) -> list[str]:
        return [s.label for s in self._sources]

    async def resolve(self, identifier: str, name: str) -> Composition:
        key = composition_key(identifier)
        cached = await self._cache.get(key)
        if cached is not None:
            logger.info("Composition cache hit: %s (%s)", name, identifier)
            return cached

        logger.info("Resolving composition: %s (%s)", name, identifier)
        registry_task = asyncio.create_task(self._lookup_registry(identifier))
        try:
            found = await self._first_success(identifier, name)
        finally:
            registry = await registry_task

        if found is None:
            logger.warning("No holdings found for %s (%s)", name, identifier)
            fallback_name = registry.holding_name if registry and registry.holding_name else name
            empty = Composition.empty(identifier, fallback_name, resolved_at=self._clock())
            return empty.overlay_registry(registry)

        result = found.overlay_registry(registry).model_copy(
            update={"identifier": identifier, "resolved_at": self._clock()}
        )
        await self._cache.put(key, result)
        logger.info("Cached composition for %s from %s", name, result.source)
        return result

    async def _first_success(self, identifier: str, name: str) -> Composition | None:
        for source in self._sources:
            try:
                outcome = await source.resolve(identifier, name)
            except Exception:
                logger.exception("%s raised while resolving %s", source.label, name)
                continue
            if outcome.ok and outcome.value is not None and outcome.value.has_data:
                logger.info(
                    "%s: %d holdings for %s", source.label, len(outcome.value.constituents), name
                )
                return outcome.value.model_copy(update={"source": source.label})
            logger.debug("%s: %s for %s (%s)", source.label, outcome.status.value, name, outcome.detail)
        return None

    async def _lookup_registry(self, identifier: str) -> RegistryInfo | None:
        if self._registry is None:
            return None
        try:
            outcome = await self._registry.lookup(identifier)
        except Exception:
            logger.exception("Registry lookup raised for %s", identifier)
            return None
        if not outcome.ok:
            logger.debug("Registry lookup for %s: %s", identifier, outcome.status.value)
            return None
        return outcome.value
