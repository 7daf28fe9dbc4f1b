"""Ratio enrichment service: attaches a valuation ratio to fund constituents.

Per-name lookup:
    fixed-income heuristic  → skipped, never sent to a provider
    ratio cache             → hit returned as-is
    primary source          → ratio + capitalization band + ticker
    secondary source        → ticker only
    cache whatever was obtained (a total miss is not cached)

Two batching modes share that lookup:
  - enrich_constituents: full list, fixed-size chunks run concurrently, with a
    pacing delay between chunks.
  - lookup_batch: the client-facing batch; hard cap on names, all concurrent,
    no pacing (the client scheduler paces itself).
"""

from __future__ import annotations

import asyncio
import logging
import re
from collections.abc import Awaitable, Callable, Sequence

import numpy as np

from fundscope.domain.models.cache import composition_key, ratio_key
from fundscope.domain.models.composition import Composition, Constituent
from fundscope.domain.models.ratios import RatioQuote
from fundscope.domain.repositories.base import TimedCache
from fundscope.domain.repositories.sources import RatioSource

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 5
DEFAULT_PACING_SECONDS = 0.2
DEFAULT_BATCH_LIMIT = 10

_FIXED_INCOME_PHRASES = (
    "government",
    "g-sec",
    "gsec",
    "treasury",
    "t-bill",
    "tbill",
    "debenture",
    "bond",
    "certificate of deposit",
    "commercial paper",
    "sovereign",
    "state development loan",
    "%",
)
_FIXED_INCOME_TOKENS = re.compile(r"\b(goi|sdl|ncd|cp|cd|treps|cblo|repo)\b", re.IGNORECASE)


def is_fixed_income(name: str) -> bool:
    """True when name looks like a debt instrument (no equity ratio exists)."""
    lowered = name.lower()
    if any(phrase in lowered for phrase in _FIXED_INCOME_PHRASES):
        return True
    return _FIXED_INCOME_TOKENS.search(name) is not None


def weighted_ratio(constituents: Sequence[Constituent]) -> float | None:
    """Weight-averaged ratio over the constituents that carry one."""
    rated = [c for c in constituents if c.ratio is not None and c.weight > 0]
    if not rated:
        return None
    ratios = np.array([c.ratio for c in rated], dtype=float)
    weights = np.array([c.weight for c in rated], dtype=float)
    return round(float(np.average(ratios, weights=weights)), 2)


def _chunks(items: Sequence, size: int):
    for start in range(0, len(items), size):
        yield items[start : start + size]


class RatioEnricher:
    """Best-effort valuation ratio lookup with fallback, cache and batching."""

    def __init__(
        self,
        primary: RatioSource,
        secondary: RatioSource | None,
        cache: TimedCache[RatioQuote],
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        pacing_seconds: float = DEFAULT_PACING_SECONDS,
        batch_limit: int = DEFAULT_BATCH_LIMIT,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        if chunk_size < 1:
            raise ValueError(f"chunk_size must be positive, got {chunk_size}")
        if batch_limit < 1:
            raise ValueError(f"batch_limit must be positive, got {batch_limit}")
        self._primary = primary
        self._secondary = secondary
        self._cache = cache
        self._chunk_size = chunk_size
        self._pacing_seconds = pacing_seconds
        self._batch_limit = batch_limit
        self._sleep = sleep

    @property
    def batch_limit(self) -> int:
        return self._batch_limit

    # ------------------------------------------------------------------ #
    # Public API                                                           #
    # ------------------------------------------------------------------ #

    async def lookup(self, name: str) -> RatioQuote:
        """Resolve one name; returns a quote with absent fields on total failure."""
        if is_fixed_income(name):
            return RatioQuote(name=name)

        key = ratio_key(name)
        cached = await self._cache.get(key)
        if cached is not None:
            logger.debug("Ratio cache hit: %s", name)
            return cached.model_copy(update={"name": name})

        quote = await self._fetch(name)
        if not quote.is_empty:
            await self._cache.put(key, quote)
            logger.debug("Ratio cached: %s", name)
        return quote

    async def lookup_batch(self, names: Sequence[str]) -> list[RatioQuote]:
        """Look up at most batch_limit names concurrently.

        Names beyond the limit are dropped; the result holds one quote per
        processed name, in request order.  A failure for one name yields an
        empty quote for that name and does not affect the others.
        """
        accepted = list(names)[: self._batch_limit]
        if len(names) > len(accepted):
            logger.info("Ratio batch truncated from %d to %d names", len(names), len(accepted))
        return list(await asyncio.gather(*(self._safe_lookup(n) for n in accepted)))

    async def enrich_constituents(self, constituents: Sequence[Constituent]) -> list[Constituent]:
        """Return copies of constituents with ratio, band and ticker filled in.

        Processes fixed-size chunks; lookups within a chunk run concurrently
        and a pacing delay separates consecutive chunks.
        """
        logger.info("Fetching ratios for %d holdings", len(constituents))
        items = list(constituents)
        enriched: list[Constituent] = []
        for index, chunk in enumerate(_chunks(items, self._chunk_size)):
            if index > 0:
                await self._sleep(self._pacing_seconds)
            quotes = await asyncio.gather(*(self._safe_lookup(c.name) for c in chunk))
            enriched.extend(q.apply_to(c) for c, q in zip(chunk, quotes))
        logger.info("Ratio enrichment complete")
        return enriched

    async def enrich_cached(self, compositions: TimedCache[Composition], identifier: str) -> Composition | None:
        """Re-read, enrich and rewrite the cached composition for identifier.

        Returns None when nothing is cached for identifier.
        """
        key = composition_key(identifier)
        composition = await compositions.get(key)
        if composition is None:
            return None
        constituents = await self.enrich_constituents(composition.constituents)
        updated = composition.model_copy(update={"constituents": constituents})
        await compositions.put(key, updated)
        return updated

    # ------------------------------------------------------------------ #
    # Internals                                                            #
    # ------------------------------------------------------------------ #

    async def _safe_lookup(self, name: str) -> RatioQuote:
        try:
            return await self.lookup(name)
        except Exception:
            logger.exception("Ratio lookup failed for %s", name)
            return RatioQuote(name=name)

    async def _fetch(self, name: str) -> RatioQuote:
        primary = await self._primary.quote(name)
        if primary.ok and primary.value is not None and primary.value.ratio is not None:
            return primary.value.model_copy(update={"name": name})

        if self._secondary is not None:
            secondary = await self._secondary.quote(name)
            if secondary.ok and secondary.value is not None and secondary.value.ticker:
                return RatioQuote(name=name, ticker=secondary.value.ticker)

        return RatioQuote(name=name)
