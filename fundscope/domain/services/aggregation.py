"""Cross-holding exposure aggregation.

Turns a set of fund holdings into one deduplicated list of underlying
constituents with portfolio-wide weight, value and provenance.

Pipeline:
    aggregate
        → consolidate_holdings    (same display name = one logical fund)
        → _resolve_all            (compositions, concurrently, failures skipped)
        → merge_compositions      (dedupe by lower-cased name, sum, sort)

For a consolidated holding h with value V_h and portfolio weight
W_h = 100 · V_h / ΣV, a constituent c with in-fund weight w_c contributes
    value  = w_c / 100 · V_h
    weight = w_c / 100 · W_h
to the aggregated record for c's deduplication key.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from dataclasses import dataclass

from fundscope.domain.models.aggregation import (
    AggregatedConstituent,
    AggregationResult,
    HoldingContribution,
    HoldingInput,
)
from fundscope.domain.models.composition import Composition
from fundscope.domain.services.resolver import CompositionResolver

logger = logging.getLogger(__name__)

DEFAULT_CONCURRENCY = 4


@dataclass
class ConsolidatedHolding:
    """One logical fund, possibly held across several sub-accounts.

    identifier is the first identifier seen for the display name.
    """

    identifier: str
    display_name: str
    value: float


def consolidate_holdings(holdings: Sequence[HoldingInput]) -> list[ConsolidatedHolding]:
    """Merge holdings sharing a display name, summing their values.

    Preserves first-seen order.
    """
    consolidated: dict[str, ConsolidatedHolding] = {}
    for holding in holdings:
        existing = consolidated.get(holding.display_name)
        if existing is None:
            consolidated[holding.display_name] = ConsolidatedHolding(
                identifier=holding.identifier,
                display_name=holding.display_name,
                value=holding.value,
            )
        else:
            existing.value += holding.value
    return list(consolidated.values())


def merge_compositions(
    holdings: Sequence[ConsolidatedHolding],
    compositions: Sequence[Composition | None],
    total_value: float,
) -> list[AggregatedConstituent]:
    """Merge each holding's constituents into deduplicated aggregate records.

    holdings and compositions are aligned by position; a None composition is
    skipped.  Ticker, sector, ratio and capitalization band come from the
    first constituent that supplies them and are never overwritten.

    Returns records sorted by total_weight descending.
    """
    merged: dict[str, AggregatedConstituent] = {}

    for holding, composition in zip(holdings, compositions):
        if composition is None or not composition.constituents:
            continue
        holding_weight = (holding.value / total_value) * 100 if total_value > 0 else 0.0

        for constituent in composition.constituents:
            value = (constituent.weight / 100) * holding.value
            portfolio_weight = (constituent.weight / 100) * holding_weight
            key = constituent.dedup_key

            record = merged.get(key)
            if record is None:
                merged[key] = AggregatedConstituent(
                    key=key,
                    name=constituent.name,
                    ticker=constituent.ticker,
                    sector=constituent.sector,
                    ratio=constituent.ratio,
                    capitalization_band=constituent.capitalization_band,
                    total_value=value,
                    total_weight=portfolio_weight,
                    contributions=[
                        HoldingContribution(
                            holding_name=holding.display_name,
                            weight=constituent.weight,
                            value=value,
                        )
                    ],
                )
                continue

            record.total_value += value
            record.total_weight += portfolio_weight
            _add_contribution(record, holding.display_name, constituent.weight, value)

            if record.ticker is None and constituent.ticker:
                record.ticker = constituent.ticker
            if record.sector is None and constituent.sector:
                record.sector = constituent.sector
            if record.ratio is None and constituent.ratio is not None:
                record.ratio = constituent.ratio
            if record.capitalization_band is None and constituent.capitalization_band:
                record.capitalization_band = constituent.capitalization_band

    return sorted(merged.values(), key=lambda r: r.total_weight, reverse=True)


def _add_contribution(
    record: AggregatedConstituent, holding_name: str, weight: float, value: float
) -> None:
    # Duplicate upstream rows from the same holding fold into one entry.
    for contribution in record.contributions:
        if contribution.holding_name == holding_name:
            contribution.weight += weight
            contribution.value += value
            return
    record.contributions.append(
        HoldingContribution(holding_name=holding_name, weight=weight, value=value)
    )


class AggregationService:
    """Resolves every holding's composition and merges them into one exposure view."""

    def __init__(
        self,
        resolver: CompositionResolver,
        concurrency: int = DEFAULT_CONCURRENCY,
    ) -> None:
        if concurrency < 1:
            raise ValueError(f"concurrency must be positive, got {concurrency}")
        self._resolver = resolver
        self._concurrency = concurrency

    async def aggregate(self, holdings: Sequence[HoldingInput]) -> AggregationResult:
        total_value = sum(h.value for h in holdings)
        consolidated = consolidate_holdings(holdings)
        compositions = await self._resolve_all(consolidated)
        constituents = merge_compositions(consolidated, compositions, total_value)
        return AggregationResult(
            constituents=constituents,
            total_constituents=len(constituents),
            total_portfolio_value=total_value,
            total_holdings=len(consolidated),
        )

    async def _resolve_all(
        self, holdings: Sequence[ConsolidatedHolding]
    ) -> list[Composition | None]:
        semaphore = asyncio.Semaphore(self._concurrency)

        async def _resolve(holding: ConsolidatedHolding) -> Composition:
            async with semaphore:
                return await self._resolver.resolve(holding.identifier, holding.display_name)

        results = await asyncio.gather(
            *(_resolve(h) for h in holdings), return_exceptions=True
        )
        compositions: list[Composition | None] = []
        for holding, result in zip(holdings, results):
            if isinstance(result, BaseException):
                logger.error(
                    "Error fetching composition for %s: %r", holding.display_name, result
                )
                compositions.append(None)
            else:
                compositions.append(result)
        return compositions
