"""HTTP endpoints consumed by the UI layer."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query

from fundscope.domain.models.aggregation import AggregateRequest, AggregationResult
from fundscope.domain.models.composition import Composition
from fundscope.domain.models.ratios import (
    EnrichRequest,
    EnrichResponse,
    RatioBatchRequest,
    RatioBatchResponse,
)
from fundscope.domain.services.ratios import weighted_ratio

from .dependencies import Services, get_services

router = APIRouter()


@router.get("/compositions/{identifier}", response_model=Composition)
async def get_composition(
    identifier: str,
    name: str | None = Query(default=None),
    services: Services = Depends(get_services),
) -> Composition:
    """Always 200: a populated composition or an empty one carrying an error."""
    return await services.resolver.resolve(identifier, name or identifier)


@router.post("/compositions/{identifier}/ratios", response_model=Composition)
async def enrich_composition(
    identifier: str,
    services: Services = Depends(get_services),
) -> Composition:
    composition = await services.enricher.enrich_cached(services.composition_cache, identifier)
    if composition is None:
        raise HTTPException(status_code=404, detail=f"No cached composition for {identifier}")
    return composition


@router.post("/ratios/batch", response_model=RatioBatchResponse)
async def ratio_batch(
    body: RatioBatchRequest,
    services: Services = Depends(get_services),
) -> RatioBatchResponse:
    """At most batch_limit results: the first names in request order."""
    return RatioBatchResponse(results=await services.enricher.lookup_batch(body.names))


@router.post("/ratios/enrich", response_model=EnrichResponse)
async def enrich_constituents(
    body: EnrichRequest,
    services: Services = Depends(get_services),
) -> EnrichResponse:
    constituents = await services.enricher.enrich_constituents(body.constituents)
    return EnrichResponse(constituents=constituents, weighted_ratio=weighted_ratio(constituents))


@router.post("/aggregate", response_model=AggregationResult)
async def aggregate(
    body: AggregateRequest,
    services: Services = Depends(get_services),
) -> AggregationResult:
    return await services.aggregator.aggregate(body.holdings)


@router.get("/cache/stats")
async def cache_stats(services: Services = Depends(get_services)) -> dict:
    return {
        "compositions": services.composition_cache.stats(),
        "ratios": services.ratio_cache.stats(),
    }
