"""Domain model package.

All domain objects are pure Python / Pydantic models with no ORM or
infrastructure dependencies.  Import from this package to avoid coupling
application code to individual module paths.
"""

from .aggregation import (
    AggregatedConstituent,
    AggregateRequest,
    AggregationResult,
    HoldingContribution,
    HoldingInput,
)
from .cache import DEFAULT_TTL, CacheEntry, composition_key, ratio_key
from .composition import (
    NO_SOURCE_ERROR,
    AssetClassWeight,
    Composition,
    Constituent,
    RegistryInfo,
    SectorWeight,
    ValuationMetrics,
    dedup_key,
)
from .enums import OutcomeStatus, SourceLabel
from .outcome import Outcome
from .ratios import (
    EnrichRequest,
    EnrichResponse,
    RatioBatchRequest,
    RatioBatchResponse,
    RatioQuote,
)

__all__ = [
    # enums
    "OutcomeStatus",
    "SourceLabel",
    # composition
    "AssetClassWeight",
    "Composition",
    "Constituent",
    "NO_SOURCE_ERROR",
    "RegistryInfo",
    "SectorWeight",
    "ValuationMetrics",
    "dedup_key",
    # ratios
    "EnrichRequest",
    "EnrichResponse",
    "RatioBatchRequest",
    "RatioBatchResponse",
    "RatioQuote",
    # aggregation
    "AggregatedConstituent",
    "AggregateRequest",
    "AggregationResult",
    "HoldingContribution",
    "HoldingInput",
    # cache
    "CacheEntry",
    "DEFAULT_TTL",
    "composition_key",
    "ratio_key",
    # outcome
    "Outcome",
]
