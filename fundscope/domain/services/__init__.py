"""Domain services package."""

from .aggregation import AggregationService, consolidate_holdings, merge_compositions
from .ratios import RatioEnricher, is_fixed_income, weighted_ratio
from .resolver import CompositionResolver

__all__ = [
    "AggregationService",
    "CompositionResolver",
    "RatioEnricher",
    "consolidate_holdings",
    "is_fixed_income",
    "merge_compositions",
    "weighted_ratio",
]
