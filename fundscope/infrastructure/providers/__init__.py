"""External provider adapters.

SOURCE_ORDER is the single declaration of the composition fallback order.
"""

from __future__ import annotations

from fundscope.domain.repositories.sources import CompositionSource

from .base import ProviderAdapter, guarded
from .errors import ProviderUnavailable
from .etmoney import EtMoneyAdapter
from .groww import GrowwAdapter
from .http import HttpClient
from .mfapi import MfapiRegistry
from .moneycontrol import MoneycontrolAdapter
from .nse import NseTickerSource
from .screener import ScreenerRatioSource
from .tickertape import TickertapeAdapter
from .value_research import ValueResearchAdapter

SOURCE_ORDER: tuple[type[ProviderAdapter], ...] = (
    GrowwAdapter,
    TickertapeAdapter,
    MoneycontrolAdapter,
    ValueResearchAdapter,
    EtMoneyAdapter,
)


def default_sources(http: HttpClient) -> list[CompositionSource]:
    return [adapter(http) for adapter in SOURCE_ORDER]


__all__ = [
    "SOURCE_ORDER",
    "EtMoneyAdapter",
    "GrowwAdapter",
    "HttpClient",
    "MfapiRegistry",
    "MoneycontrolAdapter",
    "NseTickerSource",
    "ProviderAdapter",
    "ProviderUnavailable",
    "ScreenerRatioSource",
    "TickertapeAdapter",
    "ValueResearchAdapter",
    "default_sources",
    "guarded",
]
