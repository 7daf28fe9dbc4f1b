"""External data source interfaces.

Every source answers with an Outcome and must never let an exception cross
its boundary.  Concrete sources live in fundscope/infrastructure/providers/.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from fundscope.domain.models.composition import Composition, RegistryInfo
from fundscope.domain.models.outcome import Outcome
from fundscope.domain.models.ratios import RatioQuote


class CompositionSource(ABC):
    """One provider of fund holdings, tried in a fixed fallback order."""

    label: str

    @abstractmethod
    async def resolve(self, identifier: str, name: str) -> Outcome[Composition]:
        """Search the provider and return the fund's composition.

        SUCCESS carries a Composition with at least one constituent.
        """


class RegistrySource(ABC):
    """Lightweight registry lookup for baseline scheme metadata."""

    label: str

    @abstractmethod
    async def lookup(self, identifier: str) -> Outcome[RegistryInfo]:
        """Return category, fund house and latest NAV for identifier."""


class RatioSource(ABC):
    """Provider of per-stock valuation data."""

    label: str

    @abstractmethod
    async def quote(self, name: str) -> Outcome[RatioQuote]:
        """Look up one company by name."""
