"""Shared adapter boundary: converts provider failures into Outcomes."""

from __future__ import annotations

import logging
from abc import abstractmethod
from collections.abc import Awaitable
from typing import TypeVar

from fundscope.domain.models.composition import Composition
from fundscope.domain.models.outcome import Outcome
from fundscope.domain.repositories.sources import CompositionSource

from .errors import ProviderUnavailable
from .http import HttpClient

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def guarded(label: str, awaitable: Awaitable[T | None]) -> Outcome[T]:
    """Await a provider call and classify its result.

    None → NO_DATA; ProviderUnavailable or any error while reading the
    provider's data → PROVIDER_ERROR.  Nothing propagates.
    """
    try:
        value = await awaitable
    except ProviderUnavailable as exc:
        logger.warning("%s unavailable: %s", label, exc)
        return Outcome.error(str(exc))
    except Exception as exc:
        logger.warning("%s returned unusable data: %r", label, exc)
        return Outcome.error(repr(exc))
    if value is None:
        return Outcome.no_data()
    return Outcome.success(value)


class ProviderAdapter(CompositionSource):
    """Base for composition adapters: subclasses implement _fetch only.

    _fetch may raise anything and may return None; resolve() never raises and
    reports SUCCESS only for a composition with at least one constituent.
    """

    label: str
    search_chars = 30

    def __init__(self, http: HttpClient, timeout: float | None = None) -> None:
        self._http = http
        self._timeout = timeout or http.timeout

    async def resolve(self, identifier: str, name: str) -> Outcome[Composition]:
        outcome = await guarded(self.label, self._fetch(identifier, name))
        if outcome.ok and outcome.value is not None and not outcome.value.has_data:
            return Outcome.no_data("no constituents")
        return outcome

    def _query(self, name: str) -> str:
        return name[: self.search_chars]

    @abstractmethod
    async def _fetch(self, identifier: str, name: str) -> Composition | None:
        """Search, fetch and parse; return None when the provider has nothing."""
