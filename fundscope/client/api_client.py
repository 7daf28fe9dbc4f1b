"""Client for the fundscope HTTP API with a durable cache in front of it.

Compositions are cached under composition:{identifier} only when they carry
constituents; ratio quotes are cached per name under ratio:{name} when any
field was obtained.  Cached names are never sent to the server.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from typing import Any
from urllib.parse import quote

import requests

from fundscope.domain.models.aggregation import AggregationResult, HoldingInput
from fundscope.domain.models.cache import composition_key, ratio_key
from fundscope.domain.models.composition import Composition
from fundscope.domain.models.ratios import RatioBatchResponse, RatioQuote
from fundscope.domain.repositories.base import TimedCache

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 60.0


class FundscopeClient:
    def __init__(
        self,
        base_url: str,
        compositions: TimedCache[Composition] | None = None,
        ratios: TimedCache[RatioQuote] | None = None,
        session: requests.Session | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._compositions = compositions
        self._ratios = ratios
        self._session = session or requests.Session()
        self._timeout = timeout

    async def get_composition(self, identifier: str, name: str) -> Composition:
        key = composition_key(identifier)
        if self._compositions is not None:
            cached = await self._compositions.get(key)
            if cached is not None:
                logger.info("Cache hit: %s", name)
                return cached

        logger.info("Fetching: %s", name)
        data = await self._request("GET", f"/compositions/{quote(identifier, safe='')}", params={"name": name})
        composition = Composition.model_validate(data)
        if composition.has_data and self._compositions is not None:
            await self._compositions.put(key, composition)
        return composition

    async def save_composition(self, composition: Composition) -> None:
        """Persist an updated composition (after enrichment) to the durable cache."""
        if self._compositions is not None:
            await self._compositions.put(composition_key(composition.identifier), composition)

    async def fetch_ratios(self, names: Sequence[str]) -> list[RatioQuote]:
        """One quote per name, in order; cached names skip the network.

        Raises requests.RequestException when the server call fails.
        """
        found: dict[str, RatioQuote] = {}
        missing: list[str] = []
        for name in names:
            cached = await self._ratios.get(ratio_key(name)) if self._ratios is not None else None
            if cached is not None:
                found[name] = cached.model_copy(update={"name": name})
            else:
                missing.append(name)

        if missing:
            data = await self._request("POST", "/ratios/batch", json={"names": missing})
            for result in RatioBatchResponse.model_validate(data).results:
                found[result.name] = result
                if not result.is_empty and self._ratios is not None:
                    await self._ratios.put(ratio_key(result.name), result)

        return [found.get(name) or RatioQuote(name=name) for name in names]

    async def aggregate(self, holdings: Sequence[HoldingInput]) -> AggregationResult:
        payload = {"holdings": [h.model_dump(mode="json", by_alias=True) for h in holdings]}
        data = await self._request("POST", "/aggregate", json=payload)
        return AggregationResult.model_validate(data)

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        response = await asyncio.to_thread(
            self._session.request,
            method,
            self._base_url + path,
            timeout=self._timeout,
            **kwargs,
        )
        response.raise_for_status()
        return response.json()
