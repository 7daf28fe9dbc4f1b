"""Tickertape: fund search API, then the holdings view API."""

from __future__ import annotations

from fundscope.domain.models.composition import Composition
from fundscope.domain.models.enums import SourceLabel

from .base import ProviderAdapter
from .parsing import as_dict, as_list, map_constituents, pick, prefer_match, to_text

SEARCH_URL = "https://api.tickertape.in/search"
HOLDINGS_URL = "https://api.tickertape.in/mutualfunds/view/{slug}"

HOLDING_FIELDS = {
    "name": ("name", "stock"),
    "weight": ("percentage", "weight"),
    "sector": ("sector",),
}


class TickertapeAdapter(ProviderAdapter):
    label = SourceLabel.TICKERTAPE.value

    async def _fetch(self, identifier: str, name: str) -> Composition | None:
        search = await self._http.get_json(
            SEARCH_URL, params={"text": self._query(name), "types": "mf"}, timeout=self._timeout
        )
        funds = as_list(as_dict(search).get("data"))
        fund = as_dict(prefer_match(funds, identifier))
        slug = to_text(pick(fund, ("slug", "sid")))
        if not slug:
            return None

        detail = await self._http.get_json(
            HOLDINGS_URL.format(slug=slug), params={"pageId": "holdings"}, timeout=self._timeout
        )
        holdings = as_dict(as_dict(detail).get("data")).get("holdings")
        # Equity list first, debt list for debt funds, else a flat list.
        if isinstance(holdings, dict):
            rows = as_list(holdings.get("equity")) or as_list(holdings.get("debt"))
        else:
            rows = as_list(holdings)

        constituents = map_constituents(rows, HOLDING_FIELDS)
        if not constituents:
            return None
        return Composition(
            holding_name=to_text(fund.get("name")) or name,
            identifier=identifier,
            constituents=constituents,
            source=self.label,
        )
