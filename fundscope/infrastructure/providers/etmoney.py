"""ET Money: fund search API, then the portfolio API."""

from __future__ import annotations

from fundscope.domain.models.composition import Composition
from fundscope.domain.models.enums import SourceLabel

from .base import ProviderAdapter
from .parsing import as_dict, as_list, map_constituents, pick, prefer_match, to_text

SEARCH_URL = "https://www.etmoney.com/api/v2/mf/search"
PORTFOLIO_URL = "https://www.etmoney.com/api/v2/mf/fund/{slug}/portfolio"

HOLDING_FIELDS = {
    "name": ("name", "company_name"),
    "weight": ("percentage", "weight"),
    "sector": ("sector",),
}


class EtMoneyAdapter(ProviderAdapter):
    label = SourceLabel.ET_MONEY.value

    async def _fetch(self, identifier: str, name: str) -> Composition | None:
        search = await self._http.get_json(
            SEARCH_URL, params={"q": self._query(name)}, timeout=self._timeout
        )
        fund = as_dict(prefer_match(as_list(as_dict(search).get("data")), identifier))
        slug = to_text(pick(fund, ("slug", "id")))
        if not slug:
            return None

        detail = await self._http.get_json(PORTFOLIO_URL.format(slug=slug), timeout=self._timeout)
        rows = as_list(as_dict(as_dict(detail).get("data")).get("holdings"))
        constituents = map_constituents(rows, HOLDING_FIELDS)
        if not constituents:
            return None
        return Composition(
            holding_name=to_text(fund.get("name")) or name,
            identifier=identifier,
            constituents=constituents,
            source=self.label,
        )
