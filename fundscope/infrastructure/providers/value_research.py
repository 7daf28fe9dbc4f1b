"""Value Research: fund search API, then the portfolio HTML page."""

from __future__ import annotations

from fundscope.domain.models.composition import Composition
from fundscope.domain.models.enums import SourceLabel

from .base import ProviderAdapter
from .parsing import (
    HtmlDocument,
    as_dict,
    as_list,
    map_constituents,
    pick,
    prefer_match,
    rows_to_records,
    table_rows,
    to_text,
)

SEARCH_URL = "https://www.valueresearchonline.com/api/mutualfund/search"
PORTFOLIO_URL = "https://www.valueresearchonline.com/funds/{fund_id}/portfolio/"

HOLDING_SELECTORS = (".holding-table", ".portfolio-table")
HOLDING_FIELDS = {"name": ("name",), "weight": ("weight",)}


class ValueResearchAdapter(ProviderAdapter):
    label = SourceLabel.VALUE_RESEARCH.value

    async def _fetch(self, identifier: str, name: str) -> Composition | None:
        search = await self._http.get_json(
            SEARCH_URL, params={"q": self._query(name)}, timeout=self._timeout
        )
        fund = as_dict(prefer_match(as_list(search), identifier))
        fund_id = to_text(pick(fund, ("id", "fundId")))
        if not fund_id:
            return None

        html = await self._http.get_text(PORTFOLIO_URL.format(fund_id=fund_id), timeout=self._timeout)
        document = HtmlDocument(html)
        constituents = map_constituents(
            rows_to_records(table_rows(document, HOLDING_SELECTORS)), HOLDING_FIELDS
        )
        if not constituents:
            return None
        return Composition(
            holding_name=to_text(fund.get("name")) or name,
            identifier=identifier,
            constituents=constituents,
            source=self.label,
        )
