"""Moneycontrol: fund search widget, then the portfolio-holdings HTML page."""

from __future__ import annotations

from fundscope.domain.models.composition import Composition, SectorWeight
from fundscope.domain.models.enums import SourceLabel

from .base import ProviderAdapter
from .parsing import (
    HtmlDocument,
    as_dict,
    as_list,
    map_constituents,
    map_weights,
    rows_to_records,
    table_rows,
    to_text,
)

SEARCH_URL = "https://www.moneycontrol.com/mc/widget/mfsearch"
SITE_URL = "https://www.moneycontrol.com"

HOLDING_SELECTORS = (
    "#portfolio_equity",
    ".port_table",
    ".portfolio_table",
    ".equity_holding",
    '[data-type="equity"]',
)
SECTOR_SELECTORS = ("#sector_wise", ".sector_table")

HOLDING_FIELDS = {"name": ("name",), "weight": ("weight",)}
SECTOR_FIELDS = {"label": ("name",), "weight": ("weight",)}


class MoneycontrolAdapter(ProviderAdapter):
    label = SourceLabel.MONEYCONTROL.value
    search_chars = 40

    async def _fetch(self, identifier: str, name: str) -> Composition | None:
        search = await self._http.get_json(
            SEARCH_URL,
            params={"classic": "true", "query": self._query(name), "type": 1, "format": "json"},
            timeout=self._timeout,
        )
        results = as_list(as_dict(search).get("result"))
        if not results:
            return None
        fund = as_dict(results[0])
        link = to_text(fund.get("link_src"))
        if not link:
            return None

        html = await self._http.get_text(
            SITE_URL + link.replace("/nav/", "/portfolio-holdings/"), timeout=self._timeout
        )
        document = HtmlDocument(html)
        constituents = map_constituents(
            rows_to_records(table_rows(document, HOLDING_SELECTORS)), HOLDING_FIELDS
        )
        if not constituents:
            return None
        sectors = map_weights(
            rows_to_sector_records(table_rows(document, SECTOR_SELECTORS)),
            SECTOR_FIELDS,
            SectorWeight,
        )
        return Composition(
            holding_name=to_text(fund.get("scheme_name")) or name,
            identifier=identifier,
            constituents=constituents,
            sectors=sectors,
            source=self.label,
        )


def rows_to_sector_records(rows) -> list[dict[str, str]]:
    # Sector tables carry the weight in the second column, not the last.
    return [{"name": cells[0].text, "weight": cells[1].text} for cells in rows if len(cells) >= 2]
