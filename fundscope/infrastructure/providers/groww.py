"""Groww: scheme search API, then the fund page's embedded __NEXT_DATA__ JSON."""

from __future__ import annotations

from typing import Any

from fundscope.domain.models.composition import (
    AssetClassWeight,
    Composition,
    SectorWeight,
    ValuationMetrics,
)
from fundscope.domain.models.enums import SourceLabel

from .base import ProviderAdapter
from .parsing import (
    as_dict,
    as_list,
    extract_next_data,
    map_constituents,
    map_weights,
    pick,
    to_float,
    to_text,
)

SEARCH_URL = "https://groww.in/v1/api/search/v1/entity"
PAGE_URL = "https://groww.in/mutual-funds/{search_id}"
PAGE_TIMEOUT = 15.0

HOLDING_FIELDS = {
    "name": (
        "company_name",
        "companyName",
        "instrument_name",
        "instrumentName",
        "corp_name",
        "corpName",
        "name",
    ),
    "weight": ("corpus_per", "holding_perc", "holdingPerc", "percentage"),
    "sector": ("sector_name", "sector"),
    "ticker": ("stock_search_id",),
}
SECTOR_FIELDS = {
    "label": ("sector", "sector_name"),
    "weight": ("holdingPerc", "holding_perc", "percentage", "corpus_per"),
}
ASSET_CLASS_FIELDS = {
    "label": ("asset_class", "assetClass", "type", "name"),
    "weight": ("percentage", "holding_perc", "holdingPerc", "corpus_per"),
}
METRIC_FIELDS = {
    "pe_ratio": ("pe", "pe_ratio", "peRatio"),
    "pb_ratio": ("pb", "pb_ratio", "pbRatio"),
    "dividend_yield": ("dividend_yield", "dividendYield"),
    "turnover_ratio": ("portfolio_turnover", "turnover_ratio", "turnoverRatio"),
    "standard_deviation": ("std_dev", "standard_deviation", "standardDeviation"),
    "sharpe_ratio": ("sharpe", "sharpe_ratio", "sharpeRatio"),
    "beta": ("beta",),
    "alpha": ("alpha",),
}


class GrowwAdapter(ProviderAdapter):
    label = SourceLabel.GROWW.value

    async def _search(self, query: str) -> str | None:
        data = await self._http.get_json(
            SEARCH_URL,
            params={"app": "true", "entity_type": "scheme", "q": query, "size": 5},
            timeout=self._timeout,
        )
        content = as_list(as_dict(data).get("content"))
        if not content:
            return None
        first = as_dict(content[0])
        return to_text(pick(first, ("search_id", "id")))

    async def _fetch(self, identifier: str, name: str) -> Composition | None:
        search_id = await self._search(self._query(name)) or await self._search(identifier)
        if not search_id:
            return None

        html = await self._http.get_text(
            PAGE_URL.format(search_id=search_id),
            timeout=PAGE_TIMEOUT,
            headers={"Accept": "text/html,application/xhtml+xml"},
        )
        next_data = extract_next_data(html)
        if next_data is None:
            return None
        page_props = as_dict(as_dict(next_data.get("props")).get("pageProps"))
        mf = as_dict(page_props.get("mfServerSideData") or page_props.get("mf"))
        if not mf:
            return None
        return parse_scheme(mf, identifier, name)


def parse_scheme(mf: dict[str, Any], identifier: str, name: str) -> Composition | None:
    constituents = map_constituents(as_list(mf.get("holdings")), HOLDING_FIELDS)
    if not constituents:
        return None

    sectors = map_weights(
        as_list(mf.get("sectors") or mf.get("sector_allocation")), SECTOR_FIELDS, SectorWeight
    )
    asset_classes = map_weights(
        as_list(mf.get("asset_allocation") or mf.get("assetAllocation")),
        ASSET_CLASS_FIELDS,
        AssetClassWeight,
    )

    # NAV is either a number or nested as {"nav": ...}
    nav_field = mf.get("nav")
    nav = to_float(nav_field.get("nav")) if isinstance(nav_field, dict) else to_float(nav_field)

    stats = as_dict(mf.get("return_stats") or mf.get("stats"))
    metrics = ValuationMetrics(
        **{field: to_float(pick(stats, keys)) for field, keys in METRIC_FIELDS.items()}
    )

    return Composition(
        holding_name=to_text(pick(mf, ("scheme_name", "fund_name"))) or name,
        identifier=to_text(mf.get("isin")) or identifier,
        category=to_text(pick(mf, ("sub_category", "category"))),
        house=to_text(pick(mf, ("amc", "fund_house"))),
        aum=to_text(pick(mf, ("aum", "fund_size"))),
        expense_ratio=to_text(mf.get("expense_ratio")),
        nav=nav,
        constituents=constituents,
        sectors=sectors,
        asset_classes=asset_classes,
        valuation=None if metrics.is_empty() else metrics,
        source=SourceLabel.GROWW.value,
    )
