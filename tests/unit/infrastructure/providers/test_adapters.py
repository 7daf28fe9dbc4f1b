"""Tests for the composition adapters and the MFAPI registry, with a fake HttpClient."""

import json

from fundscope.domain.models.enums import OutcomeStatus
from fundscope.infrastructure.providers import (
    SOURCE_ORDER,
    EtMoneyAdapter,
    GrowwAdapter,
    MfapiRegistry,
    MoneycontrolAdapter,
    ProviderUnavailable,
    TickertapeAdapter,
    ValueResearchAdapter,
)
from fundscope.infrastructure.providers.groww import parse_scheme


class _Http:
    """Serves canned responses keyed by URL; unknown URLs are unavailable."""

    timeout = 10.0

    def __init__(self, responses):
        self._responses = responses
        self.calls = []

    def _lookup(self, url, params, timeout):
        self.calls.append((url, params, timeout))
        response = self._responses.get(url)
        if isinstance(response, Exception):
            raise response
        if response is None:
            raise ProviderUnavailable(f"GET {url} returned HTTP 404")
        return response

    async def get_json(self, url, params=None, timeout=None, headers=None):
        return self._lookup(url, params, timeout)

    async def get_text(self, url, params=None, timeout=None, headers=None):
        return self._lookup(url, params, timeout)


GROWW_SCHEME = {
    "scheme_name": "Alpha Flexi Cap Fund Direct Growth",
    "isin": "INF000A01",
    "sub_category": "Flexi Cap",
    "amc": "Alpha Mutual Fund",
    "aum": 12345.6,
    "expense_ratio": "0.65",
    "nav": {"nav": 101.25},
    "holdings": [
        {"company_name": "Acme Ltd", "corpus_per": 8.5, "sector_name": "Energy", "stock_search_id": "acme"},
        {"company_name": "Zed Corp", "corpus_per": "4.0", "sector_name": "IT"},
        {"company_name": "Total", "corpus_per": 12.5},
        {"company_name": "Cash", "corpus_per": 0},
    ],
    "sectors": [{"sector": "Energy", "holdingPerc": 30.0}],
    "asset_allocation": [{"asset_class": "Equity", "percentage": 95.0}],
    "return_stats": {"std_dev": 12.1, "sharpe": 1.3, "beta": 0.9},
}


def _next_data_page(mf):
    payload = json.dumps({"props": {"pageProps": {"mfServerSideData": mf}}})
    return f'<html><script id="__NEXT_DATA__" type="application/json">{payload}</script></html>'


# --- Groww ---

def test_groww_parse_scheme_maps_fields():
    composition = parse_scheme(GROWW_SCHEME, "INF000A01", "Alpha")
    assert [c.name for c in composition.constituents] == ["Acme Ltd", "Zed Corp"]
    assert composition.constituents[0].ticker == "acme"
    assert composition.nav == 101.25
    assert composition.category == "Flexi Cap"
    assert composition.sectors[0].label == "Energy"
    assert composition.asset_classes[0].weight == 95.0
    assert composition.valuation.sharpe_ratio == 1.3


def test_groww_parse_scheme_without_holdings_is_none():
    assert parse_scheme({"holdings": []}, "INF000A01", "Alpha") is None


async def test_groww_resolves_through_search_and_page():
    http = _Http(
        {
            "https://groww.in/v1/api/search/v1/entity": {"content": [{"search_id": "alpha-flexi-cap"}]},
            "https://groww.in/mutual-funds/alpha-flexi-cap": _next_data_page(GROWW_SCHEME),
        }
    )
    outcome = await GrowwAdapter(http).resolve("INF000A01", "Alpha Flexi Cap Fund Direct Plan Growth Option")
    assert outcome.ok
    assert len(outcome.value.constituents) == 2
    search_params = http.calls[0][1]
    assert len(search_params["q"]) == 30
    assert http.calls[1][2] == 15.0


async def test_groww_page_without_next_data_is_no_data():
    http = _Http(
        {
            "https://groww.in/v1/api/search/v1/entity": {"content": [{"search_id": "alpha"}]},
            "https://groww.in/mutual-funds/alpha": "<html></html>",
        }
    )
    assert (await GrowwAdapter(http).resolve("INF000A01", "Alpha")).status == OutcomeStatus.NO_DATA


async def test_groww_search_failure_is_provider_error():
    outcome = await GrowwAdapter(_Http({})).resolve("INF000A01", "Alpha")
    assert outcome.status == OutcomeStatus.PROVIDER_ERROR
    assert "404" in outcome.detail


# --- Tickertape ---

async def test_tickertape_prefers_matching_isin_and_equity_list():
    http = _Http(
        {
            "https://api.tickertape.in/search": {
                "data": [{"slug": "wrong", "isin": "OTHER"}, {"slug": "alpha", "isin": "INF000A01", "name": "Alpha"}]
            },
            "https://api.tickertape.in/mutualfunds/view/alpha": {
                "data": {
                    "holdings": {
                        "equity": [{"name": "Acme Ltd", "percentage": 9.0}],
                        "debt": [{"name": "GOI 2033", "percentage": 1.0}],
                    }
                }
            },
        }
    )
    outcome = await TickertapeAdapter(http).resolve("INF000A01", "Alpha")
    assert [c.name for c in outcome.value.constituents] == ["Acme Ltd"]
    assert outcome.value.holding_name == "Alpha"


async def test_tickertape_debt_fund_uses_debt_list():
    http = _Http(
        {
            "https://api.tickertape.in/search": {"data": [{"slug": "gilt"}]},
            "https://api.tickertape.in/mutualfunds/view/gilt": {
                "data": {"holdings": {"equity": [], "debt": [{"name": "7.26% GOI 2033", "percentage": 40.0}]}}
            },
        }
    )
    outcome = await TickertapeAdapter(http).resolve("INF000G01", "Gilt Fund")
    assert outcome.value.constituents[0].name == "7.26% GOI 2033"


async def test_tickertape_no_search_hit_is_no_data():
    http = _Http({"https://api.tickertape.in/search": {"data": []}})
    assert (await TickertapeAdapter(http).resolve("X", "Y")).status == OutcomeStatus.NO_DATA


# --- Moneycontrol ---

MONEYCONTROL_PAGE = """
<table id="portfolio_equity">
  <tr><th>Stock</th><th>Sector</th><th>%</th></tr>
  <tr><td><a href="/india/stockpricequote/acme">Acme Ltd</a></td><td>Energy</td><td>7.5%</td></tr>
</table>
<table class="sector_table">
  <tr><td>Energy</td><td>22.0</td><td>-0.5</td></tr>
</table>
"""


async def test_moneycontrol_reads_portfolio_tables():
    http = _Http(
        {
            "https://www.moneycontrol.com/mc/widget/mfsearch": {
                "result": [{"link_src": "/mutual-funds/nav/alpha/MAL001", "scheme_name": "Alpha Fund"}]
            },
            "https://www.moneycontrol.com/mutual-funds/portfolio-holdings/alpha/MAL001": MONEYCONTROL_PAGE,
        }
    )
    outcome = await MoneycontrolAdapter(http).resolve("INF000A01", "Alpha Fund")
    assert [(c.name, c.weight) for c in outcome.value.constituents] == [("Acme Ltd", 7.5)]
    assert outcome.value.sectors[0].weight == 22.0


async def test_moneycontrol_search_uses_forty_characters():
    http = _Http({"https://www.moneycontrol.com/mc/widget/mfsearch": {"result": []}})
    await MoneycontrolAdapter(http).resolve("X", "A" * 60)
    assert len(http.calls[0][1]["query"]) == 40


# --- Value Research ---

async def test_value_research_reads_holding_table():
    http = _Http(
        {
            "https://www.valueresearchonline.com/api/mutualfund/search": [{"id": 42, "name": "Alpha Fund"}],
            "https://www.valueresearchonline.com/funds/42/portfolio/": (
                '<div class="holding-table"><table><tr><td>Acme Ltd</td><td>Energy</td><td>6.1</td></tr></table></div>'
            ),
        }
    )
    outcome = await ValueResearchAdapter(http).resolve("INF000A01", "Alpha Fund")
    assert outcome.value.constituents[0].weight == 6.1


async def test_value_research_page_without_table_is_no_data():
    http = _Http(
        {
            "https://www.valueresearchonline.com/api/mutualfund/search": [{"id": 42}],
            "https://www.valueresearchonline.com/funds/42/portfolio/": "<p>redesigned</p>",
        }
    )
    assert (await ValueResearchAdapter(http).resolve("X", "Y")).status == OutcomeStatus.NO_DATA


# --- ET Money ---

async def test_etmoney_reads_portfolio_api():
    http = _Http(
        {
            "https://www.etmoney.com/api/v2/mf/search": {"data": [{"slug": "alpha", "name": "Alpha"}]},
            "https://www.etmoney.com/api/v2/mf/fund/alpha/portfolio": {
                "data": {"holdings": [{"company_name": "Acme Ltd", "weight": 3.0, "sector": "Energy"}]}
            },
        }
    )
    outcome = await EtMoneyAdapter(http).resolve("INF000A01", "Alpha")
    assert outcome.value.constituents[0].sector == "Energy"


async def test_adapter_unexpected_payload_is_provider_error():
    http = _Http({"https://www.etmoney.com/api/v2/mf/search": {"data": [{"slug": "alpha"}]}})
    http._responses["https://www.etmoney.com/api/v2/mf/fund/alpha/portfolio"] = RuntimeError("parse")
    assert (await EtMoneyAdapter(http).resolve("X", "Y")).status == OutcomeStatus.PROVIDER_ERROR


# --- registry ---

async def test_mfapi_registry_reads_meta_and_latest_nav():
    http = _Http(
        {
            "https://api.mfapi.in/mf/search": [{"schemeCode": 120503, "schemeName": "Alpha"}],
            "https://api.mfapi.in/mf/120503": {
                "meta": {"scheme_name": "Alpha Fund", "scheme_category": "Flexi Cap", "fund_house": "Alpha MF"},
                "data": [{"date": "17-10-2026", "nav": "101.25000"}, {"date": "16-10-2026", "nav": "100.0"}],
            },
        }
    )
    outcome = await MfapiRegistry(http).lookup("INF000A01")
    assert outcome.ok
    info = outcome.value
    assert (info.scheme_code, info.house, info.nav, info.nav_date) == ("120503", "Alpha MF", 101.25, "17-10-2026")


async def test_mfapi_registry_no_match_is_no_data():
    http = _Http({"https://api.mfapi.in/mf/search": []})
    assert (await MfapiRegistry(http).lookup("X")).status == OutcomeStatus.NO_DATA


def test_source_order():
    assert [a.label for a in SOURCE_ORDER] == ["Groww", "Tickertape", "Moneycontrol", "Value Research", "ET Money"]
