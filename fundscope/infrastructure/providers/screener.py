"""Screener: company search API, then the company page's top ratios.

Yields P/E, market capitalization and the NSE symbol taken from the company
URL slug (/company/<SYMBOL>/).
"""

from __future__ import annotations

import re

from fundscope.domain.models.enums import SourceLabel
from fundscope.domain.models.outcome import Outcome
from fundscope.domain.models.ratios import RatioQuote
from fundscope.domain.repositories.sources import RatioSource

from .base import guarded
from .http import HttpClient
from .parsing import HtmlDocument, as_dict, as_list, to_float, to_text

SEARCH_URL = "https://www.screener.in/api/company/search/"
SITE_URL = "https://www.screener.in"

_SYMBOL = re.compile(r"/company/([^/]+)/")
_MARKET_CAP = re.compile(r"₹?\s*([\d,.]+)\s*(Lakh Cr|L Cr|Cr)?", re.IGNORECASE)
_COMPANY_SUFFIX = re.compile(r"\s+(Ltd\.?|Limited|Private|Pvt\.?)$", re.IGNORECASE)


def clean_company_name(name: str) -> str:
    """Strip a trailing Ltd / Limited / Private / Pvt for provider search."""
    return _COMPANY_SUFFIX.sub("", name.strip()).strip()


def parse_ratios(html: str) -> tuple[float | None, str | None]:
    """Return (P/E, market cap label) from a company page."""
    document = HtmlDocument(html)
    items = document.select_items("#top-ratios") or document.select_items()

    pe: float | None = None
    market_cap: str | None = None
    for item in items:
        text = item.text
        if pe is None and "P/E" in text:
            pe = to_float(text.split("P/E", 1)[1])
        if market_cap is None and "Market Cap" in text:
            match = _MARKET_CAP.search(text.split("Market Cap", 1)[1])
            if match:
                market_cap = f"₹{match.group(1)} {match.group(2) or 'Cr'}"
    return pe, market_cap


class ScreenerRatioSource(RatioSource):
    label = SourceLabel.SCREENER.value

    def __init__(self, http: HttpClient, timeout: float | None = None) -> None:
        self._http = http
        self._timeout = timeout or http.timeout

    async def quote(self, name: str) -> Outcome[RatioQuote]:
        return await guarded(self.label, self._fetch(name))

    async def _fetch(self, name: str) -> RatioQuote | None:
        companies = as_list(
            await self._http.get_json(
                SEARCH_URL, params={"q": clean_company_name(name)}, timeout=self._timeout
            )
        )
        if not companies:
            return None
        url = to_text(as_dict(companies[0]).get("url"))
        if not url:
            return None
        symbol_match = _SYMBOL.search(url)

        html = await self._http.get_text(SITE_URL + url, timeout=self._timeout)
        pe, market_cap = parse_ratios(html)
        if pe is None:
            return None
        return RatioQuote(
            name=name,
            ratio=pe,
            capitalization_band=market_cap,
            ticker=symbol_match.group(1) if symbol_match else None,
        )
