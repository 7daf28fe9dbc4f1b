"""NSE autocomplete: ticker symbol only (secondary ratio source)."""

from __future__ import annotations

from fundscope.domain.models.enums import SourceLabel
from fundscope.domain.models.outcome import Outcome
from fundscope.domain.models.ratios import RatioQuote
from fundscope.domain.repositories.sources import RatioSource

from .base import guarded
from .http import HttpClient
from .parsing import as_dict, as_list, to_text
from .screener import clean_company_name

AUTOCOMPLETE_URL = "https://www.nseindia.com/api/search/autocomplete"
NSE_TIMEOUT = 8.0


class NseTickerSource(RatioSource):
    label = SourceLabel.NSE.value

    def __init__(self, http: HttpClient, timeout: float = NSE_TIMEOUT) -> None:
        self._http = http
        self._timeout = timeout

    async def quote(self, name: str) -> Outcome[RatioQuote]:
        return await guarded(self.label, self._fetch(name))

    async def _fetch(self, name: str) -> RatioQuote | None:
        data = await self._http.get_json(
            AUTOCOMPLETE_URL,
            params={"q": clean_company_name(name)},
            timeout=self._timeout,
            headers={"Referer": "https://www.nseindia.com/"},
        )
        symbols = [as_dict(s) for s in as_list(as_dict(data).get("symbols"))]
        if not symbols:
            return None
        equity = next(
            (
                s
                for s in symbols
                if "EQ" in (s.get("symbol_info") or "") or "equity" in (s.get("symbol_info") or "")
            ),
            symbols[0],
        )
        ticker = to_text(equity.get("symbol"))
        if not ticker:
            return None
        return RatioQuote(name=name, ticker=ticker)
