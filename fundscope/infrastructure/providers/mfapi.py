"""MFAPI registry: scheme code by identifier, then scheme metadata and latest NAV."""

from __future__ import annotations

from fundscope.domain.models.composition import RegistryInfo
from fundscope.domain.models.enums import SourceLabel
from fundscope.domain.models.outcome import Outcome
from fundscope.domain.repositories.sources import RegistrySource

from .base import guarded
from .http import HttpClient
from .parsing import as_dict, as_list, to_float, to_text

SEARCH_URL = "https://api.mfapi.in/mf/search"
SCHEME_URL = "https://api.mfapi.in/mf/{scheme_code}"


class MfapiRegistry(RegistrySource):
    label = SourceLabel.MFAPI.value

    def __init__(self, http: HttpClient, timeout: float | None = None) -> None:
        self._http = http
        self._timeout = timeout or http.timeout

    async def lookup(self, identifier: str) -> Outcome[RegistryInfo]:
        return await guarded(self.label, self._fetch(identifier))

    async def _fetch(self, identifier: str) -> RegistryInfo | None:
        matches = as_list(
            await self._http.get_json(SEARCH_URL, params={"q": identifier}, timeout=self._timeout)
        )
        if not matches:
            return None
        scheme_code = to_text(as_dict(matches[0]).get("schemeCode"))
        if not scheme_code:
            return None

        scheme = as_dict(
            await self._http.get_json(
                SCHEME_URL.format(scheme_code=scheme_code), timeout=self._timeout
            )
        )
        meta = as_dict(scheme.get("meta"))
        history = as_list(scheme.get("data"))
        latest = as_dict(history[0]) if history else {}
        return RegistryInfo(
            scheme_code=scheme_code,
            holding_name=to_text(meta.get("scheme_name")),
            category=to_text(meta.get("scheme_category")),
            house=to_text(meta.get("fund_house")),
            nav=to_float(latest.get("nav")),
            nav_date=to_text(latest.get("date")),
        )
