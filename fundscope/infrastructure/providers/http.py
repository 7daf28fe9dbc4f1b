"""Blocking HTTP access to external providers, exposed as coroutines.

requests calls run in worker threads so a slow provider only occupies its
own thread.  Every call carries an explicit timeout.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from typing import Any

import requests

from .errors import ProviderUnavailable

logger = logging.getLogger(__name__)

USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)
DEFAULT_TIMEOUT = 10.0

_DEFAULT_HEADERS = {
    "User-Agent": USER_AGENT,
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,application/json,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.5",
    "Cache-Control": "no-cache",
}


class HttpClient:
    """Thin async wrapper over a shared requests.Session."""

    def __init__(
        self,
        session: requests.Session | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self._session = session or requests.Session()
        self._session.headers.update(_DEFAULT_HEADERS)
        self._timeout = timeout

    @property
    def timeout(self) -> float:
        return self._timeout

    async def get_json(
        self,
        url: str,
        params: Mapping[str, Any] | None = None,
        timeout: float | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> Any:
        merged = {"Accept": "application/json", **(headers or {})}
        response = await self._get(url, params, timeout, merged)
        try:
            return response.json()
        except ValueError as exc:
            raise ProviderUnavailable(f"Malformed JSON from {url}") from exc

    async def get_text(
        self,
        url: str,
        params: Mapping[str, Any] | None = None,
        timeout: float | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> str:
        response = await self._get(url, params, timeout, dict(headers or {}))
        return response.text

    async def _get(
        self,
        url: str,
        params: Mapping[str, Any] | None,
        timeout: float | None,
        headers: Mapping[str, str],
    ) -> requests.Response:
        try:
            response = await asyncio.to_thread(
                self._session.get,
                url,
                params=params,
                headers=headers,
                timeout=timeout or self._timeout,
            )
        except requests.RequestException as exc:
            raise ProviderUnavailable(f"GET {url} failed: {exc}") from exc
        if not response.ok:
            raise ProviderUnavailable(f"GET {url} returned HTTP {response.status_code}")
        return response
