"""
cg_client.py
Thin async wrapper around the CoinGecko public REST API.
One GET per call: no retries, no caching.
"""
import logging
from functools import partial
from typing import Any, Dict, Mapping, Optional

import anyio
import requests

from cg_settings import COINGECKO_BASE_URL

logger = logging.getLogger("cg_client")


class MarketDataError(Exception):
    """Base class for failures of a market-data operation."""


class UpstreamError(MarketDataError):
    def __init__(self, status: int, status_text: str):
        self.status = status
        self.status_text = status_text or ""
        super().__init__(f"CoinGecko API error: {status} {self.status_text}".rstrip())


class TransportError(MarketDataError):
    """The request to CoinGecko could not be completed."""


class CoinGeckoClient:
    def __init__(self, api_key: Optional[str] = None, base_url: str = COINGECKO_BASE_URL):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")

    @classmethod
    def from_settings(cls, settings) -> "CoinGeckoClient":
        return cls(api_key=settings.api_key, base_url=settings.base_url)

    def _headers(self) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.api_key:
            headers["x-cg-demo-api-key"] = self.api_key
        return headers

    def url_for(self, path: str) -> str:
        return self.base_url + "/" + path.lstrip("/")

    def _get(self, path: str, query: Optional[Mapping[str, Any]] = None) -> Any:
        url = self.url_for(path)
        params = {k: v for k, v in (query or {}).items() if v is not None and v != ""}
        logger.debug("GET %s params=%s", url, params)
        try:
            r = requests.get(url, params=params or None, headers=self._headers())
        except requests.RequestException as e:
            logger.warning("CoinGecko request to %s failed: %s", url, e)
            raise TransportError(f"CoinGecko request failed: {e}") from e
        if not r.ok:
            logger.warning("CoinGecko %s answered %s %s", url, r.status_code, r.reason)
            raise UpstreamError(r.status_code, r.reason)
        try:
            return r.json()
        except ValueError as e:
            raise TransportError(f"CoinGecko returned an invalid JSON body: {e}") from e

    async def fetch(self, path: str, query: Optional[Mapping[str, Any]] = None) -> Any:
        """GET ``path`` relative to the base URL and return the decoded JSON body."""
        return await anyio.to_thread.run_sync(partial(self._get, path, query))
