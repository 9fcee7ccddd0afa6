"""
cg_settings.py
Runtime configuration for the CoinGecko MCP server, read once at startup.
"""
import os
from dataclasses import dataclass
from typing import Mapping, Optional

from dotenv import load_dotenv

COINGECKO_BASE_URL = "https://api.coingecko.com/api/v3"
DEFAULT_NETWORK = "base-sepolia"


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


@dataclass(frozen=True)
class Settings:
    api_key: Optional[str] = None
    base_url: str = COINGECKO_BASE_URL
    host: str = "127.0.0.1"
    port: int = 8000
    facilitator_url: Optional[str] = None
    pay_to: Optional[str] = None
    network: str = DEFAULT_NETWORK
    log_level: str = "INFO"

    @property
    def payment_enabled(self) -> bool:
        return bool(self.facilitator_url and self.pay_to)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """Build settings from ``environ`` (defaults to ``os.environ`` after loading .env)."""
        if environ is None:
            load_dotenv()
            environ = os.environ
        port = _clean(environ.get("PORT"))
        return cls(
            api_key=_clean(environ.get("COINGECKO_API_KEY")) or _clean(environ.get("COINGEKO_API_KEY")),
            base_url=_clean(environ.get("COINGECKO_BASE_URL")) or COINGECKO_BASE_URL,
            host=_clean(environ.get("HOST")) or "127.0.0.1",
            port=int(port) if port else 8000,
            facilitator_url=_clean(environ.get("FACILITATOR_URL")),
            pay_to=_clean(environ.get("ADDRESS")),
            network=_clean(environ.get("PAYMENT_NETWORK")) or DEFAULT_NETWORK,
            log_level=(_clean(environ.get("LOG_LEVEL")) or "INFO").upper(),
        )
