"""
cg_catalog.py
Single declaration of the operations, prompts and resources exposed by the
CoinGecko MCP server. HTTP routes, MCP listings and the info endpoints all
read from here.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple
from urllib.parse import quote

from cg_settings import COINGECKO_BASE_URL

SERVER_NAME = "coingecko-mcp-server"
SERVER_VERSION = "1.0.0"
SERVER_TITLE = "CoinGecko MCP Server"
SERVER_DESCRIPTION = "MCP server providing CoinGecko crypto market data tools"


def is_absent(value: Any) -> bool:
    return value is None or value == ""


def path_segment(value: Any) -> str:
    """Encode ``value`` so it stays exactly one URL path segment."""
    segment = quote(str(value), safe="")
    # quote() leaves dots alone, and "." or ".." would be resolved as relative segments
    if segment.strip(".") == "":
        segment = segment.replace(".", "%2E")
    return segment


@dataclass(frozen=True)
class ParamSpec:
    name: str
    type: str
    description: str
    required: bool = False
    in_path: bool = False
    attr: Optional[str] = None

    @property
    def keyword(self) -> str:
        """Python keyword used by the handler for this parameter."""
        return self.attr or self.name


@dataclass(frozen=True)
class OperationDescriptor:
    name: str
    description: str
    summary: str
    http_path: str
    upstream_path: str
    failure: str
    example: str
    params: Tuple[ParamSpec, ...] = field(default_factory=tuple)

    @property
    def required_names(self) -> List[str]:
        return [p.name for p in self.params if p.required]

    @property
    def optional_params(self) -> Tuple[ParamSpec, ...]:
        return tuple(p for p in self.params if not p.required)

    def missing(self, values: Mapping[str, Any]) -> List[str]:
        return [name for name in self.required_names if is_absent(values.get(name))]

    def input_schema(self) -> Dict[str, Any]:
        return {
            "type": "object",
            "properties": {p.name: {"type": p.type, "description": p.description} for p in self.params},
            "required": self.required_names,
        }

    def upstream_path_for(self, values: Mapping[str, Any]) -> str:
        return self.upstream_path.format(**{p.name: path_segment(values[p.name]) for p in self.params if p.in_path})


def _flag(name: str, description: str) -> ParamSpec:
    return ParamSpec(name, "boolean", description)


def _str_flag(name: str, description: str) -> ParamSpec:
    return ParamSpec(name, "string", description)


SIMPLE_PRICE = OperationDescriptor(
    name="get_simple_price",
    description="Fetch the current price of one or more tokens using CoinGecko's /simple/price endpoint",
    summary="Get current prices for multiple crypto tokens",
    http_path="/simple/price",
    upstream_path="/simple/price",
    failure="Failed to fetch price data",
    example="/simple/price?ids=bitcoin,ethereum&vs_currencies=usd",
    params=(
        ParamSpec("ids", "string", "Comma-separated list of token IDs (e.g., bitcoin,ethereum)", required=True),
        ParamSpec("vs_currencies", "string", "Comma-separated list of quote currencies (e.g., usd,eur,inr)", required=True),
        _flag("include_market_cap", "Include market cap in the response"),
        _flag("include_24hr_vol", "Include 24h volume in the response"),
        _flag("include_24hr_change", "Include 24h price change in the response"),
        _flag("include_last_updated_at", "Include last update timestamp in the response"),
        ParamSpec("precision", "number", "Decimal precision for price values"),
    ),
)

TRENDING_COINS = OperationDescriptor(
    name="get_trending_coins",
    description="Retrieve trending coins from CoinGecko using /search/trending",
    summary="Get currently trending coins on CoinGecko",
    http_path="/search/trending",
    upstream_path="/search/trending",
    failure="Failed to fetch trending coins",
    example="/search/trending",
)

NEW_COINS = OperationDescriptor(
    name="get_new_coins",
    description="Retrieve a list of newly listed coins from CoinGecko using /coins/list/new",
    summary="Get newly listed coins on CoinGecko",
    http_path="/coins/list/new",
    upstream_path="/coins/list/new",
    failure="Failed to fetch new coins",
    example="/coins/list/new",
)

TOKEN_BY_ADDRESS = OperationDescriptor(
    name="get_token_price_by_address",
    description="Fetch USD price & market data for a token using /coins/{chainId}/contract/{tokenAddress}",
    summary="Get token data by contract address",
    http_path="/coins/{chainId}/contract/{tokenAddress}",
    upstream_path="/coins/{chainId}/contract/{tokenAddress}",
    failure="Failed to fetch token data",
    example="/coins/ethereum/contract/0x...",
    params=(
        ParamSpec(
            "chainId", "string",
            "Blockchain identifier used by CoinGecko (e.g., ethereum, polygon-pos, binance-smart-chain)",
            required=True, in_path=True, attr="chain_id",
        ),
        ParamSpec("tokenAddress", "string", "Token contract address", required=True, in_path=True, attr="token_address"),
        _str_flag("localization", "Include localized language in response (true/false). Default: true"),
        _str_flag("tickers", "Include tickers data (true/false). Default: true"),
        _str_flag("market_data", "Include market data (true/false). Default: true"),
        _str_flag("community_data", "Include community data (true/false). Default: true"),
        _str_flag("developer_data", "Include developer data (true/false). Default: true"),
        _str_flag("sparkline", "Include sparkline 7 days data (true/false). Default: false"),
    ),
)

OPERATIONS: Dict[str, OperationDescriptor] = {
    op.name: op for op in (SIMPLE_PRICE, TRENDING_COINS, NEW_COINS, TOKEN_BY_ADDRESS)
}


@dataclass(frozen=True)
class PromptArg:
    name: str
    description: str
    required: bool = False


@dataclass(frozen=True)
class PromptSpec:
    name: str
    description: str
    arguments: Tuple[PromptArg, ...] = ()


PROMPTS: Dict[str, PromptSpec] = {
    p.name: p
    for p in (
        PromptSpec(
            "crypto_price_check",
            "Get current prices for popular cryptocurrencies",
            (
                PromptArg("tokens", "Comma-separated list of crypto tokens (e.g., bitcoin,ethereum,solana)", True),
                PromptArg("currencies", "Quote currencies (default: usd,eur)"),
            ),
        ),
        PromptSpec("market_analysis", "Comprehensive crypto market analysis with trending and new coins"),
        PromptSpec(
            "token_research",
            "Deep dive research on a specific token by contract address",
            (
                PromptArg("chain", "Blockchain name (e.g., ethereum, polygon-pos, binance-smart-chain)", True),
                PromptArg("address", "Token contract address", True),
            ),
        ),
    )
}


@dataclass(frozen=True)
class ResourceSpec:
    uri: str
    name: str
    description: str
    mime_type: str = "application/json"


MARKET_STATUS_URI = "coingecko://market/status"
TRENDING_URI = "coingecko://trending/coins"
NEW_COINS_URI = "coingecko://new/coins"
API_INFO_URI = "coingecko://api/info"

RESOURCES: Dict[str, ResourceSpec] = {
    r.uri: r
    for r in (
        ResourceSpec(MARKET_STATUS_URI, "Market Status", "Current crypto market overview and statistics"),
        ResourceSpec(TRENDING_URI, "Trending Coins", "Currently trending cryptocurrencies"),
        ResourceSpec(NEW_COINS_URI, "New Listings", "Recently listed cryptocurrencies on CoinGecko"),
        ResourceSpec(API_INFO_URI, "API Information", "CoinGecko API documentation and available endpoints", "text/plain"),
    )
}

SUPPORTED_CHAINS = (
    "ethereum",
    "polygon-pos",
    "binance-smart-chain",
    "avalanche",
    "arbitrum-one",
    "optimistic-ethereum",
    "base",
)


def api_info_text(base_url: str = COINGECKO_BASE_URL) -> str:
    lines = ["CoinGecko API Information", "=" * 29, "", f"Base URL: {base_url}", "", "Available Tools:"]
    for i, op in enumerate(OPERATIONS.values(), start=1):
        lines.append(f"{i}. {op.name} - {op.summary}")
        lines.append(f"   Endpoint: {op.upstream_path}")
        if op.required_names:
            lines.append(f"   Required: {', '.join(op.required_names)}")
        lines.append("")
    lines.append("Supported Blockchains:")
    lines.extend(f"- {chain}" for chain in SUPPORTED_CHAINS)
    lines.append("- And many more...")
    lines += [
        "",
        "Rate Limits:",
        "- Demo API: 30 calls/minute",
        "- Pro API: Higher limits available",
        "",
        "Authentication:",
        "- API Key via x-cg-demo-api-key header",
        "",
    ]
    return "\n".join(lines)


API_INFO_TEXT = api_info_text()
