"""
cg_protocol.py
MCP surface of the CoinGecko server: tools, prompts and resources, all
listed from cg_catalog and dispatched through cg_operations.
"""
import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Sequence

from mcp.server.fastmcp import FastMCP
from mcp.server.fastmcp.exceptions import ResourceError
from mcp.server.lowlevel.helper_types import ReadResourceContents
from mcp.types import (
    GetPromptResult,
    Prompt,
    PromptArgument,
    PromptMessage,
    Resource,
    TextContent,
    Tool,
)

import cg_operations as ops
from cg_catalog import (
    API_INFO_URI,
    MARKET_STATUS_URI,
    NEW_COINS_URI,
    OPERATIONS,
    PROMPTS,
    RESOURCES,
    SERVER_DESCRIPTION,
    SERVER_NAME,
    TRENDING_URI,
    api_info_text,
)
from cg_client import CoinGeckoClient

logger = logging.getLogger("cg_protocol")


def _dumps(payload: Any) -> str:
    return json.dumps(payload, indent=2)


def _text(text: str) -> TextContent:
    return TextContent(type="text", text=text)


class CoinGeckoMCP(FastMCP):
    """FastMCP server whose listings come from the shared catalog instead of decorated functions."""

    def __init__(self, client: CoinGeckoClient, **settings: Any):
        settings.setdefault("stateless_http", True)
        settings.setdefault("json_response", True)
        super().__init__(name=SERVER_NAME, instructions=SERVER_DESCRIPTION, **settings)
        self.client = client

    # tools

    async def list_tools(self) -> List[Tool]:
        return [
            Tool(name=op.name, description=op.description, inputSchema=op.input_schema())
            for op in OPERATIONS.values()
        ]

    async def call_tool(self, name: str, arguments: Dict[str, Any]) -> Sequence[TextContent]:
        logger.info("call_tool %s", name)
        try:
            envelope = await ops.dispatch(self.client, name, arguments)
        except ops.UnknownOperationError:
            return [_text(f"Error: Unknown tool {name}")]
        return [_text(_dumps(envelope.body))]

    # prompts

    async def list_prompts(self) -> List[Prompt]:
        return [
            Prompt(
                name=p.name,
                description=p.description,
                arguments=[
                    PromptArgument(name=a.name, description=a.description, required=a.required)
                    for a in p.arguments
                ],
            )
            for p in PROMPTS.values()
        ]

    async def get_prompt(self, name: str, arguments: Optional[Dict[str, Any]] = None) -> GetPromptResult:
        args = arguments or {}
        if name == "crypto_price_check":
            tokens = args.get("tokens") or "bitcoin,ethereum,solana"
            currencies = args.get("currencies") or "usd,eur"
            text = (
                f"Please check the current prices for {tokens} in {currencies}. "
                "Use the get_simple_price tool with these parameters."
            )
        elif name == "market_analysis":
            text = (
                "Please provide a comprehensive crypto market analysis. "
                "First, get the trending coins using get_trending_coins, then fetch the newly listed coins "
                "using get_new_coins. Analyze the data and provide insights about current market trends."
            )
        elif name == "token_research":
            chain = args.get("chain") or "ethereum"
            address = args.get("address")
            if not address:
                raise ValueError("Token address is required for token research")
            text = (
                f"Please research the token at address {address} on {chain} blockchain. "
                "Use the get_token_price_by_address tool with market_data=true to get comprehensive "
                "information including price, market cap, volume, and other key metrics."
            )
        else:
            raise ValueError(f"Unknown prompt: {name}")
        return GetPromptResult(
            description=PROMPTS[name].description,
            messages=[PromptMessage(role="user", content=_text(text))],
        )

    # resources

    async def list_resources(self) -> List[Resource]:
        return [
            Resource(uri=r.uri, name=r.name, description=r.description, mimeType=r.mime_type)
            for r in RESOURCES.values()
        ]

    async def read_resource(self, uri: Any) -> Iterable[ReadResourceContents]:
        uri = str(uri)
        if uri == MARKET_STATUS_URI:
            payload = await self._market_status()
        elif uri == TRENDING_URI:
            payload = self._unwrap(await ops.get_trending_coins(self.client))
        elif uri == NEW_COINS_URI:
            payload = self._unwrap(await ops.get_new_coins(self.client))
        elif uri == API_INFO_URI:
            return [ReadResourceContents(content=api_info_text(self.client.base_url), mime_type="text/plain")]
        else:
            raise ResourceError(f"Unknown resource: {uri}")
        return [ReadResourceContents(content=_dumps(payload), mime_type=RESOURCES[uri].mime_type)]

    @staticmethod
    def _unwrap(envelope: ops.Envelope) -> Any:
        # resources carry the raw upstream payload, failures keep their envelope
        return envelope.body["data"] if envelope.ok else envelope.body

    async def _market_status(self) -> Dict[str, Any]:
        trending = await ops.get_trending_coins(self.client)
        if not trending.ok:
            return trending.body
        prices = await ops.get_simple_price(
            self.client,
            ids="bitcoin,ethereum",
            vs_currencies="usd",
            include_market_cap=True,
            include_24hr_vol=True,
            include_24hr_change=True,
        )
        if not prices.ok:
            return prices.body
        coins = trending.body["data"].get("coins") if isinstance(trending.body["data"], dict) else None
        return {
            "status": "active",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "topCoins": prices.body["data"],
            "trendingCount": len(coins or []),
            "summary": "Live crypto market data from CoinGecko",
        }
