#!/usr/bin/env python3
"""
coingecko_mcp.py
CoinGecko MCP server: MCP tools/prompts/resources on /mcp and the same
operations as REST routes, optionally behind an x402 payment gate.
Run: python3 coingecko_mcp.py
"""
import logging
from typing import Optional

import uvicorn
from starlette.middleware.cors import CORSMiddleware

from cg_client import CoinGeckoClient
from cg_http import register_routes
from cg_payment import GuardFactory, PaymentGate
from cg_protocol import CoinGeckoMCP
from cg_settings import Settings

logger = logging.getLogger("coingecko_mcp")


def create_app(
    settings: Settings,
    client: Optional[CoinGeckoClient] = None,
    guard_factory: Optional[GuardFactory] = None,
):
    client = client or CoinGeckoClient.from_settings(settings)
    gate = PaymentGate(settings, guard_factory=guard_factory)

    mcp = CoinGeckoMCP(client, host=settings.host, port=settings.port)
    register_routes(mcp, client, gate)

    app = mcp.streamable_http_app()
    gate.install(app)
    # last added is outermost, so 402 responses still carry CORS headers
    app.add_middleware(CORSMiddleware, allow_origins=["*"], allow_methods=["GET", "POST"], allow_headers=["*"])
    app.state.payment_gate = gate
    app.state.mcp = mcp
    return app


def _banner(settings: Settings, gate: PaymentGate) -> None:
    logger.info("=" * 60)
    logger.info("CoinGecko Market Agent MCP Server")
    logger.info("Server running on http://%s:%s (MCP at /mcp)", settings.host, settings.port)
    if gate.enabled:
        logger.info("Payment: ENABLED (x402) network=%s", gate.network)
        for rule in gate.rules:
            logger.info("  %s: %s", rule.route_key, rule.price)
    else:
        logger.info("Payment: DISABLED (set FACILITATOR_URL and ADDRESS to enable)")
    logger.info("=" * 60)


def main() -> None:
    settings = Settings.from_env()
    logging.basicConfig(level=getattr(logging, settings.log_level, logging.INFO))
    if not settings.api_key:
        logger.warning("COINGECKO_API_KEY is not set, requests go out without an API key")
    app = create_app(settings)
    _banner(settings, app.state.payment_gate)
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()
