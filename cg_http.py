"""
cg_http.py
REST routes for the CoinGecko operations plus the root, health and info
endpoints, registered on the FastMCP app as custom routes.
"""
import logging
import time
from datetime import datetime, timezone
from typing import Any, Dict

from mcp.server.fastmcp import FastMCP
from starlette.requests import Request
from starlette.responses import JSONResponse

import cg_operations as ops
from cg_catalog import (
    OPERATIONS,
    PROMPTS,
    RESOURCES,
    SERVER_DESCRIPTION,
    SERVER_NAME,
    SERVER_TITLE,
    SERVER_VERSION,
)
from cg_client import CoinGeckoClient
from cg_payment import PaymentGate

logger = logging.getLogger("cg_http")


def envelope_response(envelope: ops.Envelope) -> JSONResponse:
    if envelope.ok:
        status = 200
    elif isinstance(envelope.error, ops.ValidationError):
        status = 400
    else:
        status = 500
    return JSONResponse(envelope.body, status_code=status)


def root_descriptor(gate: PaymentGate) -> Dict[str, Any]:
    pricing = gate.pricing()
    if pricing is not None:
        pricing = {**pricing, "network": gate.network}
    return {
        "name": SERVER_TITLE,
        "version": SERVER_VERSION,
        "status": "healthy",
        "paymentEnabled": gate.enabled,
        "endpoints": {
            "tools": {
                "list": "POST /mcp (tools/list)",
                **{op.name: f"GET {op.http_path}" for op in OPERATIONS.values()},
            },
            "prompts": {"list": "POST /mcp (prompts/list)"},
            "resources": {"list": "POST /mcp (resources/list)"},
            "jsonRpc": "POST /mcp",
            "health": "GET /health",
            "info": "GET /info",
        },
        "pricing": pricing,
        "examples": {op.name: {"get": op.example} for op in OPERATIONS.values()},
        "capabilities": {
            "tools": list(OPERATIONS),
            "prompts": list(PROMPTS),
            "resources": list(RESOURCES),
        },
    }


def info_descriptor(gate: PaymentGate) -> Dict[str, Any]:
    pricing = gate.pricing()
    return {
        "name": SERVER_NAME,
        "version": SERVER_VERSION,
        "protocol": "Model Context Protocol",
        "description": SERVER_DESCRIPTION,
        "paymentEnabled": gate.enabled,
        "paymentNetwork": gate.network if gate.enabled else None,
        "capabilities": {
            "tools": {op.name: op.summary for op in OPERATIONS.values()},
            "prompts": {p.name: p.description for p in PROMPTS.values()},
            "resources": {r.uri: r.description for r in RESOURCES.values()},
        },
        "pricing": {"tools": pricing} if pricing is not None else None,
    }


def register_routes(mcp: FastMCP, client: CoinGeckoClient, gate: PaymentGate) -> None:
    started = time.monotonic()

    @mcp.custom_route("/", methods=["GET"])
    async def root(request: Request) -> JSONResponse:
        return JSONResponse(root_descriptor(gate))

    @mcp.custom_route("/health", methods=["GET"])
    async def health(request: Request) -> JSONResponse:
        return JSONResponse({
            "status": "healthy",
            "uptime": time.monotonic() - started,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        })

    @mcp.custom_route("/info", methods=["GET"])
    async def info(request: Request) -> JSONResponse:
        return JSONResponse(info_descriptor(gate))

    def operation_route(op):
        async def endpoint(request: Request) -> JSONResponse:
            logger.info("GET %s - %s", request.url.path, op.name)
            # path parameters win over query parameters with the same name
            arguments = {**dict(request.query_params), **request.path_params}
            return envelope_response(await ops.dispatch(client, op.name, arguments))

        endpoint.__name__ = op.name
        mcp.custom_route(op.http_path, methods=["GET"], name=op.name)(endpoint)

    for op in OPERATIONS.values():
        operation_route(op)
