"""
cg_operations.py
The four market-data operations. Each validates its inputs, builds the
upstream query, performs one CoinGecko call and wraps the outcome in an
Envelope. Failures are returned as data, never raised.
"""
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Union

from cg_catalog import (
    NEW_COINS,
    OPERATIONS,
    SIMPLE_PRICE,
    TOKEN_BY_ADDRESS,
    TRENDING_COINS,
    OperationDescriptor,
    is_absent,
)
from cg_client import CoinGeckoClient, MarketDataError, UpstreamError

logger = logging.getLogger("cg_operations")

Scalar = Union[str, int, float, bool]


class ValidationError(MarketDataError):
    def __init__(self, required: List[str], missing: List[str]):
        self.required = list(required)
        self.missing = list(missing)
        super().__init__(f"Missing required parameters: {', '.join(self.missing)}")


class UnknownOperationError(KeyError):
    pass


@dataclass(frozen=True)
class Envelope:
    body: Dict[str, Any]
    error: Optional[MarketDataError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def stringify(value: Scalar) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _failure(op: OperationDescriptor, exc: MarketDataError) -> Envelope:
    if isinstance(exc, ValidationError):
        body = {
            "error": "Missing required parameters",
            "required": exc.required,
            "missing": exc.missing,
            "message": f"{op.name} requires: {', '.join(exc.required)}",
        }
    else:
        body = {"error": op.failure, "message": str(exc)}
        if isinstance(exc, UpstreamError):
            body["status"] = exc.status
    return Envelope(body=body, error=exc)


async def _run(client: CoinGeckoClient, op: OperationDescriptor, values: Mapping[str, Any]) -> Envelope:
    try:
        missing = op.missing(values)
        if missing:
            raise ValidationError(op.required_names, missing)
        path_values = {p.name: stringify(values[p.name]) for p in op.params if p.in_path}
        query = {
            p.name: stringify(values[p.name])
            for p in op.params
            if not p.in_path and not is_absent(values.get(p.name))
        }
        data = await client.fetch(op.upstream_path_for(path_values), query)
    except MarketDataError as e:
        logger.warning("%s failed: %s", op.name, e)
        return _failure(op, e)
    return Envelope(body={"success": True, "data": data, "parameters": {**path_values, **query}})


async def get_simple_price(
    client: CoinGeckoClient,
    ids: Optional[str] = None,
    vs_currencies: Optional[str] = None,
    include_market_cap: Optional[bool] = None,
    include_24hr_vol: Optional[bool] = None,
    include_24hr_change: Optional[bool] = None,
    include_last_updated_at: Optional[bool] = None,
    precision: Optional[Union[int, str]] = None,
) -> Envelope:
    return await _run(client, SIMPLE_PRICE, {
        "ids": ids,
        "vs_currencies": vs_currencies,
        "include_market_cap": include_market_cap,
        "include_24hr_vol": include_24hr_vol,
        "include_24hr_change": include_24hr_change,
        "include_last_updated_at": include_last_updated_at,
        "precision": precision,
    })


async def get_trending_coins(client: CoinGeckoClient) -> Envelope:
    return await _run(client, TRENDING_COINS, {})


async def get_new_coins(client: CoinGeckoClient) -> Envelope:
    return await _run(client, NEW_COINS, {})


async def get_token_price_by_address(
    client: CoinGeckoClient,
    chain_id: Optional[str] = None,
    token_address: Optional[str] = None,
    localization: Optional[str] = None,
    tickers: Optional[str] = None,
    market_data: Optional[str] = None,
    community_data: Optional[str] = None,
    developer_data: Optional[str] = None,
    sparkline: Optional[str] = None,
) -> Envelope:
    return await _run(client, TOKEN_BY_ADDRESS, {
        "chainId": chain_id,
        "tokenAddress": token_address,
        "localization": localization,
        "tickers": tickers,
        "market_data": market_data,
        "community_data": community_data,
        "developer_data": developer_data,
        "sparkline": sparkline,
    })


HANDLERS = {
    SIMPLE_PRICE.name: get_simple_price,
    TRENDING_COINS.name: get_trending_coins,
    NEW_COINS.name: get_new_coins,
    TOKEN_BY_ADDRESS.name: get_token_price_by_address,
}


async def dispatch(client: CoinGeckoClient, name: str, arguments: Optional[Mapping[str, Any]] = None) -> Envelope:
    """Run operation ``name`` with wire-named ``arguments`` (e.g. ``chainId``)."""
    if name not in HANDLERS:
        raise UnknownOperationError(name)
    arguments = arguments or {}
    kwargs = {p.keyword: arguments[p.name] for p in OPERATIONS[name].params if p.name in arguments}
    return await HANDLERS[name](client, **kwargs)
