"""
tool_controller.py
Per-operation convenience facade over cg_operations for in-process callers.
"""
from typing import Optional, Union

import cg_operations as ops
from cg_client import CoinGeckoClient


class ToolController:
    def __init__(self, client: CoinGeckoClient):
        self.client = client

    async def get_simple_price(
        self,
        ids: Optional[str] = None,
        vs_currencies: Optional[str] = None,
        include_market_cap: Optional[bool] = None,
        include_24hr_vol: Optional[bool] = None,
        include_24hr_change: Optional[bool] = None,
        include_last_updated_at: Optional[bool] = None,
        precision: Optional[Union[int, str]] = None,
    ) -> ops.Envelope:
        return await ops.get_simple_price(
            self.client,
            ids=ids,
            vs_currencies=vs_currencies,
            include_market_cap=include_market_cap,
            include_24hr_vol=include_24hr_vol,
            include_24hr_change=include_24hr_change,
            include_last_updated_at=include_last_updated_at,
            precision=precision,
        )

    async def get_trending_coins(self) -> ops.Envelope:
        return await ops.get_trending_coins(self.client)

    async def get_new_coins(self) -> ops.Envelope:
        return await ops.get_new_coins(self.client)

    async def get_token_price_by_address(
        self,
        chain_id: Optional[str] = None,
        token_address: Optional[str] = None,
        localization: Optional[str] = None,
        tickers: Optional[str] = None,
        market_data: Optional[str] = None,
        community_data: Optional[str] = None,
        developer_data: Optional[str] = None,
        sparkline: Optional[str] = None,
    ) -> ops.Envelope:
        return await ops.get_token_price_by_address(
            self.client,
            chain_id=chain_id,
            token_address=token_address,
            localization=localization,
            tickers=tickers,
            market_data=market_data,
            community_data=community_data,
            developer_data=developer_data,
            sparkline=sparkline,
        )
