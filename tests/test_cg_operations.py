"""
Tests for the operation handlers and the name-keyed dispatch.
"""
import pytest
import requests

import cg_operations as ops
from conftest import make_response, upstream_url


class TestSimplePrice:
    @pytest.mark.asyncio
    async def test_success_envelope_passes_data_verbatim(self, client, upstream):
        payload = {"bitcoin": {"usd": 50000}, "ethereum": {"usd": 3000}}
        upstream.return_value = make_response(payload)

        envelope = await ops.get_simple_price(client, ids="bitcoin,ethereum", vs_currencies="usd")

        assert envelope.ok
        assert envelope.body == {
            "success": True,
            "data": payload,
            "parameters": {"ids": "bitcoin,ethereum", "vs_currencies": "usd"},
        }

    @pytest.mark.asyncio
    @pytest.mark.parametrize("ids,vs_currencies,missing", [
        (None, "usd", ["ids"]),
        ("bitcoin", "", ["vs_currencies"]),
        (None, None, ["ids", "vs_currencies"]),
    ])
    async def test_missing_required_fails_before_upstream(self, client, upstream, ids, vs_currencies, missing):
        envelope = await ops.get_simple_price(client, ids=ids, vs_currencies=vs_currencies)

        assert not envelope.ok
        assert isinstance(envelope.error, ops.ValidationError)
        assert envelope.body["error"] == "Missing required parameters"
        assert envelope.body["required"] == ["ids", "vs_currencies"]
        assert envelope.body["missing"] == missing
        upstream.assert_not_called()

    @pytest.mark.asyncio
    async def test_optional_flags_filtered_and_stringified(self, client, upstream):
        envelope = await ops.get_simple_price(
            client,
            ids="bitcoin",
            vs_currencies="usd",
            include_market_cap=True,
            include_24hr_vol=False,
            include_24hr_change=None,
            include_last_updated_at="",
            precision=2.0,
        )

        expected = {
            "ids": "bitcoin",
            "vs_currencies": "usd",
            "include_market_cap": "true",
            "include_24hr_vol": "false",
            "precision": "2",
        }
        assert upstream.call_args.kwargs["params"] == expected
        assert envelope.body["parameters"] == expected

    @pytest.mark.asyncio
    async def test_upstream_404_becomes_failure_envelope(self, client, upstream):
        upstream.return_value = make_response(status=404, reason="Not Found")

        envelope = await ops.get_simple_price(client, ids="nope", vs_currencies="usd")

        assert envelope.body == {
            "error": "Failed to fetch price data",
            "message": "CoinGecko API error: 404 Not Found",
            "status": 404,
        }
        assert upstream.call_count == 1


class TestTrendingAndNew:
    @pytest.mark.asyncio
    async def test_trending(self, client, upstream):
        payload = {"coins": [{"item": {"id": "pepe"}}]}
        upstream.return_value = make_response(payload)

        envelope = await ops.get_trending_coins(client)

        assert envelope.body == {"success": True, "data": payload, "parameters": {}}
        assert upstream.call_args.args[0] == upstream_url("/search/trending")
        assert upstream.call_args.kwargs["params"] is None

    @pytest.mark.asyncio
    async def test_new_coins(self, client, upstream):
        payload = [{"id": "fresh-coin", "activated_at": 1700000000}]
        upstream.return_value = make_response(payload)

        envelope = await ops.get_new_coins(client)

        assert envelope.body["data"] == payload
        assert upstream.call_args.args[0] == upstream_url("/coins/list/new")

    @pytest.mark.asyncio
    async def test_transport_failure(self, client, upstream):
        upstream.side_effect = requests.Timeout("read timed out")

        envelope = await ops.get_new_coins(client)

        assert envelope.body["error"] == "Failed to fetch new coins"
        assert "read timed out" in envelope.body["message"]
        assert "status" not in envelope.body


class TestTokenByAddress:
    @pytest.mark.asyncio
    async def test_path_templated_without_query(self, client, upstream):
        upstream.return_value = make_response({"id": "abc-token"})

        envelope = await ops.get_token_price_by_address(client, chain_id="ethereum", token_address="0xABC")

        assert upstream.call_args.args[0] == upstream_url("/coins/ethereum/contract/0xABC")
        assert upstream.call_args.kwargs["params"] is None
        assert envelope.body["parameters"] == {"chainId": "ethereum", "tokenAddress": "0xABC"}

    @pytest.mark.asyncio
    async def test_string_flags_pass_through(self, client, upstream):
        envelope = await ops.get_token_price_by_address(
            client, chain_id="base", token_address="0x1", market_data="true", sparkline="false", tickers=""
        )

        assert upstream.call_args.kwargs["params"] == {"market_data": "true", "sparkline": "false"}
        assert envelope.body["parameters"] == {
            "chainId": "base",
            "tokenAddress": "0x1",
            "market_data": "true",
            "sparkline": "false",
        }

    @pytest.mark.asyncio
    async def test_path_identifiers_are_encoded_as_single_segments(self, client, upstream):
        envelope = await ops.dispatch(
            client,
            "get_token_price_by_address",
            {"chainId": "..", "tokenAddress": "0xABC?x=1#frag"},
        )

        assert upstream.call_args.args[0] == upstream_url("/coins/%2E%2E/contract/0xABC%3Fx%3D1%23frag")
        assert upstream.call_args.kwargs["params"] is None
        assert envelope.body["parameters"] == {"chainId": "..", "tokenAddress": "0xABC?x=1#frag"}

    @pytest.mark.asyncio
    async def test_slashes_in_identifiers_do_not_add_segments(self, client, upstream):
        await ops.get_token_price_by_address(client, chain_id="../../..", token_address="markets")

        url = upstream.call_args.args[0]
        assert url == upstream_url("/coins/..%2F..%2F../contract/markets")
        assert "/../" not in url

    @pytest.mark.asyncio
    async def test_missing_address(self, client, upstream):
        envelope = await ops.get_token_price_by_address(client, chain_id="ethereum")

        assert envelope.body["missing"] == ["tokenAddress"]
        assert envelope.body["required"] == ["chainId", "tokenAddress"]
        upstream.assert_not_called()


class TestDispatch:
    @pytest.mark.asyncio
    async def test_maps_wire_names_and_ignores_unknown_keys(self, client, upstream):
        envelope = await ops.dispatch(
            client,
            "get_token_price_by_address",
            {"chainId": "polygon-pos", "tokenAddress": "0xF00", "localization": "false", "bogus": 1},
        )

        assert envelope.ok
        assert upstream.call_args.args[0] == upstream_url("/coins/polygon-pos/contract/0xF00")
        assert upstream.call_args.kwargs["params"] == {"localization": "false"}

    @pytest.mark.asyncio
    async def test_no_arguments(self, client, upstream):
        envelope = await ops.dispatch(client, "get_trending_coins")

        assert envelope.ok

    @pytest.mark.asyncio
    async def test_unknown_operation(self, client, upstream):
        with pytest.raises(ops.UnknownOperationError):
            await ops.dispatch(client, "get_everything", {})
        upstream.assert_not_called()


class TestStringify:
    @pytest.mark.parametrize("value,expected", [
        (True, "true"),
        (False, "false"),
        (3, "3"),
        (2.5, "2.5"),
        (4.0, "4"),
        ("usd", "usd"),
    ])
    def test_values(self, value, expected):
        assert ops.stringify(value) == expected
