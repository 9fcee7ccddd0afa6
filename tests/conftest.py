"""
Shared fixtures for the CoinGecko MCP server tests.
The upstream API is never contacted: requests.get is patched for every test
that uses the ``upstream`` fixture.
"""
import pytest
from unittest.mock import Mock, patch

from cg_client import CoinGeckoClient
from cg_settings import COINGECKO_BASE_URL, Settings


def make_response(payload=None, status=200, reason="OK"):
    """Build a requests.Response stand-in."""
    response = Mock()
    response.status_code = status
    response.ok = 200 <= status < 400
    response.reason = reason
    response.json.return_value = payload
    return response


def upstream_url(path):
    return COINGECKO_BASE_URL + path


@pytest.fixture
def upstream():
    """Patch requests.get; defaults to an empty JSON object with status 200."""
    with patch("cg_client.requests.get") as mock_get:
        mock_get.return_value = make_response({})
        yield mock_get


@pytest.fixture
def client():
    return CoinGeckoClient(api_key="test-key")


@pytest.fixture
def settings():
    return Settings(api_key="test-key")


@pytest.fixture
def paid_settings():
    return Settings(api_key="test-key", facilitator_url="https://facilitator.example", pay_to="0xPAYOUT")
