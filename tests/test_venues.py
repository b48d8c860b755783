"""Tests for venue clients and ABI loading."""

import json
from unittest.mock import Mock

import pytest
from web3 import Web3
from web3.exceptions import ContractLogicError

from dexwatch.core.config import BotConfig, TokensConfig
from dexwatch.core.errors import ConfigurationError
from dexwatch.venues.abi import load_router_abi
from dexwatch.venues.router import RouterVenueClient, build_router_clients, checksum_path

from conftest import PATH, TRADE_SIZE, USDC, WETH, FakeVenue

QUICKSWAP = Web3.to_checksum_address("0xa5e0829caced8ffdd4de3c43696c57f7d7a678ff")
SUSHISWAP = Web3.to_checksum_address("0x1b02da8cb0d097eb8d57a175b88c7d8b47997506")

ROUTER_ABI = [
    {
        "inputs": [
            {"internalType": "uint256", "name": "amountIn", "type": "uint256"},
            {"internalType": "address[]", "name": "path", "type": "address[]"},
        ],
        "name": "getAmountsOut",
        "outputs": [{"internalType": "uint256[]", "name": "amounts", "type": "uint256[]"}],
        "stateMutability": "view",
        "type": "function",
    }
]


def make_web3(call_side_effect=None, call_return=None):
    """Mock Web3 whose router contract answers getAmountsOut."""
    web3 = Mock()
    contract = Mock()
    call = contract.functions.getAmountsOut.return_value.call
    if call_side_effect is not None:
        call.side_effect = call_side_effect
    else:
        call.return_value = call_return
    web3.eth.contract.return_value = contract
    return web3, contract


class TestVenueClient:
    """Tests for VenueClient failure handling."""

    def test_quote_returns_amount(self):
        assert FakeVenue("A", 1_234).quote(TRADE_SIZE, PATH) == 1_234

    def test_quote_error_becomes_zero_sentinel(self):
        venue = FakeVenue("A", error=TimeoutError("read timed out"))

        assert venue.quote(TRADE_SIZE, PATH) == 0

    def test_fetch_quote_reports_reason(self):
        quote = FakeVenue("A", error=ValueError("bad response")).fetch_quote(TRADE_SIZE, PATH)

        assert quote.valid is False
        assert quote.venue_id == "A"
        assert quote.error == "bad response"

    def test_fetch_quote_reason_falls_back_to_exception_name(self):
        quote = FakeVenue("A", error=TimeoutError()).fetch_quote(TRADE_SIZE, PATH)

        assert quote.error == "TimeoutError"

    def test_bad_arguments_raise(self):
        with pytest.raises(ValueError):
            FakeVenue("A", 1).quote(0, PATH)
        with pytest.raises(ValueError):
            FakeVenue("A", 1).quote(TRADE_SIZE, [WETH])


class TestRouterVenueClient:
    """Tests for RouterVenueClient."""

    def test_returns_last_amount(self):
        web3, contract = make_web3(call_return=[TRADE_SIZE, 2_500_000_000])
        client = RouterVenueClient("QuickSwap", QUICKSWAP, ROUTER_ABI, web3)

        assert client.quote(TRADE_SIZE, PATH) == 2_500_000_000
        contract.functions.getAmountsOut.assert_called_once_with(TRADE_SIZE, PATH)

    def test_router_address_checksummed(self):
        web3, _ = make_web3(call_return=[1, 1])

        client = RouterVenueClient("QuickSwap", QUICKSWAP.lower(), ROUTER_ABI, web3)

        assert client.router_address == QUICKSWAP
        web3.eth.contract.assert_called_once_with(address=QUICKSWAP, abi=ROUTER_ABI)

    def test_invalid_router_address(self):
        web3, _ = make_web3(call_return=[1, 1])

        with pytest.raises(ConfigurationError):
            RouterVenueClient("Bad", "0x1234", ROUTER_ABI, web3)

    def test_transient_error_is_retried(self):
        web3, contract = make_web3(
            call_side_effect=[ConnectionError("reset"), [TRADE_SIZE, 42]]
        )
        client = RouterVenueClient("QuickSwap", QUICKSWAP, ROUTER_ABI, web3, max_retries=2)

        assert client.quote(TRADE_SIZE, PATH) == 42
        assert contract.functions.getAmountsOut.return_value.call.call_count == 2

    def test_persistent_error_gives_zero(self):
        web3, contract = make_web3(call_side_effect=ConnectionError("down"))
        client = RouterVenueClient("QuickSwap", QUICKSWAP, ROUTER_ABI, web3, max_retries=2)

        quote = client.fetch_quote(TRADE_SIZE, PATH)

        assert quote.valid is False
        assert quote.output_amount == 0
        assert contract.functions.getAmountsOut.return_value.call.call_count == 3

    def test_zero_retries_makes_single_attempt(self):
        web3, contract = make_web3(
            call_side_effect=[ConnectionError("reset"), [TRADE_SIZE, 42]]
        )
        client = RouterVenueClient("QuickSwap", QUICKSWAP, ROUTER_ABI, web3, max_retries=0)

        assert client.quote(TRADE_SIZE, PATH) == 0
        assert contract.functions.getAmountsOut.return_value.call.call_count == 1

    def test_revert_not_retried(self):
        web3, contract = make_web3(
            call_side_effect=ContractLogicError("execution reverted: INSUFFICIENT_LIQUIDITY")
        )
        client = RouterVenueClient("QuickSwap", QUICKSWAP, ROUTER_ABI, web3, max_retries=3)

        assert client.quote(TRADE_SIZE, PATH) == 0
        assert contract.functions.getAmountsOut.return_value.call.call_count == 1

    def test_malformed_response_is_invalid(self):
        web3, _ = make_web3(call_return=[TRADE_SIZE])
        client = RouterVenueClient("QuickSwap", QUICKSWAP, ROUTER_ABI, web3, max_retries=1)

        quote = client.fetch_quote(TRADE_SIZE, PATH)

        assert quote.valid is False
        assert "Unexpected" in quote.error

    def test_zero_output_is_invalid(self):
        web3, _ = make_web3(call_return=[TRADE_SIZE, 0])
        client = RouterVenueClient("QuickSwap", QUICKSWAP, ROUTER_ABI, web3)

        assert client.fetch_quote(TRADE_SIZE, PATH).valid is False


class TestBuildClients:
    """Tests for building clients from config."""

    @pytest.fixture
    def config(self):
        return BotConfig.model_validate({
            "rpc_url": "https://polygon-rpc.com",
            "venues": {"QuickSwap": QUICKSWAP, "SushiSwap": SUSHISWAP},
            "tokens": {"input": WETH.lower(), "output": USDC},
            "settings": {
                "trade_size": TRADE_SIZE,
                "min_profit": "1",
                "cost_estimate": "0.05",
                "refresh_rate": 10,
            },
        })

    def test_one_client_per_venue_in_order(self, config):
        web3, _ = make_web3(call_return=[1, 1])

        clients = build_router_clients(config, ROUTER_ABI, web3=web3)

        assert [c.name for c in clients] == ["QuickSwap", "SushiSwap"]
        assert all(c.web3 is web3 for c in clients)

    def test_checksum_path(self, config):
        assert checksum_path(config) == [WETH, USDC]

    def test_checksum_path_covers_every_hop(self, config):
        wmatic = "0x0d500b1d8e8ef31e21c99d1db9a6444d3adf1270"
        config = config.model_copy(update={
            "tokens": TokensConfig(path=[WETH.lower(), wmatic, USDC.lower()]),
        })

        assert checksum_path(config) == [WETH, Web3.to_checksum_address(wmatic), USDC]

    def test_checksum_path_rejects_bad_token(self, config):
        config = config.model_copy(update={
            "tokens": TokensConfig(path=[WETH, "0xnotanaddress"]),
        })

        with pytest.raises(ConfigurationError, match="token #1"):
            checksum_path(config)


class TestLoadRouterAbi:
    """Tests for load_router_abi."""

    def test_loads_list(self, tmp_path):
        path = tmp_path / "abi.json"
        path.write_text(json.dumps(ROUTER_ABI))

        assert load_router_abi(str(path)) == ROUTER_ABI

    def test_loads_artifact(self, tmp_path):
        path = tmp_path / "artifact.json"
        path.write_text(json.dumps({"contractName": "Router", "abi": ROUTER_ABI}))

        assert load_router_abi(str(path)) == ROUTER_ABI

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError):
            load_router_abi(str(tmp_path / "nope.json"))

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "abi.json"
        path.write_text("{not json")

        with pytest.raises(ConfigurationError):
            load_router_abi(str(path))

    def test_missing_quote_method(self, tmp_path):
        path = tmp_path / "abi.json"
        path.write_text(json.dumps([{"type": "function", "name": "factory", "inputs": []}]))

        with pytest.raises(ConfigurationError, match="getAmountsOut"):
            load_router_abi(str(path))

    def test_bundled_abi_is_valid(self):
        from pathlib import Path

        bundled = Path(__file__).resolve().parents[1] / "abi" / "uniswap_v2_router02_abi.json"

        abi = load_router_abi(str(bundled))

        assert any(entry["name"] == "getAmountsOut" for entry in abi)
