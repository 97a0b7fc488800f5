from decimal import Decimal
from unittest.mock import AsyncMock

import pytest

from tests.helpers import exchange_config
from transnet.adapters.binance import BinanceAdapter
from transnet.adapters.binance.normalizer import precision_from_multiple
from transnet.adapters.errors import ExchangeAPIError
from transnet.adapters.mexc import MexcAdapter
from transnet.adapters.normalizer import parse_decimal
from transnet.models.coins import NetworkState
from transnet.models.withdrawals import WithdrawParams

CAPITAL_CONFIG = [
    {
        "coin": "USDT",
        "name": "TetherUS",
        "Name": "Tether",
        "networkList": [
            {
                "network": "TRX",
                "coin": "USDT",
                "name": "Tron (TRC20)",
                "withdrawEnable": True,
                "depositEnable": True,
                "withdrawFee": "1",
                "withdrawMin": "10",
                "withdrawMax": "1000000",
                "withdrawIntegerMultiple": "0.000001",
                "memoRegex": "",
            },
            {
                "network": "ETH",
                "coin": "USDT",
                "name": "Ethereum (ERC20)",
                "withdrawEnable": False,
                "depositEnable": True,
                "withdrawFee": "5",
                "withdrawMin": "20",
                "withdrawMax": "5000000",
                "withdrawTips": "Please fill in the MEMO",
            },
        ],
    },
    {"coin": "DUST", "name": "No networks", "networkList": []},
]

EXCHANGE_INFO = {
    "symbols": [
        {"symbol": "BTCUSDT", "baseAsset": "BTC", "quoteAsset": "USDT", "status": "TRADING"},
    ]
}

ACCOUNT = {
    "balances": [
        {"asset": "USDT", "free": "12.5", "locked": "0.5"},
        {"asset": "BTC", "free": "0", "locked": "0"},
        {"asset": "ETH", "free": "0", "locked": "1"},
    ]
}


def _responses(endpoint_map):
    async def _request(method, endpoint, params=None):
        return endpoint_map[endpoint]

    return _request


@pytest.fixture
def binance_adapter(mocker):
    adapter = BinanceAdapter("key", "secret", exchange_config("Binance"))
    mocker.patch.object(
        adapter.rest,
        "_request",
        AsyncMock(
            side_effect=_responses(
                {
                    "/api/v3/exchangeInfo": EXCHANGE_INFO,
                    "/sapi/v1/capital/config/getall": CAPITAL_CONFIG,
                    "/api/v3/account": ACCOUNT,
                }
            )
        ),
    )
    return adapter


@pytest.fixture
def mexc_adapter(mocker):
    adapter = MexcAdapter("key", "secret", exchange_config("MEXC"))
    mocker.patch.object(
        adapter.rest,
        "_request",
        AsyncMock(
            side_effect=_responses(
                {
                    "/api/v3/exchangeInfo": EXCHANGE_INFO,
                    "/api/v3/capital/config/getall": CAPITAL_CONFIG,
                    "/api/v3/account": ACCOUNT,
                }
            )
        ),
    )
    return adapter


@pytest.mark.asyncio
async def test_binance_coins_merge_networks_and_limits(binance_adapter):
    coins = await binance_adapter.list_coins()

    assert [c.symbol for c in coins] == ["USDT"]
    usdt = coins[0]
    assert usdt.name == "TetherUS"
    assert usdt.networks == ["TRX", "ETH"]
    assert usdt.min_withdraw == Decimal("10")
    assert usdt.max_withdraw == Decimal("5000000")
    assert usdt.withdraw_enabled is True
    assert usdt.trading_enabled is True
    assert usdt.exchange == "binance"


@pytest.mark.asyncio
async def test_mexc_uses_capitalized_coin_name(mexc_adapter):
    coins = await mexc_adapter.list_coins()
    assert coins[0].name == "Tether"
    assert coins[0].exchange == "mexc"


@pytest.mark.asyncio
async def test_balances_drop_zero_totals(binance_adapter):
    balances = await binance_adapter.get_balance()

    assert [(b.coin, b.total) for b in balances] == [
        ("USDT", Decimal("13.0")),
        ("ETH", Decimal("1")),
    ]


@pytest.mark.asyncio
async def test_balance_filter_by_coin(binance_adapter):
    balances = await binance_adapter.get_balance("USDT")
    assert [b.coin for b in balances] == ["USDT"]


@pytest.mark.asyncio
async def test_binance_networks(binance_adapter):
    networks = await binance_adapter.list_networks("USDT")

    trx, eth = networks
    assert trx.name == "Tron (TRC20)"
    assert trx.precision == 6
    assert trx.status == NetworkState.ACTIVE
    assert trx.memo_required is False
    assert eth.status == NetworkState.DISABLED
    assert eth.withdraw_fee == Decimal("5")


@pytest.mark.asyncio
async def test_mexc_networks_detect_memo_from_tips(mexc_adapter):
    networks = await mexc_adapter.list_networks("USDT")

    trx, eth = networks
    assert trx.name == "TRX"
    assert trx.precision == 8
    assert eth.memo_required is True
    assert eth.memo_name == "memo"


@pytest.mark.asyncio
async def test_unknown_coin_has_no_networks(binance_adapter):
    assert await binance_adapter.list_networks("NOPE") == []


@pytest.mark.asyncio
async def test_network_status_of_missing_network_is_disabled(binance_adapter):
    status = await binance_adapter.check_network_status("USDT", "SOL")
    assert status.status == NetworkState.DISABLED
    assert status.withdraw_enabled is False


def test_withdraw_payload_field_names():
    params = WithdrawParams(
        coin="XRP", network="XRP", address="rAddress", amount=Decimal("1E-7"), memo="123"
    )
    binance = BinanceAdapter("k", "s", exchange_config("Binance"))
    mexc = MexcAdapter("k", "s", exchange_config("MEXC"))

    assert binance.build_withdraw_payload(params) == {
        "coin": "XRP",
        "network": "XRP",
        "address": "rAddress",
        "amount": "0.0000001",
        "addressTag": "123",
    }
    assert mexc.build_withdraw_payload(params) == {
        "coin": "XRP",
        "netWork": "XRP",
        "address": "rAddress",
        "amount": "0.0000001",
        "memo": "123",
    }


@pytest.mark.asyncio
async def test_withdraw_reports_order_id(mocker):
    adapter = BinanceAdapter("k", "s", exchange_config("Binance"))
    mocker.patch.object(adapter.rest, "_request", AsyncMock(return_value={"id": 42}))

    result = await adapter.withdraw(
        WithdrawParams(coin="USDT", network="TRX", address="T1", amount=Decimal("10"))
    )

    assert result.success is True
    assert result.order_id == "42"


@pytest.mark.asyncio
async def test_withdraw_never_raises(mocker):
    adapter = MexcAdapter("k", "s", exchange_config("MEXC"))
    mocker.patch.object(
        adapter.rest,
        "_request",
        AsyncMock(side_effect=ExchangeAPIError("mexc", 400, "MEXC API error: 400 insufficient")),
    )

    result = await adapter.withdraw(
        WithdrawParams(coin="USDT", network="TRX", address="T1", amount=Decimal("10"))
    )

    assert result.success is False
    assert "insufficient" in result.error


@pytest.mark.asyncio
async def test_connection_test_reports_false_on_error(mocker):
    adapter = BinanceAdapter("k", "s", exchange_config("Binance"))
    mocker.patch.object(
        adapter.rest, "_request", AsyncMock(side_effect=ExchangeAPIError("binance", 401, "bad key"))
    )
    assert await adapter.test_connection() is False


@pytest.mark.asyncio
async def test_connection_test_true_when_account_loads(binance_adapter):
    assert await binance_adapter.test_connection() is True


def test_testnet_flag_selects_testnet_url():
    adapter = BinanceAdapter("k", "s", exchange_config("Binance"), testnet=True)
    assert adapter.rest.base_url == "https://testnet.invalid"


def test_parse_decimal_tolerates_bad_input():
    assert parse_decimal("0.001") == Decimal("0.001")
    assert parse_decimal(None) == Decimal("0")
    assert parse_decimal("") == Decimal("0")
    assert parse_decimal("abc") == Decimal("0")
    assert parse_decimal("NaN") == Decimal("0")


def test_precision_from_multiple():
    assert precision_from_multiple("0.000001") == 6
    assert precision_from_multiple("1") == 0
    assert precision_from_multiple(None) == 8
