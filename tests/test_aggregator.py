import asyncio
from decimal import Decimal

import pytest

from tests.helpers import credential, usdt_network
from transnet.adapters.errors import ExchangeAPIError
from transnet.aggregation import ExchangeAggregator, is_usable, paginate
from transnet.models.coins import Balance


@pytest.fixture
def aggregator(registry):
    return ExchangeAggregator(registry)


@pytest.mark.asyncio
async def test_balances_are_tagged_and_sorted_by_total(aggregator, binance, mexc):
    mexc.balances = [Balance(coin="BTC", free="0.5"), Balance(coin="ETH", free="500")]
    configs = [credential("org", "binance"), credential("org", "mexc")]

    result = await aggregator.collect_balances(configs)

    assert [(b.exchange, b.coin, b.total) for b in result.balances] == [
        ("mexc", "ETH", Decimal("500")),
        ("binance", "USDT", Decimal("105")),
        ("mexc", "BTC", Decimal("0.5")),
    ]
    assert result.errors == {}
    assert binance.closed == 1
    assert mexc.closed == 1


@pytest.mark.asyncio
async def test_one_failing_exchange_does_not_hide_the_others(aggregator, mexc):
    mexc.error = ExchangeAPIError("mexc", 401, "MEXC API error: 401 invalid key")
    configs = [credential("org", "binance"), credential("org", "mexc")]

    result = await aggregator.collect_balances(configs)

    assert [b.coin for b in result.balances] == ["USDT"]
    assert result.errors == {"mexc": "MEXC API error: 401 invalid key"}


@pytest.mark.asyncio
async def test_balances_skip_inactive_invalid_and_keyless_rows(aggregator, binance):
    configs = [
        credential("org", "binance", is_active=False),
        credential("org", "binance", is_valid=False),
        credential("org", "binance", api_secret=None),
    ]

    result = await aggregator.collect_balances(configs)

    assert result.balances == []
    assert binance.created == []


@pytest.mark.asyncio
async def test_unsupported_exchange_is_reported_as_error(aggregator):
    result = await aggregator.collect_balances([credential("org", "kucoin")])
    assert result.errors == {"kucoin": "Unsupported exchange: kucoin"}


@pytest.mark.asyncio
async def test_testnet_flag_reaches_the_adapter(aggregator, binance):
    await aggregator.collect_balances([credential("org", "binance", testnet=True)])
    assert binance.created == [
        {"api_key": "key-binance", "api_secret": "secret-binance", "testnet": True}
    ]


@pytest.mark.asyncio
async def test_withdraw_data_accepts_unvalidated_rows(aggregator):
    configs = [credential("org", "binance", is_valid=False)]

    data = await aggregator.collect_withdraw_data(configs)

    assert [c.symbol for c in data.coins] == ["USDT"]
    assert data.coins[0].exchange == "binance"
    assert [b.coin for b in data.balances] == ["USDT"]
    assert [(o.name, o.display_name) for o in data.available_exchanges] == [
        ("binance", "BINANCE")
    ]


@pytest.mark.asyncio
async def test_withdraw_data_lists_failing_exchange_as_available(aggregator, mexc):
    mexc.error = ExchangeAPIError("mexc", 0, "MEXC request timeout after 10s")

    data = await aggregator.collect_withdraw_data([credential("org", "mexc")])

    assert data.coins == []
    assert data.errors == {"mexc": "MEXC request timeout after 10s"}
    assert [o.name for o in data.available_exchanges] == ["mexc"]


@pytest.mark.asyncio
async def test_withdraw_data_waits_for_both_calls_before_closing(aggregator, mocker):
    events = []

    class SlowBalanceClient:
        async def __aenter__(self):
            return self

        async def __aexit__(self, exc_type, exc, tb):
            events.append("close")

        async def list_coins(self):
            raise ExchangeAPIError("binance", 500, "coins unavailable")

        async def get_balance(self):
            await asyncio.sleep(0.05)
            events.append("balance_done")
            return []

    mocker.patch.object(aggregator, "_client_for", return_value=SlowBalanceClient())

    data = await aggregator.collect_withdraw_data([credential("org", "binance")])

    assert events == ["balance_done", "close"]
    assert data.errors == {"binance": "coins unavailable"}
    assert [o.name for o in data.available_exchanges] == ["binance"]


@pytest.mark.asyncio
async def test_single_exchange_helpers(aggregator, binance):
    binance.networks = {"USDT": [usdt_network("TRX"), usdt_network("ETH", False)]}
    config = credential("org", "binance")

    networks = await aggregator.list_networks(config, "USDT")
    balance = await aggregator.coin_balance(config, "USDT")
    missing = await aggregator.coin_balance(config, "DOGE")

    assert [n.network for n in networks] == ["TRX", "ETH"]
    assert all(n.exchange == "binance" for n in networks)
    assert balance.free == Decimal("100")
    assert missing is None


def test_is_usable():
    assert is_usable(credential("org"), require_valid=True)
    assert is_usable(credential("org", is_valid=False), require_valid=False)
    assert not is_usable(credential("org", is_valid=False), require_valid=True)
    assert not is_usable(credential("org", api_key=""), require_valid=False)


def test_paginate():
    page = paginate(list(range(120)), page=3, page_size=50)

    assert page.items == list(range(100, 120))
    assert page.total_pages == 3
    assert page.has_previous
    assert not page.has_next


def test_paginate_clamps_and_handles_empty():
    assert paginate([1, 2], page=0, page_size=50).page == 1
    empty = paginate([], page=1, page_size=50)
    assert empty.total_pages == 0
    assert not empty.has_next
    assert paginate([1, 2], page=5, page_size=1).items == []
