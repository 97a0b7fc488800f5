"""
Capital-config normalizer shared by Binance and MEXC.

Both exchanges describe withdrawable assets with the same payload shape:

Capital Config Format (one entry per coin):
    {
        "coin": "USDT",
        "name": "TetherUS",          # MEXC spells this "Name"
        "networkList": [
            {
                "network": "TRX",
                "coin": "USDT",
                "name": "Tron (TRC20)",
                "withdrawEnable": true,
                "depositEnable": true,
                "withdrawFee": "1",
                "withdrawMin": "10",
                "withdrawMax": "10000000",
                "withdrawIntegerMultiple": "0.000001",   # Binance only
                "memoRegex": "",                         # Binance only
                "withdrawTips": "...", "depositTips": "..."  # MEXC
            }
        ]
    }

Exchange Info Format:
    {"symbols": [{"symbol": "BTCUSDT", "baseAsset": "BTC",
                  "quoteAsset": "USDT", "status": "TRADING"}]}

Account Format:
    {"balances": [{"asset": "BTC", "free": "0.5", "locked": "0.1"}]}

Subclasses override the small hooks where the two exchanges differ (coin
name field, network display name, precision, memo detection).
"""

from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Iterable, List, Optional

import structlog

from transnet.models.coins import Balance, Coin, Network, NetworkState

logger = structlog.get_logger(__name__)

DEFAULT_PRECISION = 8
DEFAULT_MEMO_NAME = "memo"


def parse_decimal(value: Any) -> Decimal:
    """
    Parse an exchange numeric field to Decimal.

    Missing, empty, or unparseable values (and NaN/Infinity) parse to zero.

    Example:
        >>> parse_decimal("0.001")
        Decimal('0.001')
        >>> parse_decimal(None)
        Decimal('0')
    """
    if value is None or value == "":
        return Decimal("0")
    try:
        result = Decimal(str(value))
    except (InvalidOperation, ValueError):
        return Decimal("0")
    if not result.is_finite():
        return Decimal("0")
    return result


def network_state(withdraw_enabled: bool, deposit_enabled: bool) -> NetworkState:
    """Network is active only when both directions are open."""
    if withdraw_enabled and deposit_enabled:
        return NetworkState.ACTIVE
    return NetworkState.DISABLED


class CapitalConfigNormalizer:
    """
    Normalizes capital-config, exchange-info, and account payloads.

    All methods are classmethods so subclasses only override hooks.

    Example:
        >>> coins = BinanceNormalizer.normalize_coins(config, info, "binance")
        >>> balances = BinanceNormalizer.normalize_balances(account, None, "binance")
    """

    coin_name_field = "name"

    # Hooks

    @classmethod
    def coin_name(cls, entry: Dict[str, Any]) -> str:
        """Display name of a capital-config entry."""
        return entry.get(cls.coin_name_field) or entry["coin"]

    @classmethod
    def network_name(cls, network: Dict[str, Any]) -> str:
        """Display name of a network."""
        return network["network"]

    @classmethod
    def network_precision(cls, network: Dict[str, Any]) -> int:
        """Amount precision of a network."""
        return DEFAULT_PRECISION

    @classmethod
    def memo_required(cls, network: Dict[str, Any]) -> bool:
        """Whether the network requires a memo/tag."""
        return False

    @classmethod
    def memo_name(cls, network: Dict[str, Any]) -> Optional[str]:
        """Label of the memo field, if one applies."""
        return DEFAULT_MEMO_NAME if cls.memo_required(network) else None

    # Normalization

    @classmethod
    def normalize_coins(
        cls,
        capital_config: Iterable[Dict[str, Any]],
        exchange_info: Dict[str, Any],
        exchange: str,
    ) -> List[Coin]:
        """
        Build the coin list from capital config and exchange info.

        Entries sharing a coin symbol are merged. The minimum withdrawal is
        the smallest network minimum, the maximum the largest network
        maximum. Coins with no networks are dropped.

        Args:
            capital_config: Raw capital-config list.
            exchange_info: Raw exchange-info object.
            exchange: Exchange identifier to attach.

        Returns:
            List[Coin]: Normalized coins in capital-config order.

        Raises:
            ValueError: If an entry has no coin symbol.
        """
        merged: Dict[str, Dict[str, Any]] = {}

        for entry in capital_config:
            symbol = entry.get("coin")
            if not symbol:
                raise ValueError("Invalid capital config entry: missing coin")

            coin = merged.setdefault(
                symbol,
                {
                    "symbol": symbol,
                    "name": cls.coin_name(entry),
                    "networks": [],
                    "min_withdraw": None,
                    "max_withdraw": Decimal("0"),
                    "withdraw_enabled": False,
                    "trading_enabled": False,
                },
            )

            for network in entry.get("networkList") or []:
                coin["networks"].append(network["network"])
                minimum = parse_decimal(network.get("withdrawMin"))
                if coin["min_withdraw"] is None or minimum < coin["min_withdraw"]:
                    coin["min_withdraw"] = minimum
                coin["max_withdraw"] = max(
                    coin["max_withdraw"], parse_decimal(network.get("withdrawMax"))
                )
                coin["withdraw_enabled"] = coin["withdraw_enabled"] or bool(
                    network.get("withdrawEnable")
                )

        for symbol_info in exchange_info.get("symbols", []):
            trading = symbol_info.get("status") == "TRADING"
            for asset in (symbol_info.get("baseAsset"), symbol_info.get("quoteAsset")):
                if asset in merged and trading:
                    merged[asset]["trading_enabled"] = True

        coins = [
            Coin(
                symbol=data["symbol"],
                name=data["name"],
                networks=data["networks"],
                precision=DEFAULT_PRECISION,
                min_withdraw=data["min_withdraw"],
                max_withdraw=data["max_withdraw"],
                withdraw_enabled=data["withdraw_enabled"],
                trading_enabled=data["trading_enabled"],
                exchange=exchange,
            )
            for data in merged.values()
            if data["networks"]
        ]

        logger.debug("coins_normalized", exchange=exchange, count=len(coins))
        return coins

    @classmethod
    def normalize_networks(
        cls,
        capital_config: Iterable[Dict[str, Any]],
        coin: str,
        exchange: str,
    ) -> List[Network]:
        """
        Map the networks of one coin.

        Args:
            capital_config: Raw capital-config list.
            coin: Coin symbol to look up.
            exchange: Exchange identifier to attach.

        Returns:
            List[Network]: Networks of the coin, empty if it is unknown.
        """
        entry = next((c for c in capital_config if c.get("coin") == coin), None)
        if entry is None or not entry.get("networkList"):
            return []

        networks = []
        for raw in entry["networkList"]:
            withdraw_enabled = bool(raw.get("withdrawEnable"))
            deposit_enabled = bool(raw.get("depositEnable"))
            networks.append(
                Network(
                    network=raw["network"],
                    coin=raw.get("coin") or coin,
                    name=cls.network_name(raw),
                    withdraw_enabled=withdraw_enabled,
                    deposit_enabled=deposit_enabled,
                    withdraw_fee=parse_decimal(raw.get("withdrawFee")),
                    min_withdraw=parse_decimal(raw.get("withdrawMin")),
                    max_withdraw=parse_decimal(raw.get("withdrawMax")),
                    precision=cls.network_precision(raw),
                    memo_required=cls.memo_required(raw),
                    memo_name=cls.memo_name(raw),
                    status=network_state(withdraw_enabled, deposit_enabled),
                    exchange=exchange,
                )
            )
        return networks

    @staticmethod
    def normalize_balances(
        account: Dict[str, Any],
        coin: Optional[str],
        exchange: str,
    ) -> List[Balance]:
        """
        Map the account snapshot to balances with a non-zero total.

        Args:
            account: Raw account object.
            coin: Optional coin filter.
            exchange: Exchange identifier to attach.

        Returns:
            List[Balance]: Non-zero balances.
        """
        balances = []
        for raw in account.get("balances", []):
            if coin and raw.get("asset") != coin:
                continue
            balance = Balance(
                coin=raw["asset"],
                free=parse_decimal(raw.get("free")),
                locked=parse_decimal(raw.get("locked")),
                exchange=exchange,
            )
            if balance.total > 0:
                balances.append(balance)
        return balances
