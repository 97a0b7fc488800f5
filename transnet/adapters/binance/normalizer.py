"""
Binance data normalizer.

Binance-specific network fields:
    name: Human-readable network name (e.g., "Tron (TRC20)")
    withdrawIntegerMultiple: Smallest withdrawal step (e.g., "0.000001"),
        from which the amount precision is derived
    memoRegex: Non-empty when the network requires an address tag
"""

from typing import Any, Dict

from transnet.adapters.normalizer import (
    DEFAULT_PRECISION,
    CapitalConfigNormalizer,
    parse_decimal,
)


def precision_from_multiple(value: Any) -> int:
    """
    Derive decimal places from a withdrawal step size.

    Example:
        >>> precision_from_multiple("0.000001")
        6
        >>> precision_from_multiple("1")
        0
        >>> precision_from_multiple(None)
        8
    """
    step = parse_decimal(value)
    if step <= 0:
        return DEFAULT_PRECISION
    exponent = step.normalize().as_tuple().exponent
    return max(-exponent, 0)


class BinanceNormalizer(CapitalConfigNormalizer):
    """Normalizes Binance capital config, exchange info, and account data."""

    coin_name_field = "name"

    @classmethod
    def network_name(cls, network: Dict[str, Any]) -> str:
        return network.get("name") or network["network"]

    @classmethod
    def network_precision(cls, network: Dict[str, Any]) -> int:
        return precision_from_multiple(network.get("withdrawIntegerMultiple"))

    @classmethod
    def memo_required(cls, network: Dict[str, Any]) -> bool:
        return bool(network.get("memoRegex"))
