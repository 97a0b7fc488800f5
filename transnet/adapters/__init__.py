"""
Exchange adapters.

Each supported exchange lives in its own package and registers its adapter
with the registry on import.

Supported Exchanges:
    - Binance
    - MEXC
"""

from transnet.adapters.errors import (
    ExchangeAPIError,
    ExchangeError,
    RateLimitError,
    UnsupportedExchangeError,
)
from transnet.adapters.registry import ExchangeRegistry, register_adapter

from transnet.adapters.binance import BinanceAdapter
from transnet.adapters.mexc import MexcAdapter

__all__ = [
    "BinanceAdapter",
    "ExchangeAPIError",
    "ExchangeError",
    "ExchangeRegistry",
    "MexcAdapter",
    "RateLimitError",
    "UnsupportedExchangeError",
    "register_adapter",
]
