"""
Binance exchange adapter module.

Integrates Binance spot account and SAPI capital endpoints. Importing this
package registers BinanceAdapter under "binance".

Components:
    BinanceAdapter: Adapter implementing the ExchangeAdapter interface
    BinanceRestClient: Signed REST client
    BinanceNormalizer: Capital-config and account normalization

Example:
    >>> from transnet.adapters.binance import BinanceAdapter
    >>> adapter = BinanceAdapter(api_key, api_secret, exchange_config)
    >>> balances = await adapter.get_balance()
"""

from transnet.adapters.binance.adapter import BinanceAdapter
from transnet.adapters.binance.normalizer import BinanceNormalizer
from transnet.adapters.binance.rest import BinanceRestClient, build_binance_query

__all__ = [
    "BinanceAdapter",
    "BinanceRestClient",
    "BinanceNormalizer",
    "build_binance_query",
]
