"""
Binance exchange adapter.

Binance withdraw fields:
    network: Network identifier
    addressTag: Memo/tag for networks that require one
"""

from transnet.adapters.binance.normalizer import BinanceNormalizer
from transnet.adapters.binance.rest import BinanceRestClient
from transnet.adapters.capital_adapter import CapitalApiAdapter
from transnet.adapters.registry import register_adapter


@register_adapter("binance")
class BinanceAdapter(CapitalApiAdapter):
    """
    Binance exchange adapter implementing ExchangeAdapter interface.

    Example:
        >>> adapter = BinanceAdapter(api_key, api_secret, config.get_exchange("binance"))
        >>> coins = await adapter.list_coins()
        >>> await adapter.close()
    """

    rest_client_class = BinanceRestClient
    normalizer = BinanceNormalizer
    network_field = "network"
    memo_field = "addressTag"
