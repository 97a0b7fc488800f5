"""
MEXC exchange adapter.

MEXC withdraw fields:
    netWork: Network identifier (capital W on the v3 capital API)
    memo: Memo/tag for networks that require one
"""

from transnet.adapters.capital_adapter import CapitalApiAdapter
from transnet.adapters.mexc.normalizer import MexcNormalizer
from transnet.adapters.mexc.rest import MexcRestClient
from transnet.adapters.registry import register_adapter


@register_adapter("mexc")
class MexcAdapter(CapitalApiAdapter):
    """MEXC exchange adapter implementing ExchangeAdapter interface."""

    rest_client_class = MexcRestClient
    normalizer = MexcNormalizer
    network_field = "netWork"
    memo_field = "memo"
