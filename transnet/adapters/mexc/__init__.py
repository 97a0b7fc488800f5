"""
MEXC exchange adapter module.

Integrates MEXC spot v3 account and capital endpoints. Importing this
package registers MexcAdapter under "mexc".

Components:
    MexcAdapter: Adapter implementing the ExchangeAdapter interface
    MexcRestClient: Signed REST client
    MexcNormalizer: Capital-config and account normalization
"""

from transnet.adapters.mexc.adapter import MexcAdapter
from transnet.adapters.mexc.normalizer import MexcNormalizer
from transnet.adapters.mexc.rest import MexcRestClient, build_mexc_query

__all__ = [
    "MexcAdapter",
    "MexcRestClient",
    "MexcNormalizer",
    "build_mexc_query",
]
