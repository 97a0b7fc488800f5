"""
MEXC REST API client.

MEXC signs the parameter query string with the timestamp appended after
it, and repeats that layout in the URL:

    message = "<params>&timestamp=<ts>"
    {base}{endpoint}?<params>&timestamp=<ts>&signature=<hex>

The API key travels in the ``X-MEXC-APIKEY`` header.

Endpoints:
    Account: /api/v3/account
    Exchange info: /api/v3/exchangeInfo
    Capital config: /api/v3/capital/config/getall
    Withdraw: /api/v3/capital/withdraw (POST)
    Withdraw history: /api/v3/capital/withdraw/history
"""

from typing import Any, Dict
from urllib.parse import urlencode

from transnet.adapters.rest import SignedRestClient, sign_payload


def build_mexc_query(params: Dict[str, Any], secret: str, timestamp: int) -> str:
    """
    Build a signed MEXC query string.

    With no parameters the query starts with "&timestamp=", which is the
    exact message MEXC expects to be signed in that case.

    Args:
        params: Request parameters in insertion order.
        secret: API secret.
        timestamp: Request time in milliseconds.

    Returns:
        str: ``<params>&timestamp=<ts>&signature=<hex>``.
    """
    message = f"{urlencode(params)}&timestamp={timestamp}"
    return f"{message}&signature={sign_payload(secret, message).lower()}"


class MexcRestClient(SignedRestClient):
    """Async REST API client for MEXC spot v3 and capital endpoints."""

    exchange_name = "mexc"
    error_label = "MEXC"
    api_key_header = "X-MEXC-APIKEY"

    CAPITAL_CONFIG_ENDPOINT = "/api/v3/capital/config/getall"
    WITHDRAW_ENDPOINT = "/api/v3/capital/withdraw"
    WITHDRAW_HISTORY_ENDPOINT = "/api/v3/capital/withdraw/history"

    def build_signed_query(self, params: Dict[str, Any], timestamp: int) -> str:
        return build_mexc_query(params, self._api_secret, timestamp)
