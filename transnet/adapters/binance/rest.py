"""
Binance REST API client.

Authenticated requests append ``timestamp`` to the parameters, sign the
resulting query string, and place the signature last:

    {base}{endpoint}?coin=USDT&timestamp=1700000000000&signature=<hex>

The API key travels in the ``X-MBX-APIKEY`` header.

Endpoints:
    Account: /api/v3/account
    Exchange info: /api/v3/exchangeInfo
    Capital config: /sapi/v1/capital/config/getall
    Withdraw: /sapi/v1/capital/withdraw/apply (POST)
    Withdraw history: /sapi/v1/capital/withdraw/history
"""

from typing import Any, Dict
from urllib.parse import urlencode

from transnet.adapters.rest import SignedRestClient, sign_payload


def build_binance_query(params: Dict[str, Any], secret: str, timestamp: int) -> str:
    """
    Build a signed Binance query string.

    Args:
        params: Request parameters in insertion order.
        secret: API secret.
        timestamp: Request time in milliseconds.

    Returns:
        str: ``<params>&timestamp=<ts>&signature=<hex>``.

    Example:
        >>> build_binance_query({"coin": "USDT"}, "secret", 1700000000000)
        'coin=USDT&timestamp=1700000000000&signature=...'
    """
    signed = dict(params)
    signed["timestamp"] = timestamp
    query = urlencode(signed)
    return f"{query}&signature={sign_payload(secret, query)}"


class BinanceRestClient(SignedRestClient):
    """
    Async REST API client for Binance spot and SAPI capital endpoints.

    Example:
        >>> client = BinanceRestClient(api_key, api_secret, "https://api.binance.com")
        >>> account = await client.get_account()
        >>> await client.close()
    """

    exchange_name = "binance"
    error_label = "Binance"
    api_key_header = "X-MBX-APIKEY"

    CAPITAL_CONFIG_ENDPOINT = "/sapi/v1/capital/config/getall"
    WITHDRAW_ENDPOINT = "/sapi/v1/capital/withdraw/apply"
    WITHDRAW_HISTORY_ENDPOINT = "/sapi/v1/capital/withdraw/history"

    def build_signed_query(self, params: Dict[str, Any], timestamp: int) -> str:
        return build_binance_query(params, self._api_secret, timestamp)
