import hashlib
import hmac

import pytest

from transnet.adapters.binance import BinanceRestClient, build_binance_query
from transnet.adapters.mexc import MexcRestClient, build_mexc_query
from transnet.adapters.rest import SignedRestClient, sign_payload


def _hmac(secret: str, message: str) -> str:
    return hmac.new(secret.encode(), message.encode(), hashlib.sha256).hexdigest()


def test_sign_payload_matches_published_binance_vector():
    secret = "NhqPtmdSJYdKjVHjA7PZj4Mge3R5YNiP1e3UZjInClVN65XAbvqqM6A7H5fATj0j"
    query = (
        "symbol=LTCBTC&side=BUY&type=LIMIT&timeInForce=GTC&quantity=1&price=0.1"
        "&recvWindow=5000&timestamp=1499827319559"
    )
    assert (
        sign_payload(secret, query)
        == "c8db56825ae71d6d79447849e617115f4a920fa2acdcab2b053c4b2838bd6b71"
    )


def test_binance_query_appends_timestamp_then_signature():
    query = build_binance_query({"coin": "USDT"}, "secret", 1700000000000)

    signed_part, signature = query.rsplit("&signature=", 1)
    assert signed_part == "coin=USDT&timestamp=1700000000000"
    assert signature == _hmac("secret", signed_part)


def test_binance_query_without_params():
    query = build_binance_query({}, "secret", 1700000000000)
    assert query.startswith("timestamp=1700000000000&signature=")


def test_mexc_query_signs_params_followed_by_timestamp():
    query = build_mexc_query({"coin": "USDT", "limit": 10}, "secret", 1700000000000)

    signed_part, signature = query.rsplit("&signature=", 1)
    assert signed_part == "coin=USDT&limit=10&timestamp=1700000000000"
    assert signature == _hmac("secret", signed_part)


def test_mexc_query_without_params_keeps_leading_ampersand():
    query = build_mexc_query({}, "secret", 1700000000000)

    assert query.startswith("&timestamp=1700000000000&signature=")
    assert query.endswith(_hmac("secret", "&timestamp=1700000000000"))


def test_rest_clients_build_urls_on_their_base():
    binance = BinanceRestClient("key", "secret", "https://api.binance.com/")
    mexc = MexcRestClient("key", "secret", "https://api.mexc.com")

    assert binance.build_url("/api/v3/account", {}, 1).startswith(
        "https://api.binance.com/api/v3/account?timestamp=1&signature="
    )
    assert mexc.build_url("/api/v3/account", {}, 1).startswith(
        "https://api.mexc.com/api/v3/account?&timestamp=1&signature="
    )
    assert binance.api_key_header == "X-MBX-APIKEY"
    assert mexc.api_key_header == "X-MEXC-APIKEY"


def test_rest_client_requires_a_query_layout():
    with pytest.raises(TypeError):
        SignedRestClient("key", "secret", "https://api.example.invalid")
