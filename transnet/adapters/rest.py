"""
Signed REST client shared by the exchange adapters.

Binance and MEXC expose the same capital/account endpoint family and both
authenticate with an HMAC-SHA256 signature over the query string plus an
API key header. They differ only in how the timestamp and signature are
laid out in the URL, in the header name, and in the endpoint paths. This
module holds everything else: session management, throttling, and error
mapping.

Subclasses define:
    exchange_name: Lowercase exchange identifier
    error_label: Prefix used in error messages (e.g., "Binance")
    api_key_header: Header carrying the API key
    *_ENDPOINT: Endpoint paths
    build_signed_query(): Query string layout including the signature
"""

import asyncio
import hashlib
import hmac
import time
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

import aiohttp
import structlog

from transnet.adapters.errors import ExchangeAPIError, RateLimitError

logger = structlog.get_logger(__name__)


def sign_payload(secret: str, payload: str) -> str:
    """
    Compute the lowercase hex HMAC-SHA256 signature of a payload.

    Args:
        secret: API secret.
        payload: Exact string to sign.

    Returns:
        str: 64-character lowercase hex digest.
    """
    return hmac.new(
        secret.encode("utf-8"), payload.encode("utf-8"), hashlib.sha256
    ).hexdigest()


def current_timestamp_ms() -> int:
    """Return the current Unix time in milliseconds."""
    return int(time.time() * 1000)


class SignedRestClient(ABC):
    """
    Async REST client for HMAC-signed exchange APIs.

    Every request is signed, including the public exchange-info call, and
    parameters are always carried in the query string, even for POST.

    Attributes:
        base_url: REST API base URL.
        rate_limit_per_second: Maximum requests per second.
        timeout_seconds: Total request timeout.
    """

    exchange_name: str = ""
    error_label: str = ""
    api_key_header: str = ""

    EXCHANGE_INFO_ENDPOINT: str = "/api/v3/exchangeInfo"
    ACCOUNT_ENDPOINT: str = "/api/v3/account"
    CAPITAL_CONFIG_ENDPOINT: str = ""
    WITHDRAW_ENDPOINT: str = ""
    WITHDRAW_HISTORY_ENDPOINT: str = ""

    def __init__(
        self,
        api_key: str,
        api_secret: str,
        base_url: str,
        rate_limit_per_second: int = 10,
        timeout_seconds: int = 10,
    ):
        """
        Initialize REST client.

        Args:
            api_key: Exchange API key.
            api_secret: Exchange API secret. Never logged.
            base_url: REST API base URL.
            rate_limit_per_second: Maximum requests per second.
            timeout_seconds: Request timeout in seconds.
        """
        self.api_key = api_key
        self._api_secret = api_secret
        self.base_url = base_url.rstrip("/")
        self.rate_limit_per_second = rate_limit_per_second
        self.timeout_seconds = timeout_seconds

        self._session: Optional[aiohttp.ClientSession] = None
        self._last_request_time: float = 0.0
        self._request_interval = 1.0 / rate_limit_per_second

        logger.debug(
            "rest_client_initialized",
            exchange=self.exchange_name,
            base_url=self.base_url,
            rate_limit=rate_limit_per_second,
        )

    @abstractmethod
    def build_signed_query(self, params: Dict[str, Any], timestamp: int) -> str:
        """
        Build the full query string, signature included.

        Args:
            params: Request parameters in insertion order.
            timestamp: Request time in milliseconds.

        Returns:
            str: Query string to append after "?".
        """
        pass

    def build_url(self, endpoint: str, params: Dict[str, Any], timestamp: int) -> str:
        """Return the signed request URL."""
        return f"{self.base_url}{endpoint}?{self.build_signed_query(params, timestamp)}"

    async def _ensure_session(self) -> aiohttp.ClientSession:
        """Ensure aiohttp session is created."""
        if self._session is None or self._session.closed:
            timeout = aiohttp.ClientTimeout(total=self.timeout_seconds)
            self._session = aiohttp.ClientSession(
                timeout=timeout,
                headers={"User-Agent": "transnet/1.0"},
            )
        return self._session

    async def close(self) -> None:
        """Close the HTTP session."""
        if self._session and not self._session.closed:
            await self._session.close()
            logger.debug("rest_client_session_closed", exchange=self.exchange_name)
        self._session = None

    async def _rate_limit(self) -> None:
        """
        Apply rate limiting using simple time-based throttling.

        Ensures minimum interval between requests.
        """
        current_time = asyncio.get_event_loop().time()
        time_since_last = current_time - self._last_request_time

        if time_since_last < self._request_interval:
            wait_time = self._request_interval - time_since_last
            await asyncio.sleep(wait_time)

        self._last_request_time = asyncio.get_event_loop().time()

    async def _request(
        self, method: str, endpoint: str, params: Optional[Dict[str, Any]] = None
    ) -> Any:
        """
        Make a signed HTTP request with rate limiting and error handling.

        Args:
            method: HTTP method (GET, POST).
            endpoint: API endpoint path.
            params: Request parameters, sent in the query string.

        Returns:
            Any: Parsed JSON response.

        Raises:
            RateLimitError: If rate limited by exchange.
            ExchangeAPIError: If the exchange returns an error status or the
                request cannot be completed.
        """
        await self._rate_limit()

        session = await self._ensure_session()
        url = self.build_url(endpoint, dict(params or {}), current_timestamp_ms())
        headers = {
            self.api_key_header: self.api_key,
            "Content-Type": "application/json",
        }

        try:
            async with session.request(method, url, headers=headers) as response:
                if response.status == 429:
                    retry_after = int(response.headers.get("Retry-After", 60))
                    logger.warning(
                        "rest_rate_limited",
                        exchange=self.exchange_name,
                        endpoint=endpoint,
                        retry_after=retry_after,
                    )
                    raise RateLimitError(
                        self.exchange_name,
                        f"{self.error_label} API error: 429 rate limited, "
                        f"retry after {retry_after}s",
                        retry_after=retry_after,
                    )

                if response.status >= 400:
                    error_text = await response.text()
                    logger.error(
                        "rest_request_failed",
                        exchange=self.exchange_name,
                        endpoint=endpoint,
                        status=response.status,
                        error=error_text,
                    )
                    raise ExchangeAPIError(
                        self.exchange_name,
                        response.status,
                        f"{self.error_label} API error: {response.status} "
                        f"{response.reason} - {error_text}",
                    )

                return await response.json(content_type=None)

        except aiohttp.ClientError as e:
            logger.error(
                "rest_client_error", exchange=self.exchange_name, endpoint=endpoint, error=str(e)
            )
            raise ExchangeAPIError(
                self.exchange_name, 0, f"{self.error_label} request failed: {e}"
            ) from e
        except asyncio.TimeoutError as e:
            logger.error(
                "rest_timeout",
                exchange=self.exchange_name,
                endpoint=endpoint,
                timeout=self.timeout_seconds,
            )
            raise ExchangeAPIError(
                self.exchange_name,
                0,
                f"{self.error_label} request timeout after {self.timeout_seconds}s",
            ) from e

    async def get_exchange_info(self) -> Dict[str, Any]:
        """Fetch trading symbols and their status."""
        return await self._request("GET", self.EXCHANGE_INFO_ENDPOINT)

    async def get_capital_config(self) -> List[Dict[str, Any]]:
        """Fetch per-coin capital configuration with network lists."""
        return await self._request("GET", self.CAPITAL_CONFIG_ENDPOINT)

    async def get_account(self) -> Dict[str, Any]:
        """Fetch the account snapshot with balances."""
        return await self._request("GET", self.ACCOUNT_ENDPOINT)

    async def submit_withdrawal(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """
        Submit a withdrawal.

        Args:
            payload: Exchange-native withdrawal fields.

        Returns:
            Dict[str, Any]: Exchange response, carrying the withdrawal id.
        """
        return await self._request("POST", self.WITHDRAW_ENDPOINT, payload)

    async def get_withdraw_history(
        self, coin: Optional[str] = None, limit: int = 100
    ) -> List[Dict[str, Any]]:
        """Fetch withdrawal history, optionally for one coin."""
        params: Dict[str, Any] = {"limit": limit}
        if coin:
            params["coin"] = coin
        return await self._request("GET", self.WITHDRAW_HISTORY_ENDPOINT, params)

    def __repr__(self) -> str:
        """Return string representation."""
        return (
            f"{self.__class__.__name__}(base_url={self.base_url}, "
            f"rate_limit={self.rate_limit_per_second}/s)"
        )
