"""
Exceptions raised by exchange adapters and the registry.

Exception Hierarchy:
    ExchangeError (base)
    ├── ExchangeAPIError (remote error status or transport failure)
    │   └── RateLimitError (HTTP 429)
    └── UnsupportedExchangeError (no adapter registered for a name)
"""

from typing import Optional


class ExchangeError(Exception):
    """Base exception for exchange integrations."""

    pass


class ExchangeAPIError(ExchangeError):
    """
    Raised when an exchange request fails.

    Attributes:
        exchange: Exchange identifier.
        status: HTTP status code, or 0 for transport failures and timeouts.
        message: Human-readable message including the exchange's response body.
    """

    def __init__(self, exchange: str, status: int, message: str):
        self.exchange = exchange
        self.status = status
        self.message = message
        super().__init__(message)


class RateLimitError(ExchangeAPIError):
    """Raised when the exchange answers with HTTP 429."""

    def __init__(self, exchange: str, message: str, retry_after: Optional[int] = None):
        self.retry_after = retry_after
        super().__init__(exchange, 429, message)


class UnsupportedExchangeError(ExchangeError):
    """Raised when no adapter is registered for an exchange name."""

    def __init__(self, exchange_name: str):
        self.exchange_name = exchange_name
        super().__init__(f"Unsupported exchange: {exchange_name}")
