"""
Abstract base class for exchange adapters.

This module defines the ExchangeAdapter interface that all exchange-specific
implementations (Binance, MEXC) must follow so that the aggregation layer
can treat every exchange the same way.

The adapter pattern allows the system to:
- Add new exchanges without modifying aggregation or presentation logic
- Normalize capital-config and account data into unified models (Coin, Balance)
- Keep exchange-specific signing and field names inside one package

Example:
    >>> class ExampleAdapter(ExchangeAdapter):
    ...     @property
    ...     def exchange_name(self) -> str:
    ...         return "example"
    ...
    ...     async def get_balance(self, coin=None):
    ...         raw = await self._rest.get_account()
    ...         return self._normalizer.normalize_balances(raw, coin)
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from transnet.models.coins import Balance, Coin, Network, NetworkStatus
from transnet.models.withdrawals import WithdrawParams, WithdrawResult


class ExchangeAdapter(ABC):
    """
    Abstract base class for exchange adapters.

    Defines the contract that all exchange-specific implementations must
    follow. Each instance is bound to one set of API credentials.

    The adapter is responsible for:
    - Signing authenticated REST requests the way its exchange requires
    - Converting exchange-specific payloads to normalized models
    - Reporting remote failures as ExchangeAPIError (or, for withdraw(),
      as a failed WithdrawResult)

    Attributes:
        exchange_name: Lowercase exchange identifier (e.g., "binance", "mexc").

    Note:
        All amounts in returned models use Decimal for precision.
        Never use float for balances, fees, or withdrawal limits.
    """

    @property
    @abstractmethod
    def exchange_name(self) -> str:
        """
        Return the lowercase exchange identifier.

        This identifier is used in:
        - Registry lookups (e.g., "binance")
        - Database records (exchange_name column)
        - Logging

        Returns:
            str: Lowercase exchange name (e.g., "binance", "mexc").
        """
        pass

    @abstractmethod
    async def list_coins(self) -> List[Coin]:
        """
        List withdrawable coins with their networks.

        Only coins that have at least one network are returned. A coin is
        trading-enabled when any live trading symbol uses it as base or
        quote asset.

        Returns:
            List[Coin]: Coins known to the exchange.

        Raises:
            ExchangeAPIError: If the exchange responds with an error status.
        """
        pass

    @abstractmethod
    async def get_balance(self, coin: Optional[str] = None) -> List[Balance]:
        """
        Fetch the account balance snapshot.

        Args:
            coin: Optional coin symbol to filter on.

        Returns:
            List[Balance]: Balances with a non-zero total.

        Raises:
            ExchangeAPIError: If the exchange responds with an error status.
        """
        pass

    @abstractmethod
    async def list_networks(self, coin: str) -> List[Network]:
        """
        List transfer networks for a coin.

        Args:
            coin: Coin symbol.

        Returns:
            List[Network]: Networks for the coin, empty if the coin is unknown.

        Raises:
            ExchangeAPIError: If the exchange responds with an error status.
        """
        pass

    @abstractmethod
    async def withdraw(self, params: WithdrawParams) -> WithdrawResult:
        """
        Submit a withdrawal request.

        This method MUST NOT raise. Transport and remote errors are
        returned as WithdrawResult(success=False, error=...).

        Args:
            params: Withdrawal parameters.

        Returns:
            WithdrawResult: Outcome with the exchange order id on success.
        """
        pass

    @abstractmethod
    async def check_network_status(self, coin: str, network: str) -> NetworkStatus:
        """
        Report the availability of one coin/network pair.

        An unknown network is reported as disabled with both flags false.

        Args:
            coin: Coin symbol.
            network: Network identifier.

        Returns:
            NetworkStatus: Availability summary.
        """
        pass

    @abstractmethod
    async def test_connection(self) -> bool:
        """
        Verify the credentials with one authenticated call.

        Returns:
            bool: True if the exchange accepted the request. Never raises.
        """
        pass

    @abstractmethod
    async def get_withdraw_history(
        self, coin: Optional[str] = None, limit: int = 100
    ) -> List[Dict[str, Any]]:
        """
        Fetch raw withdrawal history from the exchange.

        Args:
            coin: Optional coin filter.
            limit: Maximum number of entries.

        Returns:
            List[Dict[str, Any]]: Exchange-native history entries.
        """
        pass

    @abstractmethod
    async def close(self) -> None:
        """
        Release network resources held by the adapter.

        Safe to call multiple times.
        """
        pass

    async def __aenter__(self) -> "ExchangeAdapter":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    def __repr__(self) -> str:
        """Return string representation."""
        return f"{self.__class__.__name__}(exchange={self.exchange_name})"
