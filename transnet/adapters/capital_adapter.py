"""
Adapter implementation shared by exchanges with a Binance-style capital API.

Binance and MEXC answer the same operations with the same payload shapes,
so the ExchangeAdapter contract is implemented once here. Exchange
packages supply the REST client class, the normalizer class, and the
field names their withdraw endpoint expects.

Example:
    >>> @register_adapter("binance")
    ... class BinanceAdapter(CapitalApiAdapter):
    ...     rest_client_class = BinanceRestClient
    ...     normalizer = BinanceNormalizer
    ...     network_field = "network"
    ...     memo_field = "addressTag"
"""

import asyncio
from typing import Any, Dict, List, Optional, Type

import structlog

from transnet.adapters.normalizer import CapitalConfigNormalizer
from transnet.adapters.rest import SignedRestClient
from transnet.config.models import ExchangeConfig
from transnet.interfaces.exchange_adapter import ExchangeAdapter
from transnet.models.coins import Balance, Coin, Network, NetworkState, NetworkStatus
from transnet.models.withdrawals import WithdrawParams, WithdrawResult

logger = structlog.get_logger(__name__)

WITHDRAW_SUBMITTED_MESSAGE = "Withdrawal request submitted successfully"


class CapitalApiAdapter(ExchangeAdapter):
    """
    ExchangeAdapter over a signed capital/account REST API.

    Attributes:
        rest_client_class: SignedRestClient subclass for the exchange.
        normalizer: CapitalConfigNormalizer subclass for the exchange.
        network_field: Withdraw parameter carrying the network id.
        memo_field: Withdraw parameter carrying the memo/tag.
    """

    rest_client_class: Type[SignedRestClient] = SignedRestClient
    normalizer: Type[CapitalConfigNormalizer] = CapitalConfigNormalizer
    network_field: str = "network"
    memo_field: str = "memo"

    def __init__(
        self,
        api_key: str,
        api_secret: str,
        exchange_config: ExchangeConfig,
        passphrase: Optional[str] = None,
        testnet: bool = False,
    ):
        """
        Initialize adapter bound to one set of credentials.

        Args:
            api_key: Exchange API key.
            api_secret: Exchange API secret.
            exchange_config: Exchange configuration from config/exchanges.yaml.
            passphrase: Unused by this API family; accepted for uniformity.
            testnet: Use the configured testnet base URL when available.
        """
        self._config = exchange_config
        self._testnet = testnet
        self._rest = self.rest_client_class(
            api_key=api_key,
            api_secret=api_secret,
            base_url=exchange_config.get_rest_url(testnet=testnet),
            rate_limit_per_second=exchange_config.connection.rate_limit_per_second,
            timeout_seconds=exchange_config.connection.timeout_seconds,
        )

    @property
    def exchange_name(self) -> str:
        """Return exchange identifier."""
        return self._rest.exchange_name

    @property
    def rest(self) -> SignedRestClient:
        """Underlying REST client."""
        return self._rest

    async def list_coins(self) -> List[Coin]:
        exchange_info = await self._rest.get_exchange_info()
        capital_config = await self._rest.get_capital_config()
        return self.normalizer.normalize_coins(
            capital_config, exchange_info, self.exchange_name
        )

    async def get_balance(self, coin: Optional[str] = None) -> List[Balance]:
        account = await self._rest.get_account()
        return self.normalizer.normalize_balances(account, coin, self.exchange_name)

    async def list_networks(self, coin: str) -> List[Network]:
        capital_config = await self._rest.get_capital_config()
        return self.normalizer.normalize_networks(
            capital_config, coin, self.exchange_name
        )

    def build_withdraw_payload(self, params: WithdrawParams) -> Dict[str, Any]:
        """
        Map WithdrawParams to the exchange's withdraw fields.

        The amount is sent in plain decimal notation, never exponent form.
        """
        payload: Dict[str, Any] = {
            "coin": params.coin,
            self.network_field: params.network,
            "address": params.address,
            "amount": format(params.amount, "f"),
        }
        if params.memo:
            payload[self.memo_field] = params.memo
        return payload

    async def withdraw(self, params: WithdrawParams) -> WithdrawResult:
        try:
            data = await self._rest.submit_withdrawal(self.build_withdraw_payload(params))
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.warning(
                "withdraw_failed",
                exchange=self.exchange_name,
                coin=params.coin,
                network=params.network,
                error=str(e),
            )
            return WithdrawResult(success=False, error=str(e) or "Unknown error occurred")

        order_id = data.get("id") if isinstance(data, dict) else None
        logger.info(
            "withdraw_submitted",
            exchange=self.exchange_name,
            coin=params.coin,
            network=params.network,
            order_id=order_id,
        )
        return WithdrawResult(
            success=True,
            order_id=str(order_id) if order_id is not None else None,
            message=WITHDRAW_SUBMITTED_MESSAGE,
        )

    async def check_network_status(self, coin: str, network: str) -> NetworkStatus:
        networks = await self.list_networks(coin)
        target = next((n for n in networks if n.network == network), None)

        if target is None:
            return NetworkStatus(
                network=network,
                coin=coin,
                status=NetworkState.DISABLED,
                withdraw_enabled=False,
                deposit_enabled=False,
            )

        return NetworkStatus(
            network=target.network,
            coin=target.coin,
            status=target.status,
            withdraw_enabled=target.withdraw_enabled,
            deposit_enabled=target.deposit_enabled,
        )

    async def test_connection(self) -> bool:
        try:
            await self._rest.get_account()
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.info("connection_test_failed", exchange=self.exchange_name, error=str(e))
            return False
        return True

    async def get_withdraw_history(
        self, coin: Optional[str] = None, limit: int = 100
    ) -> List[Dict[str, Any]]:
        return await self._rest.get_withdraw_history(coin=coin, limit=limit)

    async def close(self) -> None:
        await self._rest.close()

    def __repr__(self) -> str:
        """Return string representation."""
        return (
            f"{self.__class__.__name__}(exchange={self.exchange_name}, "
            f"testnet={self._testnet})"
        )
