"""
Exchange aggregator for fanning out adapter calls across an organization.

Every dashboard view that shows exchange data follows one pattern: walk the
organization's credential rows, skip rows that cannot be used, build an
adapter per row, call it, tag the results with the row's exchange name, and
collect failures into an error map keyed by exchange name. A failing
exchange never hides the results of the others.

Classes:
    ExchangeAggregator: Fan-out and merge over credential rows
    BalancesResult: Merged balances plus error map
    WithdrawFormData: Coins, balances, and usable exchanges for the withdraw form
    ExchangeOption: Exchange choice offered in forms
    Page: One page of a list
"""

import asyncio
import math
from typing import Any, Dict, List, Optional, Sequence

import structlog
from pydantic import BaseModel, Field

from transnet.adapters.registry import ExchangeRegistry
from transnet.interfaces.exchange_adapter import ExchangeAdapter
from transnet.models.coins import Balance, Coin, Network
from transnet.models.records import ExchangeCredential

logger = structlog.get_logger(__name__)


class ExchangeOption(BaseModel):
    """Exchange choice offered in a form."""

    model_config = {"frozen": True, "extra": "forbid"}

    name: str
    display_name: str


class BalancesResult(BaseModel):
    """
    Merged balances across exchanges.

    Attributes:
        balances: Non-zero balances tagged with their exchange, sorted by
            total descending (stable for equal totals).
        errors: Exchange name to error message for exchanges that failed.
    """

    model_config = {"frozen": True, "extra": "forbid"}

    balances: List[Balance] = Field(default_factory=list)
    errors: Dict[str, str] = Field(default_factory=dict)


class WithdrawFormData(BaseModel):
    """Data needed to render the withdraw form."""

    model_config = {"frozen": True, "extra": "forbid"}

    coins: List[Coin] = Field(default_factory=list)
    balances: List[Balance] = Field(default_factory=list)
    errors: Dict[str, str] = Field(default_factory=dict)
    available_exchanges: List[ExchangeOption] = Field(default_factory=list)


class Page(BaseModel):
    """
    One page of a list.

    Attributes:
        items: Items on this page.
        page: 1-based page number.
        page_size: Maximum items per page.
        total_items: Items across all pages.
        total_pages: ceil(total_items / page_size).
    """

    model_config = {"frozen": True, "extra": "forbid"}

    items: List[Any]
    page: int
    page_size: int
    total_items: int
    total_pages: int

    @property
    def has_previous(self) -> bool:
        return self.page > 1

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages


def paginate(items: Sequence[Any], page: int, page_size: int) -> Page:
    """
    Slice a list into one page.

    Pages below 1 are clamped to 1. Pages past the end are empty.

    Example:
        >>> page = paginate(list(range(120)), page=3, page_size=50)
        >>> len(page.items), page.total_pages
        (20, 3)
    """
    page = max(page, 1)
    start = (page - 1) * page_size
    return Page(
        items=list(items[start:start + page_size]),
        page=page,
        page_size=page_size,
        total_items=len(items),
        total_pages=math.ceil(len(items) / page_size) if items else 0,
    )


def is_usable(config: ExchangeCredential, require_valid: bool) -> bool:
    """
    Decide whether a credential row may be used for exchange calls.

    Args:
        config: Credential row.
        require_valid: Also require the last connection test to have passed.
    """
    if not config.is_active or not config.has_credentials:
        return False
    if require_valid and not config.is_valid:
        return False
    return True


class ExchangeAggregator:
    """
    Fans adapter calls out over an organization's credential rows.

    Rows are processed sequentially. Each row's failure is caught and
    recorded under its exchange name.

    Example:
        >>> aggregator = ExchangeAggregator(registry)
        >>> result = await aggregator.collect_balances(configs)
        >>> if result.errors:
        ...     print(f"Failed: {list(result.errors)}")
    """

    def __init__(self, registry: ExchangeRegistry) -> None:
        self.registry = registry

    def _client_for(self, config: ExchangeCredential) -> ExchangeAdapter:
        return self.registry.create_client(
            config.exchange_name,
            config.api_key or "",
            config.api_secret or "",
            passphrase=config.passphrase,
            testnet=config.testnet,
        )

    async def collect_balances(
        self, configs: Sequence[ExchangeCredential]
    ) -> BalancesResult:
        """
        Merge balances across all usable, validated credential rows.

        Args:
            configs: Credential rows of one organization.

        Returns:
            BalancesResult: Sorted balances and the error map.
        """
        balances: List[Balance] = []
        errors: Dict[str, str] = {}

        for config in configs:
            if not is_usable(config, require_valid=True):
                continue

            try:
                async with self._client_for(config) as client:
                    fetched = await client.get_balance()
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.warning(
                    "balance_fetch_failed",
                    exchange=config.exchange_name,
                    config_id=config.id,
                    error=str(e),
                )
                errors[config.exchange_name] = str(e) or type(e).__name__
                continue

            balances.extend(
                balance.tagged(config.exchange_name)
                for balance in fetched
                if balance.total > 0
            )

        balances.sort(key=lambda b: b.total, reverse=True)

        logger.debug(
            "balances_aggregated",
            exchanges=len(configs),
            balances=len(balances),
            errors=len(errors),
        )
        return BalancesResult(balances=balances, errors=errors)

    async def collect_withdraw_data(
        self, configs: Sequence[ExchangeCredential]
    ) -> WithdrawFormData:
        """
        Gather coins and balances for the withdraw form.

        Unlike collect_balances, rows are not required to have passed a
        connection test. Per exchange, coins and balances are fetched
        concurrently.

        Args:
            configs: Credential rows of one organization.

        Returns:
            WithdrawFormData: Tagged coins and balances, error map, and the
            exchanges that were attempted.
        """
        coins: List[Coin] = []
        balances: List[Balance] = []
        errors: Dict[str, str] = {}
        available: List[ExchangeOption] = []

        for config in configs:
            if not is_usable(config, require_valid=False):
                continue

            available.append(
                ExchangeOption(
                    name=config.exchange_name,
                    display_name=self.registry.display_name(config.exchange_name),
                )
            )

            try:
                async with self._client_for(config) as client:
                    # Both calls settle before the adapter closes.
                    fetched_coins, fetched_balances = await asyncio.gather(
                        client.list_coins(), client.get_balance(), return_exceptions=True
                    )
                for outcome in (fetched_coins, fetched_balances):
                    if isinstance(outcome, BaseException):
                        raise outcome
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.warning(
                    "withdraw_data_fetch_failed",
                    exchange=config.exchange_name,
                    config_id=config.id,
                    error=str(e),
                )
                errors[config.exchange_name] = str(e) or type(e).__name__
                continue

            coins.extend(
                coin.model_copy(update={"exchange": config.exchange_name})
                for coin in fetched_coins
            )
            balances.extend(balance.tagged(config.exchange_name) for balance in fetched_balances)

        return WithdrawFormData(
            coins=coins,
            balances=balances,
            errors=errors,
            available_exchanges=available,
        )

    async def list_coins(self, config: ExchangeCredential) -> List[Coin]:
        """
        Coins of one exchange, tagged.

        Raises:
            ExchangeError: If the exchange is unsupported or the call fails.
        """
        async with self._client_for(config) as client:
            coins = await client.list_coins()
        return [c.model_copy(update={"exchange": config.exchange_name}) for c in coins]

    async def list_networks(self, config: ExchangeCredential, coin: str) -> List[Network]:
        """
        Networks of one coin on one exchange, tagged.

        Raises:
            ExchangeError: If the exchange is unsupported or the call fails.
        """
        async with self._client_for(config) as client:
            networks = await client.list_networks(coin)
        return [n.model_copy(update={"exchange": config.exchange_name}) for n in networks]

    async def coin_balance(
        self, config: ExchangeCredential, coin: str
    ) -> Optional[Balance]:
        """
        Balance of one coin on one exchange, or None when it is zero.

        Raises:
            ExchangeError: If the exchange is unsupported or the call fails.
        """
        async with self._client_for(config) as client:
            balances = await client.get_balance(coin)
        for balance in balances:
            if balance.coin == coin:
                return balance.tagged(config.exchange_name)
        return None
