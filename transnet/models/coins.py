"""
Coin, network, and balance models.

These models describe ephemeral exchange data: they are fetched from the
exchange on every request and never persisted. All amounts use Decimal.

Models:
    Coin: Withdrawable asset with its network identifiers
    Network: One transfer network of a coin
    NetworkState: Enum for network availability
    NetworkStatus: Compact availability summary of a network
    Balance: Free and locked holdings of a coin
"""

from decimal import Decimal
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, computed_field


class NetworkState(str, Enum):
    """
    Enumeration for network availability.

    Attributes:
        ACTIVE: Deposits and withdrawals are both enabled
        MAINTENANCE: Network temporarily unavailable
        DISABLED: Deposits or withdrawals are suspended
    """

    ACTIVE = "active"
    MAINTENANCE = "maintenance"
    DISABLED = "disabled"


class Coin(BaseModel):
    """
    Withdrawable asset on an exchange.

    Attributes:
        symbol: Asset ticker (e.g., "USDT").
        name: Human-readable name.
        networks: Network identifiers the asset can be withdrawn on.
        precision: Decimal places used for amounts.
        min_withdraw: Smallest minimum withdrawal across networks.
        max_withdraw: Largest maximum withdrawal across networks.
        withdraw_enabled: True if any network allows withdrawal.
        trading_enabled: True if any trading symbol referencing it is live.
        exchange: Exchange that reported the coin.

    Example:
        >>> coin = Coin(
        ...     symbol="USDT",
        ...     name="TetherUS",
        ...     networks=["ETH", "TRX"],
        ...     min_withdraw=Decimal("10"),
        ...     max_withdraw=Decimal("1000000"),
        ...     withdraw_enabled=True,
        ...     trading_enabled=True,
        ... )
    """

    model_config = {"frozen": True, "extra": "forbid"}

    symbol: str = Field(..., description="Asset ticker", min_length=1)
    name: str = Field(..., description="Human-readable asset name")
    networks: List[str] = Field(
        default_factory=list,
        description="Network identifiers available for withdrawal",
    )
    precision: int = Field(default=8, description="Amount precision", ge=0)
    min_withdraw: Decimal = Field(default=Decimal("0"), ge=0)
    max_withdraw: Decimal = Field(default=Decimal("0"), ge=0)
    withdraw_enabled: bool = Field(default=False)
    trading_enabled: bool = Field(default=False)
    exchange: Optional[str] = Field(
        default=None,
        description="Exchange identifier the coin was fetched from",
    )


class Network(BaseModel):
    """
    Transfer network of a coin on one exchange.

    Attributes:
        network: Exchange network identifier (e.g., "TRX").
        coin: Coin symbol.
        name: Display name.
        withdraw_enabled: Whether withdrawals are open.
        deposit_enabled: Whether deposits are open.
        withdraw_fee: Flat withdrawal fee in coin units.
        min_withdraw: Minimum withdrawal amount.
        max_withdraw: Maximum withdrawal amount.
        precision: Amount precision on this network.
        memo_required: Whether a memo/tag must accompany the address.
        memo_name: Label used for the memo field.
        status: Derived availability.
        estimated_arrival_minutes: Expected confirmation time, if known.
    """

    model_config = {"frozen": True, "extra": "forbid"}

    network: str = Field(..., min_length=1)
    coin: str = Field(..., min_length=1)
    name: str
    withdraw_enabled: bool = False
    deposit_enabled: bool = False
    withdraw_fee: Decimal = Field(default=Decimal("0"), ge=0)
    min_withdraw: Decimal = Field(default=Decimal("0"), ge=0)
    max_withdraw: Decimal = Field(default=Decimal("0"), ge=0)
    precision: int = Field(default=8, ge=0)
    memo_required: bool = False
    memo_name: Optional[str] = None
    status: NetworkState = NetworkState.DISABLED
    estimated_arrival_minutes: Optional[int] = None
    exchange: Optional[str] = None


class NetworkStatus(BaseModel):
    """Availability summary for a coin/network pair."""

    model_config = {"frozen": True, "extra": "forbid"}

    network: str
    coin: str
    status: NetworkState
    withdraw_enabled: bool
    deposit_enabled: bool


class Balance(BaseModel):
    """
    Holdings of a coin on one exchange.

    The total is always free + locked.

    Example:
        >>> balance = Balance(coin="BTC", free=Decimal("1"), locked=Decimal("0.5"))
        >>> balance.total
        Decimal('1.5')
    """

    model_config = {"frozen": True, "extra": "forbid"}

    coin: str = Field(..., min_length=1)
    free: Decimal = Field(default=Decimal("0"), ge=0)
    locked: Decimal = Field(default=Decimal("0"), ge=0)
    exchange: Optional[str] = Field(
        default=None,
        description="Exchange identifier the balance was fetched from",
    )

    @computed_field  # type: ignore[misc]
    @property
    def total(self) -> Decimal:
        """Free plus locked amount."""
        return self.free + self.locked

    def tagged(self, exchange: str) -> "Balance":
        """Return a copy attributed to the given exchange."""
        return self.model_copy(update={"exchange": exchange})
