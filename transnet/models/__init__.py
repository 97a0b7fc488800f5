"""
Shared Pydantic data models.

Modules:
    coins: Coins, networks, and balances fetched from exchanges
    withdrawals: Withdrawal parameters and results exchanged with adapters
    records: Rows persisted in PostgreSQL

Example:
    >>> from transnet.models import Balance, Coin, WithdrawParams
    >>> from transnet.models import ExchangeCredential, Organization
"""

from transnet.models.coins import (
    Balance,
    Coin,
    Network,
    NetworkState,
    NetworkStatus,
)
from transnet.models.records import (
    ActivityLogEntry,
    ExchangeCredential,
    Invitation,
    InvitationStatus,
    Membership,
    MembershipRole,
    MembershipStatus,
    Organization,
    SavedWallet,
    User,
    WithdrawalRecord,
    WithdrawalSource,
    WithdrawalStatus,
    new_id,
    utc_now,
)
from transnet.models.withdrawals import WithdrawParams, WithdrawResult

__all__ = [
    # Exchange data
    "Balance",
    "Coin",
    "Network",
    "NetworkState",
    "NetworkStatus",
    "WithdrawParams",
    "WithdrawResult",
    # Records
    "ActivityLogEntry",
    "ExchangeCredential",
    "Invitation",
    "InvitationStatus",
    "Membership",
    "MembershipRole",
    "MembershipStatus",
    "Organization",
    "SavedWallet",
    "User",
    "WithdrawalRecord",
    "WithdrawalSource",
    "WithdrawalStatus",
    "new_id",
    "utc_now",
]
