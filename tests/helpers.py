"""
Test doubles: an in-memory PortalStore and a scriptable exchange adapter.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple, Type

from transnet.adapters.registry import ExchangeRegistry
from transnet.config.models import (
    AdvertisedExchange,
    AppConfig,
    CleanupConfig,
    ExchangeConfig,
    RestEndpoints,
)
from transnet.interfaces.exchange_adapter import ExchangeAdapter
from transnet.models.coins import Balance, Coin, Network, NetworkState, NetworkStatus
from transnet.models.records import (
    ActivityLogEntry,
    ExchangeCredential,
    Invitation,
    InvitationStatus,
    Membership,
    MembershipStatus,
    Organization,
    SavedWallet,
    User,
    WithdrawalRecord,
    utc_now,
)
from transnet.models.withdrawals import WithdrawParams, WithdrawResult


class FakeStore:
    """In-memory stand-in for PortalStore with the same coroutine methods."""

    def __init__(self) -> None:
        self.users: Dict[str, User] = {}
        self.organizations: Dict[str, Organization] = {}
        self.memberships: Dict[str, Membership] = {}
        self.invitations: Dict[str, Invitation] = {}
        self.exchange_configs: Dict[str, ExchangeCredential] = {}
        self.wallets: Dict[str, SavedWallet] = {}
        self.withdrawals: Dict[str, WithdrawalRecord] = {}
        self.activity: List[ActivityLogEntry] = []
        self.connected = False
        self.schema_created = False
        self.fail_next: Optional[Exception] = None

    def _maybe_fail(self) -> None:
        if self.fail_next is not None:
            error, self.fail_next = self.fail_next, None
            raise error

    # lifecycle

    async def connect(self) -> None:
        self.connected = True

    async def disconnect(self) -> None:
        self.connected = False

    async def ping(self) -> bool:
        return self.connected

    async def ensure_schema(self) -> None:
        self.schema_created = True

    # users

    async def create_user(self, user: User) -> User:
        self.users[user.id] = user
        return user

    async def get_user(self, user_id: str) -> Optional[User]:
        return self.users.get(user_id)

    async def get_user_by_username(self, username: str) -> Optional[User]:
        return next((u for u in self.users.values() if u.username == username), None)

    async def get_user_by_email(self, email: str) -> Optional[User]:
        return next((u for u in self.users.values() if u.email == email), None)

    async def touch_login(self, user_id: str, at: datetime) -> None:
        user = self.users[user_id]
        self.users[user_id] = user.model_copy(update={"last_login_at": at})

    async def set_current_organization(
        self, user_id: str, organization_id: Optional[str]
    ) -> None:
        user = self.users[user_id]
        self.users[user_id] = user.model_copy(
            update={"current_organization_id": organization_id}
        )

    async def clear_current_organization(self, user_id: str, organization_id: str) -> None:
        user = self.users.get(user_id)
        if user is not None and user.current_organization_id == organization_id:
            await self.set_current_organization(user_id, None)

    # organizations & memberships

    async def create_organization(
        self, organization: Organization, owner_membership: Membership
    ) -> Organization:
        self.organizations[organization.id] = organization
        self.memberships[owner_membership.id] = owner_membership
        return organization

    async def get_organization(self, organization_id: str) -> Optional[Organization]:
        return self.organizations.get(organization_id)

    async def get_organization_by_slug(self, slug: str) -> Optional[Organization]:
        return next((o for o in self.organizations.values() if o.slug == slug), None)

    async def list_user_organizations(
        self, user_id: str
    ) -> List[Tuple[Organization, Membership]]:
        return [
            (self.organizations[m.organization_id], m)
            for m in self.memberships.values()
            if m.user_id == user_id and m.status == MembershipStatus.ACTIVE
        ]

    async def create_membership(self, membership: Membership) -> Membership:
        self.memberships[membership.id] = membership
        return membership

    async def get_membership(
        self, user_id: str, organization_id: str
    ) -> Optional[Membership]:
        return next(
            (
                m
                for m in self.memberships.values()
                if m.user_id == user_id and m.organization_id == organization_id
            ),
            None,
        )

    async def get_membership_by_id(
        self, organization_id: str, membership_id: str
    ) -> Optional[Membership]:
        membership = self.memberships.get(membership_id)
        if membership is None or membership.organization_id != organization_id:
            return None
        return membership

    async def delete_membership(self, organization_id: str, membership_id: str) -> bool:
        if await self.get_membership_by_id(organization_id, membership_id) is None:
            return False
        del self.memberships[membership_id]
        return True

    async def list_members(self, organization_id: str) -> List[Tuple[Membership, User]]:
        return [
            (m, self.users[m.user_id])
            for m in self.memberships.values()
            if m.organization_id == organization_id
        ]

    # invitations

    async def create_invitation(self, invitation: Invitation) -> Invitation:
        self.invitations[invitation.id] = invitation
        return invitation

    async def get_invitation(
        self, organization_id: str, invitation_id: str
    ) -> Optional[Invitation]:
        invitation = self.invitations.get(invitation_id)
        if invitation is None or invitation.organization_id != organization_id:
            return None
        return invitation

    async def get_pending_invitation_by_token(self, token: str) -> Optional[Invitation]:
        return next(
            (
                i
                for i in self.invitations.values()
                if i.token == token and i.status == InvitationStatus.PENDING
            ),
            None,
        )

    async def update_invitation_status(
        self, invitation_id: str, status: InvitationStatus
    ) -> None:
        invitation = self.invitations[invitation_id]
        self.invitations[invitation_id] = invitation.model_copy(update={"status": status})

    async def accept_invitation(
        self, invitation: Invitation, membership: Membership, accepted_at: datetime
    ) -> None:
        self.memberships[membership.id] = membership
        self.invitations[invitation.id] = invitation.model_copy(
            update={
                "status": InvitationStatus.ACCEPTED,
                "accepted_at": accepted_at,
                "accepted_by": membership.user_id,
            }
        )

    async def list_pending_invitations(self, organization_id: str) -> List[Invitation]:
        return [
            i
            for i in self.invitations.values()
            if i.organization_id == organization_id and i.status == InvitationStatus.PENDING
        ]

    async def expire_invitations(self, now: datetime) -> int:
        self._maybe_fail()
        count = 0
        for invitation in list(self.invitations.values()):
            if invitation.status == InvitationStatus.PENDING and invitation.expires_at < now:
                await self.update_invitation_status(invitation.id, InvitationStatus.EXPIRED)
                count += 1
        return count

    async def delete_expired_invitations(self, before: datetime) -> int:
        stale = [
            i.id
            for i in self.invitations.values()
            if i.status == InvitationStatus.EXPIRED and i.expires_at < before
        ]
        for invitation_id in stale:
            del self.invitations[invitation_id]
        return len(stale)

    # exchange configs

    async def list_exchange_configs(self, organization_id: str) -> List[ExchangeCredential]:
        rows = [
            c for c in self.exchange_configs.values() if c.organization_id == organization_id
        ]
        return sorted(rows, key=lambda c: c.updated_at, reverse=True)

    async def get_exchange_config(
        self, organization_id: str, config_id: str
    ) -> Optional[ExchangeCredential]:
        config = self.exchange_configs.get(config_id)
        if config is None or config.organization_id != organization_id:
            return None
        return config

    async def insert_exchange_config(self, credential: ExchangeCredential) -> ExchangeCredential:
        self.exchange_configs[credential.id] = credential
        return credential

    async def update_exchange_config(
        self, credential: ExchangeCredential
    ) -> Optional[ExchangeCredential]:
        if await self.get_exchange_config(credential.organization_id, credential.id) is None:
            return None
        self.exchange_configs[credential.id] = credential
        return credential

    async def update_validation(
        self,
        organization_id: str,
        config_id: str,
        is_valid: bool,
        validated_at: datetime,
        error: Optional[str],
    ) -> None:
        config = await self.get_exchange_config(organization_id, config_id)
        if config is None:
            return
        self.exchange_configs[config_id] = config.model_copy(
            update={
                "is_valid": is_valid,
                "last_validation_at": validated_at,
                "validation_error": error,
                "updated_at": validated_at,
            }
        )

    async def delete_exchange_config(self, organization_id: str, config_id: str) -> bool:
        if await self.get_exchange_config(organization_id, config_id) is None:
            return False
        del self.exchange_configs[config_id]
        return True

    # wallets

    async def list_wallets(self, organization_id: str) -> List[SavedWallet]:
        rows = [w for w in self.wallets.values() if w.organization_id == organization_id]
        return sorted(rows, key=lambda w: w.created_at, reverse=True)

    async def get_wallet(self, organization_id: str, wallet_id: str) -> Optional[SavedWallet]:
        wallet = self.wallets.get(wallet_id)
        if wallet is None or wallet.organization_id != organization_id:
            return None
        return wallet

    async def insert_wallet(self, wallet: SavedWallet) -> SavedWallet:
        self.wallets[wallet.id] = wallet
        return wallet

    async def delete_wallet(self, organization_id: str, wallet_id: str) -> bool:
        if await self.get_wallet(organization_id, wallet_id) is None:
            return False
        del self.wallets[wallet_id]
        return True

    # withdrawals & activity

    async def record_withdrawal(
        self, record: WithdrawalRecord, activity: ActivityLogEntry
    ) -> WithdrawalRecord:
        self._maybe_fail()
        self.withdrawals[record.id] = record
        self.activity.append(activity)
        return record

    async def list_withdrawals(
        self, organization_id: str, limit: int = 50
    ) -> List[WithdrawalRecord]:
        rows = [r for r in self.withdrawals.values() if r.organization_id == organization_id]
        return sorted(rows, key=lambda r: r.created_at, reverse=True)[:limit]

    async def get_withdrawal(
        self, organization_id: str, withdrawal_id: str
    ) -> Optional[WithdrawalRecord]:
        record = self.withdrawals.get(withdrawal_id)
        if record is None or record.organization_id != organization_id:
            return None
        return record

    async def insert_activity(self, entry: ActivityLogEntry) -> ActivityLogEntry:
        self.activity.append(entry)
        return entry

    async def list_activity(
        self, organization_id: str, limit: int = 50
    ) -> List[ActivityLogEntry]:
        rows = [a for a in self.activity if a.organization_id == organization_id]
        return list(reversed(rows))[:limit]


@dataclass
class FakeExchange:
    """Canned data and failure switches shared by every FakeAdapter instance."""

    name: str
    coins: List[Coin] = field(default_factory=list)
    balances: List[Balance] = field(default_factory=list)
    networks: Dict[str, List[Network]] = field(default_factory=dict)
    connection_ok: bool = True
    error: Optional[Exception] = None
    created: List[Dict[str, Any]] = field(default_factory=list)
    closed: int = 0

    def check(self) -> None:
        if self.error is not None:
            raise self.error


def fake_adapter_class(exchange: FakeExchange) -> Type[ExchangeAdapter]:
    """Build an ExchangeAdapter subclass serving the given FakeExchange."""

    class FakeAdapter(ExchangeAdapter):
        def __init__(
            self,
            api_key: str,
            api_secret: str,
            exchange_config: ExchangeConfig,
            passphrase: Optional[str] = None,
            testnet: bool = False,
        ):
            exchange.created.append(
                {"api_key": api_key, "api_secret": api_secret, "testnet": testnet}
            )

        @property
        def exchange_name(self) -> str:
            return exchange.name

        async def list_coins(self) -> List[Coin]:
            exchange.check()
            return list(exchange.coins)

        async def get_balance(self, coin: Optional[str] = None) -> List[Balance]:
            exchange.check()
            return [b for b in exchange.balances if coin is None or b.coin == coin]

        async def list_networks(self, coin: str) -> List[Network]:
            exchange.check()
            return list(exchange.networks.get(coin, []))

        async def withdraw(self, params: WithdrawParams) -> WithdrawResult:
            return WithdrawResult(success=False, error="not supported in tests")

        async def check_network_status(self, coin: str, network: str) -> NetworkStatus:
            return NetworkStatus(
                network=network,
                coin=coin,
                status=NetworkState.DISABLED,
                withdraw_enabled=False,
                deposit_enabled=False,
            )

        async def test_connection(self) -> bool:
            exchange.check()
            return exchange.connection_ok

        async def get_withdraw_history(
            self, coin: Optional[str] = None, limit: int = 100
        ) -> List[Dict[str, Any]]:
            return []

        async def close(self) -> None:
            exchange.closed += 1

    return FakeAdapter


def exchange_config(display_name: str) -> ExchangeConfig:
    return ExchangeConfig(
        display_name=display_name,
        rest=RestEndpoints(base="https://example.invalid", testnet="https://testnet.invalid"),
    )


PASSWORD = "correct-horse"

ADVERTISED = [
    AdvertisedExchange(name="mexc", display_name="MEXC"),
    AdvertisedExchange(name="binance", display_name="Binance"),
    AdvertisedExchange(name="kucoin", display_name="KuCoin"),
]


def build_registry(*exchanges: FakeExchange) -> ExchangeRegistry:
    entries = {
        ex.name: (fake_adapter_class(ex), exchange_config(ex.name.upper()))
        for ex in exchanges
    }
    return ExchangeRegistry(entries, ADVERTISED)


def build_config() -> AppConfig:
    return AppConfig(
        exchanges={
            "binance": exchange_config("Binance"),
            "mexc": exchange_config("MEXC"),
        },
        advertised_exchanges=ADVERTISED,
        cleanup=CleanupConfig(enabled=False),
    )


def usdt_network(network: str = "TRX", withdraw_enabled: bool = True) -> Network:
    return Network(
        network=network,
        coin="USDT",
        name=network,
        withdraw_enabled=withdraw_enabled,
        deposit_enabled=True,
        withdraw_fee=Decimal("1"),
        status=NetworkState.ACTIVE if withdraw_enabled else NetworkState.DISABLED,
    )


def credential(
    organization_id: str,
    exchange_name: str = "binance",
    **overrides: Any,
) -> ExchangeCredential:
    values: Dict[str, Any] = {
        "organization_id": organization_id,
        "exchange_name": exchange_name,
        "api_key": "key-" + exchange_name,
        "api_secret": "secret-" + exchange_name,
        "is_active": True,
        "is_valid": True,
        "updated_at": utc_now(),
    }
    values.update(overrides)
    return ExchangeCredential(**values)
