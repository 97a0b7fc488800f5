"""
Persisted records for the dashboard.

Each model mirrors one PostgreSQL table. Rows are loaded with
``Model.model_validate(dict(record))`` and unknown columns are ignored.

Models:
    User, Organization, Membership, Invitation: tenancy and onboarding
    ExchangeCredential: Exchange API credentials owned by an organization
    SavedWallet: Saved destination address
    WithdrawalRecord: Locally recorded withdrawal request
    ActivityLogEntry: Audit trail entry
"""

import uuid
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


def new_id() -> str:
    """Generate a new primary key."""
    return str(uuid.uuid4())


def utc_now() -> datetime:
    """Return the current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


class MembershipRole(str, Enum):
    """Role of a user inside an organization."""

    OWNER = "owner"
    ADMIN = "admin"
    MEMBER = "member"
    VIEWER = "viewer"


class MembershipStatus(str, Enum):
    """Membership lifecycle state."""

    ACTIVE = "active"
    SUSPENDED = "suspended"
    PENDING = "pending"


class InvitationStatus(str, Enum):
    """
    Invitation lifecycle state.

    Attributes:
        PENDING: Code can still be redeemed
        ACCEPTED: Code was redeemed
        EXPIRED: Code passed its expiry before redemption
        CANCELLED: Owner withdrew the invitation
    """

    PENDING = "pending"
    ACCEPTED = "accepted"
    EXPIRED = "expired"
    CANCELLED = "cancelled"


class WithdrawalStatus(str, Enum):
    """Status of a recorded withdrawal."""

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class WithdrawalSource(str, Enum):
    """Where a withdrawal record originated."""

    APP = "app"
    EXTERNAL = "external"


class _Record(BaseModel):
    model_config = {"frozen": True, "extra": "ignore"}

    id: str = Field(default_factory=new_id)
    created_at: datetime = Field(default_factory=utc_now)


class User(_Record):
    """Dashboard user account."""

    username: str = Field(..., min_length=1)
    email: str = Field(..., min_length=1)
    password_hash: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    current_organization_id: Optional[str] = None
    is_active: bool = True
    last_login_at: Optional[datetime] = None
    updated_at: datetime = Field(default_factory=utc_now)

    @property
    def display_name(self) -> str:
        """First and last name, falling back to the username."""
        full = " ".join(p for p in (self.first_name, self.last_name) if p)
        return full or self.username


class Organization(_Record):
    """Tenant owning credentials, wallets, and history."""

    name: str = Field(..., min_length=1)
    slug: str = Field(..., pattern=r"^[a-z0-9-]+$")
    description: Optional[str] = None
    owner_id: str
    is_personal: bool = False
    updated_at: datetime = Field(default_factory=utc_now)


class Membership(_Record):
    """Link between a user and an organization."""

    user_id: str
    organization_id: str
    role: MembershipRole = MembershipRole.MEMBER
    status: MembershipStatus = MembershipStatus.ACTIVE
    joined_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


class Invitation(_Record):
    """
    Invitation code for joining an organization.

    The token is the invitation code users paste into the join form.
    """

    organization_id: str
    invited_by: str
    email: str
    role: MembershipRole = MembershipRole.MEMBER
    token: str = Field(..., min_length=1)
    status: InvitationStatus = InvitationStatus.PENDING
    expires_at: datetime
    accepted_at: Optional[datetime] = None
    accepted_by: Optional[str] = None
    updated_at: datetime = Field(default_factory=utc_now)

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        """Return True when the expiry time has passed."""
        return self.expires_at < (now or utc_now())


class ExchangeCredential(_Record):
    """
    API credentials for one exchange, owned by an organization.

    Attributes:
        exchange_name: Exchange identifier as entered (matched case-insensitively).
        is_active: Whether the row participates in aggregation.
        is_valid: Result of the most recent connection test.
        last_validation_at: Time of the most recent connection test.
        validation_error: Message from the most recent failed test.
    """

    organization_id: str
    exchange_name: str = Field(..., min_length=1)
    api_key: Optional[str] = None
    api_secret: Optional[str] = None
    passphrase: Optional[str] = None
    testnet: bool = False
    is_active: bool = True
    is_valid: bool = False
    last_validation_at: Optional[datetime] = None
    validation_error: Optional[str] = None
    created_by: Optional[str] = None
    updated_by: Optional[str] = None
    updated_at: datetime = Field(default_factory=utc_now)

    @property
    def has_credentials(self) -> bool:
        """True when both key and secret are present."""
        return bool(self.api_key) and bool(self.api_secret)

    def __repr__(self) -> str:
        return (
            f"ExchangeCredential(id={self.id}, exchange={self.exchange_name}, "
            f"active={self.is_active}, valid={self.is_valid})"
        )


class SavedWallet(_Record):
    """Saved withdrawal destination."""

    organization_id: str
    created_by: Optional[str] = None
    label: str = Field(..., min_length=1)
    address: str = Field(..., min_length=1)
    coin: str = Field(..., min_length=1)
    network: str = Field(..., min_length=1)
    exchange: str = Field(..., min_length=1)
    description: Optional[str] = None
    is_shared: bool = True
    updated_at: datetime = Field(default_factory=utc_now)


class WithdrawalRecord(_Record):
    """
    Locally recorded withdrawal request.

    Records are written with status pending. Nothing in the application
    transitions them further.
    """

    organization_id: str
    initiated_by: Optional[str] = None
    exchange_name: str
    coin: str
    network: str
    amount: Decimal
    address: str
    tag: Optional[str] = None
    status: WithdrawalStatus = WithdrawalStatus.PENDING
    tx_id: Optional[str] = None
    fee: Optional[Decimal] = None
    exchange_order_id: Optional[str] = None
    error: Optional[str] = None
    source: WithdrawalSource = WithdrawalSource.APP
    notes: Optional[str] = None
    updated_at: datetime = Field(default_factory=utc_now)


class ActivityLogEntry(_Record):
    """Audit trail entry."""

    organization_id: Optional[str] = None
    user_id: Optional[str] = None
    action: str
    entity: str
    entity_id: Optional[str] = None
    details: Dict[str, Any] = Field(default_factory=dict)
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
