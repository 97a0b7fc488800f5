"""
Withdrawal recording.

A submitted withdrawal is stored as a pending history row together with an
audit entry. Submission does not call the exchange.
"""

from decimal import Decimal, InvalidOperation
from typing import List, Mapping, Optional

import structlog
from pydantic import BaseModel, ValidationInfo, field_validator

from transnet.models.records import (
    ActivityLogEntry,
    WithdrawalRecord,
    WithdrawalSource,
    WithdrawalStatus,
)
from transnet.portal.access import AuthContext, require_organization
from transnet.portal.errors import NotFoundError
from transnet.storage.postgres_client import PortalStore

logger = structlog.get_logger(__name__)

UNKNOWN = "unknown"

_LABELS = {
    "exchange": "Exchange",
    "coin": "Coin",
    "network": "Network",
    "address": "Address",
}


class WithdrawalRequest(BaseModel):
    """Withdraw form fields."""

    model_config = {"frozen": True, "str_strip_whitespace": True}

    exchange: str
    coin: str
    network: str
    address: str
    amount: Decimal
    memo: Optional[str] = None

    @field_validator("exchange", "coin", "network", "address", mode="before")
    @classmethod
    def required(cls, v: Optional[str], info: ValidationInfo) -> str:
        if v is None or not str(v).strip():
            raise ValueError(f"{_LABELS[info.field_name]} is required")
        return v

    @field_validator("amount", mode="before")
    @classmethod
    def positive_amount(cls, v: object) -> Decimal:
        try:
            amount = Decimal(str(v).strip())
        except (InvalidOperation, ValueError):
            raise ValueError("Amount must be positive")
        if not amount.is_finite() or amount <= 0:
            raise ValueError("Amount must be positive")
        return amount

    @field_validator("memo", mode="before")
    @classmethod
    def blank_memo(cls, v: Optional[str]) -> Optional[str]:
        if v is None or not str(v).strip():
            return None
        return v


class RequestMetadata(BaseModel):
    """Client details recorded in the audit trail."""

    model_config = {"frozen": True, "extra": "forbid"}

    ip_address: str = UNKNOWN
    user_agent: str = UNKNOWN

    @classmethod
    def from_headers(cls, headers: Mapping[str, str]) -> "RequestMetadata":
        """
        Read client details from request headers.

        The address comes from CF-Connecting-IP, then X-Forwarded-For.
        """
        ip_address = headers.get("cf-connecting-ip") or headers.get("x-forwarded-for")
        return cls(
            ip_address=ip_address or UNKNOWN,
            user_agent=headers.get("user-agent") or UNKNOWN,
        )


class WithdrawalRecorder:
    """
    Records withdrawal requests and serves the history.

    Example:
        >>> recorder = WithdrawalRecorder(store)
        >>> record = await recorder.submit(context, request, metadata)
        >>> record.status
        <WithdrawalStatus.PENDING: 'pending'>
    """

    def __init__(self, store: PortalStore, history_limit: int = 50) -> None:
        self.store = store
        self.history_limit = history_limit

    async def submit(
        self,
        context: AuthContext,
        request: WithdrawalRequest,
        metadata: RequestMetadata,
    ) -> WithdrawalRecord:
        """
        Store a pending withdrawal and its audit entry in one transaction.

        Raises:
            OrganizationRequiredError: If the caller has no organization.
        """
        organization = require_organization(context)

        record = WithdrawalRecord(
            organization_id=organization.id,
            initiated_by=context.user.id,
            exchange_name=request.exchange,
            coin=request.coin,
            network=request.network,
            amount=request.amount,
            address=request.address,
            tag=request.memo,
            status=WithdrawalStatus.PENDING,
            source=WithdrawalSource.APP,
        )
        activity = ActivityLogEntry(
            organization_id=organization.id,
            user_id=context.user.id,
            action="withdrawal",
            entity="withdraw_history",
            entity_id=record.id,
            details={
                "exchange": request.exchange,
                "coin": request.coin,
                "network": request.network,
                "amount": format(request.amount, "f"),
                "address": request.address,
            },
            ip_address=metadata.ip_address,
            user_agent=metadata.user_agent,
        )

        return await self.store.record_withdrawal(record, activity)

    async def history(self, context: AuthContext) -> List[WithdrawalRecord]:
        """Latest withdrawals of the current organization, newest first."""
        organization = require_organization(context)
        return await self.store.list_withdrawals(organization.id, limit=self.history_limit)

    async def get(self, context: AuthContext, withdrawal_id: str) -> WithdrawalRecord:
        organization = require_organization(context)
        record = await self.store.get_withdrawal(organization.id, withdrawal_id)
        if record is None:
            raise NotFoundError("Transaction not found")
        return record
