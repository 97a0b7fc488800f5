"""
Saved withdrawal destinations.
"""

from typing import List, Optional

import structlog
from pydantic import BaseModel, ValidationInfo, field_validator

from transnet.models.records import SavedWallet
from transnet.portal.access import AuthContext, require_organization
from transnet.portal.errors import NotFoundError
from transnet.storage.postgres_client import PortalStore

logger = structlog.get_logger(__name__)

_LABELS = {
    "label": "Label",
    "coin": "Coin",
    "network": "Network",
    "address": "Address",
    "exchange": "Exchange",
}


class WalletForm(BaseModel):
    """Wallet form fields."""

    model_config = {"frozen": True, "str_strip_whitespace": True}

    label: str
    coin: str
    network: str
    address: str
    exchange: str
    description: Optional[str] = None

    @field_validator("label", "coin", "network", "address", "exchange", mode="before")
    @classmethod
    def required(cls, v: Optional[str], info: ValidationInfo) -> str:
        if v is None or not str(v).strip():
            raise ValueError(f"{_LABELS[info.field_name]} is required")
        return v

    @field_validator("description", mode="before")
    @classmethod
    def blank_description(cls, v: Optional[str]) -> Optional[str]:
        if v is None or not str(v).strip():
            return None
        return v


class WalletService:
    """Organization-scoped wallet book."""

    def __init__(self, store: PortalStore) -> None:
        self.store = store

    async def create(self, context: AuthContext, form: WalletForm) -> SavedWallet:
        organization = require_organization(context)
        wallet = SavedWallet(
            organization_id=organization.id,
            created_by=context.user.id,
            label=form.label,
            coin=form.coin,
            network=form.network,
            address=form.address,
            exchange=form.exchange,
            description=form.description,
        )
        await self.store.insert_wallet(wallet)
        logger.info(
            "wallet_saved",
            wallet_id=wallet.id,
            organization_id=organization.id,
            coin=wallet.coin,
            network=wallet.network,
        )
        return wallet

    async def list_wallets(self, context: AuthContext) -> List[SavedWallet]:
        """Wallets of the current organization, newest first."""
        organization = require_organization(context)
        return await self.store.list_wallets(organization.id)

    async def get(self, context: AuthContext, wallet_id: str) -> SavedWallet:
        organization = require_organization(context)
        wallet = await self.store.get_wallet(organization.id, wallet_id)
        if wallet is None:
            raise NotFoundError("Wallet not found")
        return wallet

    async def delete(self, context: AuthContext, wallet_id: str) -> None:
        organization = require_organization(context)
        if not await self.store.delete_wallet(organization.id, wallet_id):
            raise NotFoundError("Wallet not found")
        logger.info("wallet_deleted", wallet_id=wallet_id, organization_id=organization.id)
