"""
Exchange credential management.

Credentials are saved only after a successful connection test, so every
stored row starts out valid. Stored rows can be re-tested later, which
updates their validation state in place.
"""

import asyncio
from typing import List, Optional

import structlog
from pydantic import BaseModel, ValidationInfo, field_validator

from transnet.adapters.errors import ExchangeError
from transnet.adapters.registry import ExchangeRegistry
from transnet.models.records import ExchangeCredential, utc_now
from transnet.portal.access import AuthContext, require_organization
from transnet.portal.errors import CredentialValidationError, NotFoundError
from transnet.storage.postgres_client import PortalStore

logger = structlog.get_logger(__name__)

CONNECTION_FAILED_MESSAGE = "Failed to connect to exchange with provided credentials"
TEST_FAILED_MESSAGE = "Connection test failed"

_LABELS = {
    "exchange_name": "Exchange name",
    "api_key": "API key",
    "api_secret": "API secret",
}


def checkbox(value: object, default: bool) -> bool:
    """
    Interpret an HTML checkbox value.

    Browsers send "on" for checked boxes and nothing for unchecked ones.
    Forms that need to tell the two apart send a hidden "off" first.
    """
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("on", "true", "1", "yes")


class CredentialForm(BaseModel):
    """Exchange credential form fields."""

    model_config = {"frozen": True, "str_strip_whitespace": True}

    exchange_name: str
    api_key: str
    api_secret: str
    passphrase: Optional[str] = None
    testnet: bool = False
    is_active: bool = True

    @field_validator("exchange_name", "api_key", "api_secret", mode="before")
    @classmethod
    def required(cls, v: Optional[str], info: ValidationInfo) -> str:
        if v is None or not str(v).strip():
            raise ValueError(f"{_LABELS[info.field_name]} is required")
        return v

    @field_validator("exchange_name")
    @classmethod
    def lowercase_exchange(cls, v: str) -> str:
        return v.lower()

    @field_validator("passphrase", mode="before")
    @classmethod
    def blank_passphrase(cls, v: Optional[str]) -> Optional[str]:
        if v is None or not str(v).strip():
            return None
        return v

    @field_validator("testnet", mode="before")
    @classmethod
    def testnet_checkbox(cls, v: object) -> bool:
        return checkbox(v, default=False)

    @field_validator("is_active", mode="before")
    @classmethod
    def active_checkbox(cls, v: object) -> bool:
        return checkbox(v, default=True)


class ConnectionTestResult(BaseModel):
    """Outcome of re-testing stored credentials."""

    model_config = {"frozen": True, "extra": "forbid"}

    success: bool
    error: Optional[str] = None


class CredentialService:
    """
    Organization-scoped CRUD for exchange credentials.

    Example:
        >>> service = CredentialService(store, registry)
        >>> config = await service.save(context, CredentialForm(
        ...     exchange_name="binance", api_key="k", api_secret="s"))
        >>> config.is_valid
        True
    """

    def __init__(self, store: PortalStore, registry: ExchangeRegistry) -> None:
        self.store = store
        self.registry = registry

    async def _check_connection(
        self,
        exchange_name: str,
        api_key: str,
        api_secret: str,
        passphrase: Optional[str],
        testnet: bool,
    ) -> bool:
        async with self.registry.create_client(
            exchange_name, api_key, api_secret, passphrase=passphrase, testnet=testnet
        ) as client:
            return await client.test_connection()

    async def list_configs(self, context: AuthContext) -> List[ExchangeCredential]:
        """Credential rows of the current organization, most recently updated first."""
        organization = require_organization(context)
        return await self.store.list_exchange_configs(organization.id)

    async def find_config(
        self, context: AuthContext, exchange_name: str, require_valid: bool = False
    ) -> Optional[ExchangeCredential]:
        """
        Active credential row for an exchange name, matched case-insensitively.

        A row whose last connection test passed is preferred over one that
        failed. With ``require_valid`` only such rows are returned.
        """
        wanted = exchange_name.strip().lower()
        matches = [
            config
            for config in await self.list_configs(context)
            if config.is_active and config.exchange_name.lower() == wanted
        ]
        for config in matches:
            if config.is_valid:
                return config
        if require_valid or not matches:
            return None
        return matches[0]

    async def get(self, context: AuthContext, config_id: str) -> ExchangeCredential:
        organization = require_organization(context)
        config = await self.store.get_exchange_config(organization.id, config_id)
        if config is None:
            raise NotFoundError("Exchange configuration not found")
        return config

    async def save(
        self,
        context: AuthContext,
        form: CredentialForm,
        config_id: Optional[str] = None,
    ) -> ExchangeCredential:
        """
        Test the credentials and insert or update the row.

        Args:
            context: Caller context with a current organization.
            form: Submitted credentials.
            config_id: Row to update; a new row is inserted when None.

        Raises:
            OrganizationRequiredError: If the caller has no organization.
            CredentialValidationError: If the exchange is unsupported or the
                connection test fails. Nothing is persisted.
            NotFoundError: If config_id does not exist in the organization.
        """
        organization = require_organization(context)

        existing = None
        if config_id is not None:
            existing = await self.store.get_exchange_config(organization.id, config_id)
            if existing is None:
                raise NotFoundError("Exchange configuration not found")

        try:
            connected = await self._check_connection(
                form.exchange_name,
                form.api_key,
                form.api_secret,
                form.passphrase,
                form.testnet,
            )
        except asyncio.CancelledError:
            raise
        except ExchangeError as e:
            logger.info(
                "credential_check_failed",
                exchange=form.exchange_name,
                organization_id=organization.id,
                error=str(e),
            )
            raise CredentialValidationError(f"Invalid credentials: {e}") from e

        if not connected:
            logger.info(
                "credential_check_failed",
                exchange=form.exchange_name,
                organization_id=organization.id,
                error=CONNECTION_FAILED_MESSAGE,
            )
            raise CredentialValidationError(
                f"Invalid credentials: {CONNECTION_FAILED_MESSAGE}"
            )

        now = utc_now()
        values = {
            "exchange_name": form.exchange_name,
            "api_key": form.api_key,
            "api_secret": form.api_secret,
            "passphrase": form.passphrase,
            "testnet": form.testnet,
            "is_active": form.is_active,
            "is_valid": True,
            "last_validation_at": now,
            "validation_error": None,
            "updated_by": context.user.id,
            "updated_at": now,
        }

        if existing is None:
            credential = ExchangeCredential(
                organization_id=organization.id,
                created_by=context.user.id,
                created_at=now,
                **values,
            )
            return await self.store.insert_exchange_config(credential)

        updated = await self.store.update_exchange_config(
            existing.model_copy(update=values)
        )
        if updated is None:
            raise NotFoundError("Exchange configuration not found")
        logger.info(
            "exchange_config_updated",
            config_id=updated.id,
            organization_id=organization.id,
            exchange=updated.exchange_name,
        )
        return updated

    async def test(self, context: AuthContext, config_id: str) -> ConnectionTestResult:
        """
        Re-test stored credentials and record the outcome on the row.

        A false result is recorded as "Connection test failed"; an error is
        recorded with its message.
        """
        config = await self.get(context, config_id)

        error: Optional[str]
        try:
            connected = await self._check_connection(
                config.exchange_name,
                config.api_key or "",
                config.api_secret or "",
                config.passphrase,
                config.testnet,
            )
            error = None if connected else TEST_FAILED_MESSAGE
        except asyncio.CancelledError:
            raise
        except ExchangeError as e:
            connected = False
            error = str(e)

        await self.store.update_validation(
            config.organization_id, config.id, connected, utc_now(), error
        )
        logger.info(
            "exchange_config_tested",
            config_id=config.id,
            exchange=config.exchange_name,
            valid=connected,
        )
        return ConnectionTestResult(success=connected, error=error)

    async def delete(self, context: AuthContext, config_id: str) -> None:
        """
        Delete a credential row of the current organization.

        Raises:
            NotFoundError: If the row does not exist in the organization.
        """
        organization = require_organization(context)
        if not await self.store.delete_exchange_config(organization.id, config_id):
            raise NotFoundError("Exchange configuration not found")
        logger.info(
            "exchange_config_deleted", config_id=config_id, organization_id=organization.id
        )
