"""
Async PostgreSQL client for dashboard records.

This module provides the PortalStore, the single repository used by the
application services. Every query touching credentials, wallets, or
history takes the organization id, so rows of one organization are never
visible to another.

Note:
    Amounts are stored as NUMERIC and come back as Decimal.

Example:
    >>> from transnet.config.models import PostgresConnectionConfig
    >>> from transnet.storage.postgres_client import PortalStore
    >>>
    >>> store = PortalStore(PostgresConnectionConfig(url="postgresql://..."))
    >>> await store.connect()
    >>> await store.ensure_schema()
    >>> configs = await store.list_exchange_configs(organization_id)
"""

from __future__ import annotations

import asyncio
import json
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any, AsyncIterator, List, Optional, Tuple, Type, TypeVar

import asyncpg
import structlog
from asyncpg import Connection, Pool, Record
from asyncpg.exceptions import (
    ConnectionDoesNotExistError,
    InterfaceError,
    PostgresError,
    TooManyConnectionsError,
)
from pydantic import BaseModel

from transnet.config.models import PostgresConnectionConfig
from transnet.models.records import (
    ActivityLogEntry,
    ExchangeCredential,
    Invitation,
    InvitationStatus,
    Membership,
    Organization,
    SavedWallet,
    User,
    WithdrawalRecord,
    utc_now,
)
from transnet.storage.schema import SCHEMA_STATEMENTS

logger = structlog.get_logger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


class PostgresClientError(Exception):
    """Base exception for PostgreSQL client errors."""

    pass


class PostgresConnectionException(PostgresClientError):
    """Raised when PostgreSQL connection fails."""

    pass


class PostgresOperationError(PostgresClientError):
    """Raised when a PostgreSQL operation fails."""

    pass


def _to_model(model: Type[ModelT], record: Optional[Record]) -> Optional[ModelT]:
    """Convert an asyncpg record to a model, passing None through."""
    if record is None:
        return None
    return model.model_validate(dict(record))


def _to_models(model: Type[ModelT], records: List[Record]) -> List[ModelT]:
    return [model.model_validate(dict(record)) for record in records]


def _activity_from_record(record: Record) -> ActivityLogEntry:
    data = dict(record)
    details = data.get("details")
    data["details"] = json.loads(details) if details else {}
    return ActivityLogEntry.model_validate(data)


class PortalStore:
    """
    Async PostgreSQL repository for users, organizations, and their data.

    Attributes:
        config: PostgreSQL connection configuration.
        _pool: Connection pool for efficient connection reuse.
        _connected: Whether the client is connected.

    Example:
        >>> store = PortalStore(config)
        >>> await store.connect()
        >>> try:
        ...     user = await store.get_user_by_username("alice")
        ... finally:
        ...     await store.disconnect()
    """

    # Maximum retries for transient errors
    MAX_RETRIES = 3

    # Retry delay in seconds
    RETRY_DELAY = 0.5

    def __init__(self, config: PostgresConnectionConfig) -> None:
        """
        Initialize the store.

        Args:
            config: PostgreSQL connection configuration.
        """
        self.config = config
        self._pool: Optional[Pool] = None
        self._connected: bool = False

        logger.info(
            "postgres_client_initialized",
            url=self._sanitize_url(config.url),
            pool_max_size=config.pool_max_size,
        )

    def _sanitize_url(self, url: str) -> str:
        """Sanitize URL for logging (remove password)."""
        if "@" in url:
            parts = url.split("@")
            if ":" in parts[0]:
                user_part = parts[0].rsplit(":", 1)[0]
                return f"{user_part}:***@{parts[1]}"
        return url

    @property
    def is_connected(self) -> bool:
        """True if the connection pool is open."""
        return self._connected and self._pool is not None

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    async def connect(self) -> None:
        """
        Establish connection pool to PostgreSQL.

        Raises:
            PostgresConnectionException: If connection fails.
        """
        if self._connected:
            logger.warning("postgres_already_connected")
            return

        try:
            self._pool = await asyncpg.create_pool(
                dsn=self.config.url,
                min_size=self.config.pool_min_size,
                max_size=self.config.pool_max_size,
                command_timeout=self.config.command_timeout,
                init=self._init_connection,
            )

            async with self._pool.acquire() as conn:
                await conn.fetchval("SELECT 1")

            self._connected = True
            logger.info("postgres_connected", url=self._sanitize_url(self.config.url))

        except (PostgresError, OSError, asyncio.TimeoutError) as e:
            self._connected = False
            logger.error(
                "postgres_connection_failed",
                url=self._sanitize_url(self.config.url),
                error=str(e),
            )
            raise PostgresConnectionException(f"Failed to connect to PostgreSQL: {e}") from e

    async def _init_connection(self, conn: Connection) -> None:
        """Set timezone to UTC for consistent timestamps."""
        await conn.execute("SET timezone = 'UTC'")

    async def disconnect(self) -> None:
        """
        Close PostgreSQL connection pool and release resources.

        Safe to call multiple times.
        """
        if self._pool is not None:
            try:
                await self._pool.close()
            except (PostgresError, OSError) as e:
                logger.warning("postgres_close_error", error=str(e))
            finally:
                self._pool = None

        self._connected = False
        logger.info("postgres_disconnected")

    async def ping(self) -> bool:
        """
        Check PostgreSQL connection health.

        Returns:
            bool: True if PostgreSQL responds, False otherwise.
        """
        if not self._pool:
            return False

        try:
            async with self._pool.acquire() as conn:
                await conn.fetchval("SELECT 1")
            return True
        except (PostgresError, OSError, asyncio.TimeoutError) as e:
            logger.warning("postgres_ping_failed", error=str(e))
            return False

    async def ensure_schema(self) -> None:
        """Create tables and indexes if they do not exist."""

        async def _create() -> None:
            async with self._acquire_connection() as conn:
                async with conn.transaction():
                    for statement in SCHEMA_STATEMENTS:
                        await conn.execute(statement)

        await self._execute_with_retry("ensure_schema", _create)
        logger.info("postgres_schema_ready", tables=8)

    @asynccontextmanager
    async def _acquire_connection(self) -> AsyncIterator[Connection]:
        """
        Acquire a connection from the pool with error handling.

        Yields:
            Connection: asyncpg connection from the pool.

        Raises:
            PostgresConnectionException: If not connected or pool exhausted.
        """
        if not self._connected or self._pool is None:
            raise PostgresConnectionException("PostgreSQL client is not connected")

        try:
            async with self._pool.acquire() as conn:
                yield conn
        except TooManyConnectionsError as e:
            logger.error("postgres_pool_exhausted", error=str(e))
            raise PostgresConnectionException(f"Connection pool exhausted: {e}") from e
        except (ConnectionDoesNotExistError, InterfaceError) as e:
            logger.error("postgres_connection_lost", error=str(e))
            raise PostgresConnectionException(f"Connection lost: {e}") from e

    async def _execute_with_retry(
        self,
        operation: str,
        func: Any,
        *args: Any,
        **kwargs: Any,
    ) -> Any:
        """
        Execute a database operation with retry logic for transient errors.

        Constraint violations are not transient and are raised immediately.

        Args:
            operation: Name of the operation for logging.
            func: Async function to execute.

        Returns:
            Any: Result of the function call.

        Raises:
            PostgresOperationError: If all retries fail.
        """
        last_error: Optional[Exception] = None

        for attempt in range(self.MAX_RETRIES):
            try:
                return await func(*args, **kwargs)
            except asyncpg.IntegrityConstraintViolationError as e:
                logger.warning("postgres_constraint_violation", operation=operation, error=str(e))
                raise PostgresOperationError(f"Operation '{operation}' rejected: {e}") from e
            except (PostgresError, PostgresConnectionException) as e:
                last_error = e
                if attempt < self.MAX_RETRIES - 1:
                    logger.warning(
                        "postgres_operation_retry",
                        operation=operation,
                        attempt=attempt + 1,
                        max_retries=self.MAX_RETRIES,
                        error=str(e),
                    )
                    await asyncio.sleep(self.RETRY_DELAY * (attempt + 1))
                else:
                    logger.error("postgres_operation_failed", operation=operation, error=str(e))

        raise PostgresOperationError(
            f"Operation '{operation}' failed after {self.MAX_RETRIES} attempts: {last_error}"
        )

    async def _fetch(self, operation: str, query: str, *args: Any) -> List[Record]:
        async def _query() -> List[Record]:
            async with self._acquire_connection() as conn:
                return await conn.fetch(query, *args)

        return await self._execute_with_retry(operation, _query)

    async def _fetchrow(self, operation: str, query: str, *args: Any) -> Optional[Record]:
        async def _query() -> Optional[Record]:
            async with self._acquire_connection() as conn:
                return await conn.fetchrow(query, *args)

        return await self._execute_with_retry(operation, _query)

    async def _execute(self, operation: str, query: str, *args: Any) -> str:
        async def _query() -> str:
            async with self._acquire_connection() as conn:
                return await conn.execute(query, *args)

        return await self._execute_with_retry(operation, _query)

    @staticmethod
    def _affected(status: str) -> int:
        """Row count from an asyncpg command status such as 'UPDATE 3'."""
        try:
            return int(status.split()[-1])
        except (ValueError, IndexError):
            return 0

    # =========================================================================
    # USERS
    # =========================================================================

    async def create_user(self, user: User) -> User:
        await self._execute(
            "create_user",
            """
            INSERT INTO users (
                id, username, email, password_hash, first_name, last_name,
                current_organization_id, is_active, created_at, updated_at
            ) VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, $10)
            """,
            user.id, user.username, user.email, user.password_hash,
            user.first_name, user.last_name, user.current_organization_id,
            user.is_active, user.created_at, user.updated_at,
        )
        logger.info("user_created", user_id=user.id, username=user.username)
        return user

    async def get_user(self, user_id: str) -> Optional[User]:
        row = await self._fetchrow("get_user", "SELECT * FROM users WHERE id = $1", user_id)
        return _to_model(User, row)

    async def get_user_by_username(self, username: str) -> Optional[User]:
        row = await self._fetchrow(
            "get_user_by_username", "SELECT * FROM users WHERE username = $1", username
        )
        return _to_model(User, row)

    async def get_user_by_email(self, email: str) -> Optional[User]:
        row = await self._fetchrow(
            "get_user_by_email", "SELECT * FROM users WHERE email = $1", email
        )
        return _to_model(User, row)

    async def touch_login(self, user_id: str, at: datetime) -> None:
        await self._execute(
            "touch_login",
            "UPDATE users SET last_login_at = $2, updated_at = $2 WHERE id = $1",
            user_id, at,
        )

    async def set_current_organization(
        self, user_id: str, organization_id: Optional[str]
    ) -> None:
        await self._execute(
            "set_current_organization",
            "UPDATE users SET current_organization_id = $2, updated_at = $3 WHERE id = $1",
            user_id, organization_id, utc_now(),
        )

    async def clear_current_organization(self, user_id: str, organization_id: str) -> None:
        """Clear the user's current organization only if it points at the given one."""
        await self._execute(
            "clear_current_organization",
            """
            UPDATE users SET current_organization_id = NULL, updated_at = $3
            WHERE id = $1 AND current_organization_id = $2
            """,
            user_id, organization_id, utc_now(),
        )

    # =========================================================================
    # ORGANIZATIONS & MEMBERSHIPS
    # =========================================================================

    async def create_organization(
        self, organization: Organization, owner_membership: Membership
    ) -> Organization:
        """Insert an organization and its owner membership atomically."""

        async def _insert() -> None:
            async with self._acquire_connection() as conn:
                async with conn.transaction():
                    await conn.execute(
                        """
                        INSERT INTO organizations (
                            id, name, slug, description, owner_id, is_personal,
                            created_at, updated_at
                        ) VALUES ($1, $2, $3, $4, $5, $6, $7, $8)
                        """,
                        organization.id, organization.name, organization.slug,
                        organization.description, organization.owner_id,
                        organization.is_personal, organization.created_at,
                        organization.updated_at,
                    )
                    await self._insert_membership(conn, owner_membership)

        await self._execute_with_retry("create_organization", _insert)
        logger.info(
            "organization_created", organization_id=organization.id, slug=organization.slug
        )
        return organization

    async def get_organization(self, organization_id: str) -> Optional[Organization]:
        row = await self._fetchrow(
            "get_organization", "SELECT * FROM organizations WHERE id = $1", organization_id
        )
        return _to_model(Organization, row)

    async def get_organization_by_slug(self, slug: str) -> Optional[Organization]:
        row = await self._fetchrow(
            "get_organization_by_slug", "SELECT * FROM organizations WHERE slug = $1", slug
        )
        return _to_model(Organization, row)

    async def list_user_organizations(
        self, user_id: str
    ) -> List[Tuple[Organization, Membership]]:
        """Organizations where the user has an active membership, oldest first."""
        rows = await self._fetch(
            "list_user_organizations",
            """
            SELECT o.*, m.id AS m_id, m.role AS m_role, m.status AS m_status,
                   m.joined_at AS m_joined_at, m.created_at AS m_created_at,
                   m.updated_at AS m_updated_at
            FROM organization_memberships m
            JOIN organizations o ON o.id = m.organization_id
            WHERE m.user_id = $1 AND m.status = 'active'
            ORDER BY m.joined_at
            """,
            user_id,
        )
        result = []
        for row in rows:
            data = dict(row)
            membership = Membership(
                id=data["m_id"],
                user_id=user_id,
                organization_id=data["id"],
                role=data["m_role"],
                status=data["m_status"],
                joined_at=data["m_joined_at"],
                created_at=data["m_created_at"],
                updated_at=data["m_updated_at"],
            )
            result.append((Organization.model_validate(data), membership))
        return result

    async def _insert_membership(self, conn: Connection, membership: Membership) -> None:
        await conn.execute(
            """
            INSERT INTO organization_memberships (
                id, user_id, organization_id, role, status, joined_at,
                created_at, updated_at
            ) VALUES ($1, $2, $3, $4, $5, $6, $7, $8)
            """,
            membership.id, membership.user_id, membership.organization_id,
            membership.role.value, membership.status.value, membership.joined_at,
            membership.created_at, membership.updated_at,
        )

    async def create_membership(self, membership: Membership) -> Membership:
        async def _insert() -> None:
            async with self._acquire_connection() as conn:
                await self._insert_membership(conn, membership)

        await self._execute_with_retry("create_membership", _insert)
        return membership

    async def get_membership(
        self, user_id: str, organization_id: str
    ) -> Optional[Membership]:
        row = await self._fetchrow(
            "get_membership",
            """
            SELECT * FROM organization_memberships
            WHERE user_id = $1 AND organization_id = $2
            """,
            user_id, organization_id,
        )
        return _to_model(Membership, row)

    async def get_membership_by_id(
        self, organization_id: str, membership_id: str
    ) -> Optional[Membership]:
        row = await self._fetchrow(
            "get_membership_by_id",
            """
            SELECT * FROM organization_memberships
            WHERE id = $1 AND organization_id = $2
            """,
            membership_id, organization_id,
        )
        return _to_model(Membership, row)

    async def delete_membership(self, organization_id: str, membership_id: str) -> bool:
        status = await self._execute(
            "delete_membership",
            "DELETE FROM organization_memberships WHERE id = $1 AND organization_id = $2",
            membership_id, organization_id,
        )
        return self._affected(status) > 0

    async def list_members(self, organization_id: str) -> List[Tuple[Membership, User]]:
        rows = await self._fetch(
            "list_members",
            """
            SELECT m.id AS m_id, m.role AS m_role, m.status AS m_status,
                   m.joined_at AS m_joined_at, m.created_at AS m_created_at,
                   m.updated_at AS m_updated_at, u.*
            FROM organization_memberships m
            JOIN users u ON u.id = m.user_id
            WHERE m.organization_id = $1
            ORDER BY m.joined_at
            """,
            organization_id,
        )
        result = []
        for row in rows:
            data = dict(row)
            membership = Membership(
                id=data["m_id"],
                user_id=data["id"],
                organization_id=organization_id,
                role=data["m_role"],
                status=data["m_status"],
                joined_at=data["m_joined_at"],
                created_at=data["m_created_at"],
                updated_at=data["m_updated_at"],
            )
            result.append((membership, User.model_validate(data)))
        return result

    # =========================================================================
    # INVITATIONS
    # =========================================================================

    async def create_invitation(self, invitation: Invitation) -> Invitation:
        await self._execute(
            "create_invitation",
            """
            INSERT INTO organization_invitations (
                id, organization_id, invited_by, email, role, token, status,
                expires_at, created_at, updated_at
            ) VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, $10)
            """,
            invitation.id, invitation.organization_id, invitation.invited_by,
            invitation.email, invitation.role.value, invitation.token,
            invitation.status.value, invitation.expires_at, invitation.created_at,
            invitation.updated_at,
        )
        logger.info(
            "invitation_created",
            invitation_id=invitation.id,
            organization_id=invitation.organization_id,
        )
        return invitation

    async def get_invitation(
        self, organization_id: str, invitation_id: str
    ) -> Optional[Invitation]:
        row = await self._fetchrow(
            "get_invitation",
            "SELECT * FROM organization_invitations WHERE id = $1 AND organization_id = $2",
            invitation_id, organization_id,
        )
        return _to_model(Invitation, row)

    async def get_pending_invitation_by_token(self, token: str) -> Optional[Invitation]:
        row = await self._fetchrow(
            "get_pending_invitation_by_token",
            "SELECT * FROM organization_invitations WHERE token = $1 AND status = 'pending'",
            token,
        )
        return _to_model(Invitation, row)

    async def update_invitation_status(
        self, invitation_id: str, status: InvitationStatus
    ) -> None:
        await self._execute(
            "update_invitation_status",
            "UPDATE organization_invitations SET status = $2, updated_at = $3 WHERE id = $1",
            invitation_id, status.value, utc_now(),
        )

    async def accept_invitation(
        self, invitation: Invitation, membership: Membership, accepted_at: datetime
    ) -> None:
        """Create the membership and mark the invitation accepted atomically."""

        async def _accept() -> None:
            async with self._acquire_connection() as conn:
                async with conn.transaction():
                    await self._insert_membership(conn, membership)
                    await conn.execute(
                        """
                        UPDATE organization_invitations
                        SET status = 'accepted', accepted_at = $2, accepted_by = $3,
                            updated_at = $2
                        WHERE id = $1
                        """,
                        invitation.id, accepted_at, membership.user_id,
                    )

        await self._execute_with_retry("accept_invitation", _accept)

    async def list_pending_invitations(self, organization_id: str) -> List[Invitation]:
        rows = await self._fetch(
            "list_pending_invitations",
            """
            SELECT * FROM organization_invitations
            WHERE organization_id = $1 AND status = 'pending'
            ORDER BY created_at DESC
            """,
            organization_id,
        )
        return _to_models(Invitation, rows)

    async def expire_invitations(self, now: datetime) -> int:
        """Mark pending invitations past their expiry as expired."""
        status = await self._execute(
            "expire_invitations",
            """
            UPDATE organization_invitations SET status = 'expired', updated_at = $1
            WHERE status = 'pending' AND expires_at < $1
            """,
            now,
        )
        return self._affected(status)

    async def delete_expired_invitations(self, before: datetime) -> int:
        """Delete expired invitations whose expiry is older than ``before``."""
        status = await self._execute(
            "delete_expired_invitations",
            """
            DELETE FROM organization_invitations
            WHERE status = 'expired' AND expires_at < $1
            """,
            before,
        )
        return self._affected(status)

    # =========================================================================
    # EXCHANGE CONFIGS
    # =========================================================================

    async def list_exchange_configs(self, organization_id: str) -> List[ExchangeCredential]:
        rows = await self._fetch(
            "list_exchange_configs",
            """
            SELECT * FROM exchange_configs
            WHERE organization_id = $1
            ORDER BY updated_at DESC
            """,
            organization_id,
        )
        return _to_models(ExchangeCredential, rows)

    async def get_exchange_config(
        self, organization_id: str, config_id: str
    ) -> Optional[ExchangeCredential]:
        row = await self._fetchrow(
            "get_exchange_config",
            "SELECT * FROM exchange_configs WHERE id = $1 AND organization_id = $2",
            config_id, organization_id,
        )
        return _to_model(ExchangeCredential, row)

    async def insert_exchange_config(self, credential: ExchangeCredential) -> ExchangeCredential:
        await self._execute(
            "insert_exchange_config",
            """
            INSERT INTO exchange_configs (
                id, organization_id, exchange_name, api_key, api_secret, passphrase,
                testnet, is_active, is_valid, last_validation_at, validation_error,
                created_by, updated_by, created_at, updated_at
            ) VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, $10, $11, $12, $13, $14, $15)
            """,
            credential.id, credential.organization_id, credential.exchange_name,
            credential.api_key, credential.api_secret, credential.passphrase,
            credential.testnet, credential.is_active, credential.is_valid,
            credential.last_validation_at, credential.validation_error,
            credential.created_by, credential.updated_by, credential.created_at,
            credential.updated_at,
        )
        logger.info(
            "exchange_config_created",
            config_id=credential.id,
            organization_id=credential.organization_id,
            exchange=credential.exchange_name,
        )
        return credential

    async def update_exchange_config(
        self, credential: ExchangeCredential
    ) -> Optional[ExchangeCredential]:
        """Update a credential row within its organization; None if absent."""
        status = await self._execute(
            "update_exchange_config",
            """
            UPDATE exchange_configs SET
                exchange_name = $3, api_key = $4, api_secret = $5, passphrase = $6,
                testnet = $7, is_active = $8, is_valid = $9, last_validation_at = $10,
                validation_error = $11, updated_by = $12, updated_at = $13
            WHERE id = $1 AND organization_id = $2
            """,
            credential.id, credential.organization_id, credential.exchange_name,
            credential.api_key, credential.api_secret, credential.passphrase,
            credential.testnet, credential.is_active, credential.is_valid,
            credential.last_validation_at, credential.validation_error,
            credential.updated_by, credential.updated_at,
        )
        if self._affected(status) == 0:
            return None
        return credential

    async def update_validation(
        self,
        organization_id: str,
        config_id: str,
        is_valid: bool,
        validated_at: datetime,
        error: Optional[str],
    ) -> None:
        await self._execute(
            "update_validation",
            """
            UPDATE exchange_configs SET
                is_valid = $3, last_validation_at = $4, validation_error = $5,
                updated_at = $4
            WHERE id = $1 AND organization_id = $2
            """,
            config_id, organization_id, is_valid, validated_at, error,
        )

    async def delete_exchange_config(self, organization_id: str, config_id: str) -> bool:
        status = await self._execute(
            "delete_exchange_config",
            "DELETE FROM exchange_configs WHERE id = $1 AND organization_id = $2",
            config_id, organization_id,
        )
        return self._affected(status) > 0

    # =========================================================================
    # SAVED WALLETS
    # =========================================================================

    async def list_wallets(self, organization_id: str) -> List[SavedWallet]:
        rows = await self._fetch(
            "list_wallets",
            "SELECT * FROM saved_wallets WHERE organization_id = $1 ORDER BY created_at DESC",
            organization_id,
        )
        return _to_models(SavedWallet, rows)

    async def get_wallet(self, organization_id: str, wallet_id: str) -> Optional[SavedWallet]:
        row = await self._fetchrow(
            "get_wallet",
            "SELECT * FROM saved_wallets WHERE id = $1 AND organization_id = $2",
            wallet_id, organization_id,
        )
        return _to_model(SavedWallet, row)

    async def insert_wallet(self, wallet: SavedWallet) -> SavedWallet:
        await self._execute(
            "insert_wallet",
            """
            INSERT INTO saved_wallets (
                id, organization_id, created_by, label, address, coin, network,
                exchange, description, is_shared, created_at, updated_at
            ) VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, $10, $11, $12)
            """,
            wallet.id, wallet.organization_id, wallet.created_by, wallet.label,
            wallet.address, wallet.coin, wallet.network, wallet.exchange,
            wallet.description, wallet.is_shared, wallet.created_at, wallet.updated_at,
        )
        return wallet

    async def delete_wallet(self, organization_id: str, wallet_id: str) -> bool:
        status = await self._execute(
            "delete_wallet",
            "DELETE FROM saved_wallets WHERE id = $1 AND organization_id = $2",
            wallet_id, organization_id,
        )
        return self._affected(status) > 0

    # =========================================================================
    # WITHDRAWAL HISTORY & ACTIVITY
    # =========================================================================

    async def _insert_activity(self, conn: Connection, entry: ActivityLogEntry) -> None:
        await conn.execute(
            """
            INSERT INTO activity_log (
                id, organization_id, user_id, action, entity, entity_id, details,
                ip_address, user_agent, created_at
            ) VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, $10)
            """,
            entry.id, entry.organization_id, entry.user_id, entry.action,
            entry.entity, entry.entity_id, json.dumps(entry.details, default=str),
            entry.ip_address, entry.user_agent, entry.created_at,
        )

    async def record_withdrawal(
        self, record: WithdrawalRecord, activity: ActivityLogEntry
    ) -> WithdrawalRecord:
        """Insert a withdrawal record and its activity entry in one transaction."""

        async def _insert() -> None:
            async with self._acquire_connection() as conn:
                async with conn.transaction():
                    await conn.execute(
                        """
                        INSERT INTO withdraw_history (
                            id, organization_id, initiated_by, exchange_name, coin,
                            network, amount, address, tag, status, tx_id, fee,
                            exchange_order_id, error, source, notes, created_at,
                            updated_at
                        ) VALUES (
                            $1, $2, $3, $4, $5, $6, $7, $8, $9, $10, $11, $12,
                            $13, $14, $15, $16, $17, $18
                        )
                        """,
                        record.id, record.organization_id, record.initiated_by,
                        record.exchange_name, record.coin, record.network,
                        record.amount, record.address, record.tag,
                        record.status.value, record.tx_id, record.fee,
                        record.exchange_order_id, record.error, record.source.value,
                        record.notes, record.created_at, record.updated_at,
                    )
                    await self._insert_activity(conn, activity)

        await self._execute_with_retry("record_withdrawal", _insert)
        logger.info(
            "withdrawal_recorded",
            withdrawal_id=record.id,
            organization_id=record.organization_id,
            exchange=record.exchange_name,
            coin=record.coin,
        )
        return record

    async def list_withdrawals(
        self, organization_id: str, limit: int = 50
    ) -> List[WithdrawalRecord]:
        rows = await self._fetch(
            "list_withdrawals",
            """
            SELECT * FROM withdraw_history
            WHERE organization_id = $1
            ORDER BY created_at DESC
            LIMIT $2
            """,
            organization_id, limit,
        )
        return _to_models(WithdrawalRecord, rows)

    async def get_withdrawal(
        self, organization_id: str, withdrawal_id: str
    ) -> Optional[WithdrawalRecord]:
        row = await self._fetchrow(
            "get_withdrawal",
            "SELECT * FROM withdraw_history WHERE id = $1 AND organization_id = $2",
            withdrawal_id, organization_id,
        )
        return _to_model(WithdrawalRecord, row)

    async def insert_activity(self, entry: ActivityLogEntry) -> ActivityLogEntry:
        async def _insert() -> None:
            async with self._acquire_connection() as conn:
                await self._insert_activity(conn, entry)

        await self._execute_with_retry("insert_activity", _insert)
        return entry

    async def list_activity(
        self, organization_id: str, limit: int = 50
    ) -> List[ActivityLogEntry]:
        rows = await self._fetch(
            "list_activity",
            """
            SELECT * FROM activity_log
            WHERE organization_id = $1
            ORDER BY created_at DESC
            LIMIT $2
            """,
            organization_id, limit,
        )
        return [_activity_from_record(row) for row in rows]
