"""
Storage layer.

Components:
    PortalStore: asyncpg-backed repository for all persisted records
    SCHEMA_STATEMENTS: Idempotent DDL applied on startup

Example:
    >>> from transnet.storage import PortalStore
    >>> store = PortalStore(config.postgres)
    >>> await store.connect()
"""

from transnet.storage.postgres_client import (
    PortalStore,
    PostgresClientError,
    PostgresConnectionException,
    PostgresOperationError,
)
from transnet.storage.schema import SCHEMA_STATEMENTS

__all__ = [
    "PortalStore",
    "PostgresClientError",
    "PostgresConnectionException",
    "PostgresOperationError",
    "SCHEMA_STATEMENTS",
]
