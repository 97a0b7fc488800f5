"""
TransNet exchange withdrawal dashboard.

A multi-tenant dashboard for managing centralized exchange credentials,
viewing aggregated balances, and recording withdrawal requests per
organization.

This package provides:
- Data models for coins, networks, balances, and persisted records
- Abstract interface and concrete adapters for exchange REST APIs
- Aggregation across the exchanges configured for an organization
- Application services for accounts, organizations, and credentials
- PostgreSQL storage and configuration management
"""

__version__ = "0.1.0"
