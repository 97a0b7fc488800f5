"""
Configuration management.

Configuration is loaded from YAML files in the config/ directory and
validated with Pydantic models:
    - exchanges.yaml: Exchange REST endpoints and the advertised list
    - portal.yaml: Dashboard, cleanup, security, server, and logging settings

Environment variables override connection and secret settings:
    - DATABASE_URL: PostgreSQL connection URL
    - JWT_SECRET: Session token signing secret
    - LOG_LEVEL: Application log level

Example:
    >>> from transnet.config import load_config
    >>> config = load_config()
    >>> config.display_name("mexc")
    'MEXC'
"""

from transnet.config.loader import ConfigLoadError, ConfigLoader, load_config
from transnet.config.models import (
    AdvertisedExchange,
    AppConfig,
    CleanupConfig,
    ConnectionSettings,
    ExchangeConfig,
    LogFormat,
    LoggingConfig,
    LogLevel,
    PortalSettings,
    PostgresConnectionConfig,
    RestEndpoints,
    SecurityConfig,
    ServerConfig,
)

__all__ = [
    # Loader
    "ConfigLoadError",
    "ConfigLoader",
    "load_config",
    # Models
    "AdvertisedExchange",
    "AppConfig",
    "CleanupConfig",
    "ConnectionSettings",
    "ExchangeConfig",
    "LogFormat",
    "LoggingConfig",
    "LogLevel",
    "PortalSettings",
    "PostgresConnectionConfig",
    "RestEndpoints",
    "SecurityConfig",
    "ServerConfig",
]
