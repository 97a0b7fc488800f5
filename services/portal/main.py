"""
Portal service entry point.

This module configures logging and runs the FastAPI dashboard using Uvicorn.

Usage:
    python -m services.portal.main

    Or with uvicorn directly:
    uvicorn services.portal.app:create_app --factory --host 0.0.0.0 --port 3000

Environment Variables:
    CONFIG_PATH: Configuration directory (default: config)
    DATABASE_URL: PostgreSQL connection URL
    JWT_SECRET: Session token signing secret
    LOG_LEVEL: Logging level (default: INFO)
    PORTAL_HOST: Host to bind to (default: 0.0.0.0)
    PORTAL_PORT: Port to run the portal on (default: 3000)
"""

import logging
import sys

import structlog
import uvicorn

from transnet.config import load_config
from transnet.config.models import LogFormat, LoggingConfig


def setup_logging(config: LoggingConfig) -> None:
    """Configure structured logging for the portal service."""
    renderer = (
        structlog.dev.ConsoleRenderer()
        if config.format == LogFormat.TEXT
        else structlog.processors.JSONRenderer()
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, config.level.value),
    )

    # Reduce noise from uvicorn access logs
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


def main() -> None:
    """
    Main entry point for the portal service.

    Loads configuration, configures logging and starts Uvicorn with the
    application factory.
    """
    config = load_config()
    setup_logging(config.logging)

    logger = structlog.get_logger(__name__)
    logger.info(
        "portal_service_starting",
        version="0.1.0",
        python_version=sys.version,
        host=config.server.host,
        port=config.server.port,
    )

    uvicorn.run(
        "services.portal.app:create_app",
        factory=True,
        host=config.server.host,
        port=config.server.port,
        log_level=config.logging.level.value.lower(),
        reload=False,
        workers=1,
        access_log=False,
    )


if __name__ == "__main__":
    main()
