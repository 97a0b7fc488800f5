"""
FastAPI application for the withdrawal dashboard.

This module creates and configures the FastAPI application with:
- Lifespan events connecting the database and owning the cleanup task
- Router registration for pages, htmx fragments and the JSON health check
- Exception handlers mapping service errors to htmx-aware responses
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse, JSONResponse, PlainTextResponse, Response

from services.portal.components.base import alert, layout
from services.portal.components.dashboard import no_organization_notice
from services.portal.responses import htmx_headers, is_htmx
from services.portal.state import AppState
from transnet.adapters.registry import ExchangeRegistry
from transnet.config import load_config
from transnet.config.models import AppConfig
from transnet.portal.errors import (
    AuthenticationRequired,
    OrganizationRequiredError,
    PortalError,
)
from transnet.storage.postgres_client import PortalStore

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """
    Manage application lifespan events.

    Connects the store and creates the schema on startup, starts the
    invitation cleanup task, and tears both down on shutdown.
    """
    state: AppState = app.state.portal
    logger.info("portal_starting")

    await state.store.connect()
    await state.store.ensure_schema()

    if state.config.cleanup.enabled:
        state.cleanup_task.start()

    logger.info("portal_ready", exchanges=state.registry.implemented_exchanges())

    yield

    logger.info("portal_shutting_down")
    await state.cleanup_task.stop()
    await state.store.disconnect()
    logger.info("portal_shutdown_complete")


async def portal_error_handler(request: Request, exc: PortalError) -> Response:
    """
    Map service errors to responses.

    htmx requests get the message as text with an error toast. Other
    requests get a full error page, except unauthenticated ones which get
    a JSON 401.
    """
    if isinstance(exc, AuthenticationRequired):
        return JSONResponse({"error": exc.message}, status_code=exc.status_code)

    logger.info(
        "request_rejected",
        path=request.url.path,
        error_type=type(exc).__name__,
        status=exc.status_code,
        error=exc.message,
    )

    if is_htmx(request):
        return PlainTextResponse(
            exc.message,
            status_code=exc.status_code,
            headers=htmx_headers(request, exc.message, "error"),
        )

    content = (
        no_organization_notice()
        if isinstance(exc, OrganizationRequiredError)
        else alert(exc.message)
    )
    return HTMLResponse(layout("TransNet - Error", content), status_code=exc.status_code)


async def unhandled_error_handler(request: Request, exc: Exception) -> Response:
    logger.error(
        "unhandled_error",
        path=request.url.path,
        error_type=type(exc).__name__,
        error=str(exc),
        exc_info=exc,
    )
    return JSONResponse({"error": "Internal server error"}, status_code=500)


def create_app(
    config: Optional[AppConfig] = None,
    store: Optional[PortalStore] = None,
    registry: Optional[ExchangeRegistry] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        config: Application configuration; loaded from CONFIG_PATH when None.
        store: Storage client; built from the configuration when None.
        registry: Exchange registry; built from the configuration when None.

    Returns:
        FastAPI: Configured application instance.

    Example:
        >>> app = create_app()
        >>> import uvicorn
        >>> uvicorn.run(app, host="0.0.0.0", port=3000)
    """
    config = config or load_config()
    state = AppState(
        config=config,
        store=store or PortalStore(config.postgres),
        registry=registry or ExchangeRegistry.from_config(config),
    )

    app = FastAPI(
        title="TransNet",
        description="Multi-exchange withdrawal dashboard",
        version="0.1.0",
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
    )
    app.state.portal = state

    app.add_exception_handler(PortalError, portal_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    from services.portal.api.auth import router as auth_router
    from services.portal.api.dashboard import router as dashboard_router
    from services.portal.api.exchanges import router as exchanges_router
    from services.portal.api.health import router as health_router
    from services.portal.api.history import router as history_router
    from services.portal.api.organizations import router as organizations_router
    from services.portal.api.wallets import router as wallets_router
    from services.portal.api.withdraw import router as withdraw_router

    app.include_router(auth_router, tags=["Auth"])
    app.include_router(dashboard_router, tags=["Dashboard"])
    app.include_router(withdraw_router, tags=["Withdraw"])
    app.include_router(wallets_router, tags=["Wallets"])
    app.include_router(history_router, tags=["History"])
    app.include_router(organizations_router, tags=["Organizations"])
    app.include_router(exchanges_router, tags=["Exchanges"])
    app.include_router(health_router, prefix="/api", tags=["Health"])

    logger.info("fastapi_app_created")

    return app
