"""
Exchange credential settings.

Provides:
    GET    /settings                  - One card per advertised exchange
    GET    /settings/exchanges/{id}   - Edit form, or the add form for id "new"
    POST   /api/exchanges             - Test and save new credentials
    POST   /api/exchanges/{id}        - Test and update stored credentials
    DELETE /api/exchanges/{id}        - Delete stored credentials
    POST   /api/exchanges/{id}/test   - Re-test stored credentials
"""

from typing import Optional

import structlog
from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import HTMLResponse, PlainTextResponse, Response

from services.portal.components.exchanges import (
    connection_result,
    exchange_form,
    exchange_settings,
    save_success,
)
from services.portal.deps import current_context, form_values, get_state
from services.portal.responses import htmx_headers, render_page
from services.portal.state import AppState
from transnet.portal.access import AuthContext
from transnet.portal.credentials import CredentialForm
from transnet.portal.errors import NotFoundError, parse_form

logger = structlog.get_logger(__name__)

router = APIRouter()

NEW_CONFIG_ID = "new"


@router.get("/settings", response_class=HTMLResponse)
async def settings_page(
    request: Request,
    context: AuthContext = Depends(current_context),
    state: AppState = Depends(get_state),
) -> HTMLResponse:
    configs = await state.credentials.list_configs(context)
    content = exchange_settings(
        configs, state.registry.advertised, state.registry.implemented_exchanges()
    )
    return render_page(request, "TransNet - Settings", content, context.user)


@router.get("/settings/exchanges/{config_id}", response_class=HTMLResponse)
async def exchange_form_page(
    config_id: str,
    request: Request,
    exchange: Optional[str] = Query(default=None),
    context: AuthContext = Depends(current_context),
    state: AppState = Depends(get_state),
) -> HTMLResponse:
    if config_id == NEW_CONFIG_ID:
        name = (exchange or "").strip().lower()
        if not state.registry.is_implemented(name):
            raise NotFoundError("Exchange not supported")
        content = exchange_form(name, state.registry.display_name(name))
    else:
        config = await state.credentials.get(context, config_id)
        content = exchange_form(
            config.exchange_name, state.registry.display_name(config.exchange_name), config
        )
    return render_page(request, "TransNet - Exchange Settings", content, context.user)


async def _save(
    request: Request, context: AuthContext, state: AppState, config_id: Optional[str]
) -> Response:
    form = parse_form(CredentialForm, await form_values(request))
    await state.credentials.save(context, form, config_id=config_id)
    message = (
        "Exchange configuration saved successfully!"
        if config_id is None
        else "Exchange configuration updated successfully!"
    )
    return HTMLResponse(save_success(message), headers=htmx_headers(request, message))


@router.post("/api/exchanges")
async def create_exchange_config(
    request: Request,
    context: AuthContext = Depends(current_context),
    state: AppState = Depends(get_state),
) -> Response:
    return await _save(request, context, state, None)


@router.post("/api/exchanges/{config_id}")
async def update_exchange_config(
    config_id: str,
    request: Request,
    context: AuthContext = Depends(current_context),
    state: AppState = Depends(get_state),
) -> Response:
    return await _save(request, context, state, config_id)


@router.delete("/api/exchanges/{config_id}")
async def delete_exchange_config(
    config_id: str,
    request: Request,
    context: AuthContext = Depends(current_context),
    state: AppState = Depends(get_state),
) -> Response:
    await state.credentials.delete(context, config_id)
    return PlainTextResponse(
        "", headers=htmx_headers(request, "Exchange configuration deleted")
    )


@router.post("/api/exchanges/{config_id}/test", response_class=HTMLResponse)
async def test_exchange_config(
    config_id: str,
    context: AuthContext = Depends(current_context),
    state: AppState = Depends(get_state),
) -> HTMLResponse:
    result = await state.credentials.test(context, config_id)
    return HTMLResponse(connection_result(result))
