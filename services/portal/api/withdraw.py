"""
Withdraw form, its htmx fragments and submission.

Provides:
    GET  /withdraw      - Withdraw form
    GET  /api/balance   - Balance of one coin on one exchange
    GET  /api/networks  - Network select for one coin on one exchange
    POST /api/withdraw  - Record a withdrawal request
"""

from typing import Optional

import structlog
from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import HTMLResponse, JSONResponse, Response

from services.portal.components.base import alert, fmt_amount
from services.portal.components.withdraw import (
    balance_field,
    network_select,
    no_exchanges,
    withdraw_form,
)
from services.portal.deps import current_context, form_values, get_state
from services.portal.responses import render_page, toast_response
from services.portal.state import AppState
from transnet.aggregation import is_usable
from transnet.portal.access import AuthContext
from transnet.portal.errors import ValidationFailed, parse_form
from transnet.portal.withdrawals import RequestMetadata, WithdrawalRequest

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.get("/withdraw", response_class=HTMLResponse)
async def withdraw_page(
    request: Request,
    context: AuthContext = Depends(current_context),
    state: AppState = Depends(get_state),
) -> HTMLResponse:
    configs = await state.credentials.list_configs(context)
    data = await state.aggregator.collect_withdraw_data(configs)

    if not data.available_exchanges:
        return render_page(request, "TransNet - Withdraw", no_exchanges(), context.user)

    wallets = await state.wallets.list_wallets(context)
    return render_page(
        request, "TransNet - Withdraw", withdraw_form(data, wallets), context.user
    )


@router.get("/api/balance", response_class=HTMLResponse)
async def coin_balance(
    coin: Optional[str] = Query(default=None),
    exchange: Optional[str] = Query(default=None),
    context: AuthContext = Depends(current_context),
    state: AppState = Depends(get_state),
) -> HTMLResponse:
    if not coin or not exchange:
        return HTMLResponse(balance_field("Select coin and exchange"))

    config = await state.credentials.find_config(context, exchange)
    if config is None or not is_usable(config, require_valid=False):
        return HTMLResponse(balance_field("Exchange not configured"))

    try:
        balance = await state.aggregator.coin_balance(config, coin)
    except Exception as e:
        logger.warning("balance_fragment_failed", exchange=exchange, coin=coin, error=str(e))
        return HTMLResponse(balance_field("Error loading balance"))

    free = fmt_amount(balance.free) if balance is not None else "0"
    return HTMLResponse(balance_field(f"{free} {coin}"))


@router.get("/api/networks")
async def coin_networks(
    coin: Optional[str] = Query(default=None),
    exchange: Optional[str] = Query(default=None),
    context: AuthContext = Depends(current_context),
    state: AppState = Depends(get_state),
) -> Response:
    if not coin or not exchange:
        return JSONResponse({"error": "Missing coin or exchange parameter"}, status_code=400)

    config = await state.credentials.find_config(context, exchange)
    if config is None or not is_usable(config, require_valid=False):
        return HTMLResponse(network_select(placeholder="Exchange not configured", disabled=True))

    try:
        networks = await state.aggregator.list_networks(config, coin)
    except Exception as e:
        logger.warning("networks_fragment_failed", exchange=exchange, coin=coin, error=str(e))
        return HTMLResponse(network_select(placeholder="Error loading networks", disabled=True))

    return HTMLResponse(network_select(networks))


@router.post("/api/withdraw")
async def submit_withdrawal(
    request: Request,
    context: AuthContext = Depends(current_context),
    state: AppState = Depends(get_state),
) -> Response:
    """
    Record a withdrawal request as pending.

    Invalid input is reported in a single error toast listing every field.
    """
    values = await form_values(request)
    try:
        withdrawal = parse_form(WithdrawalRequest, values)
    except ValidationFailed as e:
        details = ", ".join(f"{field}: {message}" for field, message in e.errors.items())
        return toast_response(request, f"Validation error: {details}", "error", status_code=400)

    record = await state.withdrawals.submit(
        context, withdrawal, RequestMetadata.from_headers(request.headers)
    )
    logger.info(
        "withdrawal_requested",
        withdrawal_id=record.id,
        organization_id=record.organization_id,
        exchange=record.exchange_name,
        coin=record.coin,
        network=record.network,
    )

    message = f"Withdrawal request submitted successfully! Transaction ID: {record.id}"
    return toast_response(request, message, body=alert(message, "success"))
