"""
Saved wallets.

Provides:
    GET    /wallets              - Wallet list
    GET    /wallets/add          - Add wallet form
    GET    /api/wallet-coins     - Coin select for one exchange
    GET    /api/wallet-networks  - Network select for one coin on one exchange
    GET    /api/wallet-address   - Address input prefilled from a saved wallet
    POST   /api/wallets          - Save a wallet
    DELETE /api/wallets/{id}     - Delete a wallet
"""

from typing import Dict, Optional

import structlog
from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import HTMLResponse, Response

from services.portal.components.wallets import add_wallet_form, coin_select, wallet_manager
from services.portal.components.withdraw import address_input, network_select
from services.portal.deps import current_context, form_values, get_state
from services.portal.responses import render_page, toast_response
from services.portal.state import AppState
from transnet.aggregation import ExchangeOption, is_usable
from transnet.portal.access import AuthContext
from transnet.portal.errors import NotFoundError, parse_form
from transnet.portal.wallets import WalletForm

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.get("/wallets", response_class=HTMLResponse)
async def wallets_page(
    request: Request,
    context: AuthContext = Depends(current_context),
    state: AppState = Depends(get_state),
) -> HTMLResponse:
    wallets = await state.wallets.list_wallets(context)
    return render_page(request, "TransNet - Wallets", wallet_manager(wallets), context.user)


@router.get("/wallets/add", response_class=HTMLResponse)
async def add_wallet_page(
    request: Request,
    context: AuthContext = Depends(current_context),
    state: AppState = Depends(get_state),
) -> HTMLResponse:
    """Add form offering only exchanges whose credentials passed a connection test."""
    exchanges: Dict[str, ExchangeOption] = {}
    for config in await state.credentials.list_configs(context):
        name = config.exchange_name.lower()
        if is_usable(config, require_valid=True) and name not in exchanges:
            exchanges[name] = ExchangeOption(
                name=name, display_name=state.registry.display_name(name)
            )

    return render_page(
        request, "TransNet - Add Wallet", add_wallet_form(list(exchanges.values())), context.user
    )


@router.get("/api/wallet-coins", response_class=HTMLResponse)
async def wallet_coins(
    exchange: Optional[str] = Query(default=None),
    context: AuthContext = Depends(current_context),
    state: AppState = Depends(get_state),
) -> HTMLResponse:
    if not exchange:
        return HTMLResponse(coin_select(placeholder="Select exchange first", disabled=True))

    config = await state.credentials.find_config(context, exchange, require_valid=True)
    if config is None or not is_usable(config, require_valid=True):
        return HTMLResponse(
            coin_select(placeholder="Exchange not configured or invalid", disabled=True)
        )

    try:
        coins = await state.aggregator.list_coins(config)
    except Exception as e:
        logger.warning("wallet_coins_failed", exchange=exchange, error=str(e))
        return HTMLResponse(coin_select(placeholder="Error loading coins", disabled=True))

    return HTMLResponse(coin_select(sorted(coins, key=lambda c: c.symbol)))


@router.get("/api/wallet-networks", response_class=HTMLResponse)
async def wallet_networks(
    coin: Optional[str] = Query(default=None),
    exchange: Optional[str] = Query(default=None),
    context: AuthContext = Depends(current_context),
    state: AppState = Depends(get_state),
) -> HTMLResponse:
    if not coin or not exchange:
        return HTMLResponse(network_select(placeholder="Select coin first", disabled=True))

    config = await state.credentials.find_config(context, exchange, require_valid=True)
    if config is None or not is_usable(config, require_valid=True):
        return HTMLResponse(network_select(placeholder="Exchange not configured", disabled=True))

    try:
        networks = await state.aggregator.list_networks(config, coin)
    except Exception as e:
        logger.warning("wallet_networks_failed", exchange=exchange, coin=coin, error=str(e))
        return HTMLResponse(network_select(placeholder="Error loading networks", disabled=True))

    return HTMLResponse(network_select(networks))


@router.get("/api/wallet-address", response_class=HTMLResponse)
async def wallet_address(
    wallet: Optional[str] = Query(default=None),
    context: AuthContext = Depends(current_context),
    state: AppState = Depends(get_state),
) -> HTMLResponse:
    if not wallet:
        return HTMLResponse(address_input())

    try:
        saved = await state.wallets.get(context, wallet)
    except NotFoundError:
        return HTMLResponse(address_input())

    return HTMLResponse(address_input(saved.address))


@router.post("/api/wallets")
async def create_wallet(
    request: Request,
    context: AuthContext = Depends(current_context),
    state: AppState = Depends(get_state),
) -> Response:
    form = parse_form(WalletForm, await form_values(request))
    await state.wallets.create(context, form)
    return toast_response(request, "Wallet saved successfully!", redirect="/wallets")


@router.delete("/api/wallets/{wallet_id}")
async def delete_wallet(
    wallet_id: str,
    request: Request,
    context: AuthContext = Depends(current_context),
    state: AppState = Depends(get_state),
) -> Response:
    await state.wallets.delete(context, wallet_id)
    return toast_response(request, "Wallet deleted successfully!")
