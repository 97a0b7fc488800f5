"""
Dashboard and aggregated balances.

Provides:
    GET /dashboard       - Dashboard for the current organization
    GET /balances?page=  - Balances across all validated exchanges
"""

import structlog
from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import HTMLResponse

from services.portal.components.balances import balance_view
from services.portal.components.dashboard import dashboard
from services.portal.deps import current_context, get_state
from services.portal.responses import render_page
from services.portal.state import AppState
from transnet.aggregation import paginate
from transnet.portal.access import AuthContext

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.get("/dashboard", response_class=HTMLResponse)
async def dashboard_page(
    request: Request, context: AuthContext = Depends(current_context)
) -> HTMLResponse:
    return render_page(
        request, "TransNet - Dashboard", dashboard(context.organization), context.user
    )


@router.get("/balances", response_class=HTMLResponse)
async def balances_page(
    request: Request,
    page: int = Query(default=1),
    context: AuthContext = Depends(current_context),
    state: AppState = Depends(get_state),
) -> HTMLResponse:
    """
    Merged balances of the organization's validated exchanges.

    Exchanges that fail are listed above the table; the others are still
    shown.
    """
    configs = await state.credentials.list_configs(context)
    result = await state.aggregator.collect_balances(configs)
    current = paginate(result.balances, page, state.config.portal.balances_page_size)

    return render_page(
        request,
        "TransNet - Balances",
        balance_view(current, result.errors),
        context.user,
    )
