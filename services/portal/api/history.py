"""
Withdrawal history.

Provides:
    GET /history               - Latest withdrawals of the organization
    GET /api/transaction/{id}  - Details of one withdrawal
"""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse

from services.portal.components.history import transaction_details, transaction_history
from services.portal.deps import current_context, get_state
from services.portal.responses import render_page
from services.portal.state import AppState
from transnet.portal.access import AuthContext

router = APIRouter()


@router.get("/history", response_class=HTMLResponse)
async def history_page(
    request: Request,
    context: AuthContext = Depends(current_context),
    state: AppState = Depends(get_state),
) -> HTMLResponse:
    records = await state.withdrawals.history(context)
    return render_page(
        request, "TransNet - History", transaction_history(records), context.user
    )


@router.get("/api/transaction/{withdrawal_id}", response_class=HTMLResponse)
async def transaction(
    withdrawal_id: str,
    context: AuthContext = Depends(current_context),
    state: AppState = Depends(get_state),
) -> HTMLResponse:
    record = await state.withdrawals.get(context, withdrawal_id)
    return HTMLResponse(transaction_details(record))
