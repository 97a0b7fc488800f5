"""
Welcome page, login, registration and logout.

Provides:
    GET  /          - Welcome page or dashboard
    GET  /login     - Login form
    GET  /register  - Registration form
    POST /login     - Authenticate and set the session cookie
    POST /register  - Create an account and set the session cookie
    POST /logout    - Clear the session cookie
"""

from typing import Optional

import structlog
from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse, PlainTextResponse, Response

from services.portal.components.auth import login_form, register_form, welcome
from services.portal.components.dashboard import dashboard
from services.portal.deps import form_values, get_state, optional_context
from services.portal.responses import render_page
from services.portal.state import AppState
from transnet.portal.access import AuthContext
from transnet.portal.accounts import (
    LoginForm,
    RegistrationForm,
    authenticate_user,
    register_user,
)
from transnet.portal.errors import PortalError, ValidationFailed, parse_form

logger = structlog.get_logger(__name__)

router = APIRouter()


def _signed_in(state: AppState, user_id: str, message: str) -> Response:
    token = state.tokens.create_session_token(user_id)
    logger.debug("session_issued", user_id=user_id)
    response = PlainTextResponse(message, headers={"HX-Redirect": "/"})
    response.set_cookie(
        state.config.security.cookie_name,
        token,
        max_age=int(state.tokens.ttl.total_seconds()),
        path="/",
        httponly=True,
        secure=state.config.security.cookie_secure,
        samesite="lax",
    )
    return response


@router.get("/", response_class=HTMLResponse)
async def index(
    request: Request, context: Optional[AuthContext] = Depends(optional_context)
) -> HTMLResponse:
    if context is None:
        return render_page(request, "TransNet - CEX Withdraw System", welcome())
    return render_page(
        request, "TransNet - Dashboard", dashboard(context.organization), context.user
    )


@router.get("/login", response_class=HTMLResponse)
async def login_page(request: Request) -> HTMLResponse:
    return render_page(request, "TransNet - Login", login_form())


@router.get("/register", response_class=HTMLResponse)
async def register_page(request: Request) -> HTMLResponse:
    return render_page(request, "TransNet - Register", register_form())


@router.post("/login")
async def login(request: Request, state: AppState = Depends(get_state)) -> Response:
    values = await form_values(request)
    try:
        form = parse_form(LoginForm, values)
        user = await authenticate_user(state.store, form)
    except ValidationFailed as e:
        return HTMLResponse(login_form(e.errors, values), status_code=400)
    except PortalError as e:
        return HTMLResponse(login_form({"general": e.message}, values), status_code=400)

    return _signed_in(state, user.id, "Login successful")


@router.post("/register")
async def register(request: Request, state: AppState = Depends(get_state)) -> Response:
    values = await form_values(request)
    try:
        form = parse_form(RegistrationForm, values)
        user = await register_user(state.store, form)
    except ValidationFailed as e:
        return HTMLResponse(register_form(e.errors, values), status_code=400)
    except PortalError as e:
        return HTMLResponse(register_form({"general": e.message}, values), status_code=400)

    return _signed_in(state, user.id, "Registration successful")


@router.post("/logout")
async def logout(state: AppState = Depends(get_state)) -> Response:
    response = PlainTextResponse("Logged out", headers={"HX-Redirect": "/"})
    response.delete_cookie(state.config.security.cookie_name, path="/", httponly=True)
    return response
