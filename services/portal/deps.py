"""
Request dependencies: application state and the caller's AuthContext.

The session token is read from the ``Authorization: Bearer`` header first,
then from the session cookie.
"""

from typing import Dict, Optional

from fastapi import Depends, Request

from services.portal.state import AppState
from transnet.portal.access import AuthContext, resolve_context
from transnet.portal.errors import AuthenticationRequired


def get_state(request: Request) -> AppState:
    return request.app.state.portal


def session_token(request: Request, state: AppState) -> Optional[str]:
    authorization = request.headers.get("authorization", "")
    if authorization.startswith("Bearer "):
        token = authorization[len("Bearer "):].strip()
        if token:
            return token
    return request.cookies.get(state.config.security.cookie_name)


async def optional_context(
    request: Request, state: AppState = Depends(get_state)
) -> Optional[AuthContext]:
    """AuthContext of the caller, or None for anonymous requests."""
    return await resolve_context(state.store, state.tokens, session_token(request, state))


async def current_context(
    context: Optional[AuthContext] = Depends(optional_context),
) -> AuthContext:
    """
    AuthContext of the caller.

    Raises:
        AuthenticationRequired: For anonymous requests and invalid tokens.
    """
    if context is None:
        raise AuthenticationRequired()
    return context


async def form_values(request: Request) -> Dict[str, str]:
    """
    Submitted form fields as strings.

    Repeated fields keep their last value, so a hidden ``off`` input placed
    before a checkbox yields ``on`` only when the box is ticked.
    """
    form = await request.form()
    return {key: str(value) for key, value in form.items()}
