"""
htmx-aware response helpers.

Toast notifications travel in the ``HX-Trigger`` header as
``{"showToast": {"message", "type", "duration"}}``; client-side redirects
use ``HX-Redirect``.
"""

import json
from typing import Dict, Optional

from fastapi import Request
from fastapi.responses import HTMLResponse, PlainTextResponse, Response

from services.portal.components.base import layout
from transnet.models.records import User

DEFAULT_TOAST_DURATION_MS = 5000


def is_htmx(request: Request) -> bool:
    """True when the request was issued by htmx."""
    return request.headers.get("hx-request") is not None


def toast_trigger(
    message: str, toast_type: str = "success", duration: int = DEFAULT_TOAST_DURATION_MS
) -> str:
    """
    Build the HX-Trigger header value for a toast.

    Example:
        >>> toast_trigger("Wallet saved successfully!")
        '{"showToast": {"message": "Wallet saved successfully!", "type": "success", "duration": 5000}}'
    """
    return json.dumps(
        {"showToast": {"message": message, "type": toast_type, "duration": duration}}
    )


def _toast_duration(request: Request) -> int:
    state = getattr(request.app.state, "portal", None)
    if state is None:
        return DEFAULT_TOAST_DURATION_MS
    return state.config.portal.toast_duration_ms


def htmx_headers(
    request: Request,
    message: Optional[str] = None,
    toast_type: str = "success",
    redirect: Optional[str] = None,
) -> Dict[str, str]:
    headers: Dict[str, str] = {}
    if message:
        headers["HX-Trigger"] = toast_trigger(message, toast_type, _toast_duration(request))
    if redirect:
        headers["HX-Redirect"] = redirect
    return headers


def toast_response(
    request: Request,
    message: str,
    toast_type: str = "success",
    status_code: int = 200,
    redirect: Optional[str] = None,
    body: str = "",
) -> Response:
    """Plain-text response carrying a toast and an optional redirect."""
    return PlainTextResponse(
        body,
        status_code=status_code,
        headers=htmx_headers(request, message, toast_type, redirect),
    )


def render_page(
    request: Request,
    title: str,
    content: str,
    user: Optional[User] = None,
    status_code: int = 200,
    headers: Optional[Dict[str, str]] = None,
) -> HTMLResponse:
    """
    Return the fragment for htmx requests, the full page otherwise.

    Args:
        request: Incoming request.
        title: Page title used when the layout is rendered.
        content: Rendered fragment.
        user: Signed-in user, shown in the navigation bar.
        status_code: Response status.
        headers: Extra response headers.
    """
    if is_htmx(request):
        return HTMLResponse(content, status_code=status_code, headers=headers)
    return HTMLResponse(
        layout(title, content, user), status_code=status_code, headers=headers
    )
