"""
Page layout and shared HTML helpers.

Components are plain functions returning HTML strings. Every value coming
from users or exchanges goes through ``esc``.
"""

import html
from decimal import Decimal
from typing import Dict, Iterable, Optional

from transnet.models.records import User

NAV_ITEMS = (
    ("/dashboard", "Dashboard"),
    ("/balances", "Balances"),
    ("/withdraw", "Withdraw"),
    ("/wallets", "Saved Wallets"),
    ("/history", "History"),
    ("/organizations", "Organizations"),
    ("/settings", "Settings"),
)

TOAST_SCRIPT = """
document.body.addEventListener("showToast", function (evt) {
  var detail = evt.detail || {};
  var toast = document.createElement("div");
  toast.className = "alert alert-" + (detail.type || "info") + " shadow-lg";
  toast.textContent = detail.message || "";
  document.getElementById("toast-container").appendChild(toast);
  setTimeout(function () { toast.remove(); }, detail.duration || 5000);
});
"""


def esc(value: object) -> str:
    if value is None:
        return ""
    return html.escape(str(value))


def fmt_amount(value: Optional[Decimal], places: int = 8) -> str:
    """Fixed-point amount with trailing zeros trimmed."""
    if value is None:
        return "0"
    text = f"{value:.{places}f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text or "0"


def alert(message: str, kind: str = "error") -> str:
    return f"<div class='alert alert-{esc(kind)}'><span>{esc(message)}</span></div>"


def error_list(errors: Dict[str, str], title: str = "Exchange Connection Issues:") -> str:
    """Warning box listing per-exchange errors."""
    if not errors:
        return ""
    items = "".join(
        f"<li>{esc(exchange)}: {esc(message)}</li>" for exchange, message in errors.items()
    )
    return (
        "<div class='alert alert-warning mb-4'><div>"
        f"<h3 class='font-bold'>{esc(title)}</h3>"
        f"<ul class='list-disc list-inside'>{items}</ul>"
        "</div></div>"
    )


def options(
    choices: Iterable[tuple], selected: Optional[str] = None, placeholder: Optional[str] = None
) -> str:
    """<option> list from (value, label) pairs."""
    parts = [f"<option value=''>{esc(placeholder)}</option>"] if placeholder else []
    for value, label in choices:
        mark = " selected" if selected is not None and str(value) == selected else ""
        parts.append(f"<option value='{esc(value)}'{mark}>{esc(label)}</option>")
    return "".join(parts)


def field_error(errors: Optional[Dict[str, str]], name: str) -> str:
    if not errors or name not in errors:
        return ""
    return f"<span class='label-text-alt text-error'>{esc(errors[name])}</span>"


def _nav(user: Optional[User]) -> str:
    if user is None:
        return (
            "<div class='flex gap-2'>"
            "<button class='btn btn-ghost btn-sm' hx-get='/login' hx-target='#main-content'>Login</button>"
            "<button class='btn btn-primary btn-sm' hx-get='/register' hx-target='#main-content'>Register</button>"
            "</div>"
        )
    links = "".join(
        f"<li><a href='{path}' hx-get='{path}' hx-target='#main-content' "
        f"hx-push-url='true'>{label}</a></li>"
        for path, label in NAV_ITEMS
    )
    return (
        f"<ul class='menu menu-horizontal px-1'>{links}</ul>"
        "<div class='flex items-center gap-2'>"
        f"<span>{esc(user.username)}</span>"
        "<button class='btn btn-ghost btn-sm' hx-post='/logout'>Logout</button>"
        "</div>"
    )


def layout(title: str, content: str, user: Optional[User] = None) -> str:
    """Full HTML page around a fragment."""
    return f"""<!DOCTYPE html>
<html data-theme="dark">
<head>
  <meta charset="UTF-8" />
  <meta name="viewport" content="width=device-width, initial-scale=1.0" />
  <title>{esc(title)}</title>
  <script src="https://unpkg.com/htmx.org@1.9.12"></script>
</head>
<body>
  <div class="min-h-screen flex flex-col">
    <div class="navbar bg-primary text-primary-content shadow-lg">
      <a class="btn btn-ghost text-xl" href="/">TransNet</a>
      {_nav(user)}
    </div>
    <main class="flex-1">
      <div id="main-content" class="container mx-auto p-6 max-w-7xl">{content}</div>
    </main>
    <div id="toast-container" class="fixed top-4 right-4 z-50 flex flex-col gap-2"></div>
  </div>
  <script>{TOAST_SCRIPT}</script>
</body>
</html>"""
