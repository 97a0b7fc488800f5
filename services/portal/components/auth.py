"""Welcome page, login and registration forms."""

from typing import Dict, Optional

from services.portal.components.base import alert, esc, field_error


def welcome() -> str:
    return (
        "<div class='hero min-h-[80vh]'><div class='hero-content text-center'>"
        "<div class='max-w-2xl'>"
        "<h1 class='text-6xl font-bold mb-8'>Welcome to <span class='text-primary'>TransNet</span></h1>"
        "<p class='text-xl mb-8'>Multi-exchange crypto withdrawal management system. "
        "Manage your withdrawals across multiple CEX platforms with ease.</p>"
        "<div class='flex gap-4 justify-center'>"
        "<button class='btn btn-primary btn-lg' hx-get='/register' hx-target='#main-content'>Get Started</button>"
        "<button class='btn btn-outline btn-lg' hx-get='/login' hx-target='#main-content'>Login</button>"
        "</div></div></div></div>"
    )


def _input(
    name: str,
    label: str,
    values: Dict[str, str],
    errors: Optional[Dict[str, str]],
    input_type: str = "text",
    required: bool = True,
    placeholder: str = "",
) -> str:
    value = "" if input_type == "password" else esc(values.get(name, ""))
    return (
        "<div class='form-control'>"
        f"<label class='label'><span class='label-text'>{esc(label)}</span></label>"
        f"<input type='{input_type}' name='{name}' value='{value}' "
        f"placeholder='{esc(placeholder)}' class='input input-bordered'"
        f"{' required' if required else ''} />"
        f"{field_error(errors, name)}"
        "</div>"
    )


def login_form(
    errors: Optional[Dict[str, str]] = None, values: Optional[Dict[str, str]] = None
) -> str:
    values = values or {}
    general = alert(errors["general"]) if errors and "general" in errors else ""
    return (
        "<div class='card w-full max-w-md bg-base-200 shadow-2xl mx-auto'><div class='card-body'>"
        "<h2 class='card-title justify-center mb-6'>Login to TransNet</h2>"
        f"{general}"
        "<form hx-post='/login' hx-target='#main-content'>"
        f"{_input('username', 'Username', values, errors, placeholder='Enter your username')}"
        f"{_input('password', 'Password', values, errors, 'password', placeholder='Enter your password')}"
        f"{_input('organization_slug', 'Organization (Optional)', values, errors, required=False, placeholder='Enter organization code or leave empty')}"
        "<div class='form-control mt-6'><button type='submit' class='btn btn-primary'>Login</button></div>"
        "</form>"
        "<div class='divider'>OR</div>"
        "<button class='btn btn-outline' hx-get='/register' hx-target='#main-content'>Register New Account</button>"
        "</div></div>"
    )


def register_form(
    errors: Optional[Dict[str, str]] = None, values: Optional[Dict[str, str]] = None
) -> str:
    values = values or {}
    general = alert(errors["general"]) if errors and "general" in errors else ""
    return (
        "<div class='card w-96 bg-base-200 shadow-xl mx-auto'><div class='card-body'>"
        "<h2 class='card-title justify-center'>Register</h2>"
        f"{general}"
        "<form hx-post='/register' hx-target='#main-content'>"
        f"{_input('username', 'Username', values, errors)}"
        f"{_input('email', 'Email', values, errors, 'email')}"
        f"{_input('password', 'Password', values, errors, 'password')}"
        f"{_input('first_name', 'First Name', values, errors, required=False)}"
        f"{_input('last_name', 'Last Name', values, errors, required=False)}"
        "<div class='form-control mt-6'><button type='submit' class='btn btn-primary'>Register</button></div>"
        "</form>"
        "<div class='divider'>OR</div>"
        "<button class='btn btn-outline' hx-get='/login' hx-target='#main-content'>Back to Login</button>"
        "</div></div>"
    )
