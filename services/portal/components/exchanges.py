"""Exchange credential settings and the add/edit form."""

from typing import Collection, Optional, Sequence

from services.portal.components.base import alert, esc
from transnet.config.models import AdvertisedExchange
from transnet.models.records import ExchangeCredential
from transnet.portal.credentials import TEST_FAILED_MESSAGE, ConnectionTestResult


def mask_key(api_key: Optional[str]) -> str:
    if not api_key:
        return ""
    if len(api_key) <= 12:
        return api_key[:2] + "..."
    return f"{api_key[:8]}...{api_key[-4:]}"


def _badges(config: Optional[ExchangeCredential], implemented: bool) -> str:
    if not implemented:
        return "<div class='badge badge-ghost'>Not yet available</div>"
    if config is None or not config.has_credentials:
        return "<div class='badge badge-warning'>Not Configured</div>"
    badges = ["<div class='badge badge-success'>Configured</div>"]
    if config.is_active:
        badges.append("<div class='badge badge-info'>Active</div>")
        badges.append(
            "<div class='badge badge-success'>Valid</div>"
            if config.is_valid
            else "<div class='badge badge-warning'>Not Validated</div>"
        )
    else:
        badges.append("<div class='badge badge-neutral'>Inactive</div>")
    if config.testnet:
        badges.append("<div class='badge badge-outline'>Testnet</div>")
    return "".join(badges)


def _details(config: ExchangeCredential) -> str:
    validated = (
        f"<p><strong>Last Validation:</strong> {esc(config.last_validation_at.isoformat())}</p>"
        if config.last_validation_at
        else ""
    )
    error = (
        f"<p class='text-error'><strong>Validation Error:</strong> {esc(config.validation_error)}</p>"
        if config.validation_error
        else ""
    )
    return (
        f"<div id='test-result-{esc(config.id)}' class='mt-4'></div>"
        "<div class='mt-4 text-sm'>"
        f"<p><strong>API Key:</strong> {esc(mask_key(config.api_key))}</p>"
        f"<p><strong>Last Updated:</strong> {esc(config.updated_at.isoformat())}</p>"
        f"{validated}{error}"
        "</div>"
    )


def _exchange_card(
    exchange: AdvertisedExchange, config: Optional[ExchangeCredential], implemented: bool
) -> str:
    configured = config is not None and config.has_credentials
    actions = []
    if configured:
        actions.append(
            f"<button class='btn btn-sm btn-outline btn-info' hx-post='/api/exchanges/{esc(config.id)}/test' "
            f"hx-target='#test-result-{esc(config.id)}' hx-swap='innerHTML'>Test Connection</button>"
        )
    if implemented:
        target = config.id if configured else "new"
        actions.append(
            f"<button class='btn btn-sm btn-outline' hx-get='/settings/exchanges/{esc(target)}?exchange={esc(exchange.name)}' "
            "hx-target='#modal-content' hx-swap='innerHTML' "
            "onclick=\"document.getElementById('modal').showModal()\">"
            f"{'Edit' if configured else 'Configure'}</button>"
        )
    if configured:
        actions.append(
            f"<button class='btn btn-sm btn-outline btn-error' hx-delete='/api/exchanges/{esc(config.id)}' "
            "hx-confirm='Are you sure you want to delete this exchange configuration?' "
            "hx-target='closest .card' hx-swap='outerHTML'>Delete</button>"
        )

    return (
        "<div class='card bg-base-100 shadow-xl'><div class='card-body'>"
        "<div class='flex items-center justify-between'>"
        f"<div><h3 class='card-title'>{esc(exchange.display_name)}</h3>"
        f"<div class='flex items-center space-x-2'>{_badges(config, implemented)}</div></div>"
        f"<div class='card-actions'>{''.join(actions)}</div>"
        "</div>"
        f"{_details(config) if configured else ''}"
        "</div></div>"
    )


def exchange_settings(
    configs: Sequence[ExchangeCredential],
    advertised: Sequence[AdvertisedExchange],
    implemented: Collection[str],
) -> str:
    """
    One card per advertised exchange.

    Exchanges without an adapter are listed as not yet available and cannot
    be configured.
    """
    cards = []
    for exchange in advertised:
        config = next(
            (c for c in configs if c.exchange_name.lower() == exchange.name), None
        )
        cards.append(_exchange_card(exchange, config, exchange.name in implemented))

    return (
        "<div class='space-y-6'>"
        "<div class='flex justify-between items-center'>"
        "<h2 class='text-2xl font-bold'>Exchange Settings</h2>"
        "<div class='text-sm'>Configure your supported exchange API credentials</div>"
        "</div>"
        f"<div class='grid gap-4'>{''.join(cards)}</div>"
        "<dialog id='modal' class='modal'><div class='modal-box'><div id='modal-content'></div></div></dialog>"
        "</div>"
    )


def exchange_form(
    exchange_name: str,
    display_name: str,
    config: Optional[ExchangeCredential] = None,
) -> str:
    action = f"/api/exchanges/{esc(config.id)}" if config else "/api/exchanges"
    title = f"Edit {display_name} Configuration" if config else f"Configure {display_name}"
    testnet = " checked" if config is not None and config.testnet else ""
    active = " checked" if config is None or config.is_active else ""
    return (
        "<div>"
        f"<h3 class='font-bold text-lg mb-4'>{esc(title)}</h3>"
        f"<form hx-post='{action}' hx-target='#modal-content' hx-swap='innerHTML'>"
        f"<input type='hidden' name='exchange_name' value='{esc(exchange_name)}' />"
        "<div class='form-control'><label class='label'><span class='label-text'>API Key</span></label>"
        f"<input type='text' name='api_key' value='{esc(config.api_key if config else '')}' "
        "class='input input-bordered' required /></div>"
        "<div class='form-control'><label class='label'><span class='label-text'>API Secret</span></label>"
        "<input type='password' name='api_secret' class='input input-bordered' required /></div>"
        "<div class='form-control'><label class='label'><span class='label-text'>Passphrase (Optional)</span></label>"
        "<input type='password' name='passphrase' class='input input-bordered' /></div>"
        "<div class='form-control'><label class='label cursor-pointer'><span class='label-text'>Use Testnet</span>"
        f"<input type='checkbox' name='testnet' class='checkbox'{testnet} /></label></div>"
        "<div class='form-control'><label class='label cursor-pointer'><span class='label-text'>Active</span>"
        "<input type='hidden' name='is_active' value='off' />"
        f"<input type='checkbox' name='is_active' class='checkbox'{active} /></label></div>"
        "<div class='modal-action'>"
        "<button type='button' class='btn' onclick=\"document.getElementById('modal').close()\">Cancel</button>"
        "<button type='submit' class='btn btn-primary'>Save</button>"
        "</div></form></div>"
    )


def save_success(message: str) -> str:
    return (
        f"<div class='alert alert-success'><span>{esc(message)}</span>"
        "<div class='mt-2'><button class='btn btn-sm' "
        "onclick=\"document.getElementById('modal').close(); window.location.reload()\">Close</button>"
        "</div></div>"
    )


def connection_result(result: ConnectionTestResult) -> str:
    if result.success:
        return alert("Connection successful! Validation status updated.", "success")
    if result.error and result.error != TEST_FAILED_MESSAGE:
        return alert(f"Error: {result.error}")
    return alert("Connection failed. Validation status updated.")
