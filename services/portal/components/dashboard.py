"""Dashboard landing fragment and the no-organization notice."""

from typing import Optional

from services.portal.components.base import esc
from transnet.models.records import Organization

_CARDS = (
    ("/balances", "Balances", "View balances across all configured exchanges."),
    ("/withdraw", "Withdraw", "Submit a withdrawal request."),
    ("/wallets", "Saved Wallets", "Manage saved withdrawal addresses."),
    ("/history", "History", "Review recorded withdrawals."),
    ("/settings", "Settings", "Configure exchange API credentials."),
)


def no_organization_notice() -> str:
    return (
        "<div class='alert alert-warning shadow-lg'>"
        "<div><h3 class='font-bold'>No Organization Selected</h3>"
        "<div class='text-sm'>You need to create or join an organization to use TransNet features.</div>"
        "</div>"
        "<div><button class='btn btn-sm' hx-get='/organizations' hx-target='#main-content' "
        "hx-swap='innerHTML'>Manage Organizations</button></div>"
        "</div>"
    )


def dashboard(organization: Optional[Organization]) -> str:
    if organization is None:
        return no_organization_notice()

    cards = "".join(
        "<div class='card bg-base-200 shadow-lg'><div class='card-body'>"
        f"<h3 class='card-title'>{label}</h3><p>{text}</p>"
        "<div class='card-actions justify-end'>"
        f"<button class='btn btn-primary btn-sm' hx-get='{path}' hx-target='#main-content' "
        f"hx-push-url='true'>Open</button>"
        "</div></div></div>"
        for path, label, text in _CARDS
    )
    return (
        f"<h1 class='text-3xl font-bold mb-2'>{esc(organization.name)}</h1>"
        f"<p class='mb-6 text-base-content/70'>{esc(organization.description or '')}</p>"
        f"<div class='grid grid-cols-1 md:grid-cols-3 gap-6'>{cards}</div>"
    )
