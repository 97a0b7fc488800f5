"""Saved wallet list, add form and cascading selects."""

from typing import Sequence

from services.portal.components.base import esc, options
from transnet.aggregation import ExchangeOption
from transnet.models.coins import Coin
from transnet.models.records import SavedWallet


def wallet_manager(wallets: Sequence[SavedWallet]) -> str:
    rows = "".join(
        f"<tr id='wallet-{esc(w.id)}'>"
        f"<td>{esc(w.label)}</td>"
        f"<td>{esc(w.exchange.upper())}</td>"
        f"<td>{esc(w.coin)}</td>"
        f"<td>{esc(w.network)}</td>"
        f"<td class='font-mono text-xs'>{esc(w.address)}</td>"
        "<td><button class='btn btn-error btn-xs' "
        f"hx-delete='/api/wallets/{esc(w.id)}' hx-target='#wallet-{esc(w.id)}' "
        "hx-swap='outerHTML' hx-confirm='Delete this wallet?'>Delete</button></td>"
        "</tr>"
        for w in wallets
    )
    if not rows:
        rows = "<tr><td colspan='6' class='text-center'>No saved wallets yet</td></tr>"

    return (
        "<div class='card bg-base-200 shadow-xl'><div class='card-body'>"
        "<div class='flex justify-between items-center'>"
        "<h2 class='card-title'>Saved Wallets</h2>"
        "<button class='btn btn-primary btn-sm' hx-get='/wallets/add' hx-target='#main-content'>Add Wallet</button>"
        "</div>"
        "<div class='overflow-x-auto'><table class='table'>"
        "<thead><tr><th>Label</th><th>Exchange</th><th>Coin</th><th>Network</th><th>Address</th><th></th></tr></thead>"
        f"<tbody>{rows}</tbody></table></div>"
        "</div></div>"
    )


def coin_select(coins: Sequence[Coin] = (), placeholder: str = "Select Coin", disabled: bool = False) -> str:
    """Coin <select> that loads the network select on change."""
    if disabled:
        return (
            "<select name='coin' class='select select-bordered' required disabled>"
            f"<option value=''>{esc(placeholder)}</option></select>"
        )
    choices = [(c.symbol, f"{c.symbol} - {c.name}") for c in coins]
    return (
        "<select name='coin' class='select select-bordered' required "
        "hx-get='/api/wallet-networks' hx-target='#network-selection-wallet' "
        "hx-trigger='change' hx-include=\"[name='exchange']\">"
        f"{options(choices, placeholder=placeholder)}</select>"
    )


def add_wallet_form(exchanges: Sequence[ExchangeOption]) -> str:
    choices = [(ex.name, ex.display_name) for ex in exchanges]
    return (
        "<div class='max-w-2xl mx-auto'><div class='card bg-base-200 shadow-xl'><div class='card-body'>"
        "<h2 class='card-title'>Add Wallet</h2>"
        "<form hx-post='/api/wallets'>"
        "<div class='form-control'><label class='label'><span class='label-text'>Label</span></label>"
        "<input type='text' name='label' class='input input-bordered' required /></div>"
        "<div class='form-control'><label class='label'><span class='label-text'>Exchange</span></label>"
        "<select name='exchange' class='select select-bordered' required "
        "hx-get='/api/wallet-coins' hx-target='#coin-selection-wallet' hx-trigger='change'>"
        f"{options(choices, placeholder='Select Exchange')}</select></div>"
        "<div class='form-control'><label class='label'><span class='label-text'>Coin</span></label>"
        f"<div id='coin-selection-wallet'>{coin_select(placeholder='Select exchange first', disabled=True)}</div></div>"
        "<div class='form-control'><label class='label'><span class='label-text'>Network</span></label>"
        "<div id='network-selection-wallet'><select name='network' class='select select-bordered' required disabled>"
        "<option value=''>Select coin first</option></select></div></div>"
        "<div class='form-control'><label class='label'><span class='label-text'>Address</span></label>"
        "<input type='text' name='address' class='input input-bordered' required /></div>"
        "<div class='form-control'><label class='label'><span class='label-text'>Description (Optional)</span></label>"
        "<input type='text' name='description' class='input input-bordered' /></div>"
        "<div class='form-control mt-6'><button type='submit' class='btn btn-primary'>Save Wallet</button></div>"
        "</form></div></div></div>"
    )
