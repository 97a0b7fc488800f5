"""Withdraw form and its htmx fragments."""

from typing import List, Optional, Sequence

from services.portal.components.base import error_list, esc, fmt_amount, options
from transnet.aggregation import WithdrawFormData
from transnet.models.coins import Balance, Network, NetworkState
from transnet.models.records import SavedWallet


def no_exchanges() -> str:
    return (
        "<div class='mx-auto max-w-2xl'><div class='card bg-base-200 shadow-xl'>"
        "<div class='card-body text-center'>"
        "<h2 class='card-title justify-center'>No Exchanges Configured</h2>"
        "<p class='mb-4'>You need to configure at least one exchange before you can make withdrawals.</p>"
        "<div class='card-actions justify-center'>"
        "<a href='/settings' class='btn btn-primary'>Configure Exchange</a>"
        "</div></div></div></div>"
    )


def balance_field(text: str) -> str:
    return (
        "<label class='label'><span class='label-text'>Available Balance</span></label>"
        f"<div class='input input-bordered bg-base-300'><span id='balance-amount'>{esc(text)}</span></div>"
    )


def network_label(network: Network) -> str:
    usable = network.withdraw_enabled and network.status == NetworkState.ACTIVE
    label = network.network
    if not usable:
        label += " (Disabled)"
    if network.withdraw_fee > 0:
        label += f" - Fee: {fmt_amount(network.withdraw_fee)}"
    if network.memo_required:
        label += " (Requires memo)"
    return label


def network_select(
    networks: Sequence[Network] = (),
    placeholder: str = "Select Network",
    disabled: bool = False,
) -> str:
    """Network <select>; networks that cannot withdraw are shown disabled."""
    parts = [f"<option value=''>{esc(placeholder)}</option>"]
    for network in networks:
        usable = network.withdraw_enabled and network.status == NetworkState.ACTIVE
        attrs = "" if usable else " disabled class='text-gray-400'"
        parts.append(
            f"<option value='{esc(network.network)}'{attrs}>{esc(network_label(network))}</option>"
        )
    return (
        f"<select name='network' class='select select-bordered' required"
        f"{' disabled' if disabled else ''}>{''.join(parts)}</select>"
    )


def _find_balance(balances: List[Balance], coin: str, exchange: Optional[str]) -> Optional[Balance]:
    for balance in balances:
        if balance.coin == coin and balance.exchange == exchange:
            return balance
    return None


def _coin_options(data: WithdrawFormData) -> str:
    parts = ["<option value=''>Select Coin</option>"]
    for coin in data.coins:
        balance = _find_balance(data.balances, coin.symbol, coin.exchange)
        has_balance = balance is not None and balance.free > 0
        available = (
            f" ({fmt_amount(balance.free)} available)" if balance is not None else " (No balance)"
        )
        label = f"{coin.symbol} - {coin.name}{available} [{(coin.exchange or 'unknown').upper()}]"
        attrs = "" if has_balance else " disabled class='text-gray-400'"
        parts.append(
            f"<option value='{esc(coin.symbol)}' data-exchange='{esc(coin.exchange)}'{attrs}>"
            f"{esc(label)}</option>"
        )
    return "".join(parts)


def _wallet_picker(wallets: Sequence[SavedWallet]) -> str:
    if not wallets:
        return ""
    choices = [(w.id, f"{w.label} ({w.coin} / {w.network})") for w in wallets]
    return (
        "<label class='label'><span class='label-text-alt'>Or select from saved wallets:</span></label>"
        "<select name='wallet' class='select select-bordered mb-2' hx-get='/api/wallet-address' "
        "hx-target='#address-input' hx-swap='outerHTML'>"
        f"{options(choices, placeholder='Select saved wallet')}"
        "</select>"
    )


def address_input(value: str = "") -> str:
    return (
        "<input id='address-input' type='text' name='address' placeholder='Withdrawal address' "
        f"class='input input-bordered' value='{esc(value)}' required />"
    )


def withdraw_form(data: WithdrawFormData, wallets: Sequence[SavedWallet]) -> str:
    exchanges = [(ex.name, ex.display_name) for ex in data.available_exchanges]
    return (
        "<div class='max-w-2xl mx-auto'><div class='card bg-base-200 shadow-xl'><div class='card-body'>"
        "<h2 class='card-title'>Withdraw Cryptocurrency</h2>"
        f"{error_list(data.errors)}"
        "<form id='withdraw-form' hx-post='/api/withdraw' hx-target='#withdraw-result'>"
        "<div class='form-control'><label class='label'><span class='label-text'>Exchange</span></label>"
        "<select id='exchange-select' name='exchange' class='select select-bordered' required>"
        f"{options(exchanges, placeholder='Select Exchange')}</select></div>"
        "<div class='form-control'><label class='label'><span class='label-text'>Coin</span></label>"
        "<select name='coin' class='select select-bordered' required hx-get='/api/networks' "
        "hx-target='#network-selection' hx-trigger='change' hx-include=\"[name='exchange']\">"
        f"{_coin_options(data)}</select></div>"
        "<div id='balance-display' class='form-control' hx-get='/api/balance' "
        "hx-trigger=\"change from:[name='coin']\" hx-include=\"[name='coin'],[name='exchange']\">"
        f"{balance_field('Select a coin to see balance')}</div>"
        "<div class='form-control'><label class='label'><span class='label-text'>Network</span></label>"
        f"<div id='network-selection'>{network_select()}</div></div>"
        "<div class='form-control'><label class='label'><span class='label-text'>Amount</span></label>"
        "<input id='amount-input' type='number' name='amount' placeholder='0.00' "
        "class='input input-bordered' step='any' min='0' required /></div>"
        "<div class='form-control'><label class='label'><span class='label-text'>Withdrawal Address</span></label>"
        f"{_wallet_picker(wallets)}{address_input()}</div>"
        "<div class='form-control'><label class='label'><span class='label-text'>Memo / Tag (Optional)</span></label>"
        "<input type='text' name='memo' placeholder='Memo or tag' class='input input-bordered' /></div>"
        "<div class='form-control mt-6'><button type='submit' class='btn btn-primary'>Submit Withdrawal</button></div>"
        "</form>"
        "<div id='withdraw-result' class='mt-4'></div>"
        "</div></div></div>"
    )
