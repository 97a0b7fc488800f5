"""Withdrawal history table and transaction details."""

from typing import Sequence

from services.portal.components.base import esc, fmt_amount
from transnet.models.records import WithdrawalRecord, WithdrawalStatus

_STATUS_BADGES = {
    WithdrawalStatus.PENDING: "badge-warning",
    WithdrawalStatus.PROCESSING: "badge-info",
    WithdrawalStatus.COMPLETED: "badge-success",
    WithdrawalStatus.FAILED: "badge-error",
}


def status_badge(status: WithdrawalStatus) -> str:
    return f"<span class='badge {_STATUS_BADGES[status]}'>{esc(status.value)}</span>"


def transaction_history(records: Sequence[WithdrawalRecord]) -> str:
    rows = "".join(
        "<tr>"
        f"<td>{esc(r.created_at.strftime('%Y-%m-%d %H:%M'))}</td>"
        f"<td>{esc(r.exchange_name.upper())}</td>"
        f"<td>{esc(r.coin)}</td>"
        f"<td>{esc(r.network)}</td>"
        f"<td>{fmt_amount(r.amount)}</td>"
        f"<td>{status_badge(r.status)}</td>"
        f"<td><button class='btn btn-ghost btn-xs' hx-get='/api/transaction/{esc(r.id)}' "
        "hx-target='#transaction-details'>Details</button></td>"
        "</tr>"
        for r in records
    )
    if not rows:
        rows = "<tr><td colspan='7' class='text-center'>No transactions yet</td></tr>"

    return (
        "<div class='card bg-base-200 shadow-xl'><div class='card-body'>"
        "<h2 class='card-title'>Transaction History</h2>"
        "<div class='overflow-x-auto'><table class='table'>"
        "<thead><tr><th>Date</th><th>Exchange</th><th>Coin</th><th>Network</th>"
        "<th>Amount</th><th>Status</th><th></th></tr></thead>"
        f"<tbody>{rows}</tbody></table></div>"
        "<div id='transaction-details' class='mt-4'></div>"
        "</div></div>"
    )


def transaction_details(record: WithdrawalRecord) -> str:
    fields = [
        ("Transaction ID", record.id),
        ("Exchange", record.exchange_name.upper()),
        ("Coin", record.coin),
        ("Network", record.network),
        ("Amount", fmt_amount(record.amount)),
        ("Address", record.address),
        ("Memo / Tag", record.tag or "-"),
        ("Fee", fmt_amount(record.fee) if record.fee is not None else "-"),
        ("Exchange TX ID", record.tx_id or "-"),
        ("Source", record.source.value),
        ("Created", record.created_at.isoformat()),
    ]
    rows = "".join(f"<tr><th>{esc(k)}</th><td>{esc(v)}</td></tr>" for k, v in fields)
    error = (
        f"<div class='alert alert-error mt-2'><span>{esc(record.error)}</span></div>"
        if record.error
        else ""
    )
    return (
        "<div class='card bg-base-100 shadow'><div class='card-body'>"
        f"<h3 class='card-title'>Transaction Details {status_badge(record.status)}</h3>"
        f"<table class='table table-sm'>{rows}</table>{error}"
        "</div></div>"
    )
