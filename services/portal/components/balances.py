"""Balances table with pagination."""

from typing import Dict

from services.portal.components.base import error_list, esc, fmt_amount
from transnet.aggregation import Page


def _pager(page: Page) -> str:
    if page.total_pages <= 1:
        return ""
    prev_btn = (
        f"<button class='join-item btn' hx-get='/balances?page={page.page - 1}' "
        "hx-target='#main-content'>&laquo;</button>"
        if page.has_previous
        else "<button class='join-item btn' disabled>&laquo;</button>"
    )
    next_btn = (
        f"<button class='join-item btn' hx-get='/balances?page={page.page + 1}' "
        "hx-target='#main-content'>&raquo;</button>"
        if page.has_next
        else "<button class='join-item btn' disabled>&raquo;</button>"
    )
    return (
        "<div class='join mt-4'>"
        f"{prev_btn}<button class='join-item btn'>Page {page.page} of {page.total_pages}</button>{next_btn}"
        "</div>"
    )


def balance_view(page: Page, errors: Dict[str, str]) -> str:
    rows = "".join(
        "<tr>"
        f"<td>{esc(balance.coin)}</td>"
        f"<td>{esc((balance.exchange or '').upper())}</td>"
        f"<td>{fmt_amount(balance.free)}</td>"
        f"<td>{fmt_amount(balance.locked)}</td>"
        f"<td>{fmt_amount(balance.total)}</td>"
        "</tr>"
        for balance in page.items
    )
    if not rows:
        rows = "<tr><td colspan='5' class='text-center'>No balances found</td></tr>"

    return (
        "<div class='card bg-base-200 shadow-xl'><div class='card-body'>"
        "<h2 class='card-title'>Balances</h2>"
        f"{error_list(errors)}"
        "<div class='overflow-x-auto'><table class='table table-zebra'>"
        "<thead><tr><th>Coin</th><th>Exchange</th><th>Available</th><th>Locked</th><th>Total</th></tr></thead>"
        f"<tbody>{rows}</tbody></table></div>"
        f"<p class='text-sm mt-2'>{page.total_items} balances</p>"
        f"{_pager(page)}"
        "</div></div>"
    )
