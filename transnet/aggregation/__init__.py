"""
Aggregation across the exchanges configured for an organization.

Example:
    >>> from transnet.aggregation import ExchangeAggregator, paginate
    >>> result = await ExchangeAggregator(registry).collect_balances(configs)
    >>> page = paginate(result.balances, page=1, page_size=50)
"""

from transnet.aggregation.aggregator import (
    BalancesResult,
    ExchangeAggregator,
    ExchangeOption,
    Page,
    WithdrawFormData,
    is_usable,
    paginate,
)

__all__ = [
    "BalancesResult",
    "ExchangeAggregator",
    "ExchangeOption",
    "Page",
    "WithdrawFormData",
    "is_usable",
    "paginate",
]
