"""
Withdrawal request and result models exchanged with adapters.

Models:
    WithdrawParams: What to send, where, and on which network
    WithdrawResult: Outcome reported by the exchange
"""

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field


class WithdrawParams(BaseModel):
    """
    Parameters of a withdrawal submitted to an exchange.

    Attributes:
        coin: Coin symbol.
        network: Exchange network identifier.
        address: Destination address.
        amount: Amount in coin units, strictly positive.
        memo: Optional memo/tag for networks that require one.
    """

    model_config = {"frozen": True, "extra": "forbid"}

    coin: str = Field(..., min_length=1)
    network: str = Field(..., min_length=1)
    address: str = Field(..., min_length=1)
    amount: Decimal = Field(..., gt=0)
    memo: Optional[str] = None


class WithdrawResult(BaseModel):
    """
    Outcome of a withdrawal submission.

    Adapters never raise from withdraw(); failures are reported here with
    success=False and an error message.
    """

    model_config = {"frozen": True, "extra": "forbid"}

    success: bool
    order_id: Optional[str] = None
    tx_id: Optional[str] = None
    fee: Optional[Decimal] = None
    message: Optional[str] = None
    error: Optional[str] = None
