"""
MEXC data normalizer.

MEXC-specific fields:
    Name: Coin display name (capitalized, unlike Binance)
    withdrawTips / depositTips: Free-text notices; a memo is required when
        either mentions "MEMO"

MEXC reports no precision per network, so the default of 8 applies.
"""

from typing import Any, Dict, Optional

from transnet.adapters.normalizer import DEFAULT_MEMO_NAME, CapitalConfigNormalizer


class MexcNormalizer(CapitalConfigNormalizer):
    """Normalizes MEXC capital config, exchange info, and account data."""

    coin_name_field = "Name"

    @classmethod
    def memo_required(cls, network: Dict[str, Any]) -> bool:
        tips = (network.get("withdrawTips") or "", network.get("depositTips") or "")
        return any("MEMO" in tip for tip in tips)

    @classmethod
    def memo_name(cls, network: Dict[str, Any]) -> Optional[str]:
        if "MEMO" in (network.get("withdrawTips") or ""):
            return DEFAULT_MEMO_NAME
        return None
