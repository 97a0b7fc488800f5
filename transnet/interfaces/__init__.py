"""
Abstract interfaces.

Interfaces:
    ExchangeAdapter: Contract implemented by every exchange integration
"""

from transnet.interfaces.exchange_adapter import ExchangeAdapter

__all__ = ["ExchangeAdapter"]
