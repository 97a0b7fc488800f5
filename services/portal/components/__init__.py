"""
HTML components.

Each function renders one fragment as a string; ``layout`` wraps a
fragment into a full page.
"""

from services.portal.components.base import alert, esc, layout

__all__ = ["alert", "esc", "layout"]
