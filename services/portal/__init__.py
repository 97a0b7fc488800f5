"""
Web portal for the withdrawal dashboard.

The portal is a FastAPI application returning HTML. Requests made by htmx
(``HX-Request`` header) receive the bare fragment; other requests receive
the full page wrapped in the layout.
"""
