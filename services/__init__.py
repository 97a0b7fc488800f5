"""
Service entry points for the withdrawal dashboard.

Services:
    portal: FastAPI web application serving the HTML dashboard
"""
