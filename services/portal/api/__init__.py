"""
HTTP routes of the portal.

Routers:
- auth: Welcome page, login, registration, logout
- dashboard: Dashboard and aggregated balances
- withdraw: Withdraw form, its fragments and submission
- wallets: Saved wallets
- history: Withdrawal history
- organizations: Organizations, invitations and members
- exchanges: Exchange credential settings
- health: JSON health check
"""
