"""
Application state shared by the request handlers.
"""

from datetime import datetime, timezone

from transnet.adapters.registry import ExchangeRegistry
from transnet.aggregation import ExchangeAggregator
from transnet.config.models import AppConfig
from transnet.portal.credentials import CredentialService
from transnet.portal.organizations import OrganizationService
from transnet.portal.security import TokenService
from transnet.portal.wallets import WalletService
from transnet.portal.withdrawals import WithdrawalRecorder
from transnet.storage.postgres_client import PortalStore
from transnet.tasks.invitation_cleanup import InvitationCleanupTask


class AppState:
    """
    Application state container.

    Holds the storage client, the exchange registry and the services built
    on them. The lifespan connects the store and owns the cleanup task.
    """

    def __init__(
        self,
        config: AppConfig,
        store: PortalStore,
        registry: ExchangeRegistry,
    ):
        self.config = config
        self.store = store
        self.registry = registry
        self.tokens = TokenService(config.security)
        self.aggregator = ExchangeAggregator(registry)
        self.credentials = CredentialService(store, registry)
        self.wallets = WalletService(store)
        self.withdrawals = WithdrawalRecorder(
            store, history_limit=config.portal.history_limit
        )
        self.organizations = OrganizationService(
            store, invitation_ttl_days=config.portal.invitation_ttl_days
        )
        self.cleanup_task = InvitationCleanupTask(store, config.cleanup)
        self.start_time: datetime = datetime.now(timezone.utc)
