"""
Periodic invitation cleanup.

Pending invitations past their expiry are marked expired, and expired
invitations older than the purge window are deleted. The application
lifespan owns one InvitationCleanupTask: it starts the loop on startup and
cancels it on shutdown.
"""

import asyncio
from datetime import datetime, timedelta
from typing import Dict, Optional

import structlog

from transnet.config.models import CleanupConfig
from transnet.models.records import utc_now
from transnet.storage.postgres_client import PortalStore

logger = structlog.get_logger(__name__)


async def cleanup_expired_invitations(
    store: PortalStore,
    now: Optional[datetime] = None,
    purge_after_days: int = 30,
) -> Dict[str, int]:
    """
    Run one cleanup pass.

    Args:
        store: Storage client.
        now: Reference time, defaults to the current time.
        purge_after_days: Expired invitations whose expiry is older than this
            many days are deleted.

    Returns:
        Dict[str, int]: {"expired": n, "deleted": m}
    """
    now = now or utc_now()
    expired = await store.expire_invitations(now)
    deleted = await store.delete_expired_invitations(now - timedelta(days=purge_after_days))

    logger.info("invitations_cleaned_up", expired=expired, deleted=deleted)
    return {"expired": expired, "deleted": deleted}


class InvitationCleanupTask:
    """
    Owned, cancelable background loop running the cleanup pass.

    The pass runs once immediately, then every ``interval_seconds``. A failed
    pass is logged and the loop keeps going.

    Example:
        >>> task = InvitationCleanupTask(store, config.cleanup)
        >>> task.start()
        >>> ...
        >>> await task.stop()
    """

    def __init__(self, store: PortalStore, config: CleanupConfig) -> None:
        self.store = store
        self.config = config
        self._task: Optional[asyncio.Task] = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Start the loop on the running event loop. No-op if already running."""
        if self.is_running:
            return
        self._task = asyncio.create_task(self._run(), name="invitation-cleanup")
        logger.info(
            "invitation_cleanup_started",
            interval_seconds=self.config.interval_seconds,
            purge_after_days=self.config.purge_after_days,
        )

    async def stop(self) -> None:
        """Cancel the loop and wait for it to finish."""
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("invitation_cleanup_stopped")

    async def run_once(self) -> Dict[str, int]:
        return await cleanup_expired_invitations(
            self.store, purge_after_days=self.config.purge_after_days
        )

    async def _run(self) -> None:
        while True:
            try:
                await self.run_once()
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.error("invitation_cleanup_failed", error=str(e))
            await asyncio.sleep(self.config.interval_seconds)
