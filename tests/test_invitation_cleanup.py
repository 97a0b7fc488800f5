import asyncio
from datetime import timedelta
from unittest.mock import AsyncMock

import pytest

from transnet.config.models import CleanupConfig
from transnet.models.records import Invitation, InvitationStatus, utc_now
from transnet.tasks import InvitationCleanupTask, cleanup_expired_invitations


def invitation(expires_in: timedelta, status=InvitationStatus.PENDING) -> Invitation:
    return Invitation(
        organization_id="org",
        invited_by="user",
        email="someone@example.com",
        token=str(expires_in),
        status=status,
        expires_at=utc_now() + expires_in,
    )


@pytest.fixture
def invitations(store):
    rows = {
        "fresh": invitation(timedelta(days=1)),
        "lapsed": invitation(timedelta(hours=-1)),
        "old": invitation(timedelta(days=-40), InvitationStatus.EXPIRED),
        "accepted": invitation(timedelta(days=-40), InvitationStatus.ACCEPTED),
    }
    for row in rows.values():
        store.invitations[row.id] = row
    return rows


@pytest.mark.asyncio
async def test_pass_expires_pending_and_purges_old(store, invitations):
    result = await cleanup_expired_invitations(store, purge_after_days=30)

    assert result == {"expired": 1, "deleted": 1}
    assert store.invitations[invitations["fresh"].id].status == InvitationStatus.PENDING
    assert store.invitations[invitations["lapsed"].id].status == InvitationStatus.EXPIRED
    assert invitations["old"].id not in store.invitations
    assert invitations["accepted"].id in store.invitations


@pytest.mark.asyncio
async def test_task_runs_immediately_and_stops_cleanly(store, invitations):
    task = InvitationCleanupTask(store, CleanupConfig(interval_seconds=3600))

    task.start()
    assert task.is_running
    await asyncio.sleep(0)
    await asyncio.sleep(0)

    assert store.invitations[invitations["lapsed"].id].status == InvitationStatus.EXPIRED

    await task.stop()
    assert not task.is_running


@pytest.mark.asyncio
async def test_start_twice_keeps_one_loop(store):
    task = InvitationCleanupTask(store, CleanupConfig(interval_seconds=3600))

    task.start()
    first = task._task
    task.start()

    assert task._task is first
    await task.stop()


@pytest.mark.asyncio
async def test_stop_without_start_is_noop(store):
    await InvitationCleanupTask(store, CleanupConfig()).stop()


@pytest.mark.asyncio
async def test_failed_pass_does_not_end_the_loop(store):
    task = InvitationCleanupTask(store, CleanupConfig(interval_seconds=1))
    task.run_once = AsyncMock(side_effect=[RuntimeError("db down"), asyncio.CancelledError()])

    with pytest.raises(asyncio.CancelledError):
        await task._run()

    assert task.run_once.await_count == 2
