"""
Background tasks owned by the application lifespan.
"""

from transnet.tasks.invitation_cleanup import (
    InvitationCleanupTask,
    cleanup_expired_invitations,
)

__all__ = [
    "InvitationCleanupTask",
    "cleanup_expired_invitations",
]
