"""
Multi-tenant access layer.

Every request is resolved to an AuthContext: the signed-in user plus the
organization currently selected by that user. Services read and write
organization data only through ``require_organization(context)``, so the
organization id is always part of the query.
"""

from typing import Iterable, Optional

import structlog

from transnet.models.records import (
    Membership,
    MembershipRole,
    MembershipStatus,
    Organization,
    User,
)
from transnet.portal.errors import (
    OrganizationRequiredError,
    PermissionDeniedError,
)
from transnet.portal.security import TokenService
from transnet.storage.postgres_client import PortalStore

logger = structlog.get_logger(__name__)


class AuthContext:
    """Authentication context"""

    def __init__(
        self,
        user: User,
        organization: Optional[Organization] = None,
        membership: Optional[Membership] = None,
    ):
        self.user = user
        self.organization = organization
        self.membership = membership

    @property
    def is_owner(self) -> bool:
        return self.membership is not None and self.membership.role == MembershipRole.OWNER

    def __repr__(self) -> str:
        org = self.organization.slug if self.organization else None
        return f"AuthContext(user={self.user.username}, organization={org})"


async def resolve_context(
    store: PortalStore, tokens: TokenService, token: Optional[str]
) -> Optional[AuthContext]:
    """
    Resolve a session token to an AuthContext.

    The current organization is attached only while the user still holds an
    active membership in it.

    Returns:
        Optional[AuthContext]: None for missing or invalid tokens and for
        unknown or inactive users.
    """
    if not token:
        return None

    try:
        payload = tokens.verify_session_token(token)
    except ValueError as e:
        logger.info("session_token_rejected", error=str(e))
        return None

    user = await store.get_user(payload["sub"])
    if user is None or not user.is_active:
        return None

    organization = None
    membership = None
    if user.current_organization_id:
        membership = await store.get_membership(user.id, user.current_organization_id)
        if membership is not None and membership.status == MembershipStatus.ACTIVE:
            organization = await store.get_organization(user.current_organization_id)
        else:
            membership = None

    return AuthContext(user=user, organization=organization, membership=membership)


def require_organization(context: AuthContext) -> Organization:
    """
    Return the caller's current organization.

    Raises:
        OrganizationRequiredError: If the user has no current organization.
    """
    if context.organization is None:
        raise OrganizationRequiredError()
    return context.organization


async def require_role(
    store: PortalStore,
    user: User,
    organization_id: str,
    roles: Iterable[MembershipRole],
    message: str = "Only organization owners can perform this action",
) -> Membership:
    """
    Ensure the user holds one of the roles in the organization.

    Returns:
        Membership: The user's active membership.

    Raises:
        PermissionDeniedError: If the user is not an active member with
            one of the roles.
    """
    membership = await store.get_membership(user.id, organization_id)
    allowed = set(roles)
    if (
        membership is None
        or membership.status != MembershipStatus.ACTIVE
        or membership.role not in allowed
    ):
        logger.info(
            "permission_denied",
            user_id=user.id,
            organization_id=organization_id,
            required=sorted(r.value for r in allowed),
        )
        raise PermissionDeniedError(message)
    return membership


async def require_owner(store: PortalStore, user: User, organization_id: str) -> Membership:
    """Ensure the user owns the organization."""
    return await require_role(store, user, organization_id, [MembershipRole.OWNER])
