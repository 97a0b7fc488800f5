"""
Organizations, memberships and invitations.

Users create organizations (becoming their owner), switch between the
organizations they belong to, and join others with an invitation code.
Owners invite and remove members.
"""

import re
from datetime import timedelta
from typing import List, Optional, Tuple

import structlog
from pydantic import BaseModel, Field, field_validator

from transnet.models.records import (
    Invitation,
    InvitationStatus,
    Membership,
    MembershipRole,
    MembershipStatus,
    Organization,
    User,
    utc_now,
)
from transnet.portal.access import AuthContext, require_role
from transnet.portal.accounts import EMAIL_PATTERN
from transnet.portal.errors import (
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
    PortalError,
)
from transnet.portal.security import generate_invitation_code
from transnet.storage.postgres_client import PortalStore

logger = structlog.get_logger(__name__)

SLUG_PATTERN = re.compile(r"^[a-z0-9-]+$")
INVITABLE_ROLES = (MembershipRole.MEMBER, MembershipRole.ADMIN)


class OrganizationForm(BaseModel):
    """New organization form fields."""

    model_config = {"frozen": True, "str_strip_whitespace": True}

    name: str
    slug: str
    description: Optional[str] = None

    @field_validator("name", mode="before")
    @classmethod
    def name_required(cls, v: Optional[str]) -> str:
        if v is None or not str(v).strip():
            raise ValueError("Name is required")
        return v

    @field_validator("slug", mode="before")
    @classmethod
    def slug_required(cls, v: Optional[str]) -> str:
        if v is None or not str(v).strip():
            raise ValueError("Slug is required")
        return v

    @field_validator("slug")
    @classmethod
    def slug_format(cls, v: str) -> str:
        if not SLUG_PATTERN.match(v):
            raise ValueError("Slug must be lowercase letters, numbers, and hyphens only")
        return v

    @field_validator("description", mode="before")
    @classmethod
    def blank_description(cls, v: Optional[str]) -> Optional[str]:
        if v is None or not str(v).strip():
            return None
        return v


class InvitationForm(BaseModel):
    """Invitation form fields."""

    model_config = {"frozen": True, "str_strip_whitespace": True}

    email: str
    role: MembershipRole = MembershipRole.MEMBER

    @field_validator("email", mode="before")
    @classmethod
    def check_email(cls, v: Optional[str]) -> str:
        if v is None or not EMAIL_PATTERN.match(str(v).strip()):
            raise ValueError("Invalid email address")
        return str(v).strip().lower()

    @field_validator("role", mode="before")
    @classmethod
    def invitable_role(cls, v: Optional[str]) -> MembershipRole:
        if v is None or not str(v).strip():
            return MembershipRole.MEMBER
        if str(v) not in {r.value for r in INVITABLE_ROLES}:
            raise ValueError("Role must be member or admin")
        return MembershipRole(str(v))


class MemberEntry(BaseModel):
    """A member row on the settings page."""

    model_config = {"frozen": True}

    membership: Membership
    user: User


class OrganizationSettings(BaseModel):
    """Data for the owner-only settings page."""

    model_config = {"frozen": True}

    organization: Organization
    members: List[MemberEntry] = Field(default_factory=list)
    invitations: List[Invitation] = Field(default_factory=list)


class OrganizationService:
    """
    Organization lifecycle operations.

    Example:
        >>> service = OrganizationService(store, invitation_ttl_days=7)
        >>> org = await service.create_organization(
        ...     context, OrganizationForm(name="Treasury", slug="treasury"))
        >>> invitation = await service.create_invitation(
        ...     context, org.id, InvitationForm(email="ops@example.com"))
    """

    def __init__(self, store: PortalStore, invitation_ttl_days: int = 7) -> None:
        self.store = store
        self.invitation_ttl = timedelta(days=invitation_ttl_days)

    async def get_organization(self, organization_id: str) -> Organization:
        organization = await self.store.get_organization(organization_id)
        if organization is None:
            raise NotFoundError("Organization not found")
        return organization

    async def list_user_organizations(
        self, user: User
    ) -> List[Tuple[Organization, Membership]]:
        """Organizations the user is an active member of, with the membership."""
        return await self.store.list_user_organizations(user.id)

    async def create_organization(
        self, context: AuthContext, form: OrganizationForm
    ) -> Organization:
        """
        Create an organization owned by the caller and make it current.

        Raises:
            ConflictError: If the slug is taken.
        """
        if await self.store.get_organization_by_slug(form.slug) is not None:
            raise ConflictError("Organization slug already exists")

        organization = Organization(
            name=form.name,
            slug=form.slug,
            description=form.description,
            owner_id=context.user.id,
        )
        owner = Membership(
            user_id=context.user.id,
            organization_id=organization.id,
            role=MembershipRole.OWNER,
            status=MembershipStatus.ACTIVE,
        )
        await self.store.create_organization(organization, owner)
        await self.store.set_current_organization(context.user.id, organization.id)

        logger.info(
            "organization_created",
            organization_id=organization.id,
            slug=organization.slug,
            owner_id=context.user.id,
        )
        return organization

    async def switch_organization(self, context: AuthContext, organization_id: str) -> None:
        """
        Make another organization current.

        Raises:
            PermissionDeniedError: If the caller is not an active member.
        """
        membership = await self.store.get_membership(context.user.id, organization_id)
        if membership is None or membership.status != MembershipStatus.ACTIVE:
            raise PermissionDeniedError("User is not a member of this organization")
        await self.store.set_current_organization(context.user.id, organization_id)
        logger.info(
            "organization_switched", user_id=context.user.id, organization_id=organization_id
        )

    async def join_organization(self, context: AuthContext, code: Optional[str]) -> Organization:
        """
        Redeem an invitation code.

        Expired invitations are marked expired on the way out. The joined
        organization becomes current only when the caller has none.

        Raises:
            PortalError: For missing, unknown, or expired codes.
            ConflictError: If the caller is already a member.
        """
        code = (code or "").strip()
        if not code:
            raise PortalError("Invitation code is required")

        invitation = await self.store.get_pending_invitation_by_token(code)
        if invitation is None:
            raise PortalError("Invalid or expired invitation code")

        now = utc_now()
        if invitation.is_expired(now):
            await self.store.update_invitation_status(invitation.id, InvitationStatus.EXPIRED)
            raise PortalError("Invitation has expired")

        existing = await self.store.get_membership(context.user.id, invitation.organization_id)
        if existing is not None:
            raise ConflictError("You are already a member of this organization")

        membership = Membership(
            user_id=context.user.id,
            organization_id=invitation.organization_id,
            role=invitation.role,
            status=MembershipStatus.ACTIVE,
        )
        await self.store.accept_invitation(invitation, membership, now)

        if not context.user.current_organization_id:
            await self.store.set_current_organization(
                context.user.id, invitation.organization_id
            )

        logger.info(
            "invitation_accepted",
            invitation_id=invitation.id,
            organization_id=invitation.organization_id,
            user_id=context.user.id,
        )
        return await self.get_organization(invitation.organization_id)

    async def settings_view(self, context: AuthContext, slug: str) -> OrganizationSettings:
        """
        Members and pending invitations of an organization, for its owner.

        Raises:
            NotFoundError: If the slug does not exist.
            PermissionDeniedError: If the caller is not the owner.
        """
        organization = await self.store.get_organization_by_slug(slug)
        if organization is None:
            raise NotFoundError("Organization not found")

        await require_role(
            self.store,
            context.user,
            organization.id,
            [MembershipRole.OWNER],
            message="Only organization owners can access settings",
        )

        members = await self.store.list_members(organization.id)
        invitations = await self.store.list_pending_invitations(organization.id)
        return OrganizationSettings(
            organization=organization,
            members=[MemberEntry(membership=m, user=u) for m, u in members],
            invitations=invitations,
        )

    async def create_invitation(
        self, context: AuthContext, organization_id: str, form: InvitationForm
    ) -> Invitation:
        """
        Issue an invitation code expiring after the configured TTL.

        Raises:
            PermissionDeniedError: If the caller is not the owner.
        """
        await require_role(
            self.store,
            context.user,
            organization_id,
            [MembershipRole.OWNER],
            message="Only owners can invite members",
        )

        invitation = Invitation(
            organization_id=organization_id,
            invited_by=context.user.id,
            email=form.email,
            role=form.role,
            token=generate_invitation_code(),
            status=InvitationStatus.PENDING,
            expires_at=utc_now() + self.invitation_ttl,
        )
        return await self.store.create_invitation(invitation)

    async def cancel_invitation(
        self, context: AuthContext, organization_id: str, invitation_id: str
    ) -> None:
        await require_role(
            self.store,
            context.user,
            organization_id,
            [MembershipRole.OWNER],
            message="Only owners can manage invitations",
        )

        invitation = await self.store.get_invitation(organization_id, invitation_id)
        if invitation is None:
            raise NotFoundError("Invitation not found")

        await self.store.update_invitation_status(invitation.id, InvitationStatus.CANCELLED)
        logger.info(
            "invitation_cancelled", invitation_id=invitation.id, organization_id=organization_id
        )

    async def remove_member(
        self, context: AuthContext, organization_id: str, membership_id: str
    ) -> None:
        """
        Remove a member from the organization.

        Owners cannot be removed. If the removed user had this organization
        selected, their current organization is cleared.

        Raises:
            PermissionDeniedError: If the caller is not the owner.
            PortalError: If the membership is unknown or belongs to an owner.
        """
        await require_role(
            self.store,
            context.user,
            organization_id,
            [MembershipRole.OWNER],
            message="Only owners can remove members",
        )

        target = await self.store.get_membership_by_id(organization_id, membership_id)
        if target is None or target.role == MembershipRole.OWNER:
            raise PortalError("Cannot remove this member")

        await self.store.delete_membership(organization_id, membership_id)
        await self.store.clear_current_organization(target.user_id, organization_id)
        logger.info(
            "member_removed",
            organization_id=organization_id,
            membership_id=membership_id,
            user_id=target.user_id,
        )
