from datetime import timedelta

import pytest

from transnet.models.records import (
    Invitation,
    InvitationStatus,
    Membership,
    MembershipRole,
    User,
    utc_now,
)
from transnet.portal.access import AuthContext
from transnet.portal.errors import (
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
    PortalError,
    ValidationFailed,
    parse_form,
)
from transnet.portal.organizations import (
    InvitationForm,
    OrganizationForm,
    OrganizationService,
)


@pytest.fixture
def service(store):
    return OrganizationService(store, invitation_ttl_days=7)


@pytest.fixture
def newcomer(store) -> User:
    user = User(username="carol", email="carol@example.com", password_hash="x")
    store.users[user.id] = user
    return user


def invitation(organization, inviter, **overrides) -> Invitation:
    values = {
        "organization_id": organization.id,
        "invited_by": inviter.id,
        "email": "carol@example.com",
        "token": "code-123",
        "expires_at": utc_now() + timedelta(days=1),
    }
    values.update(overrides)
    return Invitation(**values)


@pytest.mark.asyncio
async def test_create_organization_makes_caller_owner(service, store, newcomer):
    org = await service.create_organization(
        AuthContext(user=newcomer), OrganizationForm(name="Ops", slug="ops")
    )

    membership = await store.get_membership(newcomer.id, org.id)
    assert membership.role == MembershipRole.OWNER
    assert store.users[newcomer.id].current_organization_id == org.id


@pytest.mark.asyncio
async def test_duplicate_slug_conflicts(service, context):
    with pytest.raises(ConflictError, match="Organization slug already exists"):
        await service.create_organization(
            context, OrganizationForm(name="Again", slug="treasury")
        )


def test_slug_format_is_validated():
    with pytest.raises(ValidationFailed) as exc_info:
        parse_form(OrganizationForm, {"name": "Ops", "slug": "Not Valid"})
    assert exc_info.value.errors == {
        "slug": "Slug must be lowercase letters, numbers, and hyphens only"
    }


@pytest.mark.asyncio
async def test_switch_requires_membership(service, store, newcomer, organization):
    with pytest.raises(PermissionDeniedError):
        await service.switch_organization(AuthContext(user=newcomer), organization.id)
    assert store.users[newcomer.id].current_organization_id is None


@pytest.mark.asyncio
async def test_join_with_valid_code(service, store, owner, organization, newcomer):
    pending = invitation(organization, owner, role=MembershipRole.ADMIN)
    store.invitations[pending.id] = pending

    joined = await service.join_organization(AuthContext(user=newcomer), " code-123 ")

    assert joined.id == organization.id
    membership = await store.get_membership(newcomer.id, organization.id)
    assert membership.role == MembershipRole.ADMIN
    accepted = store.invitations[pending.id]
    assert accepted.status == InvitationStatus.ACCEPTED
    assert accepted.accepted_by == newcomer.id
    assert store.users[newcomer.id].current_organization_id == organization.id


@pytest.mark.asyncio
async def test_join_keeps_existing_current_organization(
    service, store, owner, organization, newcomer
):
    user = newcomer.model_copy(update={"current_organization_id": "elsewhere"})
    store.users[user.id] = user
    pending = invitation(organization, owner)
    store.invitations[pending.id] = pending

    await service.join_organization(AuthContext(user=user), "code-123")

    assert store.users[user.id].current_organization_id == "elsewhere"


@pytest.mark.asyncio
async def test_join_with_expired_code_marks_it_expired(
    service, store, owner, organization, newcomer
):
    stale = invitation(organization, owner, expires_at=utc_now() - timedelta(minutes=1))
    store.invitations[stale.id] = stale

    with pytest.raises(PortalError, match="Invitation has expired"):
        await service.join_organization(AuthContext(user=newcomer), "code-123")

    assert store.invitations[stale.id].status == InvitationStatus.EXPIRED
    assert await store.get_membership(newcomer.id, organization.id) is None


@pytest.mark.asyncio
async def test_join_rejects_missing_unknown_and_used_codes(
    service, store, owner, organization, newcomer
):
    context = AuthContext(user=newcomer)

    with pytest.raises(PortalError, match="Invitation code is required"):
        await service.join_organization(context, "  ")
    with pytest.raises(PortalError, match="Invalid or expired invitation code"):
        await service.join_organization(context, "nope")

    used = invitation(organization, owner, status=InvitationStatus.ACCEPTED)
    store.invitations[used.id] = used
    with pytest.raises(PortalError, match="Invalid or expired invitation code"):
        await service.join_organization(context, "code-123")


@pytest.mark.asyncio
async def test_join_when_already_member(service, store, owner, organization, context):
    pending = invitation(organization, owner)
    store.invitations[pending.id] = pending

    with pytest.raises(ConflictError):
        await service.join_organization(context, "code-123")


@pytest.mark.asyncio
async def test_settings_are_owner_only(service, store, organization, newcomer):
    member = Membership(user_id=newcomer.id, organization_id=organization.id)
    store.memberships[member.id] = member

    with pytest.raises(PermissionDeniedError, match="Only organization owners can access settings"):
        await service.settings_view(AuthContext(user=newcomer), "treasury")


@pytest.mark.asyncio
async def test_settings_list_members_and_pending_invitations(
    service, store, owner, organization, context
):
    pending = invitation(organization, owner)
    done = invitation(organization, owner, token="other", status=InvitationStatus.ACCEPTED)
    store.invitations[pending.id] = pending
    store.invitations[done.id] = done

    settings = await service.settings_view(context, "treasury")

    assert [m.user.username for m in settings.members] == ["alice"]
    assert [i.id for i in settings.invitations] == [pending.id]


@pytest.mark.asyncio
async def test_settings_for_unknown_slug(service, context):
    with pytest.raises(NotFoundError):
        await service.settings_view(context, "missing")


@pytest.mark.asyncio
async def test_create_invitation_expires_after_ttl(service, organization, context):
    before = utc_now()

    created = await service.create_invitation(
        context, organization.id, InvitationForm(email="Dave@Example.com", role="admin")
    )

    assert created.email == "dave@example.com"
    assert created.role == MembershipRole.ADMIN
    assert created.status == InvitationStatus.PENDING
    assert created.token
    assert created.expires_at - before >= timedelta(days=7)
    assert created.expires_at - before < timedelta(days=7, minutes=1)


def test_invitation_role_cannot_be_owner():
    with pytest.raises(ValidationFailed):
        parse_form(InvitationForm, {"email": "dave@example.com", "role": "owner"})


@pytest.mark.asyncio
async def test_cancel_invitation(service, store, owner, organization, context):
    pending = invitation(organization, owner)
    store.invitations[pending.id] = pending

    await service.cancel_invitation(context, organization.id, pending.id)

    assert store.invitations[pending.id].status == InvitationStatus.CANCELLED
    with pytest.raises(NotFoundError):
        await service.cancel_invitation(context, organization.id, "missing")


@pytest.mark.asyncio
async def test_remove_member_clears_their_current_organization(
    service, store, organization, context, newcomer
):
    store.users[newcomer.id] = newcomer.model_copy(
        update={"current_organization_id": organization.id}
    )
    member = Membership(user_id=newcomer.id, organization_id=organization.id)
    store.memberships[member.id] = member

    await service.remove_member(context, organization.id, member.id)

    assert member.id not in store.memberships
    assert store.users[newcomer.id].current_organization_id is None


@pytest.mark.asyncio
async def test_owner_cannot_be_removed(service, store, organization, context):
    with pytest.raises(PortalError, match="Cannot remove this member"):
        await service.remove_member(context, organization.id, context.membership.id)


@pytest.mark.asyncio
async def test_only_owner_can_remove(service, store, organization, context, newcomer):
    member = Membership(user_id=newcomer.id, organization_id=organization.id)
    store.memberships[member.id] = member

    with pytest.raises(PermissionDeniedError, match="Only owners can remove members"):
        await service.remove_member(
            AuthContext(user=newcomer), organization.id, context.membership.id
        )
