"""Organization list, create/join forms and the owner settings page."""

from typing import Optional, Sequence, Tuple

from services.portal.components.base import esc
from transnet.models.records import Membership, MembershipRole, Organization
from transnet.portal.organizations import OrganizationSettings


def _organization_card(
    organization: Organization, membership: Membership, current: Optional[Organization]
) -> str:
    is_current = current is not None and current.id == organization.id
    badge = "<span class='badge badge-primary'>Current</span>" if is_current else ""
    switch = (
        ""
        if is_current
        else f"<button class='btn btn-sm' hx-post='/api/organizations/switch/{esc(organization.id)}' "
        "hx-target='#main-content' hx-swap='innerHTML'>Switch</button>"
    )
    settings = (
        f"<button class='btn btn-sm btn-outline' hx-get='/organizations/{esc(organization.slug)}/settings' "
        "hx-target='#main-content' hx-swap='innerHTML'>Settings</button>"
        if membership.role == MembershipRole.OWNER
        else ""
    )
    return (
        "<div class='card bg-base-100 shadow'><div class='card-body'>"
        f"<h3 class='card-title'>{esc(organization.name)} {badge}</h3>"
        f"<p class='text-sm'>{esc(organization.slug)} &middot; {esc(membership.role.value)}</p>"
        f"<p>{esc(organization.description or '')}</p>"
        f"<div class='card-actions justify-end'>{switch}{settings}</div>"
        "</div></div>"
    )


def organization_manager(
    organizations: Sequence[Tuple[Organization, Membership]],
    current: Optional[Organization],
) -> str:
    cards = "".join(_organization_card(o, m, current) for o, m in organizations)
    if not cards:
        cards = "<p>You are not a member of any organization yet.</p>"

    return (
        "<div class='space-y-6'>"
        "<h2 class='text-2xl font-bold'>Your Organizations</h2>"
        f"<div class='grid grid-cols-1 md:grid-cols-2 gap-4'>{cards}</div>"
        "<div class='grid grid-cols-1 md:grid-cols-2 gap-6'>"
        "<div class='card bg-base-200 shadow-xl'><div class='card-body'>"
        "<h3 class='card-title'>Create Organization</h3>"
        "<form hx-post='/api/organizations/create' hx-target='#main-content' hx-swap='innerHTML'>"
        "<input type='text' name='name' placeholder='Organization name' class='input input-bordered w-full mb-2' required />"
        "<input type='text' name='slug' placeholder='organization-slug' pattern='[a-z0-9-]+' "
        "class='input input-bordered w-full mb-2' required />"
        "<textarea name='description' placeholder='Description (optional)' class='textarea textarea-bordered w-full mb-2'></textarea>"
        "<button type='submit' class='btn btn-primary'>Create</button>"
        "</form></div></div>"
        "<div class='card bg-base-200 shadow-xl'><div class='card-body'>"
        "<h3 class='card-title'>Join Organization</h3>"
        "<form hx-post='/api/organizations/join' hx-target='#main-content' hx-swap='innerHTML'>"
        "<input type='text' name='invitation_code' placeholder='Invitation code' class='input input-bordered w-full mb-2' required />"
        "<button type='submit' class='btn btn-secondary'>Join</button>"
        "</form></div></div>"
        "</div></div>"
    )


def organization_settings(settings: OrganizationSettings) -> str:
    organization = settings.organization
    org_id = esc(organization.id)

    member_rows = []
    for entry in settings.members:
        membership, user = entry.membership, entry.user
        remove = (
            ""
            if membership.role == MembershipRole.OWNER
            else f"<button class='btn btn-error btn-xs' hx-delete='/api/organizations/{org_id}/members/{esc(membership.id)}' "
            "hx-confirm='Are you sure you want to remove this member?' "
            "hx-target='#main-content' hx-swap='innerHTML'>Remove</button>"
        )
        member_rows.append(
            "<tr>"
            f"<td>{esc(user.display_name)}</td><td>{esc(user.email)}</td>"
            f"<td>{esc(membership.role.value)}</td><td>{esc(membership.status.value)}</td>"
            f"<td>{remove}</td>"
            "</tr>"
        )

    invitation_rows = [
        "<tr>"
        f"<td>{esc(inv.email)}</td><td>{esc(inv.role.value)}</td>"
        f"<td class='font-mono text-xs'>{esc(inv.token)}</td>"
        f"<td>{esc(inv.expires_at.strftime('%Y-%m-%d'))}</td>"
        f"<td><button class='btn btn-ghost btn-xs' hx-delete='/api/organizations/{org_id}/invitations/{esc(inv.id)}' "
        "hx-confirm='Are you sure you want to cancel this invitation?' "
        "hx-target='#main-content' hx-swap='innerHTML'>Cancel</button></td>"
        "</tr>"
        for inv in settings.invitations
    ]
    if not invitation_rows:
        invitation_rows = ["<tr><td colspan='5' class='text-center'>No pending invitations</td></tr>"]

    return (
        "<div class='space-y-6'>"
        "<div class='flex justify-between items-center'>"
        f"<h2 class='text-2xl font-bold'>{esc(organization.name)} Settings</h2>"
        "<button class='btn btn-ghost btn-sm' hx-get='/organizations' hx-target='#main-content'>Back</button>"
        "</div>"
        "<div class='card bg-base-200 shadow-xl'><div class='card-body'>"
        "<h3 class='card-title'>Members</h3>"
        "<table class='table'><thead><tr><th>Name</th><th>Email</th><th>Role</th><th>Status</th><th></th></tr></thead>"
        f"<tbody>{''.join(member_rows)}</tbody></table>"
        "</div></div>"
        "<div class='card bg-base-200 shadow-xl'><div class='card-body'>"
        "<h3 class='card-title'>Invite Member</h3>"
        f"<form hx-post='/api/organizations/{org_id}/invitations' hx-target='#main-content' hx-swap='innerHTML'>"
        "<input type='email' name='email' placeholder='Email address' class='input input-bordered w-full mb-2' required />"
        "<select name='role' class='select select-bordered mb-2'>"
        "<option value='member'>Member</option><option value='admin'>Admin</option></select>"
        "<button type='submit' class='btn btn-primary'>Create Invitation</button>"
        "</form>"
        "<h3 class='card-title mt-4'>Pending Invitations</h3>"
        "<table class='table'><thead><tr><th>Email</th><th>Role</th><th>Code</th><th>Expires</th><th></th></tr></thead>"
        f"<tbody>{''.join(invitation_rows)}</tbody></table>"
        "</div></div>"
        "</div>"
    )
