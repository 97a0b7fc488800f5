"""
Organizations, invitations and members.

Provides:
    GET    /organizations                                   - Organization list
    POST   /api/organizations/create                        - Create an organization
    POST   /api/organizations/switch/{id}                   - Change the current organization
    POST   /api/organizations/join                          - Redeem an invitation code
    GET    /organizations/{slug}/settings                   - Owner settings page
    POST   /api/organizations/{id}/invitations              - Issue an invitation
    DELETE /api/organizations/{org}/invitations/{inv}       - Cancel an invitation
    DELETE /api/organizations/{org}/members/{membership}    - Remove a member
"""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse, Response

from services.portal.components.organizations import (
    organization_manager,
    organization_settings,
)
from services.portal.deps import current_context, form_values, get_state
from services.portal.responses import is_htmx, render_page, toast_response
from services.portal.state import AppState
from transnet.portal.access import AuthContext
from transnet.portal.errors import PermissionDeniedError, parse_form
from transnet.portal.organizations import InvitationForm, OrganizationForm

router = APIRouter()


async def _settings_redirect(
    request: Request, state: AppState, organization_id: str, message: str
) -> Response:
    organization = await state.organizations.get_organization(organization_id)
    return toast_response(
        request, message, redirect=f"/organizations/{organization.slug}/settings"
    )


@router.get("/organizations", response_class=HTMLResponse)
async def organizations_page(
    request: Request,
    context: AuthContext = Depends(current_context),
    state: AppState = Depends(get_state),
) -> HTMLResponse:
    organizations = await state.organizations.list_user_organizations(context.user)
    return render_page(
        request,
        "TransNet - Organizations",
        organization_manager(organizations, context.organization),
        context.user,
    )


@router.post("/api/organizations/create")
async def create_organization(
    request: Request,
    context: AuthContext = Depends(current_context),
    state: AppState = Depends(get_state),
) -> Response:
    form = parse_form(OrganizationForm, await form_values(request))
    await state.organizations.create_organization(context, form)
    return toast_response(request, "Organization created successfully", redirect="/dashboard")


@router.post("/api/organizations/switch/{organization_id}")
async def switch_organization(
    organization_id: str,
    request: Request,
    context: AuthContext = Depends(current_context),
    state: AppState = Depends(get_state),
) -> Response:
    await state.organizations.switch_organization(context, organization_id)
    return toast_response(request, "Switched organization successfully", redirect="/dashboard")


@router.post("/api/organizations/join")
async def join_organization(
    request: Request,
    context: AuthContext = Depends(current_context),
    state: AppState = Depends(get_state),
) -> Response:
    values = await form_values(request)
    await state.organizations.join_organization(context, values.get("invitation_code"))
    return toast_response(request, "Successfully joined organization", redirect="/dashboard")


@router.get("/organizations/{slug}/settings", response_class=HTMLResponse)
async def settings_page(
    slug: str,
    request: Request,
    context: AuthContext = Depends(current_context),
    state: AppState = Depends(get_state),
) -> Response:
    """
    Members and pending invitations, for the owner only.

    Other members are sent back to the organization list.
    """
    try:
        settings = await state.organizations.settings_view(context, slug)
    except PermissionDeniedError as e:
        if not is_htmx(request):
            raise
        return toast_response(
            request, e.message, "error", status_code=403, redirect="/organizations"
        )

    return render_page(
        request,
        f"TransNet - {settings.organization.name} Settings",
        organization_settings(settings),
        context.user,
    )


@router.post("/api/organizations/{organization_id}/invitations")
async def create_invitation(
    organization_id: str,
    request: Request,
    context: AuthContext = Depends(current_context),
    state: AppState = Depends(get_state),
) -> Response:
    form = parse_form(InvitationForm, await form_values(request))
    await state.organizations.create_invitation(context, organization_id, form)
    return await _settings_redirect(
        request, state, organization_id, "Invitation created successfully"
    )


@router.delete("/api/organizations/{organization_id}/invitations/{invitation_id}")
async def cancel_invitation(
    organization_id: str,
    invitation_id: str,
    request: Request,
    context: AuthContext = Depends(current_context),
    state: AppState = Depends(get_state),
) -> Response:
    await state.organizations.cancel_invitation(context, organization_id, invitation_id)
    return await _settings_redirect(request, state, organization_id, "Invitation cancelled")


@router.delete("/api/organizations/{organization_id}/members/{membership_id}")
async def remove_member(
    organization_id: str,
    membership_id: str,
    request: Request,
    context: AuthContext = Depends(current_context),
    state: AppState = Depends(get_state),
) -> Response:
    await state.organizations.remove_member(context, organization_id, membership_id)
    return await _settings_redirect(
        request, state, organization_id, "Member removed successfully"
    )
