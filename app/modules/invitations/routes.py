from fastapi import APIRouter, Depends, HTTPException
from app.database.supabase_client import get_supabase, get_service_supabase
from app.modules.invitations.schemas import (
    InvitationBulkCreate, InvitationResponse, PendingInvitationResponse, InvitationSendResult,
    InvitationCheckResponse, UserInvitationStatus, InviterInfoResponse, InviteLinkResponse
)
from app.modules.invitations.service import InvitationService
from app.modules.organizations.schemas import OrganizationMemberResponse
from app.modules.organizations.service import OrganizationService
from app.core.dependencies import get_current_user, get_organization_service, require_organization_member
from supabase import Client
from typing import List, Dict

router = APIRouter(tags=["invitations"])


def get_invitation_service(supabase: Client = Depends(get_supabase)) -> InvitationService:
    return InvitationService(supabase)


@router.post(
    "/organizations/{organization_id}/invitations",
    response_model=InvitationSendResult,
    status_code=201
)
async def send_invitations(
    organization_id: str,
    request: InvitationBulkCreate,
    user_data: Dict = Depends(require_organization_member),
    service: InvitationService = Depends(get_invitation_service)
):
    """Invite teammates by email (members only)"""
    return service.send_invitations(
        request.emails, organization_id, user_data.get("email"), user_data["id"], request.auto_join
    )


@router.get("/organizations/{organization_id}/invitations", response_model=List[InvitationResponse])
async def list_organization_invitations(
    organization_id: str,
    user_data: Dict = Depends(require_organization_member),
    service: InvitationService = Depends(get_invitation_service)
):
    """All invitations sent for an organization (members only)"""
    return service.list_organization_invitations(organization_id)


@router.get("/organizations/{organization_id}/invite-link", response_model=InviteLinkResponse)
async def get_invite_link(
    organization_id: str,
    user_data: Dict = Depends(require_organization_member),
    service: InvitationService = Depends(get_invitation_service)
):
    """Shareable registration link for the organization"""
    return InviteLinkResponse(url=service.invite_link(organization_id))


@router.get("/invitations/pending", response_model=List[PendingInvitationResponse])
async def list_my_pending_invitations(
    user_data: Dict = Depends(get_current_user),
    service: InvitationService = Depends(get_invitation_service)
):
    """Pending invitations addressed to the current user's email"""
    if not user_data.get("email"):
        return []
    return service.list_pending_invitations(user_data["email"])


@router.get("/invitations/status", response_model=UserInvitationStatus)
async def get_my_invitation_status(
    user_data: Dict = Depends(get_current_user),
    service: InvitationService = Depends(get_invitation_service)
):
    """Whether the current user has a pending invitation"""
    return service.check_user_invitations(user_data.get("email"))


@router.get("/invitations/check", response_model=InvitationCheckResponse)
async def check_my_invitation(
    organization_id: str,
    user_data: Dict = Depends(get_current_user),
    service: InvitationService = Depends(get_invitation_service)
):
    """Whether the current user holds a pending invitation to an organization"""
    invitation = service.check_invitation(user_data.get("email") or "", organization_id)
    return InvitationCheckResponse(exists=invitation is not None, invitation=invitation)


@router.post("/invitations/{organization_id}/accept", response_model=OrganizationMemberResponse)
async def accept_invitation(
    organization_id: str,
    user_data: Dict = Depends(get_current_user),
    service: InvitationService = Depends(get_invitation_service),
    organizations: OrganizationService = Depends(get_organization_service)
):
    """Join the organization named by a pending invitation"""
    email = user_data.get("email")
    if not email or not service.check_invitation(email, organization_id):
        raise HTTPException(status_code=404, detail="No pending invitation for this organization")
    member = organizations.add_member(organization_id, user_data["id"], is_owner=False)
    service.mark_accepted(email, organization_id)
    return member


@router.get("/invitations/inviters/{inviter_id}", response_model=InviterInfoResponse)
async def get_inviter_info(
    inviter_id: str,
    user_data: Dict = Depends(get_current_user),
    supabase: Client = Depends(get_service_supabase)
):
    """Email of the user who sent an invitation link (the `ib` query parameter)"""
    return InvitationService(supabase).get_inviter_info(inviter_id)
