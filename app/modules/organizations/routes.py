from fastapi import APIRouter, Depends, HTTPException, Query
from app.database.supabase_client import get_service_supabase
from app.modules.organizations.schemas import (
    OrganizationCreate, OrganizationUpdate, OrganizationResponse,
    OrganizationLookupResponse, OrganizationMemberResponse, MembershipCheckResponse
)
from app.modules.organizations.service import OrganizationService, email_domain
from app.core.dependencies import (
    get_current_user, get_organization_service,
    require_organization_member, require_organization_owner
)
from supabase import Client
from typing import List, Optional, Dict

router = APIRouter(prefix="/organizations", tags=["organizations"])


@router.post("", response_model=OrganizationResponse, status_code=201)
async def create_organization(
    org_data: OrganizationCreate,
    user_data: Dict = Depends(get_current_user),
    service: OrganizationService = Depends(get_organization_service)
):
    """Create an organization; the caller becomes its owner"""
    return service.create_organization(org_data, user_data["id"])


@router.get("/mine", response_model=OrganizationResponse)
async def get_my_organization(
    user_data: Dict = Depends(get_current_user),
    service: OrganizationService = Depends(get_organization_service)
):
    """Organization the caller belongs to"""
    organization = service.get_user_organization(user_data["id"])
    if not organization:
        raise HTTPException(status_code=404, detail="You do not belong to an organization yet")
    return organization


@router.get("/lookup", response_model=OrganizationLookupResponse)
async def lookup_organization(
    domain: Optional[str] = None,
    user_data: Dict = Depends(get_current_user),
    service: OrganizationService = Depends(get_organization_service)
):
    """Find an organization by domain (defaults to the caller's email domain)"""
    domain = (domain or email_domain(user_data.get("email")) or "").strip().lower()
    if not domain:
        raise HTTPException(status_code=400, detail="A domain is required")
    organization = service.find_by_domain(domain)
    return OrganizationLookupResponse(domain=domain, found=organization is not None, organization=organization)


@router.get("/{organization_id}", response_model=OrganizationResponse)
async def get_organization(
    organization_id: str,
    user_data: Dict = Depends(require_organization_member),
    service: OrganizationService = Depends(get_organization_service)
):
    """Get organization by ID (members only)"""
    return service.get_organization(organization_id)


@router.put("/{organization_id}", response_model=OrganizationResponse)
async def update_organization(
    organization_id: str,
    org_data: OrganizationUpdate,
    user_data: Dict = Depends(require_organization_owner),
    service: OrganizationService = Depends(get_organization_service)
):
    """Update organization (owner only)"""
    return service.update_organization(organization_id, org_data)


@router.get("/{organization_id}/members", response_model=List[OrganizationMemberResponse])
async def list_members(
    organization_id: str,
    user_data: Dict = Depends(require_organization_member),
    service: OrganizationService = Depends(get_organization_service)
):
    """List members of an organization (members only)"""
    return service.list_members(organization_id)


@router.get("/{organization_id}/check-membership", response_model=MembershipCheckResponse)
async def check_membership(
    organization_id: str,
    user_id: Optional[str] = Query(None, alias="userId"),
    user_data: Dict = Depends(get_current_user),
    supabase: Client = Depends(get_service_supabase)
):
    """Whether `userId` belongs to the organization"""
    if not organization_id or not user_id:
        raise HTTPException(status_code=400, detail="Missing required parameters")
    return MembershipCheckResponse(is_member=OrganizationService(supabase).is_member(user_id, organization_id))
