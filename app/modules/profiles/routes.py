from fastapi import APIRouter, Depends, HTTPException
from app.database.supabase_client import get_supabase
from app.modules.profiles.schemas import ProfileUpsert, ProfileResponse
from app.modules.profiles.service import ProfileService
from app.modules.organizations.service import OrganizationService
from app.core.dependencies import get_current_user, get_organization_service
from supabase import Client
from typing import Dict

router = APIRouter(prefix="/profiles", tags=["profiles"])


def get_profile_service(supabase: Client = Depends(get_supabase)) -> ProfileService:
    return ProfileService(supabase)


@router.get("/me", response_model=ProfileResponse)
async def get_my_profile(
    user_data: Dict = Depends(get_current_user),
    service: ProfileService = Depends(get_profile_service)
):
    """Current user's profile"""
    profile = service.get_profile(user_data["id"])
    if not profile:
        raise HTTPException(status_code=404, detail="Profile not found")
    return profile


@router.put("/me", response_model=ProfileResponse)
async def upsert_my_profile(
    profile_data: ProfileUpsert,
    user_data: Dict = Depends(get_current_user),
    service: ProfileService = Depends(get_profile_service),
    organizations: OrganizationService = Depends(get_organization_service)
):
    """Create or update the current user's profile in their organization"""
    organization = organizations.get_user_organization(user_data["id"])
    if not organization:
        raise HTTPException(status_code=400, detail="Missing organization information")
    return service.upsert_profile(user_data["id"], user_data.get("email"), organization.id, profile_data)
