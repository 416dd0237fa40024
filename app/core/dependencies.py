"""
Core dependencies for authentication and organization access checks
"""

from fastapi import Depends, HTTPException, Security, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from app.database.supabase_client import get_supabase, get_service_supabase
from app.modules.auth.service import AuthService
from app.modules.organizations.service import OrganizationService
from app.modules.onboarding.service import OnboardingService
from supabase import Client
from typing import Dict
import logging

logger = logging.getLogger(__name__)

security = HTTPBearer()


def get_auth_service(supabase: Client = Depends(get_supabase)) -> AuthService:
    return AuthService(supabase)


def get_organization_service(supabase: Client = Depends(get_supabase)) -> OrganizationService:
    return OrganizationService(supabase)


def get_onboarding_service(supabase: Client = Depends(get_supabase)) -> OnboardingService:
    return OnboardingService(supabase)


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Security(security),
    auth_service: AuthService = Depends(get_auth_service)
) -> dict:
    """Extract current user info from JWT token"""
    token = credentials.credentials
    return auth_service.get_current_user(token)


def check_organization_member(organization_id: str, user_data: Dict, supabase: Client) -> Dict:
    """Raise 403 unless the user belongs to the organization"""
    service = OrganizationService(supabase)
    if not service.is_member(user_data["id"], organization_id):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You must be a member of this organization"
        )
    return user_data


def check_organization_owner(organization_id: str, user_data: Dict, supabase: Client) -> Dict:
    """Raise 404 for unknown organizations and 403 unless the user owns it"""
    service = OrganizationService(supabase)
    service.get_organization(organization_id)
    if not service.is_owner(user_data["id"], organization_id):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only the organization owner can perform this action"
        )
    return user_data


def require_organization_member(
    organization_id: str,
    user_data: Dict = Depends(get_current_user),
    supabase: Client = Depends(get_service_supabase)
) -> Dict:
    """Route dependency for /organizations/{organization_id}/... endpoints"""
    return check_organization_member(organization_id, user_data, supabase)


def require_organization_owner(
    organization_id: str,
    user_data: Dict = Depends(get_current_user),
    supabase: Client = Depends(get_service_supabase)
) -> Dict:
    return check_organization_owner(organization_id, user_data, supabase)
