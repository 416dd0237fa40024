from fastapi import APIRouter, Depends, Security
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from app.modules.auth.schemas import (
    LoginRequest, RegisterRequest, TokenResponse, RegisterResponse,
    ForgotPasswordRequest, MessageResponse
)
from app.modules.auth.service import AuthService
from app.core.dependencies import get_auth_service, get_current_user, get_onboarding_service
from app.modules.onboarding.service import OnboardingService
from typing import Dict

router = APIRouter(prefix="/auth", tags=["auth"])

# Security scheme for JWT Bearer token
security = HTTPBearer()


def get_current_token(
    credentials: HTTPAuthorizationCredentials = Security(security)
) -> str:
    """Extract JWT token from Authorization header"""
    return credentials.credentials


@router.post("/register", response_model=RegisterResponse, status_code=201)
async def register(
    register_data: RegisterRequest,
    service: AuthService = Depends(get_auth_service)
):
    """Register a new user"""
    return service.register(register_data)


@router.post("/login", response_model=TokenResponse)
async def login(
    login_data: LoginRequest,
    service: AuthService = Depends(get_auth_service)
):
    """Login and get access token"""
    return service.login(login_data)


@router.post("/logout", status_code=200)
async def logout(
    token: str = Depends(get_current_token),
    service: AuthService = Depends(get_auth_service)
):
    """Logout and invalidate token"""
    service.logout(token)
    return {"message": "Logged out successfully"}


@router.post("/forgot-password", response_model=MessageResponse)
async def forgot_password(
    request: ForgotPasswordRequest,
    service: AuthService = Depends(get_auth_service)
):
    """Send a password reset link"""
    service.send_password_reset(request.email)
    return MessageResponse(message="Check your email for the password reset link")


@router.get("/me")
async def get_me(
    current_user: Dict = Depends(get_current_user),
    onboarding: OnboardingService = Depends(get_onboarding_service),
):
    """Current user plus onboarding state (for the frontend router)."""
    progress = onboarding.get_progress(current_user["id"])
    organization = onboarding.organizations.get_user_organization(current_user["id"])
    return {
        **current_user,
        "has_organization": organization is not None,
        "organization_id": organization.id if organization else None,
        "onboarding_step": progress.current_step if progress else None,
    }
