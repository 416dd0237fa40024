from fastapi import APIRouter, Depends, HTTPException
from app.config.onboarding_config import STEPS
from app.modules.onboarding.schemas import (
    ProgressResponse, ProgressUpdate, StepNavigation, StartResponse,
    OrganizationStepResult, ProfileStepResult, InviteStepRequest, InviteStepResult,
    WorkspaceStepResult
)
from app.modules.onboarding.service import OnboardingService
from app.modules.organizations.schemas import OrganizationCreate
from app.modules.profiles.schemas import ProfileUpsert
from app.modules.workspaces.schemas import WorkspaceCreate
from app.core.dependencies import get_current_user, get_onboarding_service
from typing import Dict, List

router = APIRouter(prefix="/onboarding", tags=["onboarding"])


@router.get("/steps", response_model=List[Dict[str, str]])
async def list_steps():
    """Wizard steps, in order"""
    return STEPS


@router.get("/progress", response_model=ProgressResponse)
async def get_progress(
    user_data: Dict = Depends(get_current_user),
    service: OnboardingService = Depends(get_onboarding_service)
):
    progress = service.get_progress(user_data["id"])
    if not progress:
        raise HTTPException(status_code=404, detail="Onboarding has not been started")
    return progress


@router.put("/progress", response_model=ProgressResponse)
async def save_progress(
    progress_data: ProgressUpdate,
    user_data: Dict = Depends(get_current_user),
    service: OnboardingService = Depends(get_onboarding_service)
):
    """Overwrite the caller's progress row"""
    return service.save_progress(user_data["id"], progress_data.current_step, progress_data.completed_steps)


@router.post("/start", response_model=StartResponse)
async def start_onboarding(
    user_data: Dict = Depends(get_current_user),
    service: OnboardingService = Depends(get_onboarding_service)
):
    """Initialise (or resume) the wizard for the caller"""
    return service.start(user_data)


@router.post("/organization", response_model=OrganizationStepResult)
async def submit_organization(
    org_data: OrganizationCreate,
    user_data: Dict = Depends(get_current_user),
    service: OnboardingService = Depends(get_onboarding_service)
):
    return service.submit_organization(user_data, org_data)


@router.post("/profile", response_model=ProfileStepResult)
async def submit_profile(
    profile_data: ProfileUpsert,
    user_data: Dict = Depends(get_current_user),
    service: OnboardingService = Depends(get_onboarding_service)
):
    return service.submit_profile(user_data, profile_data)


@router.post("/invite", response_model=InviteStepResult)
async def submit_invites(
    request: InviteStepRequest,
    user_data: Dict = Depends(get_current_user),
    service: OnboardingService = Depends(get_onboarding_service)
):
    """Send invitations; `failed` lists the addresses that could not be mailed"""
    return service.submit_invites(user_data, request)


@router.post("/invite/skip", response_model=ProgressResponse)
async def skip_invites(
    user_data: Dict = Depends(get_current_user),
    service: OnboardingService = Depends(get_onboarding_service)
):
    return service.skip_invites(user_data["id"])


@router.post("/workspace", response_model=WorkspaceStepResult)
async def submit_workspace(
    workspace_data: WorkspaceCreate,
    user_data: Dict = Depends(get_current_user),
    service: OnboardingService = Depends(get_onboarding_service)
):
    return service.submit_workspace(user_data, workspace_data)


@router.post("/workspace/skip", response_model=ProgressResponse)
async def skip_workspace(
    user_data: Dict = Depends(get_current_user),
    service: OnboardingService = Depends(get_onboarding_service)
):
    return service.skip_workspace(user_data["id"])


@router.post("/navigate", response_model=ProgressResponse)
async def navigate(
    navigation: StepNavigation,
    user_data: Dict = Depends(get_current_user),
    service: OnboardingService = Depends(get_onboarding_service)
):
    """Jump back to a completed step"""
    return service.navigate(user_data["id"], navigation.step)


@router.post("/back", response_model=ProgressResponse)
async def go_back(
    user_data: Dict = Depends(get_current_user),
    service: OnboardingService = Depends(get_onboarding_service)
):
    """Previous step of the wizard"""
    return service.back(user_data["id"])
