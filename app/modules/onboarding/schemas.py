from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Optional, List
from datetime import datetime
from app.config.onboarding_config import is_known_step
from app.modules.organizations.schemas import OrganizationResponse
from app.modules.profiles.schemas import ProfileResponse
from app.modules.workspaces.schemas import WorkspaceResponse


def _check_step(step: str) -> str:
    if not is_known_step(step):
        raise ValueError(f"Unknown onboarding step: {step}")
    return step


class ProgressResponse(BaseModel):
    user_id: str
    current_step: str
    completed_steps: List[str] = []
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ProgressUpdate(BaseModel):
    current_step: str
    completed_steps: List[str] = []

    @field_validator("current_step")
    @classmethod
    def known_step(cls, value):
        return _check_step(value)

    @field_validator("completed_steps")
    @classmethod
    def known_steps(cls, value):
        return [_check_step(step) for step in value]


class StepNavigation(BaseModel):
    step: str

    @field_validator("step")
    @classmethod
    def known_step(cls, value):
        return _check_step(value)


class StartResponse(BaseModel):
    progress: ProgressResponse
    organization: Optional[OrganizationResponse] = None
    invited: bool = False


class OrganizationStepResult(BaseModel):
    progress: ProgressResponse
    organization: OrganizationResponse


class ProfileStepResult(BaseModel):
    progress: ProgressResponse
    profile: ProfileResponse
    invited: bool = False


class InviteStepRequest(BaseModel):
    emails: List[EmailStr] = Field(..., min_length=1)
    auto_join: bool = True


class InviteStepResult(BaseModel):
    progress: Optional[ProgressResponse] = None
    success: List[str] = []
    failed: List[str] = []


class WorkspaceStepResult(BaseModel):
    progress: ProgressResponse
    workspace: WorkspaceResponse
