from pydantic import BaseModel, EmailStr, Field
from typing import Optional, List
from datetime import datetime


class InvitationBulkCreate(BaseModel):
    emails: List[EmailStr] = Field(..., min_length=1)
    auto_join: bool = True


class InvitationResponse(BaseModel):
    id: str
    email: str
    organization_id: str
    invited_by: Optional[str] = None
    accepted: bool = False
    auto_join: bool = True
    created_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class PendingInvitationResponse(InvitationResponse):
    organization_name: Optional[str] = None
    organization_logo_url: Optional[str] = None


class InvitationSendResult(BaseModel):
    success: List[str] = []
    failed: List[str] = []


class InvitationCheckResponse(BaseModel):
    exists: bool
    invitation: Optional[InvitationResponse] = None


class UserInvitationStatus(BaseModel):
    has_invitation: bool
    organization_id: Optional[str] = None
    invited_by: Optional[str] = None


class InviterInfoResponse(BaseModel):
    inviter_id: str
    email: str


class InviteLinkResponse(BaseModel):
    url: str
