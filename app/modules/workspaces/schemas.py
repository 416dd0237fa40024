from pydantic import BaseModel, Field, field_validator
from typing import Optional
from datetime import datetime


class WorkspaceCreate(BaseModel):
    name: str = Field(..., min_length=2, max_length=50)
    organization_id: Optional[str] = None  # defaults to the caller's organization
    logo_url: Optional[str] = None

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, value):
        return value.strip() if isinstance(value, str) else value


class WorkspaceResponse(BaseModel):
    id: str
    name: str
    organization_id: str
    created_by: Optional[str] = None
    logo_url: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
