from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional
from datetime import datetime

ORGANIZATION_NAME_PATTERN = r"^[a-zA-Z0-9\s.-]+$"
DOMAIN_PATTERN = r"^[a-z0-9.-]+$"


def _clean_domain(value):
    if isinstance(value, str):
        value = value.strip().lower()
        return value or None
    return value


class OrganizationCreate(BaseModel):
    name: str = Field(..., min_length=2, max_length=50, pattern=ORGANIZATION_NAME_PATTERN)
    domain: Optional[str] = Field(None, min_length=3, max_length=50, pattern=DOMAIN_PATTERN)
    logo_url: Optional[str] = None

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, value):
        return value.strip() if isinstance(value, str) else value

    @field_validator("domain", mode="before")
    @classmethod
    def normalize_domain(cls, value):
        return _clean_domain(value)


class OrganizationUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2, max_length=50, pattern=ORGANIZATION_NAME_PATTERN)
    domain: Optional[str] = Field(None, min_length=3, max_length=50, pattern=DOMAIN_PATTERN)
    logo_url: Optional[str] = None

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, value):
        return value.strip() if isinstance(value, str) else value

    @field_validator("domain", mode="before")
    @classmethod
    def normalize_domain(cls, value):
        return _clean_domain(value)


class OrganizationResponse(BaseModel):
    id: str
    name: str
    domain: Optional[str] = None
    logo_url: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class OrganizationLookupResponse(BaseModel):
    domain: str
    found: bool
    organization: Optional[OrganizationResponse] = None


class OrganizationMemberResponse(BaseModel):
    id: str
    user_id: str
    organization_id: str
    role: str = "member"
    is_owner: bool = False
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class MembershipCheckResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    is_member: bool = Field(..., alias="isMember")
