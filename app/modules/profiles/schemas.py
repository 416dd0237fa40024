from pydantic import BaseModel, Field, field_validator
from typing import Optional, Tuple
from datetime import datetime


def split_full_name(full_name: str) -> Tuple[str, str]:
    """First whitespace-separated token is the first name, the rest the last name."""
    parts = full_name.split()
    if not parts:
        return "", ""
    return parts[0], " ".join(parts[1:])


class ProfileUpsert(BaseModel):
    full_name: str = Field(..., min_length=2, max_length=100)
    job_title: Optional[str] = Field(None, max_length=100)
    avatar_url: Optional[str] = None

    @field_validator("full_name", "job_title", mode="before")
    @classmethod
    def strip_text(cls, value):
        return value.strip() if isinstance(value, str) else value


class ProfileResponse(BaseModel):
    id: str
    user_id: str
    organization_id: Optional[str] = None
    name: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    job_title: Optional[str] = None
    avatar_url: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
