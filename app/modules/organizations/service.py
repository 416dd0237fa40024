from supabase import Client
from app.database.supabase_client import first_row
from app.modules.organizations.schemas import (
    OrganizationCreate, OrganizationUpdate, OrganizationResponse, OrganizationMemberResponse
)
from typing import List, Optional
from fastapi import HTTPException
from datetime import datetime, timezone
import logging

logger = logging.getLogger(__name__)


class OrganizationService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def create_organization(self, org_data: OrganizationCreate, user_id: str) -> OrganizationResponse:
        """Create an organization and make the creator its owner"""
        try:
            result = self.supabase.table("organizations").insert({
                "name": org_data.name,
                "domain": org_data.domain,
                "logo_url": org_data.logo_url
            }).execute()

            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create organization")

            organization = OrganizationResponse(**result.data[0])
            self.add_member(organization.id, user_id, is_owner=True)
            logger.info("Organization %s created by %s", organization.id, user_id)
            return organization
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_organization(self, organization_id: str) -> OrganizationResponse:
        """Get organization by ID"""
        try:
            row = first_row(self.supabase.table("organizations")
                .select("*")
                .eq("id", organization_id)
                .limit(1)
                .execute())
            if not row:
                raise HTTPException(status_code=404, detail="Organization not found")
            return OrganizationResponse(**row)
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def update_organization(self, organization_id: str, org_data: OrganizationUpdate) -> OrganizationResponse:
        """Update organization"""
        try:
            update_data = {"updated_at": datetime.now(timezone.utc).isoformat()}
            if org_data.name:
                update_data["name"] = org_data.name
            if org_data.domain is not None:
                update_data["domain"] = org_data.domain
            if org_data.logo_url is not None:
                update_data["logo_url"] = org_data.logo_url

            result = self.supabase.table("organizations")\
                .update(update_data)\
                .eq("id", organization_id)\
                .execute()

            if not result.data:
                raise HTTPException(status_code=404, detail="Organization not found")

            return OrganizationResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def find_by_domain(self, domain: str) -> Optional[OrganizationResponse]:
        """Find the organization registered for an email domain"""
        try:
            row = first_row(self.supabase.table("organizations")
                .select("*")
                .eq("domain", domain.strip().lower())
                .limit(1)
                .execute())
            return OrganizationResponse(**row) if row else None
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_user_organization(self, user_id: str) -> Optional[OrganizationResponse]:
        """First organization the user belongs to, or None"""
        try:
            membership = first_row(self.supabase.table("organization_members")
                .select("organization_id")
                .eq("user_id", user_id)
                .limit(1)
                .execute())
            if not membership:
                return None
            return self.get_organization(membership["organization_id"])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_membership(self, user_id: str, organization_id: str) -> Optional[dict]:
        try:
            return first_row(self.supabase.table("organization_members")
                .select("*")
                .eq("user_id", user_id)
                .eq("organization_id", organization_id)
                .limit(1)
                .execute())
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def is_member(self, user_id: str, organization_id: str) -> bool:
        """Membership row, or a profile attached to the organization"""
        if self.get_membership(user_id, organization_id):
            return True
        try:
            profile = first_row(self.supabase.table("profiles")
                .select("id")
                .eq("user_id", user_id)
                .eq("organization_id", organization_id)
                .limit(1)
                .execute())
            return profile is not None
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def is_owner(self, user_id: str, organization_id: str) -> bool:
        membership = self.get_membership(user_id, organization_id)
        return bool(membership and membership.get("is_owner"))

    def add_member(self, organization_id: str, user_id: str, is_owner: bool = False) -> OrganizationMemberResponse:
        """Add a member; returns the existing membership when there already is one"""
        try:
            existing = self.get_membership(user_id, organization_id)
            if existing:
                return OrganizationMemberResponse(**existing)

            result = self.supabase.table("organization_members").insert({
                "user_id": user_id,
                "organization_id": organization_id,
                "role": "owner" if is_owner else "member",
                "is_owner": is_owner
            }).execute()

            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to add organization member")

            return OrganizationMemberResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def list_members(self, organization_id: str) -> List[OrganizationMemberResponse]:
        """List all members of an organization"""
        try:
            result = self.supabase.table("organization_members")\
                .select("*")\
                .eq("organization_id", organization_id)\
                .order("created_at")\
                .execute()
            return [OrganizationMemberResponse(**member) for member in result.data]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))


def email_domain(email: Optional[str]) -> Optional[str]:
    """Domain part of an email address, lower-cased"""
    if not email or "@" not in email:
        return None
    return email.rsplit("@", 1)[1].strip().lower() or None
