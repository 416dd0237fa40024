from supabase import Client
from app.database.supabase_client import first_row
from app.modules.profiles.schemas import ProfileUpsert, ProfileResponse, split_full_name
from typing import Optional
from fastapi import HTTPException
from datetime import datetime, timezone


class ProfileService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def get_profile(self, user_id: str) -> Optional[ProfileResponse]:
        """Profile for a user, or None"""
        try:
            row = first_row(self.supabase.table("profiles")
                .select("*")
                .eq("user_id", user_id)
                .limit(1)
                .execute())
            return ProfileResponse(**row) if row else None
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def upsert_profile(
        self,
        user_id: str,
        email: Optional[str],
        organization_id: str,
        profile_data: ProfileUpsert
    ) -> ProfileResponse:
        """Create the profile, or update the existing one (moving it to `organization_id`)"""
        try:
            first_name, last_name = split_full_name(profile_data.full_name)
            values = {
                "name": profile_data.full_name,
                "first_name": first_name,
                "last_name": last_name,
            }
            if profile_data.job_title is not None:
                values["job_title"] = profile_data.job_title
            if profile_data.avatar_url is not None:
                values["avatar_url"] = profile_data.avatar_url

            existing = self.get_profile(user_id)
            if existing:
                values["organization_id"] = organization_id
                values["updated_at"] = datetime.now(timezone.utc).isoformat()
                result = self.supabase.table("profiles")\
                    .update(values)\
                    .eq("id", existing.id)\
                    .execute()
            else:
                values.update({
                    "user_id": user_id,
                    "organization_id": organization_id,
                    "email": email,
                })
                result = self.supabase.table("profiles").insert(values).execute()

            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to save profile")

            return ProfileResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

