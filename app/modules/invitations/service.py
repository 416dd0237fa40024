from supabase import Client
from app.config import settings
from app.database.supabase_client import first_row
from app.modules.invitations.schemas import (
    InvitationResponse, PendingInvitationResponse, InvitationSendResult,
    UserInvitationStatus, InviterInfoResponse
)
from typing import Iterable, List, Optional, Tuple, Union
from fastapi import HTTPException
from datetime import datetime, timedelta, timezone
from urllib.parse import urlencode
import logging
import re

logger = logging.getLogger(__name__)

UUID_PATTERN = re.compile(r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$", re.IGNORECASE)


def is_valid_uuid(value: str) -> bool:
    return bool(UUID_PATTERN.match(value or ""))


def derive_numeric_id(uuid_value: str) -> int:
    """Integer id guessed from a UUID: first 8 hex digits, modulo one million.

    Older rows were written with serial integer user ids; this is the mapping the
    frontend used when a UUID lookup came back empty.
    """
    return int(uuid_value.replace("-", "")[:8], 16) % 1_000_000


def normalize_email(email: str) -> str:
    return email.strip().lower()


def _is_pending(invitation: InvitationResponse, now: datetime) -> bool:
    if invitation.accepted:
        return False
    if invitation.expires_at is None:
        return True
    expires_at = invitation.expires_at
    if expires_at.tzinfo is None:
        expires_at = expires_at.replace(tzinfo=timezone.utc)
    return expires_at > now


class InvitationService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def signup_url(self, email: str, organization_id: str, inviter_id: Optional[str] = None) -> str:
        """Registration link carried by the invitation email"""
        query = urlencode({
            "invitation": "true",
            "organization": organization_id,
            "ib": inviter_id or "none",
            "email": email,
        })
        return f"{settings.frontend_url('register')}?{query}"

    def invite_link(self, organization_id: str) -> str:
        """Shareable link that lets anyone register into the organization"""
        return f"{settings.frontend_url('register')}?{urlencode({'invitation': organization_id})}"

    def find_invitation(self, email: str, organization_id: str) -> Optional[InvitationResponse]:
        """Latest invitation row for the pair, accepted or not"""
        try:
            row = first_row(self.supabase.table("invitations")
                .select("*")
                .eq("email", normalize_email(email))
                .eq("organization_id", organization_id)
                .order("created_at", desc=True)
                .limit(1)
                .execute())
            return InvitationResponse(**row) if row else None
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def add_invitation(
        self,
        email: str,
        organization_id: str,
        invited_by: Optional[str] = None,
        auto_join: bool = True
    ) -> Tuple[InvitationResponse, bool]:
        """Insert an invitation unless a pending one exists for the pair. Returns (invitation, already_existed).

        An expired or accepted row for the pair is reopened with a fresh expiry.
        """
        try:
            now = datetime.now(timezone.utc)
            existing = self.find_invitation(email, organization_id)
            if existing and _is_pending(existing, now):
                return existing, True

            values = {
                "invited_by": invited_by,
                "auto_join": auto_join,
                "accepted": False,
                "expires_at": (now + timedelta(days=settings.invitation_ttl_days)).isoformat()
            }
            if existing:
                result = self.supabase.table("invitations")\
                    .update(values)\
                    .eq("id", existing.id)\
                    .execute()
                logger.info("Reopened invitation %s for %s", existing.id, existing.email)
            else:
                values.update({"email": normalize_email(email), "organization_id": organization_id})
                result = self.supabase.table("invitations").insert(values).execute()

            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create invitation")

            return InvitationResponse(**result.data[0]), False
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def send_invitation(
        self,
        email: str,
        organization_id: str,
        inviter_email: Optional[str],
        inviter_id: Optional[str] = None,
        auto_join: bool = True
    ) -> None:
        """Record the invitation and mail the registration link.

        The row insert is best effort: when it fails the email is still sent.
        """
        email = normalize_email(email)
        try:
            self.add_invitation(email, organization_id, inviter_email, auto_join)
        except HTTPException as e:
            logger.error(f"Error inserting invitation for {email}: {e.detail}")

        # No transactional mail provider: Supabase's password-reset mail carries the link
        try:
            self.supabase.auth.reset_password_for_email(email, {
                "redirect_to": self.signup_url(email, organization_id, inviter_id)
            })
        except Exception as e:
            logger.error(f"Error sending invitation email to {email}: {e}")
            raise HTTPException(
                status_code=500,
                detail=str(e) or "Failed to send invitation email. Please try again later."
            )
        logger.info("Invitation to organization %s sent to %s", organization_id, email)

    def send_invitations(
        self,
        emails: Iterable[str],
        organization_id: str,
        inviter_email: Optional[str],
        inviter_id: Optional[str] = None,
        auto_join: bool = True
    ) -> InvitationSendResult:
        """Send one invitation per distinct email and report which ones went out"""
        results = InvitationSendResult(success=[], failed=[])
        seen = set()
        for raw_email in emails:
            email = normalize_email(raw_email)
            if not email or email in seen:
                continue
            seen.add(email)
            try:
                self.send_invitation(email, organization_id, inviter_email, inviter_id, auto_join)
                results.success.append(email)
            except HTTPException:
                results.failed.append(email)
        return results

    def check_invitation(self, email: str, organization_id: str) -> Optional[InvitationResponse]:
        """Pending invitation for the pair, or None"""
        try:
            result = self.supabase.table("invitations")\
                .select("*")\
                .eq("email", normalize_email(email))\
                .eq("organization_id", organization_id)\
                .eq("accepted", False)\
                .execute()
            now = datetime.now(timezone.utc)
            for row in result.data or []:
                invitation = InvitationResponse(**row)
                if _is_pending(invitation, now):
                    return invitation
            return None
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def check_user_invitations(self, email: Optional[str]) -> UserInvitationStatus:
        """First pending invitation addressed to an email"""
        if not email:
            return UserInvitationStatus(has_invitation=False)
        pending = self.list_pending_invitations(email)
        if not pending:
            return UserInvitationStatus(has_invitation=False)
        return UserInvitationStatus(
            has_invitation=True,
            organization_id=pending[0].organization_id,
            invited_by=pending[0].invited_by
        )

    def mark_accepted(self, email: str, organization_id: str) -> bool:
        """Mark every invitation for the pair as accepted"""
        try:
            result = self.supabase.table("invitations")\
                .update({"accepted": True})\
                .eq("email", normalize_email(email))\
                .eq("organization_id", organization_id)\
                .execute()
            accepted = bool(result.data)
            if accepted:
                logger.info("Invitation for %s to organization %s marked as accepted", email, organization_id)
            return accepted
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def list_organization_invitations(self, organization_id: str) -> List[InvitationResponse]:
        """All invitations of an organization, newest first"""
        try:
            result = self.supabase.table("invitations")\
                .select("*")\
                .eq("organization_id", organization_id)\
                .order("created_at", desc=True)\
                .execute()
            return [InvitationResponse(**row) for row in result.data]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def list_pending_invitations(self, email: str) -> List[PendingInvitationResponse]:
        """Pending invitations for an email, with the inviting organization's name and logo"""
        try:
            result = self.supabase.table("invitations")\
                .select("*")\
                .eq("email", normalize_email(email))\
                .eq("accepted", False)\
                .order("created_at", desc=True)\
                .execute()
            now = datetime.now(timezone.utc)
            pending = [
                PendingInvitationResponse(**row) for row in result.data or []
                if _is_pending(InvitationResponse(**row), now)
            ]
            if not pending:
                return []

            org_ids = list({invitation.organization_id for invitation in pending})
            orgs_result = self.supabase.table("organizations")\
                .select("id, name, logo_url")\
                .in_("id", org_ids)\
                .execute()
            organizations = {org["id"]: org for org in orgs_result.data or []}
            for invitation in pending:
                org = organizations.get(invitation.organization_id)
                if org:
                    invitation.organization_name = org.get("name")
                    invitation.organization_logo_url = org.get("logo_url")
            return pending
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def _profile_email(self, user_id: Union[str, int]) -> Optional[str]:
        # PostgREST rejects ids of the wrong type for the column; that is a miss
        try:
            row = first_row(self.supabase.table("profiles")
                .select("email")
                .eq("user_id", user_id)
                .limit(1)
                .execute())
        except Exception as e:
            logger.debug("profiles lookup failed for %s: %s", user_id, e)
            return None
        return row.get("email") if row else None

    def _user_email(self, user_id: str) -> Optional[str]:
        try:
            row = first_row(self.supabase.table("users")
                .select("email")
                .eq("id", user_id)
                .limit(1)
                .execute())
        except Exception as e:
            logger.warning("users table lookup failed for %s: %s", user_id, e)
            return None
        return row.get("email") if row else None

    def get_inviter_info(self, inviter_id: str) -> InviterInfoResponse:
        """Resolve the email of the user behind an `ib` link parameter.

        Ids arrive either as auth UUIDs or as legacy serial integers, and profile
        rows were written with both schemes. Lookup order: profiles.user_id as
        given, then (UUIDs only) the derived numeric id, then users.id.
        """
        inviter_id = (inviter_id or "").strip()
        is_uuid = is_valid_uuid(inviter_id)
        if not is_uuid and not inviter_id.isdigit():
            raise HTTPException(status_code=400, detail="Invalid user ID format")

        email = self._profile_email(inviter_id)
        if not email and is_uuid:
            numeric_id = derive_numeric_id(inviter_id)
            logger.debug("No profile for %s, retrying with derived id %s", inviter_id, numeric_id)
            email = self._profile_email(numeric_id)
        if not email:
            email = self._user_email(inviter_id)
        if not email:
            raise HTTPException(status_code=404, detail="User not found")
        return InviterInfoResponse(inviter_id=inviter_id, email=email)
