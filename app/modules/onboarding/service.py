from supabase import Client
from app.config.onboarding_config import COMPLETE_STEP, STEP_IDS, next_step, previous_step, is_known_step
from app.database.supabase_client import first_row
from app.modules.onboarding.schemas import (
    ProgressResponse, StartResponse, OrganizationStepResult, ProfileStepResult,
    InviteStepRequest, InviteStepResult, WorkspaceStepResult
)
from app.modules.organizations.schemas import (
    OrganizationCreate, OrganizationUpdate, OrganizationResponse, DOMAIN_PATTERN
)
from app.modules.organizations.service import OrganizationService, email_domain
from app.modules.profiles.schemas import ProfileUpsert
from app.modules.profiles.service import ProfileService
from app.modules.invitations.service import InvitationService
from app.modules.workspaces.schemas import WorkspaceCreate
from app.modules.workspaces.service import WorkspaceService
from typing import Dict, Iterable, List, Optional
from fastapi import HTTPException
from datetime import datetime, timezone
import logging
import re

logger = logging.getLogger(__name__)


def _dedupe(steps: Iterable[str]) -> List[str]:
    return list(dict.fromkeys(steps))


class OnboardingService:
    """Drives the onboarding wizard: organization, profile, invite, workspace.

    Each submit persists the step's data through the owning service, then
    upserts the user's onboarding_progress row. Steps are not transactional:
    if the progress write fails the step's data stays written.
    """

    def __init__(self, supabase: Client):
        self.supabase = supabase
        self.organizations = OrganizationService(supabase)
        self.profiles = ProfileService(supabase)
        self.invitations = InvitationService(supabase)
        self.workspaces = WorkspaceService(supabase)

    def get_progress(self, user_id: str) -> Optional[ProgressResponse]:
        """The user's progress row, or None before the wizard was started"""
        try:
            row = first_row(self.supabase.table("onboarding_progress")
                .select("*")
                .eq("user_id", user_id)
                .limit(1)
                .execute())
            return ProgressResponse(**row) if row else None
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def save_progress(self, user_id: str, current_step: str, completed_steps: Iterable[str]) -> ProgressResponse:
        """Upsert the progress row (one per user)"""
        completed_steps = _dedupe(completed_steps)
        for step in [current_step, *completed_steps]:
            if not is_known_step(step):
                raise HTTPException(status_code=422, detail=f"Unknown onboarding step: {step}")
        try:
            result = self.supabase.table("onboarding_progress").upsert({
                "user_id": user_id,
                "current_step": current_step,
                "completed_steps": completed_steps,
                "updated_at": datetime.now(timezone.utc).isoformat()
            }, on_conflict="user_id").execute()

            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to save onboarding progress")

            return ProgressResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error saving onboarding progress for {user_id}: {e}")
            raise HTTPException(status_code=500, detail=str(e))

    def complete_step(self, user_id: str, step: str) -> ProgressResponse:
        """Mark `step` completed and move to the step after it.

        Repeating a step the user has already moved past (a double submit, a
        stale tab) leaves the current step where it is.
        """
        progress = self.get_progress(user_id)
        if progress and step in progress.completed_steps and progress.current_step != step:
            return progress
        completed = progress.completed_steps if progress else []
        return self.save_progress(user_id, next_step(step), [*completed, step])

    def _require_step(self, user_id: str, step: str) -> ProgressResponse:
        """409 unless `step` is the current step or an already completed one"""
        progress = self.get_progress(user_id)
        if not progress:
            raise HTTPException(status_code=404, detail="Onboarding has not been started")
        if step != progress.current_step and step not in progress.completed_steps:
            raise HTTPException(status_code=409, detail=f"Step '{step}' is not available yet")
        return progress

    def _require_organization(self, user_id: str) -> OrganizationResponse:
        organization = self.organizations.get_user_organization(user_id)
        if not organization:
            raise HTTPException(status_code=400, detail="Missing organization information")
        return organization

    def start(self, user_data: Dict) -> StartResponse:
        """Create the progress row on first visit; later visits return it unchanged"""
        user_id = user_data["id"]
        invited = False

        # Auto-join invitations are honoured as soon as the invitee shows up
        status = self.invitations.check_user_invitations(user_data.get("email"))
        if status.has_invitation:
            invited = True
            pending = self.invitations.check_invitation(user_data["email"], status.organization_id)
            if pending and pending.auto_join and not self.organizations.is_member(user_id, status.organization_id):
                self.organizations.add_member(status.organization_id, user_id)
                self.invitations.mark_accepted(user_data["email"], status.organization_id)
                logger.info("User %s auto-joined organization %s", user_id, status.organization_id)

        organization = self.organizations.get_user_organization(user_id)
        progress = self.get_progress(user_id)
        if not progress:
            if organization or invited:
                progress = self.save_progress(user_id, "profile", ["organization"])
            else:
                progress = self.save_progress(user_id, "organization", [])

        return StartResponse(progress=progress, organization=organization, invited=invited)

    def submit_organization(self, user_data: Dict, org_data: OrganizationCreate) -> OrganizationStepResult:
        """Create the caller's organization, or update it when they already own one"""
        user_id = user_data["id"]
        organization = self.organizations.get_user_organization(user_id)

        if organization:
            if not self.organizations.is_owner(user_id, organization.id):
                raise HTTPException(status_code=403, detail="Only the organization owner can perform this action")
            organization = self.organizations.update_organization(
                organization.id,
                OrganizationUpdate(**org_data.model_dump())
            )
        else:
            if org_data.domain is None:
                domain = email_domain(user_data.get("email"))
                if domain and 3 <= len(domain) <= 50 and re.match(DOMAIN_PATTERN, domain):
                    org_data = org_data.model_copy(update={"domain": domain})
            organization = self.organizations.create_organization(org_data, user_id)

        progress = self.complete_step(user_id, "organization")
        return OrganizationStepResult(progress=progress, organization=organization)

    def submit_profile(self, user_data: Dict, profile_data: ProfileUpsert) -> ProfileStepResult:
        """Save the profile; invited users finish the wizard here"""
        user_id = user_data["id"]
        email = user_data.get("email")

        status = self.invitations.check_user_invitations(email)
        if status.has_invitation:
            self.organizations.add_member(status.organization_id, user_id)
            organization_id = status.organization_id
            invited = True
        else:
            organization = self._require_organization(user_id)
            organization_id = organization.id
            # Joined through an invitation accepted on start
            invited = not self.organizations.is_owner(user_id, organization_id)

        profile = self.profiles.upsert_profile(user_id, email, organization_id, profile_data)

        if status.has_invitation:
            self.invitations.mark_accepted(email, organization_id)

        progress = self.get_progress(user_id)
        if invited and not (progress and progress.current_step == COMPLETE_STEP):
            completed = [*(progress.completed_steps if progress else []), "profile"]
            progress = self.save_progress(user_id, COMPLETE_STEP, completed)
        else:
            progress = self.complete_step(user_id, "profile")

        return ProfileStepResult(progress=progress, profile=profile, invited=invited)

    def submit_invites(self, user_data: Dict, request: InviteStepRequest) -> InviteStepResult:
        """Invite teammates; the step only counts as done when one invite went out"""
        user_id = user_data["id"]
        organization = self._require_organization(user_id)
        self._require_step(user_id, "invite")

        sent = self.invitations.send_invitations(
            request.emails,
            organization.id,
            inviter_email=user_data.get("email"),
            inviter_id=user_id,
            auto_join=request.auto_join
        )

        if sent.success:
            progress = self.complete_step(user_id, "invite")
        else:
            logger.warning("No invitation could be sent for user %s", user_id)
            progress = self.get_progress(user_id)

        return InviteStepResult(progress=progress, success=sent.success, failed=sent.failed)

    def skip_invites(self, user_id: str) -> ProgressResponse:
        self._require_step(user_id, "invite")
        return self.complete_step(user_id, "invite")

    def submit_workspace(self, user_data: Dict, workspace_data: WorkspaceCreate) -> WorkspaceStepResult:
        """Create the first workspace and finish the wizard"""
        user_id = user_data["id"]
        if workspace_data.organization_id:
            if not self.organizations.is_member(user_id, workspace_data.organization_id):
                raise HTTPException(status_code=403, detail="You must be a member of this organization")
            organization_id = workspace_data.organization_id
        else:
            organization_id = self._require_organization(user_id).id
        self._require_step(user_id, "workspace")

        workspace = self.workspaces.create_workspace(workspace_data, organization_id, user_id)
        progress = self.complete_step(user_id, "workspace")
        return WorkspaceStepResult(progress=progress, workspace=workspace)

    def skip_workspace(self, user_id: str) -> ProgressResponse:
        self._require_step(user_id, "workspace")
        return self.complete_step(user_id, "workspace")

    def navigate(self, user_id: str, step: str) -> ProgressResponse:
        """Go back to a completed step (or stay on the current one)"""
        progress = self._require_step(user_id, step)
        return self.save_progress(user_id, step, progress.completed_steps)

    def back(self, user_id: str) -> ProgressResponse:
        """Nearest completed step before the current one; invited users skipped some"""
        progress = self.get_progress(user_id)
        if not progress:
            raise HTTPException(status_code=404, detail="Onboarding has not been started")
        step = progress.current_step
        while step != STEP_IDS[0]:
            step = previous_step(step)
            if step in progress.completed_steps:
                return self.save_progress(user_id, step, progress.completed_steps)
        return progress
