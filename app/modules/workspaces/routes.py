from fastapi import APIRouter, Depends, HTTPException
from app.database.supabase_client import get_supabase, get_service_supabase
from app.modules.workspaces.schemas import WorkspaceCreate, WorkspaceResponse
from app.modules.workspaces.service import WorkspaceService
from app.modules.organizations.service import OrganizationService
from app.core.dependencies import get_current_user, check_organization_member
from supabase import Client
from typing import List, Optional, Dict

router = APIRouter(prefix="/workspaces", tags=["workspaces"])


def get_workspace_service(supabase: Client = Depends(get_supabase)) -> WorkspaceService:
    return WorkspaceService(supabase)


def resolve_organization_id(organization_id: Optional[str], user_data: Dict, supabase: Client) -> str:
    """Explicit organization (membership checked) or the caller's own"""
    if organization_id:
        check_organization_member(organization_id, user_data, supabase)
        return organization_id
    organization = OrganizationService(supabase).get_user_organization(user_data["id"])
    if not organization:
        raise HTTPException(status_code=400, detail="Missing organization information")
    return organization.id


@router.post("", response_model=WorkspaceResponse, status_code=201)
async def create_workspace(
    workspace_data: WorkspaceCreate,
    user_data: Dict = Depends(get_current_user),
    service: WorkspaceService = Depends(get_workspace_service),
    supabase: Client = Depends(get_service_supabase)
):
    """Create a workspace in an organization the caller belongs to"""
    organization_id = resolve_organization_id(workspace_data.organization_id, user_data, supabase)
    return service.create_workspace(workspace_data, organization_id, user_data["id"])


@router.get("", response_model=List[WorkspaceResponse])
async def list_workspaces(
    organization_id: Optional[str] = None,
    limit: int = 50,
    offset: int = 0,
    user_data: Dict = Depends(get_current_user),
    service: WorkspaceService = Depends(get_workspace_service),
    supabase: Client = Depends(get_service_supabase)
):
    """List an organization's workspaces (defaults to the caller's organization)"""
    organization_id = resolve_organization_id(organization_id, user_data, supabase)
    return service.list_workspaces(organization_id, limit=limit, offset=offset)


@router.get("/{workspace_id}", response_model=WorkspaceResponse)
async def get_workspace(
    workspace_id: str,
    user_data: Dict = Depends(get_current_user),
    service: WorkspaceService = Depends(get_workspace_service),
    supabase: Client = Depends(get_service_supabase)
):
    """Get a workspace (members of its organization only)"""
    workspace = service.get_workspace(workspace_id)
    check_organization_member(workspace.organization_id, user_data, supabase)
    return workspace
