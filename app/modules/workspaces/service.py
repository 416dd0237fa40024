from supabase import Client
from app.database.supabase_client import first_row
from app.modules.workspaces.schemas import WorkspaceCreate, WorkspaceResponse
from typing import List
from fastapi import HTTPException
import logging

logger = logging.getLogger(__name__)


class WorkspaceService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def create_workspace(self, workspace_data: WorkspaceCreate, organization_id: str, user_id: str) -> WorkspaceResponse:
        """Create a workspace in an organization"""
        try:
            result = self.supabase.table("workspaces").insert({
                "name": workspace_data.name,
                "organization_id": organization_id,
                "created_by": user_id,
                "logo_url": workspace_data.logo_url
            }).execute()

            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create workspace")

            workspace = WorkspaceResponse(**result.data[0])
            logger.info("Workspace %s created in organization %s", workspace.id, organization_id)
            return workspace
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_workspace(self, workspace_id: str) -> WorkspaceResponse:
        try:
            row = first_row(self.supabase.table("workspaces")
                .select("*")
                .eq("id", workspace_id)
                .limit(1)
                .execute())
            if not row:
                raise HTTPException(status_code=404, detail="Workspace not found")
            return WorkspaceResponse(**row)
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def list_workspaces(self, organization_id: str, limit: int = 50, offset: int = 0) -> List[WorkspaceResponse]:
        """Workspaces of an organization, newest first"""
        try:
            result = self.supabase.table("workspaces")\
                .select("*")\
                .eq("organization_id", organization_id)\
                .order("created_at", desc=True)\
                .limit(limit)\
                .offset(offset)\
                .execute()
            return [WorkspaceResponse(**workspace) for workspace in result.data]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
