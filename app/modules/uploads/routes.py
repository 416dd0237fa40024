from fastapi import APIRouter, Depends, UploadFile, File
from app.database.supabase_client import get_supabase
from app.modules.uploads.schemas import AssetKind, UploadResponse, PreviewResponse
from app.modules.uploads.service import UploadService
from app.core.dependencies import get_current_user
from supabase import Client
from typing import Dict

router = APIRouter(prefix="/uploads", tags=["uploads"])


def get_upload_service(supabase: Client = Depends(get_supabase)) -> UploadService:
    return UploadService(supabase)


@router.post("/{kind}", response_model=UploadResponse, status_code=201)
async def upload_image(
    kind: AssetKind,
    file: UploadFile = File(...),
    user_data: Dict = Depends(get_current_user),
    service: UploadService = Depends(get_upload_service)
):
    """
    Upload an avatar or logo. JPG, PNG or GIF, max 800KB by default.
    Returns the public URL to store on the profile, organization or workspace.
    """
    content = await file.read()
    return service.upload(kind, content, file.content_type, file.filename, user_data["id"])


@router.post("/{kind}/preview", response_model=PreviewResponse)
async def preview_image(
    kind: AssetKind,
    file: UploadFile = File(...),
    user_data: Dict = Depends(get_current_user),
    service: UploadService = Depends(get_upload_service)
):
    """Validate an image and return it as a data URL without storing it"""
    content = await file.read()
    return service.preview(kind, content, file.content_type)
