from supabase import Client
from app.config import settings
from app.config.onboarding_config import IMAGE_EXTENSIONS, get_asset_rules
from app.modules.uploads.schemas import AssetKind, UploadResponse, PreviewResponse
from app.modules.uploads.s3_storage import S3Storage
from typing import Optional
from fastapi import HTTPException
import base64
import logging
import uuid

logger = logging.getLogger(__name__)


def validate_image(content: bytes, content_type: Optional[str], kind: AssetKind) -> None:
    """Size first, then type; raises 400 with a message fit for the form"""
    rules = get_asset_rules(kind.value)
    if not content:
        raise HTTPException(status_code=400, detail="File is empty")
    if len(content) > rules["max_bytes"]:
        raise HTTPException(status_code=400, detail=f"File size must be less than {rules['max_label']}")
    if content_type not in rules["content_types"]:
        raise HTTPException(status_code=400, detail="Only JPG, PNG, and GIF files are allowed")


def preview_data_url(content: bytes, content_type: str) -> str:
    return f"data:{content_type};base64,{base64.b64encode(content).decode('ascii')}"


def file_extension(content_type: str) -> str:
    return IMAGE_EXTENSIONS[content_type]


class UploadService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

        # S3 when credentials are available, Supabase Storage otherwise
        self.s3_storage = None
        if settings.s3_configured:
            try:
                self.s3_storage = S3Storage()
            except Exception as e:
                logger.warning(f"S3 storage initialization failed ({str(e)}), will use Supabase Storage")
                self.s3_storage = None

    def preview(self, kind: AssetKind, content: bytes, content_type: Optional[str]) -> PreviewResponse:
        """Validate without storing and echo the image back as a data URL"""
        validate_image(content, content_type, kind)
        return PreviewResponse(
            kind=kind,
            data_url=preview_data_url(content, content_type),
            content_type=content_type,
            size=len(content)
        )

    def upload(
        self,
        kind: AssetKind,
        content: bytes,
        content_type: Optional[str],
        filename: Optional[str],
        owner_id: str
    ) -> UploadResponse:
        """Validate and store an image; returns its public URL"""
        validate_image(content, content_type, kind)
        bucket = get_asset_rules(kind.value)["bucket"]
        path = f"{owner_id}/{uuid.uuid4().hex}{file_extension(content_type)}"

        if self.s3_storage:
            key = f"{bucket}/{path}"
            logger.info(f"Uploading {filename or kind.value} to S3: {key}")
            try:
                public_url = self.s3_storage.upload_file(content, key, content_type)
            except Exception as e:
                logger.error(f"S3 upload failed: {str(e)}")
                raise HTTPException(status_code=500, detail=f"Failed to upload to S3: {str(e)}")
        else:
            logger.info(f"Uploading {filename or kind.value} to Supabase Storage: {bucket}/{path}")
            try:
                self.supabase.storage.from_(bucket).upload(
                    path,
                    content,
                    file_options={"content-type": content_type}
                )
                public_url = self.supabase.storage.from_(bucket).get_public_url(path)
            except Exception as e:
                logger.error(f"Supabase Storage upload failed: {str(e)}")
                raise HTTPException(status_code=500, detail="Failed to upload file")

        return UploadResponse(
            kind=kind,
            path=path,
            public_url=public_url,
            content_type=content_type,
            size=len(content)
        )
