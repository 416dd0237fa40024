from enum import Enum
from pydantic import BaseModel


class AssetKind(str, Enum):
    avatar = "avatar"
    organization_logo = "organization-logo"
    workspace_logo = "workspace-logo"


class UploadResponse(BaseModel):
    kind: AssetKind
    path: str
    public_url: str
    content_type: str
    size: int


class PreviewResponse(BaseModel):
    kind: AssetKind
    data_url: str
    content_type: str
    size: int
