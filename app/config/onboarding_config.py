"""
Onboarding Configuration
Defines the wizard steps shown to a new user and the upload rules for the
images collected along the way (avatars, organization and workspace logos).
"""

from app.config.settings import settings

# Wizard steps, in order
STEPS = [
    {
        "id": "organization",
        "label": "Organization",
        "description": "Create or confirm your organization"
    },
    {
        "id": "profile",
        "label": "Profile",
        "description": "Complete your profile"
    },
    {
        "id": "invite",
        "label": "Invite",
        "description": "Invite your teammates"
    },
    {
        "id": "workspace",
        "label": "Workspace",
        "description": "Create your first workspace"
    }
]

STEP_IDS = [step["id"] for step in STEPS]

# Stored in current_step once every step is done
COMPLETE_STEP = "complete"

# Stored objects are named after the content type, never the client filename
IMAGE_EXTENSIONS = {
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "image/gif": ".gif",
}

IMAGE_CONTENT_TYPES = list(IMAGE_EXTENSIONS)

# Upload rules per asset kind
ASSET_KINDS = {
    "avatar": {
        "bucket": settings.avatars_bucket,
        "label": "Profile picture",
        "content_types": IMAGE_CONTENT_TYPES,
    },
    "organization-logo": {
        "bucket": settings.organization_logos_bucket,
        "label": "Organization logo",
        "content_types": IMAGE_CONTENT_TYPES,
    },
    "workspace-logo": {
        "bucket": settings.workspace_assets_bucket,
        "label": "Workspace logo",
        "content_types": IMAGE_CONTENT_TYPES,
    },
}


def next_step(step: str) -> str:
    """Step that follows `step`; the last step is followed by COMPLETE_STEP."""
    index = STEP_IDS.index(step)
    if index + 1 < len(STEP_IDS):
        return STEP_IDS[index + 1]
    return COMPLETE_STEP


def previous_step(step: str) -> str:
    if step == COMPLETE_STEP:
        return STEP_IDS[-1]
    index = STEP_IDS.index(step)
    return STEP_IDS[max(index - 1, 0)]


def is_known_step(step: str) -> bool:
    return step in STEP_IDS or step == COMPLETE_STEP


def get_asset_rules(kind: str) -> dict:
    """Upload rules for an asset kind, including the size limit in bytes."""
    rules = dict(ASSET_KINDS[kind])
    rules["max_bytes"] = settings.max_upload_size_kb * 1024
    rules["max_label"] = f"{settings.max_upload_size_kb}KB"
    return rules
