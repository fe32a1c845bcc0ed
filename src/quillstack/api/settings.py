"""Settings API endpoints for classification preferences."""

from __future__ import annotations

from fastapi import APIRouter

from quillstack.api.dependencies import current_classification_settings, get_data_path
from quillstack.models import ClassificationSettings, ClassificationSettingsUpdate
from quillstack.settings import load_settings, save_settings

router = APIRouter(prefix="/api/v1/settings", tags=["settings"])


@router.get("/classification", response_model=ClassificationSettings)
async def get_classification() -> ClassificationSettings:
    """Return the effective classification settings."""
    return current_classification_settings()


@router.put("/classification", response_model=ClassificationSettings)
async def update_classification(body: ClassificationSettingsUpdate) -> ClassificationSettings:
    """Update any subset of the stored classification preferences."""
    data_path = get_data_path()
    settings = load_settings(data_path)
    updates = body.model_dump(exclude_none=True)
    settings["classification"].update(updates)
    save_settings(data_path, settings)
    return current_classification_settings()
