"""/api/v1/settings: read and update the caller's preferences."""

from fastapi import APIRouter, Depends

from app.routes.deps import get_settings_service, get_settings_user_id
from app.schemas.settings import SettingsResponse, SettingsUpdateRequest
from app.services.settings_service import SettingsService

router = APIRouter(prefix="/api/v1/settings", tags=["Settings"])


@router.get("", response_model=SettingsResponse, summary="Get settings (created with defaults on first read)")
async def get_settings(
    user_id: int = Depends(get_settings_user_id),
    service: SettingsService = Depends(get_settings_service),
) -> SettingsResponse:
    return await service.get_settings(user_id)


@router.put("", response_model=SettingsResponse, summary="Update any subset of settings")
async def update_settings(
    request: SettingsUpdateRequest,
    user_id: int = Depends(get_settings_user_id),
    service: SettingsService = Depends(get_settings_service),
) -> SettingsResponse:
    return await service.update_settings(user_id, request)
