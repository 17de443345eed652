from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlmodel import Session

from ..schemas import ProfileUpdate, UserProfileSettings, UserSettingsUpdate, UserSettingsView
from ..services import ProfileService
from .deps import get_current_user_id, get_db_session

router = APIRouter(tags=["profile"])


def _get_service(session: Session = Depends(get_db_session)) -> ProfileService:
    return ProfileService(session)


@router.get("/profile", response_model=UserProfileSettings)
def get_profile(
    user_id: str = Depends(get_current_user_id),
    service: ProfileService = Depends(_get_service),
) -> UserProfileSettings:
    return service.get_profile(user_id)


@router.put("/profile", response_model=UserProfileSettings)
def update_profile(
    payload: ProfileUpdate,
    user_id: str = Depends(get_current_user_id),
    service: ProfileService = Depends(_get_service),
) -> UserProfileSettings:
    return service.update_profile(user_id, payload)


@router.get("/settings", response_model=UserSettingsView)
def get_settings(
    user_id: str = Depends(get_current_user_id),
    service: ProfileService = Depends(_get_service),
) -> UserSettingsView:
    return service.get_settings(user_id)


@router.put("/settings", response_model=UserSettingsView)
def update_settings(
    payload: UserSettingsUpdate,
    user_id: str = Depends(get_current_user_id),
    service: ProfileService = Depends(_get_service),
) -> UserSettingsView:
    return service.update_settings(user_id, payload)
