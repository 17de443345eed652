from __future__ import annotations

from datetime import datetime

from sqlmodel import Session

from ..models import UserProfile, UserSettings
from ..schemas import ProfileUpdate, UserProfileSettings, UserSettingsUpdate, UserSettingsView

DEFAULT_PROFILE_NAME = "Security Analyst"


class ProfileService:
    """Profile and preferences for one user, created with defaults on first read."""

    def __init__(self, session: Session):
        self.session = session

    def get_profile(self, user_id: str) -> UserProfileSettings:
        return self._build_profile(self._profile(user_id))

    def update_profile(self, user_id: str, payload: ProfileUpdate) -> UserProfileSettings:
        profile = self._profile(user_id)
        profile.name = payload.name
        profile.email = payload.email
        profile.avatar_url = payload.avatar_url
        profile.updated_at = datetime.utcnow()
        self.session.add(profile)
        self.session.commit()
        self.session.refresh(profile)
        return self._build_profile(profile)

    def get_settings(self, user_id: str) -> UserSettingsView:
        return UserSettingsView.model_validate(self._settings(user_id))

    def update_settings(self, user_id: str, payload: UserSettingsUpdate) -> UserSettingsView:
        record = self._settings(user_id)
        for key, value in payload.model_dump(exclude_unset=True).items():
            if value is not None:
                setattr(record, key, value)
        record.updated_at = datetime.utcnow()
        self.session.add(record)
        self.session.commit()
        self.session.refresh(record)
        return UserSettingsView.model_validate(record)

    def _profile(self, user_id: str) -> UserProfile:
        profile = self.session.get(UserProfile, user_id)
        if profile is None:
            profile = UserProfile(
                user_id=user_id,
                name=DEFAULT_PROFILE_NAME,
                email=f"{user_id}@vulnsentry.local",
            )
            self.session.add(profile)
            self.session.commit()
            self.session.refresh(profile)
        return profile

    def _settings(self, user_id: str) -> UserSettings:
        record = self.session.get(UserSettings, user_id)
        if record is None:
            record = UserSettings(user_id=user_id)
            self.session.add(record)
            self.session.commit()
            self.session.refresh(record)
        return record

    def _build_profile(self, profile: UserProfile) -> UserProfileSettings:
        return UserProfileSettings(
            user_id=profile.user_id,
            name=profile.name,
            email=profile.email,
            avatar_url=profile.avatar_url,
        )
