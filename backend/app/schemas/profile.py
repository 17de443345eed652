from __future__ import annotations

import re
from typing import Literal, Optional
from urllib.parse import urlparse

from pydantic import BaseModel, Field, field_validator

from .common import CamelModel

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


# Profile payloads use the same snake_case keys as the profile form.
class UserProfileSettings(BaseModel):
    user_id: str
    name: str
    email: str
    avatar_url: Optional[str] = None


class ProfileUpdate(BaseModel):
    name: str = Field(min_length=1)
    email: str
    avatar_url: Optional[str] = None

    @field_validator("email")
    @classmethod
    def _email(cls, value: str) -> str:
        value = value.strip()
        if not EMAIL_PATTERN.match(value):
            raise ValueError("Invalid email address.")
        return value

    @field_validator("avatar_url")
    @classmethod
    def _avatar(cls, value: Optional[str]) -> Optional[str]:
        if value is None or not value.strip():
            return None
        parsed = urlparse(value.strip())
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError("Please enter a valid URL.")
        return value.strip()


class UserSettingsView(CamelModel):
    email_notifications: bool
    push_notifications: bool
    theme: Literal["light", "dark", "system"]


class UserSettingsUpdate(CamelModel):
    email_notifications: Optional[bool] = None
    push_notifications: Optional[bool] = None
    theme: Optional[Literal["light", "dark", "system"]] = None
