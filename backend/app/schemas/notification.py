from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional

from pydantic import Field

from ..models import NotificationType
from .common import CamelModel


class NotificationFilters(CamelModel):
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=10, ge=1, le=1000)
    status: Literal["read", "unread", "all"] = "all"


class NotificationView(CamelModel):
    id: str
    type: NotificationType
    title: str
    message: str
    is_read: bool
    link: Optional[str] = None
    created_at: datetime


class UnreadCount(CamelModel):
    unread: int
