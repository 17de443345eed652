from __future__ import annotations

from typing import Optional

from sqlalchemy import func, update
from sqlmodel import Session, select

from ..models import Notification, NotificationType
from ..schemas import NotificationFilters, NotificationView, Page, UnreadCount
from .pagination import paginate


class NotificationService:
    def __init__(self, session: Session):
        self.session = session

    def list_notifications(self, user_id: str, filters: NotificationFilters) -> Page[NotificationView]:
        statement = select(Notification).where(Notification.user_id == user_id)
        if filters.status == "read":
            statement = statement.where(Notification.is_read == True)  # noqa: E712 - SQLAlchemy truthiness
        elif filters.status == "unread":
            statement = statement.where(Notification.is_read == False)  # noqa: E712
        statement = statement.order_by(Notification.created_at.desc())
        rows, total = paginate(self.session, statement, filters.page, filters.limit)
        return Page[NotificationView].build(
            [self._build_view(row) for row in rows],
            page=filters.page,
            limit=filters.limit,
            total=total,
        )

    def unread_count(self, user_id: str) -> UnreadCount:
        count = self.session.exec(
            select(func.count())
            .select_from(Notification)
            .where(Notification.user_id == user_id, Notification.is_read == False)  # noqa: E712
        ).one()
        return UnreadCount(unread=int(count))

    def mark_read(self, user_id: str, notification_id: str) -> NotificationView:
        notification = self._get_owned(user_id, notification_id)
        notification.is_read = True
        self.session.add(notification)
        self.session.commit()
        self.session.refresh(notification)
        return self._build_view(notification)

    def mark_all_read(self, user_id: str) -> int:
        result = self.session.execute(
            update(Notification)
            .where(Notification.user_id == user_id, Notification.is_read == False)  # noqa: E712
            .values(is_read=True)
        )
        self.session.commit()
        return result.rowcount or 0

    def delete(self, user_id: str, notification_id: str) -> None:
        notification = self._get_owned(user_id, notification_id)
        self.session.delete(notification)
        self.session.commit()

    def create(
        self,
        user_id: str,
        type: str | NotificationType,
        title: str,
        message: str,
        link: Optional[str] = None,
        commit: bool = True,
    ) -> Notification:
        notification = Notification(
            user_id=user_id,
            type=NotificationType(type).value,
            title=title,
            message=message,
            link=link,
        )
        self.session.add(notification)
        if commit:
            self.session.commit()
            self.session.refresh(notification)
        return notification

    def _get_owned(self, user_id: str, notification_id: str) -> Notification:
        notification = self.session.get(Notification, notification_id)
        if not notification or notification.user_id != user_id:
            raise ValueError("Notification not found")
        return notification

    def _build_view(self, notification: Notification) -> NotificationView:
        return NotificationView(
            id=notification.id,
            type=notification.type,
            title=notification.title,
            message=notification.message,
            is_read=notification.is_read,
            link=notification.link,
            created_at=notification.created_at,
        )
