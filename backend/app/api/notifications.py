from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlmodel import Session

from ..config import settings
from ..schemas import NotificationFilters, NotificationView, Page, UnreadCount
from ..services import NotificationService
from .deps import build_filters, get_current_user_id, get_db_session

router = APIRouter(prefix="/notifications", tags=["notifications"])


def _get_service(session: Session = Depends(get_db_session)) -> NotificationService:
    return NotificationService(session)


def _filters(
    status: str = "all",
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=settings.page_size, ge=1, le=1000),
) -> NotificationFilters:
    return build_filters(NotificationFilters, status=status, page=page, limit=limit)


@router.get("", response_model=Page[NotificationView])
def list_notifications(
    filters: NotificationFilters = Depends(_filters),
    user_id: str = Depends(get_current_user_id),
    service: NotificationService = Depends(_get_service),
) -> Page[NotificationView]:
    return service.list_notifications(user_id, filters)


@router.get("/unread-count", response_model=UnreadCount)
def unread_count(
    user_id: str = Depends(get_current_user_id),
    service: NotificationService = Depends(_get_service),
) -> UnreadCount:
    return service.unread_count(user_id)


@router.post("/read-all")
def mark_all_read(
    user_id: str = Depends(get_current_user_id),
    service: NotificationService = Depends(_get_service),
) -> dict[str, int]:
    return {"updated": service.mark_all_read(user_id)}


@router.post("/{notification_id}/read", response_model=NotificationView)
def mark_read(
    notification_id: str,
    user_id: str = Depends(get_current_user_id),
    service: NotificationService = Depends(_get_service),
) -> NotificationView:
    try:
        return service.mark_read(user_id, notification_id)
    except ValueError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc


@router.delete("/{notification_id}")
def delete_notification(
    notification_id: str,
    user_id: str = Depends(get_current_user_id),
    service: NotificationService = Depends(_get_service),
) -> dict[str, str]:
    try:
        service.delete(user_id, notification_id)
    except ValueError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return {"status": "deleted"}
