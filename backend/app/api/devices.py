from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlmodel import Session

from ..config import settings
from ..schemas import (
    DeviceCreate,
    DeviceDetail,
    DeviceFilters,
    DeviceUpdate,
    DeviceView,
    Page,
    ScanRequest,
    ScanSummary,
)
from ..services import DeviceService, ScanService
from .deps import build_filters, get_current_user_id, get_db_session, get_lifecycle

router = APIRouter(prefix="/devices", tags=["devices"])


def _get_service(session: Session = Depends(get_db_session)) -> DeviceService:
    return DeviceService(session)


def _filters(
    name: str | None = None,
    brand: str | None = None,
    model: str | None = None,
    version: str | None = None,
    location: str | None = None,
    is_active: str | None = Query(default=None, alias="isActive"),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=settings.page_size, ge=1, le=1000),
) -> DeviceFilters:
    return build_filters(
        DeviceFilters,
        name=name,
        brand=brand,
        model=model,
        version=version,
        location=location,
        is_active=is_active,
        page=page,
        limit=limit,
    )


@router.get("", response_model=Page[DeviceView])
def list_devices(
    filters: DeviceFilters = Depends(_filters),
    service: DeviceService = Depends(_get_service),
) -> Page[DeviceView]:
    return service.list_devices(filters)


@router.post("", response_model=DeviceView, status_code=201)
def create_device(payload: DeviceCreate, service: DeviceService = Depends(_get_service)) -> DeviceView:
    return service.create_device(payload)


@router.get("/{device_id}", response_model=DeviceDetail)
def get_device(device_id: str, service: DeviceService = Depends(_get_service)) -> DeviceDetail:
    try:
        return service.get_device(device_id)
    except ValueError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc


@router.patch("/{device_id}", response_model=DeviceView)
def update_device(
    device_id: str,
    payload: DeviceUpdate,
    service: DeviceService = Depends(_get_service),
) -> DeviceView:
    try:
        return service.update_device(device_id, payload)
    except ValueError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc


@router.post("/{device_id}/toggle", response_model=DeviceView)
def toggle_device(device_id: str, service: DeviceService = Depends(_get_service)) -> DeviceView:
    try:
        return service.toggle_active(device_id)
    except ValueError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc


@router.post("/{device_id}/scans", response_model=ScanSummary, status_code=202)
async def trigger_scan(
    device_id: str,
    payload: ScanRequest,
    session: Session = Depends(get_db_session),
    user_id: str = Depends(get_current_user_id),
    lifecycle=Depends(get_lifecycle),
) -> ScanSummary:
    try:
        scan = ScanService(session).create_scan(device_id, payload.scan_type)
    except ValueError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    lifecycle.start(scan.id, user_id)
    return scan
