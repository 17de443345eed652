from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session

from ..schemas import ScheduledScanCreate, ScheduledScanUpdate, ScheduledScanView
from ..services import ScheduleService
from .deps import get_db_session

router = APIRouter(prefix="/schedules", tags=["schedules"])


def _get_service(session: Session = Depends(get_db_session)) -> ScheduleService:
    return ScheduleService(session)


@router.get("", response_model=List[ScheduledScanView])
def list_schedules(service: ScheduleService = Depends(_get_service)) -> List[ScheduledScanView]:
    return service.list_schedules()


@router.post("", response_model=ScheduledScanView, status_code=201)
def create_schedule(
    payload: ScheduledScanCreate,
    service: ScheduleService = Depends(_get_service),
) -> ScheduledScanView:
    try:
        return service.create_schedule(payload)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


@router.get("/{schedule_id}", response_model=ScheduledScanView)
def get_schedule(schedule_id: str, service: ScheduleService = Depends(_get_service)) -> ScheduledScanView:
    try:
        return service.get_schedule(schedule_id)
    except ValueError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc


@router.patch("/{schedule_id}", response_model=ScheduledScanView)
def update_schedule(
    schedule_id: str,
    payload: ScheduledScanUpdate,
    service: ScheduleService = Depends(_get_service),
) -> ScheduledScanView:
    try:
        return service.update_schedule(schedule_id, payload)
    except ValueError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc


@router.delete("/{schedule_id}")
def delete_schedule(schedule_id: str, service: ScheduleService = Depends(_get_service)) -> dict[str, str]:
    try:
        service.delete_schedule(schedule_id)
    except ValueError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return {"status": "deleted"}
