from __future__ import annotations

from datetime import datetime, timedelta
from typing import List, Optional

from sqlmodel import Session, select

from ..models import Device, ScanType, ScheduledScan, ScheduleType
from ..schemas import ScheduledScanCreate, ScheduledScanUpdate, ScheduledScanView

# Schedules are only stored here; a separate runner executes them.
SCHEDULE_INTERVALS = {
    ScheduleType.ONCE: timedelta(days=1),
    ScheduleType.DAILY: timedelta(days=1),
    ScheduleType.WEEKLY: timedelta(days=7),
    ScheduleType.MONTHLY: timedelta(days=30),
}


def next_run_for(schedule_type: ScheduleType, now: Optional[datetime] = None) -> datetime:
    return (now or datetime.utcnow()) + SCHEDULE_INTERVALS[ScheduleType(schedule_type)]


class ScheduleService:
    def __init__(self, session: Session):
        self.session = session

    def list_schedules(self) -> List[ScheduledScanView]:
        schedules = self.session.exec(select(ScheduledScan).order_by(ScheduledScan.next_run_at)).all()
        return [self._build_schedule_view(schedule) for schedule in schedules]

    def get_schedule(self, schedule_id: str) -> ScheduledScanView:
        return self._build_schedule_view(self._get(schedule_id))

    def create_schedule(self, payload: ScheduledScanCreate) -> ScheduledScanView:
        device = self._get_device(payload.device_id)
        now = datetime.utcnow()
        schedule = ScheduledScan(
            device_id=device.id,
            scan_type=ScanType(payload.scan_type).value,
            schedule_type=ScheduleType(payload.schedule_type).value,
            cron_expression=payload.cron_expression,
            next_run_at=next_run_for(payload.schedule_type, now),
            is_active=payload.is_active,
            created_at=now,
            updated_at=now,
        )
        self.session.add(schedule)
        self.session.commit()
        self.session.refresh(schedule)
        return self._build_schedule_view(schedule, device)

    def update_schedule(self, schedule_id: str, payload: ScheduledScanUpdate) -> ScheduledScanView:
        schedule = self._get(schedule_id)
        changes = payload.model_dump(exclude_unset=True)
        if changes.get("device_id"):
            schedule.device_id = self._get_device(changes["device_id"]).id
        if changes.get("scan_type"):
            schedule.scan_type = ScanType(changes["scan_type"]).value
        if changes.get("schedule_type"):
            schedule.schedule_type = ScheduleType(changes["schedule_type"]).value
            schedule.next_run_at = next_run_for(changes["schedule_type"])
        if changes.get("cron_expression"):
            schedule.cron_expression = changes["cron_expression"]
        if changes.get("is_active") is not None:
            schedule.is_active = changes["is_active"]
        schedule.updated_at = datetime.utcnow()
        self.session.add(schedule)
        self.session.commit()
        self.session.refresh(schedule)
        return self._build_schedule_view(schedule)

    def delete_schedule(self, schedule_id: str) -> None:
        schedule = self._get(schedule_id)
        self.session.delete(schedule)
        self.session.commit()

    def _get(self, schedule_id: str) -> ScheduledScan:
        schedule = self.session.get(ScheduledScan, schedule_id)
        if not schedule:
            raise ValueError("Scheduled scan not found")
        return schedule

    def _get_device(self, device_id: str) -> Device:
        device = self.session.get(Device, device_id)
        if not device:
            raise ValueError("Device not found")
        return device

    def _build_schedule_view(self, schedule: ScheduledScan, device: Device | None = None) -> ScheduledScanView:
        device = device or self.session.get(Device, schedule.device_id)
        return ScheduledScanView(
            id=schedule.id,
            device_id=schedule.device_id,
            device_name=device.name if device else None,
            scan_type=schedule.scan_type,
            schedule_type=schedule.schedule_type,
            cron_expression=schedule.cron_expression,
            next_run_at=schedule.next_run_at,
            last_run_at=schedule.last_run_at,
            is_active=schedule.is_active,
            created_at=schedule.created_at,
            updated_at=schedule.updated_at,
        )
