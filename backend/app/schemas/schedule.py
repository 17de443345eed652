from __future__ import annotations

import re
from datetime import datetime
from typing import Optional

from pydantic import Field, field_validator

from ..models import ScanType, ScheduleType
from .common import CamelModel

CRON_FIELD = re.compile(r"^(\*|\d+)(-\d+)?(/\d+)?(,(\*|\d+)(-\d+)?(/\d+)?)*$")


def validate_cron(expression: str) -> str:
    parts = expression.split()
    if len(parts) != 5:
        raise ValueError("Cron expression must have five fields")
    for part in parts:
        if not CRON_FIELD.match(part):
            raise ValueError(f"Invalid cron field '{part}'")
    return " ".join(parts)


class ScheduledScanCreate(CamelModel):
    device_id: str = Field(min_length=1)
    scan_type: ScanType = ScanType.FULL
    schedule_type: ScheduleType = ScheduleType.WEEKLY
    cron_expression: str = "0 2 * * 1"
    is_active: bool = True

    @field_validator("cron_expression")
    @classmethod
    def _cron(cls, value: str) -> str:
        return validate_cron(value)


class ScheduledScanUpdate(CamelModel):
    device_id: Optional[str] = Field(default=None, min_length=1)
    scan_type: Optional[ScanType] = None
    schedule_type: Optional[ScheduleType] = None
    cron_expression: Optional[str] = None
    is_active: Optional[bool] = None

    @field_validator("cron_expression")
    @classmethod
    def _cron(cls, value: Optional[str]) -> Optional[str]:
        return validate_cron(value) if value is not None else None


class ScheduledScanView(CamelModel):
    id: str
    device_id: str
    device_name: Optional[str] = None
    scan_type: ScanType
    schedule_type: ScheduleType
    cron_expression: str
    next_run_at: datetime
    last_run_at: Optional[datetime] = None
    is_active: bool
    created_at: datetime
    updated_at: datetime
