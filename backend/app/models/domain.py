from __future__ import annotations

import uuid
from datetime import datetime
from enum import Enum
from typing import Optional

from sqlalchemy import Column, Text
from sqlmodel import Field, SQLModel


def generate_id(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex[:12]}"


class ScanType(str, Enum):
    FULL = "full"
    LOCAL = "local"
    WEB = "web"
    AI = "ai"


class ScanStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in (ScanStatus.COMPLETED, ScanStatus.FAILED, ScanStatus.CANCELLED)


class Severity(str, Enum):
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    INFORMATIONAL = "informational"


class FindingStatus(str, Enum):
    OPEN = "open"
    CLOSED = "closed"
    IGNORED = "ignored"


class ScheduleType(str, Enum):
    ONCE = "once"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


class NotificationType(str, Enum):
    SCAN_COMPLETED = "scan_completed"
    CRITICAL_ALERT = "critical_alert"
    REPORT_READY = "report_ready"
    SYSTEM_UPDATE = "system_update"


class ReportFormat(str, Enum):
    PDF = "pdf"
    CSV = "csv"


class Device(SQLModel, table=True):
    id: str = Field(default_factory=lambda: generate_id("device"), primary_key=True)
    name: str = Field(index=True)
    brand: str = Field(index=True)
    model: str
    version: str
    location: str = Field(index=True)
    ip_address: str
    mac_address: str
    os: str
    os_version: str
    is_active: bool = Field(default=True, index=True)
    tags_json: str = Field(default="[]")
    last_seen: datetime = Field(default_factory=datetime.utcnow)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)


class Scan(SQLModel, table=True):
    id: str = Field(default_factory=lambda: generate_id("scan"), primary_key=True)
    device_id: str = Field(foreign_key="device.id", index=True)
    device_name: Optional[str] = None
    scan_type: str = Field(default=ScanType.FULL.value, index=True)
    status: str = Field(default=ScanStatus.PENDING.value, index=True)
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    summary: Optional[str] = Field(default=None, sa_column=Column(Text))
    ai_analysis_json: str = Field(default="{}", sa_column=Column(Text, nullable=False, default="{}"))
    ai_degraded: bool = Field(default=False)
    vulnerabilities_found: int = 0
    created_at: datetime = Field(default_factory=datetime.utcnow, index=True)


class ScanResult(SQLModel, table=True):
    id: str = Field(default_factory=lambda: generate_id("scanresult"), primary_key=True)
    scan_id: str = Field(foreign_key="scan.id", index=True)
    vulnerability_id: Optional[str] = None
    finding: str
    details: Optional[str] = Field(default=None, sa_column=Column(Text))
    severity: str = Field(index=True)
    status: str = Field(default=FindingStatus.OPEN.value, index=True)
    ai_confidence_score: Optional[float] = None
    ai_suggested_remediation: Optional[str] = Field(default=None, sa_column=Column(Text))
    created_at: datetime = Field(default_factory=datetime.utcnow)


class ScheduledScan(SQLModel, table=True):
    id: str = Field(default_factory=lambda: generate_id("schedule"), primary_key=True)
    device_id: str = Field(foreign_key="device.id", index=True)
    scan_type: str = Field(default=ScanType.FULL.value)
    schedule_type: str = Field(default=ScheduleType.WEEKLY.value)
    cron_expression: str = Field(default="0 2 * * 1")
    next_run_at: datetime
    last_run_at: Optional[datetime] = None
    is_active: bool = Field(default=True)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)


class Notification(SQLModel, table=True):
    id: str = Field(default_factory=lambda: generate_id("notif"), primary_key=True)
    user_id: str = Field(index=True)
    type: str = Field(default=NotificationType.SYSTEM_UPDATE.value)
    title: str
    message: str = Field(sa_column=Column(Text, nullable=False))
    is_read: bool = Field(default=False, index=True)
    link: Optional[str] = None
    created_at: datetime = Field(default_factory=datetime.utcnow, index=True)


class UserProfile(SQLModel, table=True):
    user_id: str = Field(primary_key=True)
    name: str
    email: str
    avatar_url: Optional[str] = None
    updated_at: datetime = Field(default_factory=datetime.utcnow)


class UserSettings(SQLModel, table=True):
    user_id: str = Field(primary_key=True)
    email_notifications: bool = Field(default=True)
    push_notifications: bool = Field(default=False)
    theme: str = Field(default="system")
    updated_at: datetime = Field(default_factory=datetime.utcnow)


class GeneratedReport(SQLModel, table=True):
    id: str = Field(default_factory=lambda: generate_id("report"), primary_key=True)
    user_id: str = Field(index=True)
    report_type: str
    format: str = Field(default=ReportFormat.PDF.value)
    status: str = Field(default="completed")
    message: Optional[str] = None
    scan_id: Optional[str] = Field(default=None, foreign_key="scan.id")
    parameters_json: str = Field(default="{}", sa_column=Column(Text, nullable=False, default="{}"))
    data_json: str = Field(default="{}", sa_column=Column(Text, nullable=False, default="{}"))
    generated_at: datetime = Field(default_factory=datetime.utcnow, index=True)
