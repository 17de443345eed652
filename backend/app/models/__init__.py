from .domain import (
    Device,
    FindingStatus,
    GeneratedReport,
    Notification,
    NotificationType,
    ReportFormat,
    Scan,
    ScanResult,
    ScanStatus,
    ScanType,
    ScheduledScan,
    ScheduleType,
    Severity,
    UserProfile,
    UserSettings,
    generate_id,
)

__all__ = [
    "Device",
    "FindingStatus",
    "GeneratedReport",
    "Notification",
    "NotificationType",
    "ReportFormat",
    "Scan",
    "ScanResult",
    "ScanStatus",
    "ScanType",
    "ScheduledScan",
    "ScheduleType",
    "Severity",
    "UserProfile",
    "UserSettings",
    "generate_id",
]
