from .dashboard_service import DashboardService
from .device_service import DeviceService
from .notification_service import NotificationService
from .profile_service import ProfileService
from .report_service import ReportService
from .scan_service import ScanService, ScanStateError
from .schedule_service import ScheduleService

__all__ = [
    "DashboardService",
    "DeviceService",
    "NotificationService",
    "ProfileService",
    "ReportService",
    "ScanService",
    "ScanStateError",
    "ScheduleService",
]
