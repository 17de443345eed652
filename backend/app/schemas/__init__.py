from .ai import (
    AIEnhancement,
    AIResult,
    AISuggestion,
    AISummary,
    EnhanceRequest,
    RemediationRequest,
    SummarizeRequest,
)
from .common import CamelModel, Page
from .dashboard import Catalog, LabelledOption, OrganizationSummary, ScanActivityPoint, SeverityBucket
from .device import DeviceCreate, DeviceDetail, DeviceFilters, DeviceUpdate, DeviceView
from .notification import NotificationFilters, NotificationView, UnreadCount
from .profile import ProfileUpdate, UserProfileSettings, UserSettingsUpdate, UserSettingsView
from .report import (
    CustomReportData,
    CustomReportFilters,
    CustomReportParams,
    CustomReportResponse,
    DateRange,
    ReportRecordView,
    ScanReportParams,
)
from .scan import (
    BulkScanRequest,
    BulkScanResponse,
    ScanDetail,
    ScanHistoryFilters,
    ScanRequest,
    ScanResultView,
    ScanSummary,
)
from .schedule import ScheduledScanCreate, ScheduledScanUpdate, ScheduledScanView

__all__ = [
    "AIEnhancement",
    "AIResult",
    "AISuggestion",
    "AISummary",
    "BulkScanRequest",
    "BulkScanResponse",
    "CamelModel",
    "Catalog",
    "CustomReportData",
    "CustomReportFilters",
    "CustomReportParams",
    "CustomReportResponse",
    "DateRange",
    "DeviceCreate",
    "DeviceDetail",
    "DeviceFilters",
    "DeviceUpdate",
    "DeviceView",
    "EnhanceRequest",
    "LabelledOption",
    "NotificationFilters",
    "NotificationView",
    "OrganizationSummary",
    "Page",
    "ProfileUpdate",
    "RemediationRequest",
    "ReportRecordView",
    "ScanActivityPoint",
    "ScanDetail",
    "ScanHistoryFilters",
    "ScanReportParams",
    "ScanRequest",
    "ScanResultView",
    "ScanSummary",
    "ScheduledScanCreate",
    "ScheduledScanUpdate",
    "ScheduledScanView",
    "SeverityBucket",
    "SummarizeRequest",
    "UnreadCount",
    "UserProfileSettings",
    "UserSettingsUpdate",
    "UserSettingsView",
]
