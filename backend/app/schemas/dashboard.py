from __future__ import annotations

from typing import List, Optional

from ..models import Severity
from .common import CamelModel


class ScanActivityPoint(CamelModel):
    date: str
    count: int


class SeverityBucket(CamelModel):
    severity: Severity
    count: int


class OrganizationSummary(CamelModel):
    total_devices: int
    active_devices: int
    devices_with_critical_vulnerabilities: int
    total_vulnerabilities: int
    average_time_to_remediate: Optional[str] = None
    recent_scans_count: int
    scan_activity: List[ScanActivityPoint]
    vulnerability_severity_distribution: List[SeverityBucket]


class LabelledOption(CamelModel):
    value: str
    label: str


class Catalog(CamelModel):
    scan_types: List[str]
    scan_statuses: List[str]
    device_brands: List[str]
    device_locations: List[str]
    report_formats: List[LabelledOption]
    severity_levels: List[LabelledOption]
