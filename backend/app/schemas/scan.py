from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import Field, field_validator

from ..models import ScanStatus, ScanType, Severity, FindingStatus
from .ai import AIEnhancement
from .common import CamelModel


class ScanRequest(CamelModel):
    scan_type: ScanType = ScanType.FULL


class BulkScanRequest(CamelModel):
    device_ids: List[str] = Field(min_length=1)


class BulkScanResponse(CamelModel):
    job_id: str
    message: str
    scan_ids: List[str] = Field(default_factory=list)
    skipped: List[str] = Field(default_factory=list)


class ScanHistoryFilters(CamelModel):
    device_id: Optional[str] = None
    status: Optional[ScanStatus] = None
    scan_type: Optional[ScanType] = None
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=10, ge=1, le=1000)

    @field_validator("device_id", "status", "scan_type", mode="before")
    @classmethod
    def _drop_all(cls, value: object) -> object:
        if isinstance(value, str) and value.strip().lower() in {"", "all"}:
            return None
        return value


class ScanResultView(CamelModel):
    id: str
    scan_id: str
    vulnerability_id: Optional[str] = None
    finding: str
    details: Optional[str] = None
    severity: Severity
    status: FindingStatus
    ai_confidence_score: Optional[float] = None
    ai_suggested_remediation: Optional[str] = None
    created_at: datetime


class ScanSummary(CamelModel):
    id: str
    device_id: str
    device_name: Optional[str] = None
    scan_type: ScanType
    status: ScanStatus
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    summary: Optional[str] = None
    vulnerabilities_found: int = 0
    created_at: datetime


class ScanDetail(ScanSummary):
    ai_analysis: Optional[AIEnhancement] = None
    ai_degraded: bool = False
    results: List[ScanResultView] = Field(default_factory=list)
