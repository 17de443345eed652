from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from ..models import ReportFormat, Severity
from .ai import AIEnhancement
from .common import CamelModel


# Report requests and envelopes keep the snake_case keys the dashboard has
# always sent; only the ``data`` payload is camelCase.


class DateRange(BaseModel):
    start: Optional[datetime] = None
    end: Optional[datetime] = None

    @field_validator("start", "end")
    @classmethod
    def _naive_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        if value is not None and value.tzinfo is not None:
            return value.astimezone(timezone.utc).replace(tzinfo=None)
        return value

    @model_validator(mode="after")
    def _ordered(self) -> "DateRange":
        if self.start and self.end and self.start > self.end:
            raise ValueError("End date cannot be earlier than start date")
        return self


class CustomReportFilters(BaseModel):
    device_brands: Optional[List[str]] = None
    severity_levels: Optional[List[Severity]] = None
    date_range: Optional[DateRange] = None


class CustomReportParams(BaseModel):
    report_type: str = Field(min_length=1)
    filters: CustomReportFilters = Field(default_factory=CustomReportFilters)
    include_trends: bool = False
    format: ReportFormat = ReportFormat.PDF


class ScanReportParams(BaseModel):
    format: ReportFormat = ReportFormat.PDF


class CustomReportData(CamelModel):
    download_link: Optional[str] = None
    details: Optional[Any] = None
    filters_applied: Optional[CustomReportFilters] = None
    trends_included: Optional[bool] = None
    trend_summary: Optional[str] = None
    ai_analysis: Optional[AIEnhancement] = None


class CustomReportResponse(BaseModel):
    report_id: str
    status: Literal["completed", "failed"]
    message: Optional[str] = None
    data: Optional[CustomReportData] = None
    generated_at: datetime


class ReportRecordView(CamelModel):
    id: str
    report_type: str
    format: ReportFormat
    status: str
    message: Optional[str] = None
    scan_id: Optional[str] = None
    parameters: Dict[str, Any] = Field(default_factory=dict)
    data: Dict[str, Any] = Field(default_factory=dict)
    generated_at: datetime
