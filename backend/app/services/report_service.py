from __future__ import annotations

import asyncio
import json
import logging
import random
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import func
from sqlmodel import Session, select

from ..config import settings
from ..models import (
    Device,
    FindingStatus,
    GeneratedReport,
    ReportFormat,
    Scan,
    ScanResult,
    ScanStatus,
    Severity,
    generate_id,
)
from ..schemas import (
    AIEnhancement,
    CustomReportData,
    CustomReportFilters,
    CustomReportParams,
    CustomReportResponse,
    ReportRecordView,
    ScanReportParams,
)
from .notification_service import NotificationService

logger = logging.getLogger("vulnsentry.reports")

FAILURE_MESSAGE = "Report generation failed due to an unexpected error."
DEFAULT_TREND_WINDOW = timedelta(days=30)
SEVERITY_ORDER = [level.value for level in Severity]


def download_link(report_id: str) -> str:
    return f"/api/reports/{report_id}/download"


def describe_trend(current: int, previous: int, new_critical: int, resolved_critical: int) -> str:
    if previous == 0 and current == 0:
        headline = "No vulnerabilities were recorded in this or the previous period."
    elif previous == 0:
        headline = f"Overall vulnerability count rose to {current} from none in the previous period."
    else:
        change = round((current - previous) / previous * 100)
        if change == 0:
            headline = "Overall vulnerability count remained unchanged compared to the previous period."
        else:
            direction = "increased" if change > 0 else "decreased"
            headline = f"Overall vulnerability count {direction} by {abs(change)}% compared to the previous period."
    return (
        f"{headline} New critical vulnerabilities: {new_critical}, "
        f"Resolved critical vulnerabilities: {resolved_critical}."
    )


class ReportService:
    """Builds custom and per-scan reports.

    Generation is simulated: it waits ``delay`` seconds and fails with
    probability ``failure_rate``. Completed reports are stored so their
    download link can render them later.
    """

    def __init__(
        self,
        session: Session,
        rng: Optional[random.Random] = None,
        delay: Optional[float] = None,
        failure_rate: Optional[float] = None,
    ):
        self.session = session
        self.rng = rng or random.Random()
        self.delay = settings.report_delay if delay is None else delay
        self.failure_rate = settings.report_failure_rate if failure_rate is None else failure_rate

    async def generate_custom_report(self, user_id: str, params: CustomReportParams) -> CustomReportResponse:
        report_id = generate_id("report")
        await asyncio.sleep(self.delay)
        if self.rng.random() < self.failure_rate:
            logger.warning("Custom report %s (%s) failed", report_id, params.report_type)
            return CustomReportResponse(
                report_id=report_id,
                status="failed",
                message=FAILURE_MESSAGE,
                generated_at=datetime.utcnow(),
            )

        data = CustomReportData(
            download_link=download_link(report_id),
            details=self._details(params),
            filters_applied=params.filters,
            trends_included=params.include_trends,
            trend_summary=self._trend_summary(params.filters) if params.include_trends else None,
        )
        message = f"Custom report '{params.report_type}' generated successfully."
        record = self._record(
            report_id,
            user_id,
            report_type=params.report_type,
            format=params.format,
            message=message,
            parameters=params.model_dump(mode="json"),
            data=data,
        )
        logger.info("Custom report %s (%s) completed", report_id, params.report_type)
        return CustomReportResponse(
            report_id=report_id,
            status="completed",
            message=message,
            data=data,
            generated_at=record.generated_at,
        )

    async def generate_scan_report(self, user_id: str, scan_id: str, params: ScanReportParams) -> CustomReportResponse:
        scan = self.session.get(Scan, scan_id)
        if not scan:
            raise ValueError("Scan not found")
        report_id = generate_id("report")
        await asyncio.sleep(self.delay)
        if scan.status != ScanStatus.COMPLETED.value:
            logger.warning("Scan report %s refused: scan %s is %s", report_id, scan_id, scan.status)
            return CustomReportResponse(
                report_id=report_id,
                status="failed",
                message=f"Reports can only be generated for completed scans (scan is {scan.status}).",
                generated_at=datetime.utcnow(),
            )

        results = self._scan_results(scan_id)
        analysis = json.loads(scan.ai_analysis_json or "{}")
        data = CustomReportData(
            download_link=download_link(report_id),
            details={
                "scanId": scan.id,
                "deviceName": scan.device_name,
                "scanType": scan.scan_type,
                "summary": scan.summary,
                "totalFindings": len(results),
                "openFindings": scan.vulnerabilities_found,
                "bySeverity": self._count_by_severity(result.severity for result in results),
            },
            ai_analysis=AIEnhancement.model_validate(analysis) if analysis else None,
        )
        message = f"Scan report for {scan.device_name or scan.device_id} generated successfully."
        record = self._record(
            report_id,
            user_id,
            report_type="scan",
            format=params.format,
            message=message,
            parameters={"scan_id": scan_id, "format": params.format.value},
            data=data,
            scan_id=scan_id,
        )
        logger.info("Scan report %s for scan %s completed", report_id, scan_id)
        return CustomReportResponse(
            report_id=report_id,
            status="completed",
            message=message,
            data=data,
            generated_at=record.generated_at,
        )

    def get_report(self, report_id: str, user_id: str) -> ReportRecordView:
        return self._build_record_view(self._get(report_id, user_id))

    def list_reports(self, user_id: str) -> List[ReportRecordView]:
        records = self.session.exec(
            select(GeneratedReport)
            .where(GeneratedReport.user_id == user_id)
            .order_by(GeneratedReport.generated_at.desc())
        ).all()
        return [self._build_record_view(record) for record in records]

    def report_rows(self, report_id: str, user_id: str) -> Tuple[ReportRecordView, List[Dict[str, Any]]]:
        """Return a stored report with the finding rows its download contains."""
        record = self._get(report_id, user_id)
        if record.scan_id:
            statement = self._findings_query().where(ScanResult.scan_id == record.scan_id)
        else:
            params = CustomReportParams.model_validate(json.loads(record.parameters_json or "{}"))
            statement = self._findings_query().where(*self._conditions(params.filters))
        rows = self.session.exec(statement.order_by(ScanResult.created_at.desc(), ScanResult.id)).all()
        return self._build_record_view(record), [self._row(result, scan, device) for result, scan, device in rows]

    def _details(self, params: CustomReportParams) -> Dict[str, Any]:
        conditions = self._conditions(params.filters)
        counts = self.session.exec(
            select(ScanResult.severity, func.count())
            .join(Scan, ScanResult.scan_id == Scan.id)
            .join(Device, Scan.device_id == Device.id)
            .where(*conditions)
            .group_by(ScanResult.severity)
        ).all()
        by_severity = {severity: int(count) for severity, count in counts}
        devices = self.session.exec(
            select(func.count(func.distinct(Device.id)))
            .select_from(ScanResult)
            .join(Scan, ScanResult.scan_id == Scan.id)
            .join(Device, Scan.device_id == Device.id)
            .where(*conditions)
        ).one()
        return {
            "description": f"{params.format.value.upper()} report of type '{params.report_type}'.",
            "totalFindings": sum(by_severity.values()),
            "devicesAffected": int(devices),
            "bySeverity": {level: by_severity[level] for level in SEVERITY_ORDER if level in by_severity},
        }

    def _trend_summary(self, filters: CustomReportFilters) -> str:
        end = (filters.date_range.end if filters.date_range and filters.date_range.end else None) or datetime.utcnow()
        start = (filters.date_range.start if filters.date_range and filters.date_range.start else None) or (
            end - DEFAULT_TREND_WINDOW
        )
        window = max(end - start, timedelta(days=1))
        base = self._conditions(filters, include_dates=False)

        current = self._count(base, ScanResult.created_at >= start, ScanResult.created_at <= end)
        previous = self._count(base, ScanResult.created_at >= start - window, ScanResult.created_at < start)
        critical = ScanResult.severity == Severity.CRITICAL.value
        new_critical = self._count(
            base,
            critical,
            ScanResult.status == FindingStatus.OPEN.value,
            ScanResult.created_at >= start,
            ScanResult.created_at <= end,
        )
        resolved_critical = self._count(
            base,
            critical,
            ScanResult.status == FindingStatus.CLOSED.value,
            ScanResult.created_at >= start,
            ScanResult.created_at <= end,
        )
        return describe_trend(current, previous, new_critical, resolved_critical)

    def _count(self, base: List[Any], *extra: Any) -> int:
        return int(
            self.session.exec(
                select(func.count())
                .select_from(ScanResult)
                .join(Scan, ScanResult.scan_id == Scan.id)
                .join(Device, Scan.device_id == Device.id)
                .where(*base, *extra)
            ).one()
        )

    def _conditions(self, filters: CustomReportFilters, include_dates: bool = True) -> List[Any]:
        conditions: List[Any] = []
        if filters.device_brands:
            conditions.append(Device.brand.in_(filters.device_brands))
        if filters.severity_levels:
            conditions.append(ScanResult.severity.in_([Severity(level).value for level in filters.severity_levels]))
        if include_dates and filters.date_range:
            if filters.date_range.start:
                conditions.append(ScanResult.created_at >= filters.date_range.start)
            if filters.date_range.end:
                conditions.append(ScanResult.created_at <= filters.date_range.end)
        return conditions

    def _findings_query(self):
        return (
            select(ScanResult, Scan, Device)
            .join(Scan, ScanResult.scan_id == Scan.id)
            .join(Device, Scan.device_id == Device.id)
        )

    def _scan_results(self, scan_id: str) -> List[ScanResult]:
        return list(self.session.exec(select(ScanResult).where(ScanResult.scan_id == scan_id)).all())

    def _count_by_severity(self, severities) -> Dict[str, int]:
        counts: Dict[str, int] = {}
        for severity in severities:
            counts[severity] = counts.get(severity, 0) + 1
        return {level: counts[level] for level in SEVERITY_ORDER if level in counts}

    def _record(
        self,
        report_id: str,
        user_id: str,
        *,
        report_type: str,
        format: ReportFormat,
        message: str,
        parameters: Dict[str, Any],
        data: CustomReportData,
        scan_id: Optional[str] = None,
    ) -> GeneratedReport:
        record = GeneratedReport(
            id=report_id,
            user_id=user_id,
            report_type=report_type,
            format=ReportFormat(format).value,
            status="completed",
            message=message,
            scan_id=scan_id,
            parameters_json=json.dumps(parameters),
            data_json=data.model_dump_json(by_alias=True, exclude_none=True),
        )
        self.session.add(record)
        NotificationService(self.session).create(
            user_id=user_id,
            type="report_ready",
            title="Report ready",
            message=message,
            link=download_link(report_id),
            commit=False,
        )
        self.session.commit()
        self.session.refresh(record)
        return record

    def _get(self, report_id: str, user_id: str) -> GeneratedReport:
        record = self.session.get(GeneratedReport, report_id)
        if not record or record.user_id != user_id:
            raise ValueError("Report not found")
        return record

    def _row(self, result: ScanResult, scan: Scan, device: Device) -> Dict[str, Any]:
        return {
            "device": device.name,
            "brand": device.brand,
            "scan_id": scan.id,
            "scan_type": scan.scan_type,
            "finding": result.finding,
            "severity": result.severity,
            "status": result.status,
            "detected_at": result.created_at.isoformat(timespec="seconds"),
        }

    def _build_record_view(self, record: GeneratedReport) -> ReportRecordView:
        return ReportRecordView(
            id=record.id,
            report_type=record.report_type,
            format=record.format,
            status=record.status,
            message=record.message,
            scan_id=record.scan_id,
            parameters=json.loads(record.parameters_json or "{}"),
            data=json.loads(record.data_json or "{}"),
            generated_at=record.generated_at,
        )
