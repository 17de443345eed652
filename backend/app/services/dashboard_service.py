from __future__ import annotations

from collections import Counter
from datetime import date, datetime, timedelta
from typing import List

from sqlalchemy import func
from sqlmodel import Session, select

from ..models import Device, FindingStatus, ReportFormat, Scan, ScanResult, ScanStatus, ScanType, Severity
from ..schemas import Catalog, LabelledOption, OrganizationSummary, ScanActivityPoint, SeverityBucket

ACTIVITY_DAYS = 7
# No remediation timestamps are tracked yet; the dashboard shows the agreed target.
REMEDIATION_TARGET = "7 days"


class DashboardService:
    def __init__(self, session: Session):
        self.session = session

    def organization_summary(self, now: datetime | None = None) -> OrganizationSummary:
        now = now or datetime.utcnow()
        today = now.date()
        window_start = datetime.combine(today - timedelta(days=ACTIVITY_DAYS - 1), datetime.min.time())
        recent_cutoff = now - timedelta(days=ACTIVITY_DAYS)
        severity_rows = self._open_severity_counts()

        critical_devices = self.session.exec(
            select(func.count(func.distinct(Scan.device_id)))
            .select_from(ScanResult)
            .join(Scan, ScanResult.scan_id == Scan.id)
            .where(
                ScanResult.status == FindingStatus.OPEN.value,
                ScanResult.severity == Severity.CRITICAL.value,
                Scan.status == ScanStatus.COMPLETED.value,
            )
        ).one()

        return OrganizationSummary(
            total_devices=self._count(select(func.count()).select_from(Device)),
            active_devices=self._count(
                select(func.count()).select_from(Device).where(Device.is_active == True)  # noqa: E712
            ),
            devices_with_critical_vulnerabilities=int(critical_devices),
            total_vulnerabilities=sum(severity_rows.values()),
            average_time_to_remediate=REMEDIATION_TARGET,
            recent_scans_count=self._count(
                select(func.count()).select_from(Scan).where(Scan.created_at > recent_cutoff)
            ),
            scan_activity=self._scan_activity(today, window_start),
            vulnerability_severity_distribution=[
                SeverityBucket(severity=level, count=severity_rows[level.value])
                for level in Severity
                if severity_rows.get(level.value)
            ],
        )

    def catalog(self) -> Catalog:
        brands = self.session.exec(select(Device.brand).distinct().order_by(Device.brand)).all()
        locations = self.session.exec(select(Device.location).distinct().order_by(Device.location)).all()
        return Catalog(
            scan_types=[scan_type.value for scan_type in ScanType],
            scan_statuses=["all"] + [status.value for status in ScanStatus],
            device_brands=["all", *brands],
            device_locations=["all", *locations],
            report_formats=[LabelledOption(value=fmt.value, label=fmt.value.upper()) for fmt in ReportFormat],
            severity_levels=[LabelledOption(value=level.value, label=level.value.capitalize()) for level in Severity],
        )

    def _open_severity_counts(self) -> Counter:
        rows = self.session.exec(
            select(ScanResult.severity, func.count())
            .join(Scan, ScanResult.scan_id == Scan.id)
            .where(ScanResult.status == FindingStatus.OPEN.value, Scan.status == ScanStatus.COMPLETED.value)
            .group_by(ScanResult.severity)
        ).all()
        return Counter({severity: int(count) for severity, count in rows})

    def _scan_activity(self, today: date, window_start: datetime) -> List[ScanActivityPoint]:
        created = self.session.exec(select(Scan.created_at).where(Scan.created_at >= window_start)).all()
        per_day = Counter(timestamp.date() for timestamp in created)
        days = [today - timedelta(days=offset) for offset in range(ACTIVITY_DAYS - 1, -1, -1)]
        return [ScanActivityPoint(date=day.isoformat(), count=per_day.get(day, 0)) for day in days]

    def _count(self, statement) -> int:
        return int(self.session.exec(statement).one())
