from __future__ import annotations

import json
from datetime import datetime
from typing import List, Tuple

from sqlmodel import Session, select

from ..models import Device, Scan, ScanResult, ScanStatus, ScanType
from ..schemas import (
    AIEnhancement,
    AISuggestion,
    Page,
    ScanDetail,
    ScanHistoryFilters,
    ScanResultView,
    ScanSummary,
)
from .pagination import paginate


class ScanStateError(ValueError):
    """Raised when a scan cannot make the requested transition."""


class ScanService:
    """Persistence side of scans. Timing is handled by the lifecycle manager."""

    def __init__(self, session: Session):
        self.session = session

    def create_scan(self, device_id: str, scan_type: ScanType = ScanType.FULL) -> ScanSummary:
        device = self.session.get(Device, device_id)
        if not device:
            raise ValueError("Device not found")
        scan = self._new_scan(device, scan_type)
        self.session.commit()
        self.session.refresh(scan)
        return self.build_summary(scan)

    def create_bulk(self, device_ids: List[str], scan_type: ScanType = ScanType.FULL) -> Tuple[List[ScanSummary], List[str]]:
        scans: List[Scan] = []
        skipped: List[str] = []
        for device_id in dict.fromkeys(device_ids):
            device = self.session.get(Device, device_id)
            if not device:
                skipped.append(device_id)
                continue
            scans.append(self._new_scan(device, scan_type))
        self.session.commit()
        for scan in scans:
            self.session.refresh(scan)
        return [self.build_summary(scan) for scan in scans], skipped

    def list_history(self, filters: ScanHistoryFilters) -> Page[ScanSummary]:
        statement = select(Scan)
        if filters.device_id:
            statement = statement.where(Scan.device_id == filters.device_id)
        if filters.status:
            statement = statement.where(Scan.status == filters.status.value)
        if filters.scan_type:
            statement = statement.where(Scan.scan_type == filters.scan_type.value)
        statement = statement.order_by(Scan.created_at.desc(), Scan.id)
        rows, total = paginate(self.session, statement, filters.page, filters.limit)
        return Page[ScanSummary].build(
            [self.build_summary(scan) for scan in rows],
            page=filters.page,
            limit=filters.limit,
            total=total,
        )

    def get_scan(self, scan_id: str) -> ScanDetail:
        scan = self._get(scan_id)
        return self.build_detail(scan, self._load_results(scan_id))

    def mark_cancelled(self, scan_id: str) -> ScanSummary:
        scan = self._get(scan_id)
        if ScanStatus(scan.status).is_terminal:
            raise ScanStateError(f"Scan is already {scan.status}")
        scan.status = ScanStatus.CANCELLED.value
        scan.completed_at = datetime.utcnow()
        self.session.add(scan)
        self.session.commit()
        self.session.refresh(scan)
        return self.build_summary(scan)

    def get_result(self, result_id: str) -> ScanResult:
        result = self.session.get(ScanResult, result_id)
        if not result:
            raise ValueError("Scan result not found")
        return result

    def get_device_result(self, device_id: str, result_id: str) -> ScanResult:
        """Fetch a finding only if it was reported by a scan of ``device_id``."""
        result = self.get_result(result_id)
        scan = self.session.get(Scan, result.scan_id)
        if not scan or scan.device_id != device_id:
            raise ValueError("Scan result not found")
        return result

    def record_remediation(self, result_id: str, suggestion: AISuggestion) -> ScanResultView:
        result = self.get_result(result_id)
        result.ai_suggested_remediation = suggestion.remediation_steps
        result.ai_confidence_score = suggestion.confidence_score
        self.session.add(result)
        self.session.commit()
        self.session.refresh(result)
        return self._build_result_view(result)

    def build_summary(self, scan: Scan) -> ScanSummary:
        return ScanSummary(
            id=scan.id,
            device_id=scan.device_id,
            device_name=scan.device_name,
            scan_type=scan.scan_type,
            status=scan.status,
            started_at=scan.started_at,
            completed_at=scan.completed_at,
            summary=scan.summary,
            vulnerabilities_found=scan.vulnerabilities_found,
            created_at=scan.created_at,
        )

    def build_detail(self, scan: Scan, results: List[ScanResult]) -> ScanDetail:
        analysis = json.loads(scan.ai_analysis_json or "{}")
        return ScanDetail(
            **self.build_summary(scan).model_dump(),
            ai_analysis=AIEnhancement.model_validate(analysis) if analysis else None,
            ai_degraded=scan.ai_degraded,
            results=[self._build_result_view(result) for result in results],
        )

    def _new_scan(self, device: Device, scan_type: ScanType) -> Scan:
        now = datetime.utcnow()
        scan = Scan(
            device_id=device.id,
            device_name=device.name,
            scan_type=ScanType(scan_type).value,
            status=ScanStatus.PENDING.value,
            started_at=now,
            created_at=now,
        )
        self.session.add(scan)
        return scan

    def _build_result_view(self, result: ScanResult) -> ScanResultView:
        return ScanResultView(
            id=result.id,
            scan_id=result.scan_id,
            vulnerability_id=result.vulnerability_id,
            finding=result.finding,
            details=result.details,
            severity=result.severity,
            status=result.status,
            ai_confidence_score=result.ai_confidence_score,
            ai_suggested_remediation=result.ai_suggested_remediation,
            created_at=result.created_at,
        )

    def _get(self, scan_id: str) -> Scan:
        scan = self.session.get(Scan, scan_id)
        if not scan:
            raise ValueError("Scan not found")
        return scan

    def _load_results(self, scan_id: str) -> List[ScanResult]:
        return list(self.session.exec(select(ScanResult).where(ScanResult.scan_id == scan_id).order_by(ScanResult.id)).all())
