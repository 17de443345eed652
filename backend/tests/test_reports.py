import asyncio
import csv
import io
import random
from datetime import datetime, timedelta

import pytest
from pydantic import ValidationError
from sqlmodel import Session, select

from backend.app.models import Device, Notification, Scan, ScanResult
from backend.app.schemas import CustomReportParams, ScanReportParams
from backend.app.services import ReportService
from backend.app.services.report_service import FAILURE_MESSAGE, describe_trend
from backend.engine.report_renderer import CSV_COLUMNS, render_report


def _fixture_findings(session: Session) -> None:
    now = datetime.utcnow()
    for index, brand in enumerate(["Cisco", "Fortinet"]):
        session.add(
            Device(
                id=f"dev-{index}",
                name=f"{brand} edge",
                brand=brand,
                model="m",
                version="1",
                location="DMZ Zone",
                ip_address=f"10.0.0.{index + 1}",
                mac_address=f"00:A1:B2:C3:D4:0{index}",
                os="os",
                os_version="1",
            )
        )
        session.add(
            Scan(id=f"scan-{index}", device_id=f"dev-{index}", device_name=f"{brand} edge", status="completed")
        )
    rows = [
        ("scan-0", "critical", "open", now - timedelta(days=2)),
        ("scan-0", "high", "closed", now - timedelta(days=3)),
        ("scan-0", "critical", "closed", now - timedelta(days=40)),
        ("scan-1", "medium", "open", now - timedelta(days=1)),
    ]
    for index, (scan_id, severity, status, created_at) in enumerate(rows):
        session.add(
            ScanResult(
                id=f"result-{index}",
                scan_id=scan_id,
                finding=f"Finding {index}",
                severity=severity,
                status=status,
                created_at=created_at,
            )
        )
    session.commit()


def _service(session: Session, failure_rate: float = 0.0) -> ReportService:
    return ReportService(session, rng=random.Random(1), delay=0, failure_rate=failure_rate)


def test_custom_report_applies_filters_and_is_stored(session: Session) -> None:
    _fixture_findings(session)
    params = CustomReportParams(
        report_type="Quarterly review",
        format="csv",
        filters={"device_brands": ["Cisco"], "severity_levels": ["critical", "high"]},
    )

    response = asyncio.run(_service(session).generate_custom_report("alice", params))

    assert response.status == "completed"
    assert response.message == "Custom report 'Quarterly review' generated successfully."
    assert response.data.download_link == f"/api/reports/{response.report_id}/download"
    assert response.data.details["totalFindings"] == 3
    assert response.data.details["bySeverity"] == {"critical": 2, "high": 1}
    assert response.data.trend_summary is None

    stored = ReportService(session).get_report(response.report_id, "alice")
    assert stored.format.value == "csv"
    with pytest.raises(ValueError, match="Report not found"):
        ReportService(session).get_report(response.report_id, "mallory")
    notification = session.exec(select(Notification).where(Notification.user_id == "alice")).one()
    assert notification.type == "report_ready"
    assert notification.link == response.data.download_link


def test_custom_report_trend_summary(session: Session) -> None:
    _fixture_findings(session)
    now = datetime.utcnow()
    params = CustomReportParams(
        report_type="Trends",
        include_trends=True,
        filters={"date_range": {"start": now - timedelta(days=30), "end": now}},
    )

    response = asyncio.run(_service(session).generate_custom_report("alice", params))

    assert response.data.trend_summary == (
        "Overall vulnerability count increased by 200% compared to the previous period. "
        "New critical vulnerabilities: 1, Resolved critical vulnerabilities: 0."
    )


def test_custom_report_failure_is_not_persisted(session: Session) -> None:
    response = asyncio.run(_service(session, failure_rate=1.0).generate_custom_report(
        "alice", CustomReportParams(report_type="Doomed")
    ))

    assert response.status == "failed"
    assert response.message == FAILURE_MESSAGE
    assert response.data is None
    assert ReportService(session).list_reports("alice") == []


def test_report_params_validation() -> None:
    with pytest.raises(ValidationError):
        CustomReportParams(report_type="")
    with pytest.raises(ValidationError, match="End date cannot be earlier than start date"):
        CustomReportParams(
            report_type="x",
            filters={"date_range": {"start": "2024-02-01T00:00:00", "end": "2024-01-01T00:00:00"}},
        )
    with pytest.raises(ValidationError):
        CustomReportParams(report_type="x", format="docx")


def test_scan_report_requires_completed_scan(session: Session) -> None:
    _fixture_findings(session)
    session.add(Scan(id="scan-pending", device_id="dev-0", status="pending"))
    session.commit()
    service = _service(session)

    with pytest.raises(ValueError, match="Scan not found"):
        asyncio.run(service.generate_scan_report("alice", "missing", ScanReportParams()))

    refused = asyncio.run(service.generate_scan_report("alice", "scan-pending", ScanReportParams()))
    assert refused.status == "failed"

    report = asyncio.run(service.generate_scan_report("alice", "scan-0", ScanReportParams(format="pdf")))
    assert report.status == "completed"
    assert report.data.details["totalFindings"] == 3
    assert report.data.details["bySeverity"] == {"critical": 2, "high": 1}


def test_download_rendering(session: Session) -> None:
    _fixture_findings(session)
    service = _service(session)
    csv_report = asyncio.run(service.generate_custom_report(
        "alice", CustomReportParams(report_type="Export", format="csv", filters={"device_brands": ["Fortinet"]})
    ))
    pdf_report = asyncio.run(service.generate_scan_report("alice", "scan-0", ScanReportParams()))

    body, media_type, filename = render_report(*service.report_rows(csv_report.report_id, "alice"))
    assert media_type == "text/csv"
    assert filename.endswith(".csv")
    rows = list(csv.DictReader(io.StringIO(body.decode())))
    assert list(rows[0]) == CSV_COLUMNS
    assert [(row["device"], row["severity"]) for row in rows] == [("Fortinet edge", "medium")]

    body, media_type, filename = render_report(*service.report_rows(pdf_report.report_id, "alice"))
    assert media_type == "application/pdf"
    assert body.startswith(b"%PDF")


def test_describe_trend_wording() -> None:
    assert describe_trend(85, 100, 2, 5) == (
        "Overall vulnerability count decreased by 15% compared to the previous period. "
        "New critical vulnerabilities: 2, Resolved critical vulnerabilities: 5."
    )
    assert describe_trend(0, 0, 0, 0).startswith("No vulnerabilities were recorded")
