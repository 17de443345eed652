from datetime import datetime, timedelta

from sqlmodel import Session

from backend.app.models import Device, Scan, ScanResult
from backend.app.services import DashboardService


def _device(session: Session, device_id: str, active: bool = True) -> None:
    session.add(
        Device(
            id=device_id,
            name=device_id,
            brand="Cisco",
            model="ASA",
            version="1",
            location="Data Center A",
            ip_address="10.0.0.1",
            mac_address="00:A1:B2:C3:D4:0A",
            os="Cisco ASA Software",
            os_version="9.0.0",
            is_active=active,
        )
    )


def test_summary_counts_open_findings_of_completed_scans(session: Session) -> None:
    now = datetime(2024, 5, 10, 12, 0)
    _device(session, "dev-a")
    _device(session, "dev-b", active=False)
    session.add(Scan(id="s1", device_id="dev-a", status="completed", created_at=now - timedelta(days=1)))
    session.add(Scan(id="s2", device_id="dev-b", status="failed", created_at=now - timedelta(days=20)))
    session.add(Scan(id="s3", device_id="dev-b", status="completed", created_at=now))
    session.add_all(
        [
            ScanResult(id="r1", scan_id="s1", finding="f", severity="critical", status="open"),
            ScanResult(id="r2", scan_id="s1", finding="f", severity="high", status="open"),
            ScanResult(id="r3", scan_id="s1", finding="f", severity="critical", status="closed"),
            ScanResult(id="r4", scan_id="s2", finding="f", severity="critical", status="open"),
            ScanResult(id="r5", scan_id="s3", finding="f", severity="low", status="open"),
        ]
    )
    session.commit()

    summary = DashboardService(session).organization_summary(now=now)

    assert summary.total_devices == 2
    assert summary.active_devices == 1
    assert summary.devices_with_critical_vulnerabilities == 1
    assert summary.total_vulnerabilities == 3
    assert [(bucket.severity.value, bucket.count) for bucket in summary.vulnerability_severity_distribution] == [
        ("critical", 1),
        ("high", 1),
        ("low", 1),
    ]
    assert summary.recent_scans_count == 2
    assert len(summary.scan_activity) == 7
    assert summary.scan_activity[-1].date == "2024-05-10"
    assert summary.scan_activity[-1].count == 1
    assert summary.scan_activity[-2].count == 1
    assert summary.average_time_to_remediate == "7 days"


def test_catalog_lists_all_options(session: Session) -> None:
    _device(session, "dev-a")
    session.commit()

    catalog = DashboardService(session).catalog()

    assert catalog.scan_types == ["full", "local", "web", "ai"]
    assert catalog.scan_statuses[0] == "all"
    assert catalog.device_brands == ["all", "Cisco"]
    assert [option.value for option in catalog.report_formats] == ["pdf", "csv"]
    assert catalog.severity_levels[-1].label == "Informational"
