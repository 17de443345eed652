from __future__ import annotations

import json
import logging
import random
from datetime import datetime, timedelta
from typing import List, Optional

from sqlmodel import Session, select

from backend.engine.findings import count_open, synthesize_findings

from .config import settings
from .models import Device, Notification, NotificationType, Scan, ScanStatus, ScanType
from .services import ProfileService

logger = logging.getLogger("vulnsentry.seed")

DEMO_DEVICE_COUNT = 55
DEMO_SCAN_COUNT = 120

FIREWALL_MODELS = {
    "Cisco": ["ASA 5500-X", "Firepower 1000", "Meraki MX"],
    "Palo Alto Networks": ["PA-220", "PA-800 Series", "PA-3200 Series"],
    "Fortinet": ["FortiGate 60F", "FortiGate 100F", "FortiGate 1800F"],
    "Juniper Networks": ["SRX300 Series", "SRX1500", "SRX4600"],
    "Check Point": ["Quantum Spark", "Quantum Security Gateway", "Maestro Hyperscale Orchestrator"],
}
FIREWALL_OS = {
    "Cisco": "Cisco ASA Software",
    "Palo Alto Networks": "PAN-OS",
    "Fortinet": "FortiOS",
    "Juniper Networks": "Junos OS",
    "Check Point": "Gaia OS",
}
LOCATIONS = ["Data Center A", "Branch Office X", "DMZ Zone", "Cloud VPC Segment"]
TAG_SETS = [["core-network", "high-availability"], ["perimeter-security"], ["internal-segmentation"]]

# Seeded history never leaves scans in flight; nothing would ever advance them.
SEED_SCAN_STATUSES = [ScanStatus.COMPLETED, ScanStatus.FAILED, ScanStatus.COMPLETED, ScanStatus.CANCELLED]


def build_demo_devices(now: datetime, rng: random.Random) -> List[Device]:
    brands = list(FIREWALL_MODELS)
    devices: List[Device] = []
    for i in range(DEMO_DEVICE_COUNT):
        brand = brands[i % len(brands)]
        models = FIREWALL_MODELS[brand]
        model = models[i % len(models)]
        devices.append(
            Device(
                id=f"device-fw-{i + 1}",
                name=f"{brand.split(' ')[0]} Firewall {model.split(' ')[0]}-{1000 + i}",
                brand=brand,
                model=model,
                version=f"{1 + i % 4}.{i % 10}.{i % 5}",
                location=LOCATIONS[i % len(LOCATIONS)],
                ip_address=f"10.0.{i % 255}.{10 + i % 200}",
                mac_address=f"00:A1:B2:C3:D4:{10 + i:02X}",
                os=FIREWALL_OS[brand],
                os_version=f"{9 + i % 3}.{i % 5}.{i % 9}",
                is_active=i % 6 != 0,
                tags_json=json.dumps(TAG_SETS[i % len(TAG_SETS)]),
                last_seen=now - timedelta(seconds=rng.uniform(0, 7 * 86400)),
                created_at=now - timedelta(seconds=rng.uniform(0, 30 * 86400)),
                updated_at=now,
            )
        )
    return devices


def build_demo_scans(devices: List[Device], now: datetime, rng: random.Random) -> List[Scan]:
    scan_types = list(ScanType)
    scans: List[Scan] = []
    for i in range(DEMO_SCAN_COUNT):
        device = devices[i % len(devices)]
        status = SEED_SCAN_STATUSES[i % len(SEED_SCAN_STATUSES)]
        created_at = now - timedelta(seconds=rng.uniform(0, 10 * 86400))
        started_at = created_at + timedelta(seconds=1)
        scans.append(
            Scan(
                id=f"scan-fw-{i + 1}",
                device_id=device.id,
                device_name=device.name,
                scan_type=scan_types[i % len(scan_types)].value,
                status=status.value,
                started_at=started_at,
                completed_at=started_at + timedelta(minutes=rng.randint(1, 20)),
                created_at=created_at,
            )
        )
    return scans


def seed_demo_data(session: Session, now: Optional[datetime] = None, rng: Optional[random.Random] = None) -> bool:
    """Populate an empty database with demo firewalls, scan history and notifications.

    Returns False without touching anything when devices already exist.
    """

    if session.exec(select(Device).limit(1)).first():
        return False

    now = now or datetime.utcnow()
    rng = rng or random.Random(42)
    devices = build_demo_devices(now, rng)
    session.add_all(devices)

    scans = build_demo_scans(devices, now, rng)
    finding_total = 0
    for scan in scans:
        if scan.status == ScanStatus.COMPLETED.value:
            results = synthesize_findings(scan.id, rng=rng)
            open_count = count_open(results)
            scan.vulnerabilities_found = open_count
            scan.summary = f"Scan found {open_count} open issues."
            session.add_all(results)
            finding_total += len(results)
        elif scan.status == ScanStatus.FAILED.value:
            scan.summary = "Scan failed before completion."
        session.add(scan)

    user_id = settings.default_user_id
    session.add_all(
        [
            Notification(
                user_id=user_id,
                type=NotificationType.SYSTEM_UPDATE.value,
                title="Welcome to VulnSentry",
                message="Demo firewalls and scan history have been loaded.",
                link="/dashboard",
                created_at=now - timedelta(hours=2),
            ),
            Notification(
                user_id=user_id,
                type=NotificationType.CRITICAL_ALERT.value,
                title="Critical vulnerability detected",
                message=f"Critical findings are open on {devices[0].name}.",
                link=f"/devices/{devices[0].id}",
                created_at=now - timedelta(hours=1),
            ),
            Notification(
                user_id=user_id,
                type=NotificationType.SCAN_COMPLETED.value,
                title="Scan completed",
                message=f"{scans[0].scan_type.upper()} scan on {devices[0].name} finished.",
                link=f"/devices/{devices[0].id}",
                is_read=True,
                created_at=now - timedelta(minutes=30),
            ),
        ]
    )
    session.commit()

    ProfileService(session).get_profile(user_id)
    logger.info("Seeded %s devices, %s scans and %s findings", len(devices), len(scans), finding_total)
    return True
