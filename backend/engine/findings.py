from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import List, Optional

from backend.app.models import FindingStatus, ScanResult, Severity

REMEDIATION_HINT = "Update firmware to the latest vendor-supplied version. Refer to vendor advisory."
MAX_FINDINGS = 4


@dataclass(frozen=True)
class Vulnerability:
    id: str
    name: str
    description: str
    severity: Severity
    cvss_score: float
    cve_id: Optional[str] = None
    affected_software: Optional[str] = None
    references: List[str] = field(default_factory=list)


VULNERABILITY_CATALOG: List[Vulnerability] = [
    Vulnerability(
        id="vuln-fw-1",
        cve_id="CVE-2023-20202",
        name="Cisco IOS XE Web UI Auth Bypass",
        description="A critical authentication bypass in Cisco IOS XE Web UI.",
        severity=Severity.CRITICAL,
        cvss_score=9.8,
        affected_software="Cisco IOS XE",
        references=[
            "https://sec.cloudapps.cisco.com/security/center/content/CiscoSecurityAdvisory/cisco-sa-iosxe-auth-bypass-kLgg5N3"
        ],
    ),
    Vulnerability(
        id="vuln-fw-2",
        cve_id="CVE-2022-30524",
        name="PAN-OS GlobalProtect Heap Overflow",
        description="A high severity heap overflow in Palo Alto Networks GlobalProtect.",
        severity=Severity.HIGH,
        cvss_score=8.8,
        affected_software="PAN-OS",
        references=["https://security.paloaltonetworks.com/CVE-2022-30524"],
    ),
    Vulnerability(
        id="vuln-fw-3",
        name="FortiOS Weak SSL/TLS Configuration",
        description="FortiGate device supports weak SSL/TLS ciphers.",
        severity=Severity.MEDIUM,
        cvss_score=5.3,
        affected_software="FortiOS",
    ),
    Vulnerability(
        id="vuln-fw-4",
        name="Junos OS Default Credentials Active",
        description="Default credentials still active on Juniper SRX device.",
        severity=Severity.HIGH,
        cvss_score=7.5,
        affected_software="Junos OS",
    ),
    Vulnerability(
        id="vuln-fw-5",
        name="Outdated Firmware - General",
        description="Device firmware is outdated and misses security patches.",
        severity=Severity.LOW,
        cvss_score=3.5,
    ),
]

_STATUS_CYCLE = (FindingStatus.OPEN, FindingStatus.CLOSED, FindingStatus.IGNORED)


def synthesize_findings(scan_id: str, rng: Optional[random.Random] = None, count: Optional[int] = None) -> List[ScanResult]:
    """Build the findings a simulated scan reports.

    Between zero and four results are drawn in catalog order; statuses cycle
    open, closed, ignored. AI columns are filled at random for roughly half
    of the rows, the way historical scans look.
    """

    rng = rng or random.Random()
    total = rng.randint(0, MAX_FINDINGS) if count is None else count
    results: List[ScanResult] = []
    for index in range(total):
        vuln = VULNERABILITY_CATALOG[index % len(VULNERABILITY_CATALOG)]
        results.append(
            ScanResult(
                id=f"scanresult-{scan_id}-{index}",
                scan_id=scan_id,
                vulnerability_id=vuln.id,
                finding=vuln.name,
                details=vuln.description,
                severity=vuln.severity.value,
                status=_STATUS_CYCLE[index % len(_STATUS_CYCLE)].value,
                ai_confidence_score=round(rng.random(), 2) if rng.random() > 0.5 else None,
                ai_suggested_remediation=REMEDIATION_HINT if rng.random() > 0.5 else None,
            )
        )
    return results


def count_open(results: List[ScanResult]) -> int:
    return sum(1 for result in results if result.status == FindingStatus.OPEN.value)


def findings_payload(results: List[ScanResult]) -> List[dict]:
    """Serialize findings for the AI prompts."""
    return [
        {
            "id": result.id,
            "vulnerabilityId": result.vulnerability_id,
            "finding": result.finding,
            "details": result.details,
            "severity": result.severity,
            "status": result.status,
        }
        for result in results
    ]
