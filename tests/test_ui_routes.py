import pytest
from fastapi.testclient import TestClient


@pytest.mark.parametrize(
    "path, marker",
    [
        ("/dashboard", "Recent scans"),
        ("/devices", "Add device"),
        ("/devices/device-fw-1", "Run a scan"),
        ("/bulk-scan", "Start full scan on selected devices"),
        ("/scan-history", "Open findings"),
        ("/scheduled-scans", "New schedule"),
        ("/reports", "Custom report"),
        ("/notifications", "Mark all as read"),
        ("/profile", "Save profile"),
        ("/settings", "Save settings"),
    ],
)
def test_pages_render(client: TestClient, path: str, marker: str) -> None:
    response = client.get(path)
    assert response.status_code == 200
    assert "text/html" in response.headers["content-type"]
    assert marker in response.text


def test_root_redirects_to_dashboard(client: TestClient) -> None:
    response = client.get("/", follow_redirects=False)
    assert response.status_code == 303
    assert response.headers["location"] == "/dashboard"


def test_invalid_filter_shows_message_instead_of_failing(client: TestClient) -> None:
    response = client.get("/devices", params={"isActive": "sometimes"})
    assert response.status_code == 200
    assert "isActive must be a boolean" in response.text


def test_unknown_device_page_redirects_with_toast(client: TestClient) -> None:
    response = client.get("/devices/device-missing", follow_redirects=False)
    assert response.status_code == 303
    assert "toast=Could+not+load+device+details." in response.headers["location"]


def test_toggle_form_redirects_back(client: TestClient) -> None:
    response = client.post("/devices/device-fw-20/toggle", data={"next": "/devices"}, follow_redirects=False)
    assert response.status_code == 303
    assert response.headers["location"].startswith("/devices?")
    client.post("/devices/device-fw-20/toggle")


def test_bulk_scan_form_requires_selection(client: TestClient) -> None:
    response = client.post("/bulk-scan", data={}, follow_redirects=False)
    assert "level=error" in response.headers["location"]

    started = client.post("/bulk-scan", data={"device_ids": ["device-fw-30", "device-fw-31"]}, follow_redirects=False)
    assert "2+firewall+scans+initiated." in started.headers["location"]


def test_profile_form_validation(client: TestClient) -> None:
    response = client.post(
        "/profile", data={"name": "Ops", "email": "ops@example.com", "avatar_url": "ftp://x"}, follow_redirects=False
    )
    assert "level=error" in response.headers["location"]
    assert "Please+enter+a+valid+URL." in response.headers["location"]


def test_custom_report_form(client: TestClient) -> None:
    response = client.post(
        "/reports",
        data={"report_type": "Weekly", "format": "pdf", "severity_levels": ["critical"], "include_trends": "on"},
        follow_redirects=False,
    )
    assert response.status_code == 303
    assert "level=success" in response.headers["location"]
    page = client.get("/reports")
    assert "Weekly" in page.text


@pytest.mark.parametrize(
    "target",
    ["https://evil.example/phish", "//evil.example/phish", "/\\evil.example", "javascript:alert(1)", "devices"],
)
def test_toggle_form_ignores_offsite_next(client: TestClient, target: str) -> None:
    response = client.post("/devices/device-fw-3/toggle", data={"next": target}, follow_redirects=False)
    client.post("/devices/device-fw-3/toggle")

    assert response.status_code == 303
    assert response.headers["location"].startswith("/devices/device-fw-3?")


def test_edit_form_can_clear_tags(client: TestClient) -> None:
    device = client.post(
        "/api/devices",
        json={
            "name": "Tagged Firewall",
            "brand": "Cisco",
            "model": "ASA 5500-X",
            "version": "9.1.0",
            "location": "DMZ Zone",
            "ipAddress": "192.168.50.1",
            "macAddress": "00:11:22:33:44:AA",
            "os": "Cisco ASA Software",
            "osVersion": "9.1.0",
            "tags": ["dmz", "edge"],
        },
    ).json()

    response = client.post(
        f"/devices/{device['id']}/edit",
        data={"name": "Tagged Firewall", "tags": "", "is_active": "on"},
        follow_redirects=False,
    )

    assert "level=success" in response.headers["location"]
    assert client.get(f"/api/devices/{device['id']}").json()["tags"] == []


def test_remediation_form_rejects_finding_from_another_device(client: TestClient) -> None:
    completed = client.get("/api/scans", params={"status": "completed", "limit": 1000}).json()["data"]
    detail = next(
        body
        for body in (client.get(f"/api/scans/{scan['id']}").json() for scan in completed)
        if body["results"]
    )
    finding = detail["results"][0]
    other_device = "device-fw-2" if detail["deviceId"] != "device-fw-2" else "device-fw-3"

    response = client.post(f"/devices/{other_device}/results/{finding['id']}/remediation", follow_redirects=False)

    assert response.headers["location"].startswith(f"/devices/{other_device}?")
    assert "level=error" in response.headers["location"]
    after = client.get(f"/api/scans/{detail['id']}").json()["results"][0]
    assert after["aiSuggestedRemediation"] == finding["aiSuggestedRemediation"]


def test_cancel_form_stops_running_scan(client: TestClient, monkeypatch) -> None:
    lifecycle = client.app.state.lifecycle
    monkeypatch.setattr(lifecycle, "pending_delay", 30)
    scan = client.post("/api/devices/device-fw-12/scans", json={"scanType": "local"}).json()

    response = client.post(f"/scans/{scan['id']}/cancel", follow_redirects=False)

    assert "toast=Scan+cancelled." in response.headers["location"]
    assert scan["id"] not in lifecycle.active_scan_ids
    assert client.get(f"/api/scans/{scan['id']}").json()["status"] == "cancelled"
