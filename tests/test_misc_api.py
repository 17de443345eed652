from fastapi.testclient import TestClient


def test_dashboard_and_catalog(client: TestClient) -> None:
    summary = client.get("/api/dashboard").json()
    assert summary["totalDevices"] >= 55
    assert len(summary["scanActivity"]) == 7
    assert summary["averageTimeToRemediate"] == "7 days"

    catalog = client.get("/api/catalog").json()
    assert catalog["scanStatuses"] == ["all", "pending", "in_progress", "completed", "failed", "cancelled"]
    assert "Palo Alto Networks" in catalog["deviceBrands"]


def test_notifications_flow(client: TestClient) -> None:
    headers = {"X-User-Id": "notification-tester"}
    client.post("/api/reports/custom", json={"report_type": "One"}, headers=headers)
    client.post("/api/reports/custom", json={"report_type": "Two"}, headers=headers)

    assert client.get("/api/notifications/unread-count", headers=headers).json() == {"unread": 2}
    page = client.get("/api/notifications", params={"status": "unread"}, headers=headers).json()
    first = page["data"][0]
    assert first["type"] == "report_ready"

    assert client.post(f"/api/notifications/{first['id']}/read", headers=headers).json()["isRead"] is True
    assert client.post(f"/api/notifications/{first['id']}/read").status_code == 404
    assert client.post("/api/notifications/read-all", headers=headers).json() == {"updated": 1}
    assert client.delete(f"/api/notifications/{first['id']}", headers=headers).json() == {"status": "deleted"}
    assert client.get("/api/notifications", headers=headers).json()["totalItems"] == 1
    assert client.get("/api/notifications", params={"status": "archived"}).status_code == 422


def test_schedules_crud(client: TestClient) -> None:
    created = client.post(
        "/api/schedules",
        json={"deviceId": "device-fw-12", "scanType": "web", "scheduleType": "weekly", "cronExpression": "0 3 * * 2"},
    )
    assert created.status_code == 201
    schedule = created.json()
    assert schedule["deviceName"]
    assert schedule["nextRunAt"]

    patched = client.patch(f"/api/schedules/{schedule['id']}", json={"isActive": False})
    assert patched.json()["isActive"] is False
    assert client.delete(f"/api/schedules/{schedule['id']}").json() == {"status": "deleted"}
    assert client.get(f"/api/schedules/{schedule['id']}").status_code == 404

    assert client.post("/api/schedules", json={"deviceId": "ghost"}).status_code == 400
    assert client.post("/api/schedules", json={"deviceId": "device-fw-1", "cronExpression": "soon"}).status_code == 422


def test_profile_and_settings(client: TestClient) -> None:
    headers = {"X-User-Id": "profile-tester"}
    profile = client.get("/api/profile", headers=headers).json()
    assert profile["name"] == "Security Analyst"

    updated = client.put(
        "/api/profile",
        json={"name": "Dana", "email": "dana@example.com", "avatar_url": "https://example.com/a.png"},
        headers=headers,
    )
    assert updated.json()["email"] == "dana@example.com"
    assert client.put("/api/profile", json={"name": "Dana", "email": "nope"}, headers=headers).status_code == 422

    settings = client.put("/api/settings", json={"theme": "dark"}, headers=headers).json()
    assert settings["theme"] == "dark"
    assert client.put("/api/settings", json={"theme": "neon"}, headers=headers).status_code == 422


def test_ai_endpoints_degrade_without_provider(client: TestClient) -> None:
    response = client.post(
        "/api/ai/remediation",
        json={"vulnerabilityDescription": "Weak TLS ciphers", "deviceInformation": "FortiGate 60F"},
    )
    body = response.json()
    assert body["status"] == "degraded"
    assert body["data"]["confidenceScore"] <= 0.2

    known = client.post("/api/ai/remediation", json={"vulnerabilityDescription": "Cisco IOS XE Web UI Auth Bypass"})
    assert known.json()["status"] == "ok"
    assert known.json()["data"]["confidenceScore"] == 0.95

    assert client.post("/api/ai/summarize", json={"scanData": "[]"}).json()["status"] == "degraded"
    assert client.post("/api/ai/enhance", json={"scanReport": ""}).status_code == 422
