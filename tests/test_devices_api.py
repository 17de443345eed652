from fastapi.testclient import TestClient

from backend.app.config import settings

NEW_DEVICE = {
    "name": "Lab Firewall",
    "brand": "Fortinet",
    "model": "FortiGate 60F",
    "version": "7.2.1",
    "location": "Branch Office X",
    "ipAddress": "172.16.0.1",
    "macAddress": "00:11:22:33:44:55",
    "os": "FortiOS",
    "osVersion": "7.2.1",
    "tags": ["lab"],
}


def test_health(client: TestClient) -> None:
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy", "database": "connected"}


def test_list_devices_is_paginated_and_camel_cased(client: TestClient) -> None:
    response = client.get("/api/devices", params={"brand": "Cisco", "limit": 5})

    assert response.status_code == 200
    body = response.json()
    assert body["itemsPerPage"] == 5
    assert body["currentPage"] == 1
    assert body["totalItems"] >= 11
    assert len(body["data"]) == 5
    assert {"ipAddress", "macAddress", "isActive", "lastSeen"} <= set(body["data"][0])


def test_invalid_filters_are_rejected(client: TestClient) -> None:
    assert client.get("/api/devices", params={"isActive": "sometimes"}).status_code == 422
    assert client.get("/api/devices", params={"page": 0}).status_code == 422


def test_device_crud_and_toggle(client: TestClient) -> None:
    created = client.post("/api/devices", json=NEW_DEVICE)
    assert created.status_code == 201
    device_id = created.json()["id"]

    detail = client.get(f"/api/devices/{device_id}").json()
    assert detail["name"] == "Lab Firewall"
    assert detail["scans"] == []

    patched = client.patch(f"/api/devices/{device_id}", json={"location": "DMZ Zone"})
    assert patched.json()["location"] == "DMZ Zone"

    assert client.post(f"/api/devices/{device_id}/toggle").json()["isActive"] is False
    assert client.post(f"/api/devices/{device_id}/toggle").json()["isActive"] is True


def test_device_validation_and_missing(client: TestClient) -> None:
    bad = client.post("/api/devices", json={**NEW_DEVICE, "ipAddress": "not-an-ip"})
    assert bad.status_code == 422

    missing = client.get("/api/devices/device-does-not-exist")
    assert missing.status_code == 404
    assert missing.json() == {"detail": "Device not found", "status": 404}


def test_default_page_size_follows_settings(client: TestClient) -> None:
    for path in ("/api/devices", "/api/scans", "/api/notifications"):
        body = client.get(path).json()
        assert body["itemsPerPage"] == settings.page_size
        assert len(body["data"]) <= settings.page_size


def test_patch_is_active_persists(client: TestClient) -> None:
    device_id = client.post("/api/devices", json={**NEW_DEVICE, "name": "Patch Target"}).json()["id"]

    patched = client.patch(f"/api/devices/{device_id}", json={"isActive": False})

    assert patched.status_code == 200
    assert patched.json()["isActive"] is False
    assert client.get(f"/api/devices/{device_id}").json()["isActive"] is False
