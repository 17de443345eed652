import csv
import io

from fastapi.testclient import TestClient

HEADERS = {"X-User-Id": "report-tester"}


def test_custom_report_envelope_and_download(client: TestClient) -> None:
    response = client.post(
        "/api/reports/custom",
        json={
            "report_type": "Perimeter review",
            "format": "csv",
            "include_trends": True,
            "filters": {"device_brands": ["Cisco"], "severity_levels": ["critical", "high"]},
        },
        headers=HEADERS,
    )

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "completed"
    assert body["report_id"].startswith("report-")
    assert "generated_at" in body
    data = body["data"]
    assert data["trendsIncluded"] is True
    assert "New critical vulnerabilities:" in data["trendSummary"]
    assert data["filtersApplied"]["device_brands"] == ["Cisco"]

    download = client.get(data["downloadLink"], headers=HEADERS)
    assert download.status_code == 200
    assert download.headers["content-type"].startswith("text/csv")
    rows = list(csv.DictReader(io.StringIO(download.text)))
    assert all(row["brand"] == "Cisco" and row["severity"] in {"critical", "high"} for row in rows)

    listed = client.get("/api/reports", headers=HEADERS).json()
    assert body["report_id"] in [report["id"] for report in listed]


def test_custom_report_validation(client: TestClient) -> None:
    assert client.post("/api/reports/custom", json={"report_type": ""}).status_code == 422
    bad_range = client.post(
        "/api/reports/custom",
        json={
            "report_type": "x",
            "filters": {"date_range": {"start": "2024-03-01T00:00:00Z", "end": "2024-01-01T00:00:00Z"}},
        },
    )
    assert bad_range.status_code == 422


def test_scan_report_pdf(client: TestClient) -> None:
    response = client.post("/api/reports/scan/scan-fw-1", json={"format": "pdf"}, headers=HEADERS)

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "completed"
    assert body["data"]["details"]["scanId"] == "scan-fw-1"

    download = client.get(f"/api/reports/{body['report_id']}/download", headers=HEADERS)
    assert download.headers["content-type"] == "application/pdf"
    assert download.content.startswith(b"%PDF")


def test_scan_report_for_incomplete_or_missing_scan(client: TestClient) -> None:
    assert client.post("/api/reports/scan/scan-fw-2").json()["status"] == "failed"
    assert client.post("/api/reports/scan/scan-missing").status_code == 404
    assert client.get("/api/reports/report-missing/download").status_code == 404


def test_reports_are_private_to_their_owner(client: TestClient) -> None:
    body = client.post("/api/reports/custom", json={"report_type": "Owner only", "format": "csv"}, headers=HEADERS).json()
    report_id = body["report_id"]
    stranger = {"X-User-Id": "someone-else"}

    assert client.get(f"/api/reports/{report_id}", headers=HEADERS).json()["id"] == report_id
    assert client.get(f"/api/reports/{report_id}", headers=stranger).status_code == 404
    assert client.get(f"/api/reports/{report_id}/download", headers=stranger).status_code == 404
    assert report_id not in [report["id"] for report in client.get("/api/reports", headers=stranger).json()]
