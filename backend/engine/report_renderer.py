from __future__ import annotations

import csv
import io
from typing import Any, Dict, List, Tuple

from reportlab.lib.pagesizes import letter
from reportlab.pdfgen import canvas

from backend.app.schemas import ReportRecordView

CSV_COLUMNS = ["device", "brand", "scan_id", "scan_type", "finding", "severity", "status", "detected_at"]
PAGE_TOP = 750
PAGE_BOTTOM = 72
LEFT = 72
WRAP = 90


def render_report(report: ReportRecordView, rows: List[Dict[str, Any]]) -> Tuple[bytes, str, str]:
    """Render a stored report; returns the body, media type and filename."""
    if report.format == "csv":
        return render_csv(rows), "text/csv", f"{report.id}.csv"
    return render_pdf(report, rows), "application/pdf", f"{report.id}.pdf"


def render_csv(rows: List[Dict[str, Any]]) -> bytes:
    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=CSV_COLUMNS, extrasaction="ignore")
    writer.writeheader()
    writer.writerows(rows)
    return buffer.getvalue().encode("utf-8")


def render_pdf(report: ReportRecordView, rows: List[Dict[str, Any]]) -> bytes:
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    c.setTitle(f"VulnSentry Report {report.id}")
    y = PAGE_TOP

    def line(text: str, font: str = "Helvetica", size: int = 11, gap: int = 14) -> None:
        nonlocal y
        if y < PAGE_BOTTOM:
            c.showPage()
            y = PAGE_TOP
        c.setFont(font, size)
        c.drawString(LEFT, y, text)
        y -= gap

    line(f"VulnSentry report: {report.report_type}", "Helvetica-Bold", 14, 22)
    line(f"Report {report.id}  Format: {report.format.upper()}  Generated: {report.generated_at:%Y-%m-%d %H:%M} UTC")
    if report.message:
        line(report.message)
    y -= 8

    data = report.data
    details = data.get("details")
    if isinstance(details, dict):
        line("Details", "Helvetica-Bold", 12, 18)
        for key, value in details.items():
            if isinstance(value, dict):
                value = ", ".join(f"{k}: {v}" for k, v in value.items()) or "none"
            line(f"{key}: {value}")
        y -= 8
    for heading, text in (
        ("Trend summary", data.get("trendSummary")),
        ("Executive summary", (data.get("aiAnalysis") or {}).get("executiveSummary")),
        ("Recommendations", (data.get("aiAnalysis") or {}).get("prioritizedRecommendations")),
    ):
        if not text:
            continue
        line(heading, "Helvetica-Bold", 12, 18)
        for paragraph in str(text).splitlines():
            for i in range(0, max(len(paragraph), 1), WRAP):
                line(paragraph[i : i + WRAP])
        y -= 8

    line(f"Findings ({len(rows)})", "Helvetica-Bold", 12, 18)
    for row in rows:
        line(f"[{row['severity'].upper()}] {row['finding']}  {row['device']}  ({row['status']})", size=9, gap=12)

    c.showPage()
    c.save()
    pdf = buf.getvalue()
    buf.close()
    return pdf
