from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session
from starlette.responses import Response

from backend.engine.report_renderer import render_report

from ..schemas import CustomReportParams, CustomReportResponse, ReportRecordView, ScanReportParams
from ..services import ReportService
from .deps import get_current_user_id, get_db_session

router = APIRouter(prefix="/reports", tags=["reports"])


def _get_service(session: Session = Depends(get_db_session)) -> ReportService:
    return ReportService(session)


@router.get("", response_model=List[ReportRecordView])
def list_reports(
    user_id: str = Depends(get_current_user_id),
    service: ReportService = Depends(_get_service),
) -> List[ReportRecordView]:
    return service.list_reports(user_id)


@router.post("/custom", response_model=CustomReportResponse)
async def generate_custom_report(
    params: CustomReportParams,
    user_id: str = Depends(get_current_user_id),
    service: ReportService = Depends(_get_service),
) -> CustomReportResponse:
    return await service.generate_custom_report(user_id, params)


@router.post("/scan/{scan_id}", response_model=CustomReportResponse)
async def generate_scan_report(
    scan_id: str,
    params: ScanReportParams | None = None,
    user_id: str = Depends(get_current_user_id),
    service: ReportService = Depends(_get_service),
) -> CustomReportResponse:
    try:
        return await service.generate_scan_report(user_id, scan_id, params or ScanReportParams())
    except ValueError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc


@router.get("/{report_id}", response_model=ReportRecordView)
def get_report(
    report_id: str,
    user_id: str = Depends(get_current_user_id),
    service: ReportService = Depends(_get_service),
) -> ReportRecordView:
    try:
        return service.get_report(report_id, user_id)
    except ValueError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc


@router.get("/{report_id}/download")
def download_report(
    report_id: str,
    user_id: str = Depends(get_current_user_id),
    service: ReportService = Depends(_get_service),
) -> Response:
    """Render a stored report as PDF or CSV, according to its format.

    Reports belong to the user who generated them; anyone else gets a 404.
    """
    try:
        report, rows = service.report_rows(report_id, user_id)
    except ValueError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    body, media_type, filename = render_report(report, rows)
    return Response(body, media_type=media_type, headers={"Content-Disposition": f"attachment; filename={filename}"})
