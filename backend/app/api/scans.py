from __future__ import annotations

import logging
import uuid

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlmodel import Session

from ..config import settings
from ..schemas import BulkScanRequest, BulkScanResponse, Page, ScanDetail, ScanHistoryFilters, ScanSummary
from ..services import ScanService, ScanStateError
from .deps import build_filters, get_current_user_id, get_db_session, get_lifecycle

router = APIRouter(prefix="/scans", tags=["scans"])

logger = logging.getLogger("vulnsentry.api")


def _get_service(session: Session = Depends(get_db_session)) -> ScanService:
    return ScanService(session)


def _filters(
    device_id: str | None = Query(default=None, alias="deviceId"),
    status: str | None = None,
    scan_type: str | None = Query(default=None, alias="scanType"),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=settings.page_size, ge=1, le=1000),
) -> ScanHistoryFilters:
    return build_filters(
        ScanHistoryFilters, device_id=device_id, status=status, scan_type=scan_type, page=page, limit=limit
    )


@router.get("", response_model=Page[ScanSummary])
def scan_history(
    filters: ScanHistoryFilters = Depends(_filters),
    service: ScanService = Depends(_get_service),
) -> Page[ScanSummary]:
    return service.list_history(filters)


@router.post("/bulk", response_model=BulkScanResponse, status_code=202)
async def trigger_bulk_scan(
    payload: BulkScanRequest,
    service: ScanService = Depends(_get_service),
    user_id: str = Depends(get_current_user_id),
    lifecycle=Depends(get_lifecycle),
) -> BulkScanResponse:
    scans, skipped = service.create_bulk(payload.device_ids)
    for scan in scans:
        lifecycle.start(scan.id, user_id)
    if skipped:
        logger.warning("Bulk scan skipped unknown devices: %s", ", ".join(skipped))
    return BulkScanResponse(
        job_id=f"bulk-job-{uuid.uuid4().hex[:12]}",
        message=f"{len(scans)} firewall scans initiated.",
        scan_ids=[scan.id for scan in scans],
        skipped=skipped,
    )


@router.get("/{scan_id}", response_model=ScanDetail)
def get_scan(scan_id: str, service: ScanService = Depends(_get_service)) -> ScanDetail:
    try:
        return service.get_scan(scan_id)
    except ValueError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc


@router.post("/{scan_id}/cancel", response_model=ScanSummary)
async def cancel_scan(
    scan_id: str,
    service: ScanService = Depends(_get_service),
    lifecycle=Depends(get_lifecycle),
) -> ScanSummary:
    # stop the task before writing, so it cannot record completion afterwards
    lifecycle.cancel(scan_id)
    try:
        return service.mark_cancelled(scan_id)
    except ScanStateError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
