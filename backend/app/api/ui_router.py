from __future__ import annotations

import logging
from typing import Any, Dict, List
from urllib.parse import urlencode, urlsplit

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates
from pydantic import ValidationError
from sqlmodel import Session
from starlette.responses import Response

from ..config import settings
from ..models import ReportFormat, ScanType, ScheduleType
from ..schemas import (
    BulkScanRequest,
    CustomReportParams,
    DeviceCreate,
    DeviceFilters,
    DeviceUpdate,
    NotificationFilters,
    ProfileUpdate,
    ScanHistoryFilters,
    ScanReportParams,
    ScheduledScanCreate,
    ScheduledScanUpdate,
    UserSettingsUpdate,
)
from ..services import (
    DashboardService,
    DeviceService,
    NotificationService,
    ProfileService,
    ReportService,
    ScanService,
    ScheduleService,
)
from .deps import get_current_user_id, get_db_session

router = APIRouter()

logger = logging.getLogger("vulnsentry.api")

_templates_instance: Jinja2Templates | None = None

NAV_ITEMS = [
    ("dashboard", "/dashboard", "Dashboard"),
    ("devices", "/devices", "Devices"),
    ("bulk-scan", "/bulk-scan", "Bulk Scan"),
    ("scan-history", "/scan-history", "Scan History"),
    ("scheduled-scans", "/scheduled-scans", "Scheduled Scans"),
    ("reports", "/reports", "Reports"),
    ("notifications", "/notifications", "Notifications"),
    ("profile", "/profile", "Profile"),
    ("settings", "/settings", "Settings"),
]


def _templates() -> Jinja2Templates:
    global _templates_instance
    if _templates_instance is None:
        _templates_instance = Jinja2Templates(directory=str(settings.template_dir))
        _templates_instance.env.globals.update({"app_name": settings.app_name, "nav_items": NAV_ITEMS})
        _templates_instance.env.filters["enum"] = lambda value: getattr(value, "value", value)
    return _templates_instance


def _redirect(path: str, message: str, level: str = "success", **params: Any) -> RedirectResponse:
    query = {k: v for k, v in params.items() if v not in (None, "")}
    query.update({"toast": message, "level": level})
    return RedirectResponse(f"{path}?{urlencode(query)}", status_code=303)


def _validation_message(exc: ValidationError) -> str:
    first = exc.errors()[0]
    field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = str(first.get("msg", "Invalid input")).removeprefix("Value error, ")
    return f"{field}: {message}" if field else message


def _local_path(value: Any, fallback: str) -> str:
    """Return ``value`` when it is a path on this site, otherwise ``fallback``."""
    candidate = str(value or "")
    parts = urlsplit(candidate)
    if not candidate.startswith("/") or candidate.startswith("//") or "\\" in candidate:
        return fallback
    if parts.scheme or parts.netloc:
        return fallback
    return candidate


def _form_bool(value: Any) -> bool:
    return str(value or "").lower() in {"on", "true", "1", "yes"}


def _render(
    request: Request,
    template: str,
    active: str,
    session: Session,
    user_id: str,
    **context: Any,
) -> HTMLResponse:
    profiles = ProfileService(session)
    base = {
        "nav_active": active,
        "page_title": next((label for key, _, label in NAV_ITEMS if key == active), settings.app_name),
        "environment": settings.environment,
        "profile": profiles.get_profile(user_id),
        "theme": profiles.get_settings(user_id).theme,
        "unread_count": NotificationService(session).unread_count(user_id).unread,
        "toast": request.query_params.get("toast"),
        "toast_level": request.query_params.get("level", "success"),
    }
    base.update(context)
    return _templates().TemplateResponse(request, template, base)


def _query_filters(request: Request, model, **defaults: Any):
    values: Dict[str, Any] = dict(defaults)
    for key, value in request.query_params.items():
        if key not in ("toast", "level") and value != "":
            values[key] = value
    try:
        return model.model_validate(values), None
    except ValidationError as exc:
        return model.model_validate(defaults), _validation_message(exc)


@router.get("/")
def index() -> RedirectResponse:
    return RedirectResponse("/dashboard", status_code=303)


@router.get("/dashboard", response_class=HTMLResponse)
def dashboard_page(
    request: Request,
    session: Session = Depends(get_db_session),
    user_id: str = Depends(get_current_user_id),
) -> Response:
    summary = DashboardService(session).organization_summary()
    recent = ScanService(session).list_history(ScanHistoryFilters(limit=5))
    peak = max((point.count for point in summary.scan_activity), default=0)
    return _render(
        request,
        "dashboard.html",
        "dashboard",
        session,
        user_id,
        summary=summary,
        recent_scans=recent.data,
        activity_peak=peak or 1,
    )


@router.get("/devices", response_class=HTMLResponse)
def devices_page(
    request: Request,
    session: Session = Depends(get_db_session),
    user_id: str = Depends(get_current_user_id),
) -> Response:
    filters, error = _query_filters(request, DeviceFilters, limit=settings.page_size)
    service = DeviceService(session)
    page = service.list_devices(filters)
    return _render(
        request,
        "devices.html",
        "devices",
        session,
        user_id,
        page=page,
        filters=filters,
        filter_error=error,
        brands=service.brands(),
        locations=service.locations(),
        query=_pager_query(request),
    )


@router.post("/devices")
async def create_device_form(request: Request, session: Session = Depends(get_db_session)) -> Response:
    form = await request.form()
    try:
        payload = DeviceCreate.model_validate({key: form.get(key) for key in form.keys()} | {
            "is_active": _form_bool(form.get("is_active")),
        })
    except ValidationError as exc:
        return _redirect("/devices", _validation_message(exc), "error")
    device = DeviceService(session).create_device(payload)
    logger.info("Device %s created from UI", device.id)
    return _redirect(f"/devices/{device.id}", f"Device '{device.name}' added.")


@router.get("/devices/{device_id}", response_class=HTMLResponse)
def device_detail_page(
    device_id: str,
    request: Request,
    session: Session = Depends(get_db_session),
    user_id: str = Depends(get_current_user_id),
) -> Response:
    try:
        device = DeviceService(session).get_device(device_id)
    except ValueError:
        return _redirect("/devices", "Could not load device details.", "error")
    scans = ScanService(session)
    latest = scans.get_scan(device.scans[0].id) if device.scans else None
    return _render(
        request,
        "device_detail.html",
        "devices",
        session,
        user_id,
        device=device,
        latest_scan=latest,
        scan_types=[scan_type.value for scan_type in ScanType],
    )


@router.post("/devices/{device_id}/edit")
async def edit_device_form(device_id: str, request: Request, session: Session = Depends(get_db_session)) -> Response:
    form = await request.form()
    values = {key: form.get(key) for key in form.keys() if form.get(key) not in (None, "")}
    if "tags" in form:
        # an emptied tags field clears the tags
        values["tags"] = str(form.get("tags") or "")
    values["is_active"] = _form_bool(form.get("is_active"))
    try:
        payload = DeviceUpdate.model_validate(values)
        device = DeviceService(session).update_device(device_id, payload)
    except ValidationError as exc:
        return _redirect(f"/devices/{device_id}", _validation_message(exc), "error")
    except ValueError as exc:
        return _redirect("/devices", str(exc), "error")
    return _redirect(f"/devices/{device_id}", f"Device '{device.name}' updated.")


@router.post("/devices/{device_id}/toggle")
async def toggle_device_form(device_id: str, request: Request, session: Session = Depends(get_db_session)) -> Response:
    form = await request.form()
    back = _local_path(form.get("next"), f"/devices/{device_id}")
    try:
        device = DeviceService(session).toggle_active(device_id)
    except ValueError as exc:
        return _redirect("/devices", str(exc), "error")
    state = "activated" if device.is_active else "deactivated"
    return _redirect(back, f"Device '{device.name}' {state}.")


@router.post("/devices/{device_id}/scan")
async def trigger_scan_form(
    device_id: str,
    request: Request,
    session: Session = Depends(get_db_session),
    user_id: str = Depends(get_current_user_id),
) -> Response:
    form = await request.form()
    try:
        scan_type = ScanType(str(form.get("scan_type", ScanType.FULL.value)))
        scan = ScanService(session).create_scan(device_id, scan_type)
    except ValueError:
        return _redirect(f"/devices/{device_id}", "Could not start scan.", "error")
    request.app.state.lifecycle.start(scan.id, user_id)
    return _redirect(f"/devices/{device_id}", f"{scan_type.value.upper()} scan started.")


@router.post("/devices/{device_id}/results/{result_id}/remediation")
async def remediation_form(
    device_id: str,
    result_id: str,
    request: Request,
    session: Session = Depends(get_db_session),
) -> Response:
    scans = ScanService(session)
    try:
        device = DeviceService(session).get_device(device_id)
        result = scans.get_device_result(device_id, result_id)
    except ValueError:
        return _redirect(f"/devices/{device_id}", "Could not get AI remediation suggestions.", "error")
    outcome = await request.app.state.analyzer.suggest_remediation(
        result.finding,
        f"{device.name} ({device.brand} {device.model}, {device.os} {device.os_version})",
    )
    scans.record_remediation(result_id, outcome.data)
    if outcome.degraded:
        return _redirect(f"/devices/{device_id}", "AI unavailable; showing standard remediation advice.", "warning")
    return _redirect(f"/devices/{device_id}", "AI remediation suggestion ready.")


@router.get("/bulk-scan", response_class=HTMLResponse)
def bulk_scan_page(
    request: Request,
    session: Session = Depends(get_db_session),
    user_id: str = Depends(get_current_user_id),
) -> Response:
    filters, error = _query_filters(request, DeviceFilters, limit=settings.page_size)
    service = DeviceService(session)
    return _render(
        request,
        "bulk_scan.html",
        "bulk-scan",
        session,
        user_id,
        page=service.list_devices(filters),
        filters=filters,
        filter_error=error,
        brands=service.brands(),
        locations=service.locations(),
        query=_pager_query(request),
    )


@router.post("/bulk-scan")
async def bulk_scan_form(
    request: Request,
    session: Session = Depends(get_db_session),
    user_id: str = Depends(get_current_user_id),
) -> Response:
    form = await request.form()
    device_ids = [str(value) for value in form.getlist("device_ids") if str(value).strip()]
    try:
        payload = BulkScanRequest(device_ids=device_ids)
    except ValidationError:
        return _redirect("/bulk-scan", "Please select at least one device to scan.", "error")
    scans, skipped = ScanService(session).create_bulk(payload.device_ids)
    for scan in scans:
        request.app.state.lifecycle.start(scan.id, user_id)
    message = f"{len(scans)} firewall scans initiated."
    if skipped:
        message += f" Skipped {len(skipped)} unknown devices."
    return _redirect("/bulk-scan", message)


@router.get("/scan-history", response_class=HTMLResponse)
def scan_history_page(
    request: Request,
    session: Session = Depends(get_db_session),
    user_id: str = Depends(get_current_user_id),
) -> Response:
    filters, error = _query_filters(request, ScanHistoryFilters, limit=settings.page_size)
    return _render(
        request,
        "scan_history.html",
        "scan-history",
        session,
        user_id,
        page=ScanService(session).list_history(filters),
        filters=filters,
        filter_error=error,
        catalog=DashboardService(session).catalog(),
        query=_pager_query(request),
    )


@router.post("/scans/{scan_id}/cancel")
async def cancel_scan_form(scan_id: str, request: Request, session: Session = Depends(get_db_session)) -> Response:
    request.app.state.lifecycle.cancel(scan_id)
    try:
        ScanService(session).mark_cancelled(scan_id)
    except ValueError as exc:
        return _redirect("/scan-history", str(exc), "error")
    return _redirect("/scan-history", "Scan cancelled.")


@router.get("/scheduled-scans", response_class=HTMLResponse)
def scheduled_scans_page(
    request: Request,
    session: Session = Depends(get_db_session),
    user_id: str = Depends(get_current_user_id),
) -> Response:
    devices = DeviceService(session).list_devices(DeviceFilters(limit=1000))
    return _render(
        request,
        "scheduled_scans.html",
        "scheduled-scans",
        session,
        user_id,
        schedules=ScheduleService(session).list_schedules(),
        devices=devices.data,
        scan_types=[scan_type.value for scan_type in ScanType],
        schedule_types=[schedule_type.value for schedule_type in ScheduleType],
    )


@router.post("/scheduled-scans")
async def create_schedule_form(request: Request, session: Session = Depends(get_db_session)) -> Response:
    form = await request.form()
    try:
        payload = ScheduledScanCreate(
            device_id=str(form.get("device_id", "")),
            scan_type=str(form.get("scan_type", ScanType.FULL.value)),
            schedule_type=str(form.get("schedule_type", ScheduleType.WEEKLY.value)),
            cron_expression=str(form.get("cron_expression") or "0 2 * * 1"),
            is_active=_form_bool(form.get("is_active")),
        )
        ScheduleService(session).create_schedule(payload)
    except ValidationError as exc:
        return _redirect("/scheduled-scans", _validation_message(exc), "error")
    except ValueError:
        return _redirect("/scheduled-scans", "Failed to save schedule.", "error")
    return _redirect("/scheduled-scans", "New schedule created.")


@router.post("/scheduled-scans/{schedule_id}/edit")
async def edit_schedule_form(schedule_id: str, request: Request, session: Session = Depends(get_db_session)) -> Response:
    form = await request.form()
    values = {key: form.get(key) for key in ("device_id", "scan_type", "schedule_type", "cron_expression") if form.get(key)}
    values["is_active"] = _form_bool(form.get("is_active"))
    try:
        ScheduleService(session).update_schedule(schedule_id, ScheduledScanUpdate.model_validate(values))
    except ValidationError as exc:
        return _redirect("/scheduled-scans", _validation_message(exc), "error")
    except ValueError:
        return _redirect("/scheduled-scans", "Failed to save schedule.", "error")
    return _redirect("/scheduled-scans", "Schedule updated successfully.")


@router.post("/scheduled-scans/{schedule_id}/delete")
def delete_schedule_form(schedule_id: str, session: Session = Depends(get_db_session)) -> Response:
    try:
        ScheduleService(session).delete_schedule(schedule_id)
    except ValueError:
        return _redirect("/scheduled-scans", "Failed to delete schedule.", "error")
    return _redirect("/scheduled-scans", "Schedule deleted.")


@router.get("/reports", response_class=HTMLResponse)
def reports_page(
    request: Request,
    session: Session = Depends(get_db_session),
    user_id: str = Depends(get_current_user_id),
) -> Response:
    catalog = DashboardService(session).catalog()
    completed = ScanService(session).list_history(ScanHistoryFilters(status="completed", limit=20))
    return _render(
        request,
        "reports.html",
        "reports",
        session,
        user_id,
        reports=ReportService(session).list_reports(user_id),
        brands=[brand for brand in catalog.device_brands if brand != "all"],
        severity_levels=catalog.severity_levels,
        report_formats=catalog.report_formats,
        completed_scans=completed.data,
    )


@router.post("/reports")
async def custom_report_form(
    request: Request,
    session: Session = Depends(get_db_session),
    user_id: str = Depends(get_current_user_id),
) -> Response:
    form = await request.form()
    date_range = {"start": form.get("start") or None, "end": form.get("end") or None}
    try:
        params = CustomReportParams.model_validate(
            {
                "report_type": str(form.get("report_type", "")).strip(),
                "format": form.get("format") or ReportFormat.PDF.value,
                "include_trends": _form_bool(form.get("include_trends")),
                "filters": {
                    "device_brands": form.getlist("device_brands") or None,
                    "severity_levels": form.getlist("severity_levels") or None,
                    "date_range": date_range if any(date_range.values()) else None,
                },
            }
        )
    except ValidationError as exc:
        return _redirect("/reports", _validation_message(exc), "error")
    outcome = await ReportService(session).generate_custom_report(user_id, params)
    if outcome.status == "failed":
        return _redirect("/reports", outcome.message or "Report generation failed.", "error")
    return _redirect("/reports", outcome.message or "Report generated.", report=outcome.report_id)


@router.post("/reports/scan")
async def scan_report_form(
    request: Request,
    session: Session = Depends(get_db_session),
    user_id: str = Depends(get_current_user_id),
) -> Response:
    form = await request.form()
    try:
        params = ScanReportParams(format=form.get("format") or ReportFormat.PDF.value)
        outcome = await ReportService(session).generate_scan_report(user_id, str(form.get("scan_id", "")), params)
    except ValidationError as exc:
        return _redirect("/reports", _validation_message(exc), "error")
    except ValueError as exc:
        return _redirect("/reports", str(exc), "error")
    if outcome.status == "failed":
        return _redirect("/reports", outcome.message or "Report generation failed.", "error")
    return _redirect("/reports", outcome.message or "Report generated.", report=outcome.report_id)


@router.get("/notifications", response_class=HTMLResponse)
def notifications_page(
    request: Request,
    session: Session = Depends(get_db_session),
    user_id: str = Depends(get_current_user_id),
) -> Response:
    filters, error = _query_filters(request, NotificationFilters, limit=settings.page_size)
    return _render(
        request,
        "notifications.html",
        "notifications",
        session,
        user_id,
        page=NotificationService(session).list_notifications(user_id, filters),
        filters=filters,
        filter_error=error,
        query=_pager_query(request),
    )


@router.post("/notifications/read-all")
def read_all_form(session: Session = Depends(get_db_session), user_id: str = Depends(get_current_user_id)) -> Response:
    NotificationService(session).mark_all_read(user_id)
    return _redirect("/notifications", "All notifications marked as read.")


@router.post("/notifications/{notification_id}/read")
def read_form(
    notification_id: str,
    session: Session = Depends(get_db_session),
    user_id: str = Depends(get_current_user_id),
) -> Response:
    try:
        NotificationService(session).mark_read(user_id, notification_id)
    except ValueError:
        return _redirect("/notifications", "Failed to mark notification as read.", "error")
    return _redirect("/notifications", "Notification marked as read.")


@router.post("/notifications/{notification_id}/delete")
def delete_notification_form(
    notification_id: str,
    session: Session = Depends(get_db_session),
    user_id: str = Depends(get_current_user_id),
) -> Response:
    try:
        NotificationService(session).delete(user_id, notification_id)
    except ValueError:
        return _redirect("/notifications", "Failed to delete notification.", "error")
    return _redirect("/notifications", "Notification deleted.")


@router.get("/profile", response_class=HTMLResponse)
def profile_page(
    request: Request,
    session: Session = Depends(get_db_session),
    user_id: str = Depends(get_current_user_id),
) -> Response:
    return _render(request, "profile.html", "profile", session, user_id)


@router.post("/profile")
async def profile_form(
    request: Request,
    session: Session = Depends(get_db_session),
    user_id: str = Depends(get_current_user_id),
) -> Response:
    form = await request.form()
    try:
        payload = ProfileUpdate(
            name=str(form.get("name", "")).strip(),
            email=str(form.get("email", "")),
            avatar_url=str(form.get("avatar_url") or "") or None,
        )
    except ValidationError as exc:
        return _redirect("/profile", _validation_message(exc), "error")
    ProfileService(session).update_profile(user_id, payload)
    return _redirect("/profile", "Profile updated.")


@router.get("/settings", response_class=HTMLResponse)
def settings_page(
    request: Request,
    session: Session = Depends(get_db_session),
    user_id: str = Depends(get_current_user_id),
) -> Response:
    return _render(
        request,
        "settings.html",
        "settings",
        session,
        user_id,
        preferences=ProfileService(session).get_settings(user_id),
    )


@router.post("/settings")
async def settings_form(
    request: Request,
    session: Session = Depends(get_db_session),
    user_id: str = Depends(get_current_user_id),
) -> Response:
    form = await request.form()
    try:
        payload = UserSettingsUpdate(
            email_notifications=_form_bool(form.get("email_notifications")),
            push_notifications=_form_bool(form.get("push_notifications")),
            theme=str(form.get("theme") or "system"),
        )
    except ValidationError as exc:
        return _redirect("/settings", _validation_message(exc), "error")
    ProfileService(session).update_settings(user_id, payload)
    return _redirect("/settings", "Settings saved.")


def _pager_query(request: Request) -> str:
    """Current query string without paging or toast keys, for pagination links."""
    keep: List[tuple] = [
        (key, value)
        for key, value in request.query_params.multi_items()
        if key not in ("page", "toast", "level", "report") and value != ""
    ]
    return urlencode(keep)
