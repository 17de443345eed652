from datetime import datetime, timedelta

import pytest
from pydantic import ValidationError
from sqlmodel import Session

from backend.app.schemas import NotificationFilters, ScheduledScanCreate, ScheduledScanUpdate
from backend.app.seed import seed_demo_data
from backend.app.services import NotificationService, ScheduleService
from backend.app.services.schedule_service import next_run_for


def test_notifications_are_scoped_to_user(session: Session) -> None:
    service = NotificationService(session)
    first = service.create("alice", "scan_completed", "Scan completed", "done")
    service.create("alice", "critical_alert", "Critical", "bad")
    service.create("bob", "report_ready", "Report ready", "ok")

    assert service.unread_count("alice").unread == 2
    assert service.list_notifications("bob", NotificationFilters()).total_items == 1

    with pytest.raises(ValueError, match="Notification not found"):
        service.mark_read("bob", first.id)

    service.mark_read("alice", first.id)
    unread = service.list_notifications("alice", NotificationFilters(status="unread"))
    assert [item.title for item in unread.data] == ["Critical"]

    assert service.mark_all_read("alice") == 1
    assert service.unread_count("alice").unread == 0
    assert service.unread_count("bob").unread == 1

    service.delete("alice", first.id)
    assert service.list_notifications("alice", NotificationFilters(status="read")).total_items == 1


def test_notification_type_must_be_known(session: Session) -> None:
    with pytest.raises(ValueError):
        NotificationService(session).create("alice", "party", "t", "m")


def test_next_run_intervals() -> None:
    now = datetime(2024, 1, 1, 2, 0)
    assert next_run_for("daily", now) == now + timedelta(days=1)
    assert next_run_for("weekly", now) == now + timedelta(days=7)
    assert next_run_for("monthly", now) == now + timedelta(days=30)


def test_schedule_crud(session: Session) -> None:
    seed_demo_data(session)
    service = ScheduleService(session)

    created = service.create_schedule(ScheduledScanCreate(device_id="device-fw-4", schedule_type="daily"))
    assert created.device_name == "Juniper Firewall SRX300-1003"
    assert created.cron_expression == "0 2 * * 1"
    assert timedelta(hours=23) < created.next_run_at - datetime.utcnow() <= timedelta(days=1)

    updated = service.update_schedule(created.id, ScheduledScanUpdate(schedule_type="monthly", is_active=False))
    assert updated.schedule_type.value == "monthly"
    assert updated.is_active is False
    assert updated.next_run_at - datetime.utcnow() > timedelta(days=29)

    assert [schedule.id for schedule in service.list_schedules()] == [created.id]
    service.delete_schedule(created.id)
    with pytest.raises(ValueError, match="Scheduled scan not found"):
        service.get_schedule(created.id)


def test_schedule_validation(session: Session) -> None:
    with pytest.raises(ValidationError):
        ScheduledScanCreate(device_id="device-fw-1", cron_expression="every day")
    with pytest.raises(ValueError, match="Device not found"):
        ScheduleService(session).create_schedule(ScheduledScanCreate(device_id="device-missing"))
