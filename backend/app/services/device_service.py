from __future__ import annotations

import json
from datetime import datetime
from typing import List

from sqlalchemy import func
from sqlmodel import Session, select

from ..models import Device, Scan
from ..schemas import DeviceCreate, DeviceDetail, DeviceFilters, DeviceUpdate, DeviceView, Page
from .pagination import paginate
from .scan_service import ScanService

RECENT_SCAN_LIMIT = 5


class DeviceService:
    def __init__(self, session: Session):
        self.session = session

    def list_devices(self, filters: DeviceFilters) -> Page[DeviceView]:
        statement = select(Device)
        if filters.name:
            statement = statement.where(func.lower(Device.name).contains(filters.name.lower()))
        if filters.brand:
            statement = statement.where(Device.brand == filters.brand)
        if filters.model:
            statement = statement.where(func.lower(Device.model).contains(filters.model.lower()))
        if filters.version:
            statement = statement.where(Device.version == filters.version)
        if filters.location:
            statement = statement.where(Device.location == filters.location)
        if isinstance(filters.is_active, bool):
            statement = statement.where(Device.is_active == filters.is_active)
        statement = statement.order_by(Device.name, Device.id)
        rows, total = paginate(self.session, statement, filters.page, filters.limit)
        return Page[DeviceView].build(
            [self._build_device_view(device) for device in rows],
            page=filters.page,
            limit=filters.limit,
            total=total,
        )

    def get_device(self, device_id: str) -> DeviceDetail:
        device = self._get(device_id)
        scans = self.session.exec(
            select(Scan)
            .where(Scan.device_id == device_id)
            .order_by(Scan.created_at.desc())
            .limit(RECENT_SCAN_LIMIT)
        ).all()
        builder = ScanService(self.session)
        return DeviceDetail(
            **self._build_device_view(device).model_dump(),
            scans=[builder.build_summary(scan) for scan in scans],
        )

    def create_device(self, payload: DeviceCreate) -> DeviceView:
        now = datetime.utcnow()
        device = Device(
            **payload.model_dump(exclude={"tags"}),
            tags_json=json.dumps(payload.tags),
            last_seen=now,
            created_at=now,
            updated_at=now,
        )
        self.session.add(device)
        self.session.commit()
        self.session.refresh(device)
        return self._build_device_view(device)

    def update_device(self, device_id: str, payload: DeviceUpdate) -> DeviceView:
        device = self._get(device_id)
        changes = payload.model_dump(exclude_unset=True, exclude={"tags"})
        for key, value in changes.items():
            if value is not None:
                setattr(device, key, value)
        if payload.tags is not None:
            device.tags_json = json.dumps(payload.tags)
        device.updated_at = datetime.utcnow()
        self.session.add(device)
        self.session.commit()
        self.session.refresh(device)
        return self._build_device_view(device)

    def toggle_active(self, device_id: str) -> DeviceView:
        device = self._get(device_id)
        device.is_active = not device.is_active
        device.updated_at = datetime.utcnow()
        self.session.add(device)
        self.session.commit()
        self.session.refresh(device)
        return self._build_device_view(device)

    def brands(self) -> List[str]:
        return list(self.session.exec(select(Device.brand).distinct().order_by(Device.brand)).all())

    def locations(self) -> List[str]:
        return list(self.session.exec(select(Device.location).distinct().order_by(Device.location)).all())

    def _get(self, device_id: str) -> Device:
        device = self.session.get(Device, device_id)
        if not device:
            raise ValueError("Device not found")
        return device

    def _build_device_view(self, device: Device) -> DeviceView:
        return DeviceView(
            id=device.id,
            name=device.name,
            brand=device.brand,
            model=device.model,
            version=device.version,
            location=device.location,
            ip_address=device.ip_address,
            mac_address=device.mac_address,
            os=device.os,
            os_version=device.os_version,
            is_active=device.is_active,
            last_seen=device.last_seen,
            created_at=device.created_at,
            updated_at=device.updated_at,
            tags=json.loads(device.tags_json or "[]"),
        )
