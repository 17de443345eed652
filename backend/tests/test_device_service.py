import pytest
from pydantic import ValidationError
from sqlmodel import Session

from backend.app.schemas import DeviceCreate, DeviceFilters, DeviceUpdate
from backend.app.seed import seed_demo_data
from backend.app.services import DeviceService, ScanService


@pytest.fixture()
def devices(session: Session) -> DeviceService:
    seed_demo_data(session)
    return DeviceService(session)


def test_brand_filter_counts_and_pages(devices: DeviceService) -> None:
    page = devices.list_devices(DeviceFilters(brand="Cisco", limit=10))

    assert page.total_items == 11
    assert page.total_pages == 2
    assert len(page.data) == 10
    assert {device.brand for device in page.data} == {"Cisco"}


def test_page_past_the_end_is_empty(devices: DeviceService) -> None:
    page = devices.list_devices(DeviceFilters(page=7, limit=10))

    assert page.data == []
    assert page.total_items == 55
    assert page.total_pages == 6
    assert page.current_page == 7


def test_filters_combine(devices: DeviceService) -> None:
    inactive = devices.list_devices(DeviceFilters(is_active="false", limit=100))
    assert inactive.total_items == 10
    assert not any(device.is_active for device in inactive.data)

    by_name = devices.list_devices(DeviceFilters(name="FIREWALL", location="all", limit=100))
    assert by_name.total_items == 55

    narrowed = devices.list_devices(DeviceFilters(brand="Fortinet", location="DMZ Zone", model="fortigate"))
    assert narrowed.total_items > 0
    assert all(d.brand == "Fortinet" and d.location == "DMZ Zone" for d in narrowed.data)


def test_invalid_active_filter_is_rejected() -> None:
    with pytest.raises(ValidationError):
        DeviceFilters(is_active="maybe")


def test_toggle_round_trip(devices: DeviceService) -> None:
    original = devices.get_device("device-fw-2").is_active

    assert devices.toggle_active("device-fw-2").is_active is (not original)
    assert devices.toggle_active("device-fw-2").is_active is original


def test_create_and_update_device(devices: DeviceService) -> None:
    created = devices.create_device(
        DeviceCreate(
            name="Edge FW",
            brand="Fortinet",
            model="FortiGate 60F",
            version="7.2.1",
            location="Branch Office X",
            ip_address="192.168.1.1",
            mac_address="aa:bb:cc:dd:ee:ff",
            os="FortiOS",
            os_version="7.2.1",
            tags="edge, branch",
        )
    )
    assert created.tags == ["edge", "branch"]
    assert created.mac_address == "AA:BB:CC:DD:EE:FF"

    updated = devices.update_device(created.id, DeviceUpdate(location="DMZ Zone", tags=[]))
    assert updated.location == "DMZ Zone"
    assert updated.tags == []
    assert updated.name == "Edge FW"


def test_create_rejects_bad_addresses() -> None:
    with pytest.raises(ValidationError, match="Invalid IP address"):
        DeviceCreate(
            name="x", brand="x", model="x", version="1", location="x",
            ip_address="300.1.1.1", mac_address="00:A1:B2:C3:D4:0A", os="x", os_version="1",
        )
    with pytest.raises(ValidationError, match="Invalid MAC address"):
        DeviceCreate(
            name="x", brand="x", model="x", version="1", location="x",
            ip_address="10.0.0.1", mac_address="00:A1", os="x", os_version="1",
        )


def test_detail_lists_five_most_recent_scans(devices: DeviceService, session: Session) -> None:
    scans = ScanService(session)
    for _ in range(6):
        scans.create_scan("device-fw-1")

    detail = devices.get_device("device-fw-1")

    assert len(detail.scans) == 5
    created = [scan.created_at for scan in detail.scans]
    assert created == sorted(created, reverse=True)


def test_unknown_device_raises(devices: DeviceService) -> None:
    with pytest.raises(ValueError, match="Device not found"):
        devices.get_device("device-fw-999")
    with pytest.raises(ValueError):
        devices.toggle_active("device-fw-999")


def test_brand_and_location_catalogs(devices: DeviceService) -> None:
    assert devices.brands() == ["Check Point", "Cisco", "Fortinet", "Juniper Networks", "Palo Alto Networks"]
    assert len(devices.locations()) == 4
