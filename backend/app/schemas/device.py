from __future__ import annotations

import ipaddress
import re
from datetime import datetime
from typing import List, Optional, Union

from pydantic import Field, field_validator

from .common import CamelModel
from .scan import ScanSummary

MAC_PATTERN = re.compile(r"^([0-9A-Fa-f]{2}[:-]){5}([0-9A-Fa-f]{2})$")


def _split_tags(value: object) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [tag.strip() for tag in value.split(",") if tag.strip()]
    return [str(tag).strip() for tag in value if str(tag).strip()]


def _validate_ipv4(value: str) -> str:
    try:
        return str(ipaddress.IPv4Address(value.strip()))
    except ValueError as exc:
        raise ValueError("Invalid IP address.") from exc


def _validate_mac(value: str) -> str:
    value = value.strip()
    if not MAC_PATTERN.match(value):
        raise ValueError("Invalid MAC address.")
    return value.upper()


class DeviceFilters(CamelModel):
    name: Optional[str] = None
    brand: Optional[str] = None
    model: Optional[str] = None
    version: Optional[str] = None
    location: Optional[str] = None
    is_active: Optional[Union[bool, str]] = None
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=10, ge=1, le=1000)

    @field_validator("is_active", mode="before")
    @classmethod
    def _normalize_active(cls, value: object) -> object:
        if value is None or isinstance(value, bool):
            return value
        text = str(value).strip().lower()
        if text in {"", "all"}:
            return None
        if text in {"true", "1", "yes", "active"}:
            return True
        if text in {"false", "0", "no", "inactive"}:
            return False
        raise ValueError("isActive must be a boolean or 'all'")

    @field_validator("brand", "location", mode="before")
    @classmethod
    def _drop_all(cls, value: object) -> object:
        if isinstance(value, str) and value.strip().lower() in {"", "all"}:
            return None
        return value


class DeviceCreate(CamelModel):
    name: str = Field(min_length=1)
    brand: str = Field(min_length=1)
    model: str = Field(min_length=1)
    version: str = Field(min_length=1)
    location: str = Field(min_length=1)
    ip_address: str
    mac_address: str
    os: str = Field(min_length=1)
    os_version: str = Field(min_length=1)
    is_active: bool = True
    tags: List[str] = Field(default_factory=list)

    @field_validator("tags", mode="before")
    @classmethod
    def _tags(cls, value: object) -> List[str]:
        return _split_tags(value)

    @field_validator("ip_address")
    @classmethod
    def _ip(cls, value: str) -> str:
        return _validate_ipv4(value)

    @field_validator("mac_address")
    @classmethod
    def _mac(cls, value: str) -> str:
        return _validate_mac(value)


class DeviceUpdate(CamelModel):
    name: Optional[str] = Field(default=None, min_length=1)
    brand: Optional[str] = Field(default=None, min_length=1)
    model: Optional[str] = Field(default=None, min_length=1)
    version: Optional[str] = Field(default=None, min_length=1)
    location: Optional[str] = Field(default=None, min_length=1)
    ip_address: Optional[str] = None
    mac_address: Optional[str] = None
    os: Optional[str] = Field(default=None, min_length=1)
    os_version: Optional[str] = Field(default=None, min_length=1)
    is_active: Optional[bool] = None
    tags: Optional[List[str]] = None

    @field_validator("tags", mode="before")
    @classmethod
    def _tags(cls, value: object) -> Optional[List[str]]:
        if value is None:
            return None
        return _split_tags(value)

    @field_validator("ip_address")
    @classmethod
    def _ip(cls, value: Optional[str]) -> Optional[str]:
        return _validate_ipv4(value) if value is not None else None

    @field_validator("mac_address")
    @classmethod
    def _mac(cls, value: Optional[str]) -> Optional[str]:
        return _validate_mac(value) if value is not None else None


class DeviceView(CamelModel):
    id: str
    name: str
    brand: str
    model: str
    version: str
    location: str
    ip_address: str
    mac_address: str
    os: str
    os_version: str
    is_active: bool
    last_seen: datetime
    created_at: datetime
    updated_at: datetime
    tags: List[str] = Field(default_factory=list)


class DeviceDetail(DeviceView):
    scans: List[ScanSummary] = Field(default_factory=list)
