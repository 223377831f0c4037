"""Block device, drive and SMART data models."""

from __future__ import annotations

import os
import posixpath
from dataclasses import dataclass, field
from typing import Any, Callable

DEFAULT_MOUNT_PATH = "/media"


def _to_str(value: Any) -> str:
    return str(value)


def _to_number(value: Any) -> str:
    if isinstance(value, bool):
        return "1" if value else "0"
    return str(value)


def _to_int(value: Any) -> int:
    return int(value)


def _to_float(value: Any) -> float:
    return float(value)


def _to_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true")
    return bool(value)


@dataclass
class LSBLKModel:
    """A block device as described by lsblk, with its partitions as children."""

    name: str = ""
    fs_type: str = ""
    size: int = 0
    fs_size: str = ""
    path: str = ""
    model: str = ""
    rm: bool = False
    ro: bool = False
    state: str = ""
    phy_sec: int = 0
    type: str = ""
    vendor: str = ""
    rev: str = ""
    fs_avail: str = ""
    fs_use: str = ""
    mount_point: str = ""
    format: str = ""
    health: str = ""
    hot_plug: bool = False
    uuid: str = ""
    pt_uuid: str = ""
    part_uuid: str = ""
    fs_used: str = ""
    temperature: int = 0
    tran: str = ""
    min_io: int = 0
    used_percent: float = 0.0
    serial: str = ""
    children: list["LSBLKModel"] = field(default_factory=list)
    sub_systems: str = ""
    label: str = ""
    start_sector: int = 0
    rota: bool = False
    disk_type: str = ""
    end_sector: int = 0

    @classmethod
    def from_dict(cls, data: dict) -> "LSBLKModel":
        """Build a model from one lsblk JSON entry."""
        kwargs: dict[str, Any] = {}
        for key, (attr, convert) in _LSBLK_FIELDS.items():
            value = data.get(key)
            if value is not None:
                kwargs[attr] = convert(value)
        kwargs["children"] = [cls.from_dict(child) for child in data.get("children") or []]
        return cls(**kwargs)

    def get_mount_point(self, name: str = "") -> str:
        """Return a mount path under /media for this device, avoiding existing paths."""
        if not name:
            name = "Storage_" + self.name
        if self.label:
            name += "_" + self.label
        if self.model:
            name += "_" + self.model
        mount_point = posixpath.normpath(posixpath.join(DEFAULT_MOUNT_PATH, name))
        if not os.path.exists(mount_point):
            return mount_point
        return mount_point + "_" + self.name


_LSBLK_FIELDS: dict[str, tuple[str, Callable[[Any], Any]]] = {
    "name": ("name", _to_str),
    "fstype": ("fs_type", _to_str),
    "size": ("size", _to_int),
    "fssize": ("fs_size", _to_number),
    "path": ("path", _to_str),
    "model": ("model", _to_str),
    "rm": ("rm", _to_bool),
    "ro": ("ro", _to_bool),
    "state": ("state", _to_str),
    "phy-sec": ("phy_sec", _to_int),
    "type": ("type", _to_str),
    "vendor": ("vendor", _to_str),
    "rev": ("rev", _to_str),
    "fsavail": ("fs_avail", _to_number),
    "fsuse%": ("fs_use", _to_str),
    "mountpoint": ("mount_point", _to_str),
    "format": ("format", _to_str),
    "health": ("health", _to_str),
    "hotplug": ("hot_plug", _to_bool),
    "uuid": ("uuid", _to_str),
    "ptuuid": ("pt_uuid", _to_str),
    "partuuid": ("part_uuid", _to_str),
    "fsused": ("fs_used", _to_number),
    "temperature": ("temperature", _to_int),
    "tran": ("tran", _to_str),
    "min-io": ("min_io", _to_int),
    "used_percent": ("used_percent", _to_float),
    "serial": ("serial", _to_str),
    "subsystems": ("sub_systems", _to_str),
    "label": ("label", _to_str),
    "start_sector": ("start_sector", _to_int),
    "rota": ("rota", _to_bool),
    "disk_type": ("disk_type", _to_str),
    "end_sector": ("end_sector", _to_int),
}


@dataclass
class DiskChildren:
    name: str = ""
    size: int = 0
    format: str = ""
    supported: bool = False


@dataclass
class Drive:
    name: str = ""
    size: int = 0
    model: str = ""
    health: str = ""
    temperature: int = 0
    disk_type: str = ""
    need_format: bool = False
    serial: str = ""
    path: str = ""
    children_number: int = 0
    children: list[DiskChildren] = field(default_factory=list)
    supported: bool = False


@dataclass
class USBChildren:
    name: str = ""
    size: int = 0
    avail: int = 0
    mount_point: str = ""


@dataclass
class USBDriveStatus:
    name: str = ""
    size: int = 0
    model: str = ""
    avail: int = 0
    children: list[USBChildren] = field(default_factory=list)


@dataclass
class Storage:
    uuid: str = ""
    mount_point: str = ""
    size: str = ""
    avail: str = ""
    used: str = ""
    type: str = ""
    path: str = ""
    drive_name: str = ""
    label: str = ""
    persisted_in: str = ""  # none, fstab, or the service's own record


@dataclass
class Storages:
    disk_name: str = ""
    size: int = 0
    path: str = ""
    children: list[Storage] = field(default_factory=list)
    type: str = ""


@dataclass
class DiskStatus:
    size: int = 0
    avail: int = 0
    health: bool = False
    used: int = 0


@dataclass
class DFDiskSpace:
    file_system: str = ""
    type: str = ""
    blocks: str = ""
    used: str = ""
    available: str = ""
    use_percent: str = ""
    mounted_on: str = ""


@dataclass
class SmartctlA:
    """The parts of `smartctl -a --json` output the service relies on."""

    smartctl_version: list[int] = field(default_factory=list)
    smartctl_svn_revision: str = ""
    smartctl_platform_info: str = ""
    smartctl_build_info: str = ""
    smartctl_argv: list[str] = field(default_factory=list)
    smartctl_exit_status: int = 0
    smartctl_messages: list[dict] = field(default_factory=list)
    device_name: str = ""
    device_info_name: str = ""
    device_type: str = ""
    device_protocol: str = ""
    model_name: str = ""
    serial_number: str = ""
    firmware_version: str = ""
    user_capacity_blocks: int = 0
    user_capacity_bytes: int = 0
    smart_status_passed: bool = False
    ata_smart_data: dict = field(default_factory=dict)
    power_on_hours: int = 0
    power_cycle_count: int = 0
    temperature: int = 0

    @classmethod
    def from_dict(cls, data: dict) -> "SmartctlA":
        smartctl = data.get("smartctl") or {}
        device = data.get("device") or {}
        capacity = data.get("user_capacity") or {}
        return cls(
            smartctl_version=list(smartctl.get("version") or []),
            smartctl_svn_revision=smartctl.get("svn_revision", ""),
            smartctl_platform_info=smartctl.get("platform_info", ""),
            smartctl_build_info=smartctl.get("build_info", ""),
            smartctl_argv=list(smartctl.get("argv") or []),
            smartctl_exit_status=int(smartctl.get("exit_status", 0)),
            smartctl_messages=[dict(m) for m in smartctl.get("messages") or []],
            device_name=device.get("name", ""),
            device_info_name=device.get("info_name", ""),
            device_type=device.get("type", ""),
            device_protocol=device.get("protocol", ""),
            model_name=data.get("model_name", ""),
            serial_number=data.get("serial_number", ""),
            firmware_version=data.get("firmware_version", ""),
            user_capacity_blocks=int(capacity.get("blocks", 0)),
            user_capacity_bytes=int(capacity.get("bytes", 0)),
            smart_status_passed=bool((data.get("smart_status") or {}).get("passed", False)),
            ata_smart_data=dict(data.get("ata_smart_data") or {}),
            power_on_hours=int((data.get("power_on_time") or {}).get("hours", 0)),
            power_cycle_count=int(data.get("power_cycle_count", 0)),
            temperature=int((data.get("temperature") or {}).get("current", 0)),
        )

    def is_empty(self) -> bool:
        """True when nothing at all was reported."""
        return self == type(self)()