"""Message-bus event types and adapters for kernel device events."""

from __future__ import annotations

import re
import time
from dataclasses import dataclass, field
from typing import Optional

from storagekit.disk import LSBLKModel

VERSION = "0.4.4"
SERVICE_NAME = "local-storage"
DEFAULT_MOUNT_POINT = "/DATA"

UI_TYPE_NOTIFICATION_STYLE_1 = "notification-style-1"
UI_TYPE_NOTIFICATION_STYLE_2 = "notification-style-2"
UI_TYPE_NOTIFICATION_STYLE_3 = "notification-style-3"

PROPERTY_NAME_LOOKUP_MAPS: dict[str, dict[str, str]] = {
    "disk": {
        f"{SERVICE_NAME}:bus": "ID_BUS",
        f"{SERVICE_NAME}:vendor": "ID_VENDOR",
        f"{SERVICE_NAME}:model": "ID_MODEL",
        f"{SERVICE_NAME}:path": "DEVNAME",
        "tran": "ID_BUS",
        "serial": "ID_SERIAL_SHORT",
    },
    "storage": {},
}

ACTION_PAST_TENSE: dict[str, str] = {
    "add": "added",
    "remove": "removed",
}

_INTEGER = re.compile(r"[+-]?[0-9]+")


@dataclass
class PropertyType:
    name: str
    description: Optional[str] = None
    example: Optional[str] = None


@dataclass
class EventType:
    name: str
    source_id: str
    property_type_list: list[PropertyType] = field(default_factory=list)


@dataclass
class Event:
    source_id: str
    name: str
    properties: dict[str, str] = field(default_factory=dict)


@dataclass
class UEvent:
    """A kernel device event: its action and environment."""

    action: str
    env: dict[str, str] = field(default_factory=dict)
    kobj: str = ""


def build_event_types() -> dict[str, dict[str, EventType]]:
    """Build the event types, keyed by device type and then by action."""
    return {
        devtype: {
            action: EventType(
                name=f"{SERVICE_NAME}:{devtype}:{past}",
                source_id=SERVICE_NAME,
                property_type_list=[PropertyType(name=name) for name in lookup],
            )
            for action, past in ACTION_PAST_TENSE.items()
        }
        for devtype, lookup in PROPERTY_NAME_LOOKUP_MAPS.items()
    }


EVENT_TYPES = build_event_types()


def event_adapter(uevent: UEvent, delay: float = 3.0) -> Optional[Event]:
    """Turn a kernel event into a bus event, or None if it is of no interest.

    Waits `delay` seconds first so the device has settled.
    """
    devtype = uevent.env.get("DEVTYPE", "")
    event_type = EVENT_TYPES.get(devtype, {}).get(uevent.action)
    if event_type is None:
        return None
    if delay > 0:
        time.sleep(delay)
    properties = {
        name: uevent.env[env_name]
        for name, env_name in PROPERTY_NAME_LOOKUP_MAPS[devtype].items()
        if env_name in uevent.env
    }
    return Event(source_id=event_type.source_id, name=event_type.name, properties=properties)


def event_adapter_with_ui_properties(event: Event) -> Event:
    """Give events of this service their own copy of the property map."""
    if event.source_id != SERVICE_NAME:
        return event
    event.properties = dict(event.properties)
    return event


def additional_properties(disk: LSBLKModel) -> dict[str, str]:
    """Describe a disk and its partitions as flat string properties."""
    properties = {
        "size": str(disk.size),
        "model": disk.model,
        "path": disk.path,
        "serial": disk.serial,
        "uuid": disk.uuid,
        "children:num": str(len(disk.children)),
        "tran": disk.tran,
    }
    avail = 0
    mount_points = []
    for index, child in enumerate(disk.children):
        if _INTEGER.fullmatch(child.fs_avail):
            avail += int(child.fs_avail)
        mount_points.append(child.mount_point)
        prefix = f"children:{index}:"
        properties[prefix + "fstype"] = child.fs_type
        properties[prefix + "path"] = child.path
        properties[prefix + "size"] = child.fs_size
        properties[prefix + "avail"] = child.fs_avail
    properties["avail"] = str(avail)
    properties["mount_point"] = ",".join(mount_points)
    return properties