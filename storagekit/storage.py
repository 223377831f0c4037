"""Storage, setting and service configuration models."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import IntEnum


class SettingGroup(IntEnum):
    SINGLE = 0
    SITE = 1
    STYLE = 2
    PREVIEW = 3
    GLOBAL = 4
    ARIA2 = 5
    INDEX = 6
    GITHUB = 7


class SettingFlag(IntEnum):
    PUBLIC = 0
    PRIVATE = 1
    READONLY = 2
    DEPRECATED = 3


@dataclass
class SettingItem:
    key: str
    value: str = ""
    help: str = ""
    type: str = ""  # string, number, bool, select
    options: str = ""
    group: int = SettingGroup.SINGLE
    flag: int = SettingFlag.PUBLIC

    def is_deprecated(self) -> bool:
        return self.flag == SettingFlag.DEPRECATED


@dataclass
class Sort:
    order_by: str = ""
    order_direction: str = ""
    extract_folder: str = ""


@dataclass
class Proxy:
    web_proxy: bool = False
    webdav_policy: str = ""
    down_proxy_url: str = ""

    def webdav_302(self) -> bool:
        return self.webdav_policy == "302_redirect"

    def webdav_proxy(self) -> bool:
        return self.webdav_policy == "use_proxy_url"

    def webdav_native(self) -> bool:
        return not self.webdav_302() and not self.webdav_proxy()


@dataclass
class StorageA(Sort, Proxy):
    """A mounted remote storage, with its sort and proxy preferences."""

    id: int = 0
    mount_path: str = ""
    order: int = 0
    driver: str = ""
    cache_expiration: int = 0
    status: str = ""
    addition: str = ""
    remark: str = ""
    modified: datetime = datetime(1, 1, 1, tzinfo=timezone.utc)
    disabled: bool = False


@dataclass
class CommonModel:
    runtime_path: str = ""


@dataclass
class APPModel:
    log_path: str = ""
    log_save_name: str = ""
    log_file_ext: str = ""
    shell_path: str = ""
    db_path: str = ""


@dataclass
class ServerModel:
    usb_auto_mount: str = ""
    enable_merger_fs: str = ""