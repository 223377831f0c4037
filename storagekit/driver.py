"""Storage driver interface, driver configuration and driver option descriptions."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, NewType, Optional

from storagekit.objects import Link, LinkArgs, ListArgs
from storagekit.storage import StorageA

UpdateProgress = Callable[[int], None]

# Option type shown as a drop-down list of choices.
Select = NewType("Select", str)


@dataclass
class DriverConfig:
    """Static capabilities and defaults of a driver."""

    name: str = ""
    local_sort: bool = False
    only_local: bool = False
    only_proxy: bool = False
    no_cache: bool = False
    no_upload: bool = False
    need_ms: bool = False  # the user must supply a message, such as a validation code
    default_root: str = ""
    check_status: bool = False

    def must_proxy(self) -> bool:
        return self.only_proxy or self.only_local


class Driver(ABC):
    """A storage backend able to list files and hand out links to them.

    Write operations are optional: a driver offers them by defining
    ``make_dir``, ``move``, ``rename``, ``copy``, ``remove`` or ``put``.
    """

    def __init__(self, storage: Optional[StorageA] = None) -> None:
        self._storage = storage if storage is not None else StorageA()

    @abstractmethod
    def config(self) -> DriverConfig:
        """Return the driver's static configuration."""

    def get_storage(self) -> StorageA:
        """Return the storage record this driver serves."""
        return self._storage

    def set_storage(self, storage: StorageA) -> None:
        """Replace the storage record this driver serves."""
        self._storage = storage

    @abstractmethod
    def get_addition(self) -> Any:
        """Return the driver-specific options object."""

    @abstractmethod
    def init(self) -> None:
        """Prepare the driver for use; drop first if already initialised."""

    @abstractmethod
    def drop(self) -> None:
        """Release whatever init acquired."""

    @abstractmethod
    def list(self, directory: Any, args: ListArgs) -> list:
        """List the objects inside a directory."""

    @abstractmethod
    def link(self, file: Any, args: LinkArgs) -> Link:
        """Return how to fetch a file's content."""

    @abstractmethod
    def get_user_info(self) -> str:
        """Return the account name of the signed-in user."""


class Progress:
    """A write target that reports upload progress as a percentage."""

    def __init__(self, total: int, up: UpdateProgress) -> None:
        self.total = total
        self.done = 0
        self._up = up

    def write(self, data: bytes) -> int:
        count = len(data)
        self.done += count
        percentage = int(self.done / self.total * 100) if self.total else 100
        self._up(percentage)
        return count


@dataclass
class Item:
    """One user-facing option of a driver."""

    name: str = ""
    type: str = ""
    default: str = ""
    options: str = ""
    required: bool = False
    help: str = ""


@dataclass
class Info:
    common: list[Item] = field(default_factory=list)
    additional: list[Item] = field(default_factory=list)
    config: DriverConfig = field(default_factory=DriverConfig)


@dataclass
class RootPath:
    """Options mix-in for drivers whose root is addressed by path."""

    root_folder_path: str = field(default="", metadata={"json": "root_folder_path"})

    def get_root_path(self) -> str:
        return self.root_folder_path

    def set_root_path(self, path: str) -> None:
        self.root_folder_path = path


@dataclass
class RootID:
    """Options mix-in for drivers whose root is addressed by identifier."""

    root_folder_id: str = field(
        default="", metadata={"json": "root_folder_id", "omit": True}
    )

    def get_root_id(self) -> str:
        return self.root_folder_id