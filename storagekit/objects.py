"""File-system object model: plain objects, name wrappers, streams and listing helpers."""

from __future__ import annotations

import functools
import itertools
import re
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, BinaryIO, Iterable, Optional

ZERO_TIME = datetime(1, 1, 1, tzinfo=timezone.utc)

_DIGITS = re.compile(r"[0-9]+")


@dataclass
class Object:
    """A file or folder as reported by a storage driver."""

    id: str = ""
    path: str = ""
    name: str = ""
    size: int = 0
    modified: datetime = ZERO_TIME
    is_dir: bool = False


@dataclass
class ObjThumb(Object):
    """An object that carries a thumbnail link."""

    thumbnail: str = ""


@dataclass
class ObjectURL(Object):
    """An object that carries a direct URL."""

    url: str = ""


@dataclass
class ObjThumbURL(ObjThumb, ObjectURL):
    """An object that carries both a thumbnail link and a direct URL."""


class ObjWrapName:
    """Wraps an object, caching (or overriding) its name."""

    def __init__(self, obj: Any, name: str = "") -> None:
        self.obj = obj
        self._name = name

    @property
    def name(self) -> str:
        if not self._name:
            self._name = self.obj.name
        return self._name

    @property
    def size(self) -> int:
        return self.obj.size

    @property
    def modified(self) -> datetime:
        return self.obj.modified

    @property
    def is_dir(self) -> bool:
        return self.obj.is_dir

    @property
    def id(self) -> str:
        return self.obj.id

    @property
    def path(self) -> str:
        return self.obj.path

    def unwrap(self) -> Any:
        """Return the wrapped object."""
        return self.obj

    def __repr__(self) -> str:
        return f"ObjWrapName(name={self.name!r}, obj={self.obj!r})"


@dataclass
class FileStream:
    """An object being uploaded, together with the reader that supplies its bytes."""

    obj: Any
    reader: Optional[BinaryIO] = None
    mimetype: str = ""
    web_put_as_task: bool = False
    old: Any = None

    @property
    def name(self) -> str:
        return self.obj.name

    @property
    def size(self) -> int:
        return self.obj.size

    @property
    def modified(self) -> datetime:
        return self.obj.modified

    @property
    def is_dir(self) -> bool:
        return self.obj.is_dir

    @property
    def id(self) -> str:
        return self.obj.id

    @property
    def path(self) -> str:
        return self.obj.path

    @property
    def need_store(self) -> bool:
        return self.web_put_as_task

    def close(self) -> None:
        """Close the underlying reader."""
        if self.reader is not None:
            self.reader.close()

    def __enter__(self) -> "FileStream":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()


@dataclass
class ListArgs:
    req_path: str = ""


@dataclass
class LinkArgs:
    ip: str = ""
    header: dict[str, list[str]] = field(default_factory=dict)
    type: str = ""


@dataclass
class Link:
    """Where and how a file's content can be fetched."""

    url: str = ""
    header: dict[str, list[str]] = field(default_factory=dict)
    data: Optional[BinaryIO] = None
    status: int = 0
    file_path: Optional[str] = None
    expiration: Optional[timedelta] = None
    method: str = ""


@dataclass
class OtherArgs:
    obj: Any = None
    method: str = ""
    data: Any = None


@dataclass
class FsOtherArgs:
    path: str = ""
    method: str = ""
    data: Any = None


def natural_less(a: str, b: str) -> bool:
    """Return True if a sorts before b, comparing runs of digits numerically."""
    while True:
        i = 0
        limit = min(len(a), len(b))
        while i < limit and a[i] == b[i] and not a[i].isascii() or (
            i < limit and a[i] == b[i] and a[i] not in "0123456789"
        ):
            i += 1
        a, b = a[i:], b[i:]
        if not a:
            return bool(b)
        match_a = _DIGITS.match(a)
        match_b = _DIGITS.match(b)
        if match_a and match_b:
            num_a, num_b = int(match_a.group()), int(match_b.group())
            if num_a != num_b:
                return num_a < num_b
            if match_a.end() != len(a) and match_b.end() != len(b):
                a, b = a[match_a.end():], b[match_b.end():]
                continue
        return a < b


def _natural_cmp(a: Any, b: Any) -> int:
    if natural_less(a.name, b.name):
        return -1
    if natural_less(b.name, a.name):
        return 1
    return 0


def sort_files(objs: list, order_by: str, order_direction: str) -> None:
    """Sort objects in place by name, size or modification time."""
    if not order_by:
        return
    reverse = order_direction == "desc"
    if order_by == "name":
        objs.sort(key=functools.cmp_to_key(_natural_cmp), reverse=reverse)
    elif order_by == "size":
        objs.sort(key=lambda o: o.size, reverse=reverse)
    elif order_by == "modified":
        objs.sort(key=lambda o: o.modified, reverse=reverse)


def extract_folder(objs: list, extract_folder: str) -> None:
    """Move folders to the front ("front") or to the back (any other value), keeping order."""
    if not extract_folder:
        return
    front = extract_folder == "front"
    objs.sort(key=lambda o: (not o.is_dir) if front else o.is_dir)


def wrap_obj_name(obj: Any) -> ObjWrapName:
    return ObjWrapName(obj)


def wrap_objs_name(objs: list) -> None:
    """Wrap every object of the list in place."""
    objs[:] = [ObjWrapName(obj) for obj in objs]


def unwrap_obj(obj: Any) -> Any:
    """Remove one level of wrapping, if any."""
    if isinstance(obj, ObjWrapName):
        return obj.unwrap()
    return obj


def get_thumb(obj: Any) -> Optional[str]:
    """Return the object's thumbnail, looking through wrappers; None if it has none."""
    if isinstance(obj, ObjThumb):
        return obj.thumbnail
    if isinstance(obj, ObjWrapName):
        return get_thumb(obj.unwrap())
    return None


def get_url(obj: Any) -> Optional[str]:
    """Return the object's URL, looking through wrappers; None if it has none."""
    if isinstance(obj, ObjectURL):
        return obj.url
    if isinstance(obj, ObjWrapName):
        return get_url(obj.unwrap())
    return None


class ObjMerge:
    """Merges object lists, dropping hidden names and names already seen."""

    def __init__(self) -> None:
        self._patterns: list[re.Pattern[str]] = []
        self._seen: set[str] = set()

    def merge(self, objs: Iterable, *args: Any) -> list:
        return [obj for obj in itertools.chain(objs, args) if self._accept(obj)]

    def _accept(self, obj: Any) -> bool:
        name = obj.name
        if any(pattern.search(name) for pattern in self._patterns):
            return False
        if name in self._seen:
            return False
        self._seen.add(name)
        return True

    def init_hide_reg(self, hides: str) -> None:
        """Set the hide patterns, one regular expression per line."""
        self._patterns = [re.compile(line) for line in hides.split("\n")]

    def reset(self) -> None:
        self._seen.clear()