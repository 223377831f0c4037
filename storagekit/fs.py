"""File operations on a storage driver, with cached directory listings and links."""

from __future__ import annotations

import os
import posixpath
import threading
import time
from datetime import timedelta
from typing import Any, Callable, Optional

from storagekit.driver import Driver, UpdateProgress
from storagekit.hooks import handle_objs_update_hook
from storagekit.objects import (
    FileStream,
    FsOtherArgs,
    Link,
    LinkArgs,
    ListArgs,
    Object,
    ObjWrapName,
    OtherArgs,
    extract_folder,
    sort_files,
    unwrap_obj,
    wrap_obj_name,
    wrap_objs_name,
)

WORK = "work"
ROOT_NAME = "root"

SORT_DEBOUNCE = timedelta(minutes=1)


class OperationError(Exception):
    """A file operation on a storage failed."""


class ObjectNotFoundError(OperationError):
    """The requested path does not exist in the storage."""


class StorageNotReadyError(OperationError):
    """The storage has not finished initialising."""


class _ExpiringCache:
    """A thread-safe mapping whose entries expire after a time to live."""

    def __init__(self) -> None:
        self._items: dict[str, tuple[Any, float]] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Any:
        with self._lock:
            entry = self._items.get(key)
            if entry is None:
                return None
            value, expires_at = entry
            if expires_at <= time.monotonic():
                del self._items[key]
                return None
            return value

    def set(self, key: str, value: Any, ttl: timedelta) -> None:
        with self._lock:
            self._items[key] = (value, time.monotonic() + ttl.total_seconds())

    def delete(self, key: str) -> None:
        with self._lock:
            self._items.pop(key, None)


class _Call:
    def __init__(self) -> None:
        self.done = threading.Event()
        self.result: Any = None
        self.error: Optional[BaseException] = None


class _SingleFlight:
    """Runs one call per key at a time; concurrent callers share its outcome."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._calls: dict[str, _Call] = {}

    def do(self, key: str, fn: Callable[[], Any]) -> Any:
        with self._lock:
            call = self._calls.get(key)
            leader = call is None
            if leader:
                call = _Call()
                self._calls[key] = call
        if not leader:
            call.done.wait()
            if call.error is not None:
                raise call.error
            return call.result
        try:
            call.result = fn()
        except BaseException as err:
            call.error = err
            raise
        finally:
            with self._lock:
                self._calls.pop(key, None)
            call.done.set()
        return call.result


_list_cache = _ExpiringCache()
_list_flight = _SingleFlight()
_link_cache = _ExpiringCache()
_link_flight = _SingleFlight()
_mkdir_flight = _SingleFlight()

_sort_lock = threading.Lock()
_sort_timers: dict[str, threading.Timer] = {}


def _clean(path: str) -> str:
    if not path:
        return "."
    cleaned = posixpath.normpath(path)
    if cleaned.startswith("//"):
        cleaned = "/" + cleaned.lstrip("/")
    return cleaned


def _join(*parts: str) -> str:
    present = [part for part in parts if part]
    if not present:
        return ""
    return _clean("/".join(present))


def fix_and_clean_path(path: str) -> str:
    """Make a path absolute and remove redundant separators and dot segments."""
    path = path.replace("\\", "/")
    if not path.startswith("/"):
        path = "/" + path
    return _clean(path)


def _wrap(err: BaseException, message: str) -> OperationError:
    cls = type(err) if isinstance(err, OperationError) else OperationError
    return cls(f"{message}: {err}")


def _check_ready(storage: Driver) -> None:
    status = storage.get_storage().status
    if storage.config().check_status and status != WORK:
        raise StorageNotReadyError(f"storage not init: {status}")


def _ttl(storage: Driver) -> timedelta:
    return timedelta(minutes=storage.get_storage().cache_expiration)


def key(storage: Driver, path: str) -> str:
    """Return the cache key of a path inside a storage."""
    return _join(storage.get_storage().mount_path, fix_and_clean_path(path))


def clear_cache(storage: Driver, path: str) -> None:
    """Forget the cached listing of a directory."""
    _list_cache.delete(key(storage, path))


def _update_cache_obj(storage: Driver, path: str, old_obj: Any, new_obj: Any) -> None:
    cache_key = key(storage, path)
    objs = _list_cache.get(cache_key)
    if objs is None:
        return
    for index, obj in enumerate(objs):
        if obj.name == old_obj.name:
            objs[index] = new_obj
            break
    _list_cache.set(cache_key, objs, _ttl(storage))


def _del_cache_obj(storage: Driver, path: str, obj: Any) -> None:
    cache_key = key(storage, path)
    objs = _list_cache.get(cache_key)
    if objs is None:
        return
    for index, old_obj in enumerate(objs):
        if old_obj.name == obj.name:
            del objs[index]
            break
    _list_cache.set(cache_key, objs, _ttl(storage))


def _debounce_sort(cache_key: str, objs: list, storage: Driver) -> None:
    def run() -> None:
        record = storage.get_storage()
        sort_files(objs, record.order_by, record.order_direction)
        with _sort_lock:
            _sort_timers.pop(cache_key, None)

    with _sort_lock:
        previous = _sort_timers.get(cache_key)
        if previous is not None:
            previous.cancel()
        timer = threading.Timer(SORT_DEBOUNCE.total_seconds(), run)
        timer.daemon = True
        _sort_timers[cache_key] = timer
        timer.start()


def _add_cache_obj(storage: Driver, path: str, new_obj: Any) -> None:
    cache_key = key(storage, path)
    objs = _list_cache.get(cache_key)
    if objs is None:
        return
    for index, obj in enumerate(objs):
        if obj.name == new_obj.name:
            objs[index] = new_obj
            return
    # Keep files and folders roughly apart.
    if objs and objs[-1].is_dir == new_obj.is_dir:
        objs.append(new_obj)
    else:
        objs.insert(0, new_obj)
    if storage.config().local_sort:
        _debounce_sort(cache_key, objs, storage)
    _list_cache.set(cache_key, objs, _ttl(storage))


def list_dir(
    storage: Driver,
    path: str,
    args: Optional[ListArgs] = None,
    refresh: bool = False,
) -> list:
    """List a directory of the storage, using the cache unless refresh is set."""
    _check_ready(storage)
    args = args if args is not None else ListArgs()
    path = fix_and_clean_path(path)
    cache_key = key(storage, path)
    if not refresh:
        cached = _list_cache.get(cache_key)
        if cached is not None:
            return cached
    try:
        directory = get_unwrap(storage, path)
    except OperationError as err:
        raise _wrap(err, "failed get dir") from err
    if not directory.is_dir:
        raise OperationError("not a folder")

    def fetch() -> list:
        try:
            files = list(storage.list(directory, args))
        except Exception as err:
            raise _wrap(err, "failed to list objs") from err
        for f in files:
            if isinstance(f, Object) and f.path == "" and directory.path != "":
                f.path = _join(directory.path, f.name)
        wrap_objs_name(files)
        threading.Thread(
            target=handle_objs_update_hook, args=(args.req_path, files), daemon=True
        ).start()
        record = storage.get_storage()
        if storage.config().local_sort:
            sort_files(files, record.order_by, record.order_direction)
        extract_folder(files, record.extract_folder)
        if not storage.config().no_cache:
            if files:
                _list_cache.set(cache_key, files, _ttl(storage))
            else:
                _list_cache.delete(cache_key)
        return files

    return _list_flight.do(cache_key, fetch)


def _root_object(storage: Driver, path: str) -> Any:
    addition = storage.get_addition()
    modified = storage.get_storage().modified
    if hasattr(addition, "get_root_id"):
        return Object(
            id=addition.get_root_id(),
            name=ROOT_NAME,
            size=0,
            modified=modified,
            is_dir=True,
            path=path,
        )
    if hasattr(addition, "get_root_path"):
        return Object(
            path=addition.get_root_path(),
            name=ROOT_NAME,
            size=0,
            modified=modified,
            is_dir=True,
        )
    get_root = getattr(storage, "get_root", None)
    if get_root is None:
        return None
    try:
        return get_root()
    except Exception as err:
        raise _wrap(err, "failed get root obj") from err


def get(storage: Driver, path: str) -> Any:
    """Return the object at a path, as found in its parent's listing."""
    path = fix_and_clean_path(path)
    if path == "/":
        root = _root_object(storage, path)
        if root is None:
            raise OperationError("please implement IRootPath or IRootId or Getter method")
        return ObjWrapName(root, name=ROOT_NAME)

    directory, name = posixpath.split(path)
    try:
        files = list_dir(storage, directory, ListArgs())
    except OperationError as err:
        raise _wrap(err, "failed get parent list") from err
    for f in files:
        if f.name == name:
            return f
    raise ObjectNotFoundError("object not found")


def get_unwrap(storage: Driver, path: str) -> Any:
    """Return the object at a path with its name wrapper removed."""
    return unwrap_obj(get(storage, path))


def link(storage: Driver, path: str, args: Optional[LinkArgs] = None) -> tuple[Link, Any]:
    """Return a link to a file's content and the file itself."""
    _check_ready(storage)
    args = args if args is not None else LinkArgs()
    try:
        file = get_unwrap(storage, path)
    except OperationError as err:
        raise _wrap(err, "failed to get file") from err
    if file.is_dir:
        raise OperationError("not a file")
    cache_key = key(storage, path) + ":" + args.ip
    cached = _link_cache.get(cache_key)
    if cached is not None:
        return cached, file

    def fetch() -> Link:
        try:
            result = storage.link(file, args)
        except Exception as err:
            raise _wrap(err, "failed get link") from err
        if result.expiration is not None:
            _link_cache.set(cache_key, result, result.expiration)
        return result

    return _link_flight.do(cache_key, fetch), file


def other(storage: Driver, args: FsOtherArgs) -> Any:
    """Run a driver-specific operation on the object at args.path."""
    try:
        obj = get_unwrap(storage, args.path)
    except OperationError as err:
        raise _wrap(err, "failed to get obj") from err
    handler = getattr(storage, "other", None)
    if handler is None:
        raise OperationError("not implement")
    return handler(OtherArgs(obj=obj, method=args.method, data=args.data))


def make_dir(storage: Driver, path: str, lazy_cache: bool = False) -> None:
    """Create a directory and any missing parents; existing directories are fine."""
    _check_ready(storage)
    path = fix_and_clean_path(path)

    def create() -> None:
        try:
            existing = get_unwrap(storage, path)
        except ObjectNotFoundError:
            parent_path, dir_name = posixpath.split(path)
            try:
                make_dir(storage, parent_path)
            except OperationError as err:
                raise _wrap(err, f"failed to make parent dir [{parent_path}]") from err
            try:
                parent_dir = get_unwrap(storage, parent_path)
            except OperationError as err:
                raise _wrap(err, f"failed to get parent dir [{parent_path}]") from err
            make = getattr(storage, "make_dir", None)
            if make is None:
                raise OperationError("not implement")
            new_obj = make(parent_dir, dir_name)
            if new_obj is not None:
                _add_cache_obj(storage, parent_path, wrap_obj_name(new_obj))
            elif not lazy_cache:
                clear_cache(storage, parent_path)
            return
        except OperationError as err:
            raise _wrap(err, "failed to check if dir exists") from err
        if not existing.is_dir:
            raise OperationError("file exists")

    _mkdir_flight.do(key(storage, path), create)


def move(storage: Driver, src_path: str, dst_dir_path: str, lazy_cache: bool = False) -> None:
    """Move an object into another directory of the same storage."""
    _check_ready(storage)
    src_path = fix_and_clean_path(src_path)
    dst_dir_path = fix_and_clean_path(dst_dir_path)
    try:
        src_raw = get(storage, src_path)
    except OperationError as err:
        raise _wrap(err, "failed to get src object") from err
    src_obj = unwrap_obj(src_raw)
    try:
        dst_dir = get_unwrap(storage, dst_dir_path)
    except OperationError as err:
        raise _wrap(err, "failed to get dst dir") from err
    src_dir_path = posixpath.dirname(src_path)

    mover = getattr(storage, "move", None)
    if mover is None:
        raise OperationError("not implement")
    new_obj = mover(src_obj, dst_dir)
    _del_cache_obj(storage, src_dir_path, src_raw)
    if new_obj is not None:
        _add_cache_obj(storage, dst_dir_path, wrap_obj_name(new_obj))
    elif not lazy_cache:
        clear_cache(storage, dst_dir_path)


def rename(storage: Driver, src_path: str, dst_name: str, lazy_cache: bool = False) -> None:
    """Give an object a new name in its directory."""
    _check_ready(storage)
    src_path = fix_and_clean_path(src_path)
    try:
        src_raw = get(storage, src_path)
    except OperationError as err:
        raise _wrap(err, "failed to get src object") from err
    src_obj = unwrap_obj(src_raw)
    src_dir_path = posixpath.dirname(src_path)

    renamer = getattr(storage, "rename", None)
    if renamer is None:
        raise OperationError("not implement")
    new_obj = renamer(src_obj, dst_name)
    if new_obj is not None:
        _update_cache_obj(storage, src_dir_path, src_raw, wrap_obj_name(new_obj))
    elif not lazy_cache:
        clear_cache(storage, src_dir_path)


def copy(storage: Driver, src_path: str, dst_dir_path: str, lazy_cache: bool = False) -> None:
    """Copy an object into another directory of the same storage."""
    _check_ready(storage)
    src_path = fix_and_clean_path(src_path)
    dst_dir_path = fix_and_clean_path(dst_dir_path)
    try:
        src_obj = get_unwrap(storage, src_path)
    except OperationError as err:
        raise _wrap(err, "failed to get src object") from err
    try:
        dst_dir = get_unwrap(storage, dst_dir_path)
    except OperationError as err:
        raise _wrap(err, "failed to get dst dir") from err

    copier = getattr(storage, "copy", None)
    if copier is None:
        raise OperationError("not implement")
    new_obj = copier(src_obj, dst_dir)
    if new_obj is not None:
        _add_cache_obj(storage, dst_dir_path, wrap_obj_name(new_obj))
    elif not lazy_cache:
        clear_cache(storage, dst_dir_path)


def remove(storage: Driver, path: str) -> None:
    """Remove an object; a path that does not exist is not an error."""
    _check_ready(storage)
    path = fix_and_clean_path(path)
    try:
        raw = get(storage, path)
    except ObjectNotFoundError:
        return
    except OperationError as err:
        raise _wrap(err, "failed to get object") from err
    dir_path = posixpath.dirname(path)

    remover = getattr(storage, "remove", None)
    if remover is None:
        raise OperationError("not implement")
    remover(unwrap_obj(raw))
    _del_cache_obj(storage, dir_path, raw)


def _discard_stream(file: FileStream) -> None:
    reader = file.reader
    file.close()
    name = getattr(reader, "name", None)
    if isinstance(name, str) and os.path.exists(name):
        try:
            if os.path.isdir(name):
                import shutil

                shutil.rmtree(name)
            else:
                os.remove(name)
        except OSError:
            pass


def put(
    storage: Driver,
    dst_dir_path: str,
    file: FileStream,
    up: Optional[UpdateProgress] = None,
    lazy_cache: bool = False,
) -> None:
    """Upload a stream into a directory, creating the directory if needed.

    The stream is closed afterwards; a stream read from a local file has that
    file removed.
    """
    _check_ready(storage)
    try:
        dst_dir_path = fix_and_clean_path(dst_dir_path)
        dst_path = _join(dst_dir_path, file.name)
        try:
            existing = get_unwrap(storage, dst_path)
        except OperationError:
            existing = None
        if existing is not None:
            if existing.size == 0:
                try:
                    remove(storage, dst_path)
                except OperationError as err:
                    raise _wrap(err, "failed remove file that exist and have size 0") from err
            else:
                file.old = existing
        try:
            make_dir(storage, dst_dir_path)
        except OperationError as err:
            raise _wrap(err, f"failed to make dir [{dst_dir_path}]") from err
        try:
            parent_dir = get_unwrap(storage, dst_dir_path)
        except OperationError as err:
            raise _wrap(err, f"failed to get dir [{dst_dir_path}]") from err
        if up is None:
            up = lambda percentage: None  # noqa: E731

        uploader = getattr(storage, "put", None)
        if uploader is None:
            raise OperationError("not implement")
        new_obj = uploader(parent_dir, file, up)
        if new_obj is not None:
            _add_cache_obj(storage, dst_dir_path, wrap_obj_name(new_obj))
        elif not lazy_cache:
            clear_cache(storage, dst_dir_path)
    finally:
        _discard_stream(file)