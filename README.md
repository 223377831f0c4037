# storagekit

Building blocks for a local storage service. The package covers data models
for block devices and SMART reports, adapters that turn kernel device events
into message-bus events, a registry of storage drivers, and file operations
that put a listing and link cache in front of any driver. It uses only the
standard library.

## Modules

- `storagekit.objects` holds the file objects and their helpers.
  - Objects: `Object`, `ObjThumb`, `ObjectURL` and `ObjThumbURL`. `ObjWrapName`
    wraps an object and caches or overrides its name.
  - Upload stream: `FileStream`, which is a context manager that closes its
    reader.
  - Arguments and results: `ListArgs`, `LinkArgs`, `OtherArgs`, `FsOtherArgs`
    and `Link`.
  - `sort_files(objs, order_by, order_direction)` sorts in place by `"name"`,
    `"size"` or `"modified"`. Name order is natural, so `file2` sorts before
    `file10`. `"desc"` reverses the order.
  - `extract_folder(objs, extract_folder)` moves folders to the front when
    given `"front"` and to the back for any other non-empty value. It keeps
    the existing order otherwise.
  - `natural_less`, `wrap_obj_name`, `wrap_objs_name`, `unwrap_obj`,
    `get_thumb` and `get_url` are smaller helpers.
  - `ObjMerge` merges listings. It drops names that match the hide patterns
    set by `init_hide_reg`, one regular expression per line, and names it has
    already seen, until `reset` is called.
- `storagekit.disk` holds the device models.
  - `LSBLKModel` describes a device and its child partitions. It can be built
    from an lsblk JSON entry with `LSBLKModel.from_dict`. `get_mount_point`
    proposes a path under `/media` and appends the device name if that path
    already exists.
  - `SmartctlA` holds a SMART report (`from_dict`, `is_empty`).
  - `Drive`, `DiskChildren`, `USBDriveStatus`, `USBChildren`, `Storage`,
    `Storages`, `DiskStatus` and `DFDiskSpace` are plain records.
- `storagekit.storage` holds the storage records.
  - `StorageA` combines the `Sort` and `Proxy` preferences. `Proxy` offers
    `webdav_302`, `webdav_proxy` and `webdav_native`.
  - `SettingItem` has `is_deprecated`, with the `SettingGroup` and
    `SettingFlag` enums.
  - `CommonModel`, `APPModel` and `ServerModel` describe the service
    settings.
- `storagekit.events` works with `EventType`, `PropertyType`, `Event` and
  `UEvent`.
  - `build_event_types()` returns the event types keyed by device type
    (`disk`, `storage`) and then by action (`add`, `remove`). An example name
    is `local-storage:disk:added`.
  - `event_adapter(uevent, delay=3.0)` maps a `UEvent` to an `Event`, or
    returns `None` when the event is of no interest. It sleeps for `delay`
    seconds first.
  - `event_adapter_with_ui_properties(event)` gives this service's events
    their own copy of the property map.
  - `additional_properties(disk)` flattens an `LSBLKModel` and its children
    into string properties.
- `storagekit.driver` holds the driver interface.
  - `Driver` is an abstract base. Subclasses implement `config`,
    `get_addition`, `init`, `drop`, `list`, `link` and `get_user_info`.
  - Supporting classes: `DriverConfig` (with `must_proxy`), `Progress`,
    `Item`, `Info`, and the `RootPath` and `RootID` option mix-ins.
- `storagekit.registry` keeps track of drivers.
  - `register_driver(factory)` files a driver under the name from its
    `config()`. `get_driver_new(name)` raises `LookupError` for unknown names.
  - `get_driver_names()` and `get_driver_info_map()` report what is
    registered.
  - `get_additional_items(addition_type, default_root)` describes the fields
    of a driver's options dataclass. Only fields whose metadata has a `"json"`
    key are included, and nested dataclasses are described in place.
- `storagekit.conf` holds the application configuration: `Config` (built with
  `Config.from_dict`), `Database`, `Scheme` and `LogConfig`. It also has
  process-wide values such as `SLICES_MAP` and `FILENAME_CHAR_MAP`.
- `storagekit.hooks` runs hooks in registration order.
  - Listing hooks: `register_objs_update_hook` and `handle_objs_update_hook`.
  - Setting hooks, one per key: `register_setting_item_hook` and
    `handle_setting_item_hook`. The latter returns whether a hook ran.
  - Storage hooks: `register_storage_hook` and `call_storage_hooks`.
- `storagekit.migration` holds the migration support.
  - `MigrationTool` is the interface. `DummyMigration` is a tool that never
    needs to run.
  - `select_migration_tool` picks a tool, and `run_migrations(tools, logger)`
    runs the first one that is needed. A failure in the post-migration step
    is only logged.
  - `Logger` writes `info` and `debug` to stdout and `error` to stderr, with
    `DEBUG: ` and `ERROR: ` prefixes.
- `storagekit.fs` has the file operations.
  - Reading: `list_dir`, `get`, `get_unwrap`, `link` and `other`.
  - Writing: `make_dir`, `move`, `rename`, `copy`, `remove` and `put`.
  - Cache helpers: `key`, `clear_cache` and `fix_and_clean_path`.
  - Failures raise `OperationError`. Its subclasses are `ObjectNotFoundError`
    and `StorageNotReadyError`; the latter applies when the driver's config
    sets `check_status` and the storage status is not `"work"`.

## Writing a driver

Subclass `storagekit.driver.Driver`. Write operations are optional. A driver
supports one by defining the matching method:

- `make_dir(parent_dir, name)`
- `move(obj, dst_dir)`
- `rename(obj, new_name)`
- `copy(obj, dst_dir)`
- `remove(obj)`
- `put(parent_dir, stream, up)`
- `other(args)`

If a method returns an object, the cached listing is updated with it. If it
returns `None`, the cached listing is dropped, unless `lazy_cache` is set.

The root directory comes from the options object returned by
`get_addition()`:

- options with a `get_root_id` method, such as `RootID`;
- options with a `get_root_path` method, such as `RootPath`;
- otherwise, a `get_root()` method on the driver.

## Example

```python
from storagekit.objects import Object, sort_files, extract_folder

objs = [
    Object(name="file10", size=3),
    Object(name="file2", size=1),
    Object(name="photos", is_dir=True),
]
sort_files(objs, "name", "asc")
extract_folder(objs, "front")
print([o.name for o in objs])  # ['photos', 'file2', 'file10']
```

## What it does not do

This is a library, not a service. It has no command, no HTTP server and no
database.

It ships no storage drivers. You write them against `Driver`.

It does not run `lsblk` or `smartctl`. It does not listen for kernel device
events, and it does not connect to a message bus. Callers parse the tool
output themselves, build the `UEvent` objects and send the resulting events.

The only migration tool provided is `DummyMigration`.

## Tests

The test suite uses pytest, which comes with the `test` extra:

```
pip install -e .[test]
pytest
```