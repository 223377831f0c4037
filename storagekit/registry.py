"""Registry of storage drivers and the option descriptions derived from them."""

from __future__ import annotations

import dataclasses
from typing import Any, Callable

from storagekit.driver import Driver, Item

DriverFactory = Callable[[], Driver]

_driver_new_map: dict[str, DriverFactory] = {}
_driver_info_map: dict[str, list[Item]] = {}

_TYPE_NAMES = {str: "string", bool: "bool", int: "int", float: "float64"}
_TYPE_NAME_STRINGS = {"str": "string", "bool": "bool", "int": "int", "float": "float64"}


def register_driver(factory: DriverFactory) -> None:
    """Register a driver factory under the name its configuration reports."""
    driver = factory()
    config = driver.config()
    addition = driver.get_addition()
    addition_type = addition if isinstance(addition, type) else type(addition)
    _driver_info_map[config.name] = get_additional_items(addition_type, config.default_root)
    _driver_new_map[config.name] = factory


def get_driver_new(name: str) -> DriverFactory:
    """Return the factory of the named driver."""
    try:
        return _driver_new_map[name]
    except KeyError:
        raise LookupError(f"no driver named: {name}") from None


def get_driver_names() -> list[str]:
    return list(_driver_info_map)


def get_driver_info_map() -> dict[str, list[Item]]:
    return _driver_info_map


def _is_true(value: Any) -> bool:
    return value is True or value == "true"


def _field_type(f: dataclasses.Field) -> Any:
    """Return the field's type, resolving nested dataclasses from their defaults."""
    if isinstance(f.type, type):
        return f.type
    factory = f.default_factory
    if isinstance(factory, type) and dataclasses.is_dataclass(factory):
        return factory
    if dataclasses.is_dataclass(f.default) and not isinstance(f.default, type):
        return type(f.default)
    return f.type


def _type_name(hint: Any) -> str:
    if hint in _TYPE_NAMES:
        return _TYPE_NAMES[hint]
    if isinstance(hint, str):
        name = hint.strip()
        if name in _TYPE_NAME_STRINGS:
            return _TYPE_NAME_STRINGS[name]
        return name.lower() if name.isidentifier() else ""
    return str(getattr(hint, "__name__", "")).lower()


def get_additional_items(addition_type: type, default_root: str) -> list[Item]:
    """Describe the options of a driver's options dataclass.

    Only fields whose metadata carries a "json" name are described; nested
    dataclass fields are described in place.
    """
    if not (isinstance(addition_type, type) and dataclasses.is_dataclass(addition_type)):
        raise TypeError(f"{addition_type!r} is not a dataclass type")
    items: list[Item] = []
    for f in dataclasses.fields(addition_type):
        hint = _field_type(f)
        if isinstance(hint, type) and dataclasses.is_dataclass(hint):
            items.extend(get_additional_items(hint, default_root))
            continue
        meta = f.metadata
        if _is_true(meta.get("ignore")) or "json" not in meta:
            continue
        if _is_true(meta.get("omit")):
            continue
        item = Item(
            name=meta["json"],
            type=meta.get("type") or _type_name(hint),
            default=str(meta.get("default", "")),
            options=meta.get("options", ""),
            required=_is_true(meta.get("required")),
            help=meta.get("help", ""),
        )
        if item.name in ("root_folder_id", "root_folder_path"):
            if not item.default:
                item.default = default_root
            item.required = item.default != ""
        if not item.type:
            item.type = "string"
        items.append(item)
    return items