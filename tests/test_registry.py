from dataclasses import dataclass, field

import pytest

from storagekit.driver import Driver, DriverConfig, Item, RootID, RootPath, Select
from storagekit.objects import Link
from storagekit.registry import (
    get_additional_items,
    get_driver_info_map,
    get_driver_names,
    get_driver_new,
    register_driver,
)


@dataclass
class _Nested:
    region: str = field(default="", metadata={"json": "region"})


@dataclass
class _Addition(RootPath):
    client_id: str = field(default="", metadata={"json": "client_id", "required": True})
    chunk_size: int = field(default=5, metadata={"json": "chunk_size", "default": "5"})
    order_by: Select = field(
        default="", metadata={"json": "order_by", "options": "name,size"}
    )
    enabled: bool = field(default=False, metadata={"json": "enabled", "help": "turn on"})
    hidden: str = field(default="", metadata={"json": "hidden", "ignore": True})
    omitted: str = field(default="", metadata={"json": "omitted", "omit": "true"})
    untagged: str = ""
    override: str = field(default="", metadata={"json": "override", "type": "text"})
    nested: _Nested = field(default_factory=_Nested)


@dataclass
class _IdAddition(RootID):
    name: str = field(default="", metadata={"json": "name"})


def _make_driver_class(driver_name, addition_cls, default_root=""):
    class _Driver(Driver):
        def config(self):
            return DriverConfig(name=driver_name, default_root=default_root)

        def get_addition(self):
            return addition_cls()

        def init(self):
            pass

        def drop(self):
            pass

        def list(self, directory, args):
            return []

        def link(self, file, args):
            return Link()

        def get_user_info(self):
            return ""

    return _Driver


def _by_name(items):
    return {item.name: item for item in items}


def test_additional_items_names_and_order():
    items = get_additional_items(_Addition, "/")
    assert [i.name for i in items] == [
        "root_folder_path",
        "client_id",
        "chunk_size",
        "order_by",
        "enabled",
        "override",
        "region",
    ]


def test_additional_items_types():
    items = _by_name(get_additional_items(_Addition, ""))
    assert items["client_id"].type == "string"
    assert items["chunk_size"].type == "int"
    assert items["order_by"].type == "select"
    assert items["enabled"].type == "bool"
    assert items["override"].type == "text"


def test_additional_items_tag_values():
    items = _by_name(get_additional_items(_Addition, ""))
    assert items["client_id"].required is True
    assert items["chunk_size"].default == "5"
    assert items["order_by"].options == "name,size"
    assert items["enabled"].help == "turn on"
    assert items["enabled"].required is False


def test_root_folder_takes_default_root():
    items = _by_name(get_additional_items(_Addition, "/home"))
    root = items["root_folder_path"]
    assert root.default == "/home"
    assert root.required is True


def test_root_folder_without_default_not_required():
    root = _by_name(get_additional_items(_Addition, ""))["root_folder_path"]
    assert root.default == ""
    assert root.required is False


def test_root_id_is_omitted():
    items = get_additional_items(_IdAddition, "root")
    assert [i.name for i in items] == ["name"]


def test_not_a_dataclass():
    with pytest.raises(TypeError):
        get_additional_items(int, "")


def test_register_and_lookup():
    cls = _make_driver_class("registry-test-a", _Addition, "/")
    register_driver(cls)
    assert get_driver_new("registry-test-a") is cls
    assert "registry-test-a" in get_driver_names()
    assert get_driver_info_map()["registry-test-a"] == get_additional_items(_Addition, "/")


def test_register_replaces_existing():
    first = _make_driver_class("registry-test-b", _Addition)
    second = _make_driver_class("registry-test-b", _IdAddition)
    register_driver(first)
    register_driver(second)
    assert get_driver_new("registry-test-b") is second
    assert get_driver_info_map()["registry-test-b"] == [Item(name="name", type="string")]
    assert get_driver_names().count("registry-test-b") == 1


def test_unknown_driver():
    with pytest.raises(LookupError, match="no driver named: nothing-here"):
        get_driver_new("nothing-here")