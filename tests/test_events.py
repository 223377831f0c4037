from storagekit.disk import LSBLKModel
from storagekit.events import (
    EVENT_TYPES,
    PROPERTY_NAME_LOOKUP_MAPS,
    SERVICE_NAME,
    Event,
    UEvent,
    additional_properties,
    build_event_types,
    event_adapter,
    event_adapter_with_ui_properties,
)


def test_build_event_types_covers_devtypes_and_actions():
    types = build_event_types()
    assert set(types) == set(PROPERTY_NAME_LOOKUP_MAPS)
    assert all(set(by_action) == {"add", "remove"} for by_action in types.values())
    assert types["disk"]["add"].name == "local-storage:disk:added"
    assert types["disk"]["remove"].source_id == SERVICE_NAME


def test_event_type_properties_match_lookup():
    types = build_event_types()
    names = {p.name for p in types["disk"]["add"].property_type_list}
    assert names == set(PROPERTY_NAME_LOOKUP_MAPS["disk"])
    assert types["storage"]["add"].property_type_list == []


def test_event_adapter_maps_environment():
    uevent = UEvent(action="add", env={"DEVTYPE": "disk", "ID_BUS": "usb", "DEVNAME": "/dev/sdz"})
    event = event_adapter(uevent, delay=0)
    assert event.name == EVENT_TYPES["disk"]["add"].name
    assert event.properties == {
        "local-storage:bus": "usb",
        "tran": "usb",
        "local-storage:path": "/dev/sdz",
    }


def test_event_adapter_ignores_unknown():
    assert event_adapter(UEvent(action="add", env={"DEVTYPE": "partition"}), delay=0) is None
    assert event_adapter(UEvent(action="change", env={"DEVTYPE": "disk"}), delay=0) is None
    assert event_adapter(UEvent(action="add"), delay=0) is None


def test_ui_properties_copies_only_own_events():
    props = {"a": "1"}
    own = event_adapter_with_ui_properties(Event(source_id=SERVICE_NAME, name="n", properties=props))
    assert own.properties == props and own.properties is not props
    foreign = event_adapter_with_ui_properties(Event(source_id="other", name="n", properties=props))
    assert foreign.properties is props


def test_additional_properties():
    disk = LSBLKModel(
        size=42,
        model="M",
        path="/dev/sdz",
        tran="usb",
        children=[
            LSBLKModel(fs_type="ext4", path="/dev/sdz1", fs_size="90", fs_avail="100", mount_point="/mnt/a"),
            LSBLKModel(fs_type="vfat", path="/dev/sdz2", fs_avail="", mount_point="/mnt/b"),
        ],
    )
    props = additional_properties(disk)
    assert props["size"] == str(42)
    assert props["children:num"] == str(len(disk.children))
    assert props["avail"] == "100"
    assert props["mount_point"] == "/mnt/a,/mnt/b"
    assert props["children:0:fstype"] == "ext4"
    assert props["children:1:path"] == "/dev/sdz2"
    assert props["children:0:size"] == "90"


def test_additional_properties_without_children():
    props = additional_properties(LSBLKModel(path="/dev/sdy"))
    assert props["avail"] == str(0)
    assert props["mount_point"] == ""
    assert not any(k.startswith("children:0") for k in props)