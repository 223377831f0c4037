"""Hooks run when listings, settings or storages change."""

from __future__ import annotations

from typing import Any, Callable

from storagekit.storage import SettingItem

ObjsUpdateHook = Callable[[str, list], None]
SettingItemHook = Callable[[SettingItem], None]
StorageHook = Callable[[str, Any], None]

_objs_update_hooks: list[ObjsUpdateHook] = []
_setting_item_hooks: dict[str, SettingItemHook] = {}
_storage_hooks: list[StorageHook] = []


def register_objs_update_hook(hook: ObjsUpdateHook) -> None:
    _objs_update_hooks.append(hook)


def handle_objs_update_hook(parent: str, objs: list) -> None:
    """Run every listing hook, in registration order."""
    for hook in _objs_update_hooks:
        hook(parent, objs)


def register_setting_item_hook(key: str, hook: SettingItemHook) -> None:
    """Register the hook for a setting key, replacing any earlier one."""
    _setting_item_hooks[key] = hook


def handle_setting_item_hook(item: SettingItem) -> bool:
    """Run the hook for the item's key; return whether there was one.

    Errors raised by the hook propagate.
    """
    hook = _setting_item_hooks.get(item.key)
    if hook is None:
        return False
    hook(item)
    return True


def register_storage_hook(hook: StorageHook) -> None:
    _storage_hooks.append(hook)


def call_storage_hooks(typ: str, storage: Any) -> None:
    """Run every storage hook, in registration order."""
    for hook in _storage_hooks:
        hook(typ, storage)