"""Storage models, device event adapters, a driver registry and cached file operations."""

__version__ = "0.4.4"

__all__ = [
    "conf",
    "disk",
    "driver",
    "events",
    "fs",
    "hooks",
    "migration",
    "objects",
    "registry",
    "storage",
]