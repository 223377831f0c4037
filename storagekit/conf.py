"""Application configuration and process-wide settings."""

import dataclasses
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Optional, TypeVar

_T = TypeVar("_T")


@dataclass
class Database:
    type: str = ""
    host: str = ""
    port: int = 0
    user: str = ""
    password: str = ""
    name: str = ""
    db_file: str = ""
    table_prefix: str = ""
    ssl_mode: str = ""


@dataclass
class Scheme:
    https: bool = False
    cert_file: str = ""
    key_file: str = ""


@dataclass
class LogConfig:
    enable: bool = False
    name: str = ""
    max_size: int = 0
    max_backups: int = 0
    max_age: int = 0
    compress: bool = False


def _from_mapping(cls: type, data: Mapping[str, Any]) -> Any:
    kwargs: dict[str, Any] = {}
    for f in dataclasses.fields(cls):
        if f.name not in data:
            continue
        value = data[f.name]
        hint = f.type
        if isinstance(hint, type) and dataclasses.is_dataclass(hint) and isinstance(value, Mapping):
            value = _from_mapping(hint, value)
        kwargs[f.name] = value
    return cls(**kwargs)


@dataclass
class Config:
    force: bool = False
    address: str = ""
    port: int = 0
    site_url: str = ""
    cdn: str = ""
    jwt_secret: str = ""
    token_expires_in: int = 0
    database: Database = field(default_factory=Database)
    scheme: Scheme = field(default_factory=Scheme)
    temp_dir: str = ""
    bleve_dir: str = ""
    log: LogConfig = field(default_factory=LogConfig)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Config":
        """Build a configuration from its JSON form; unknown keys are ignored."""
        return _from_mapping(cls, data)


BUILT_AT = ""
GIT_AUTHOR = ""
GIT_COMMIT = ""
VERSION = "dev"
WEB_VERSION = ""

CONF: Optional[Config] = None

SLICES_MAP: dict[str, list[str]] = {}
FILENAME_CHAR_MAP: dict[str, str] = {}
PRIVACY_REG: list = []

# True once every storage has been loaded.
STORAGES_LOADED = False

RAW_INDEX_HTML = ""
MANAGE_HTML = ""
INDEX_HTML = ""