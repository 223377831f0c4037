"""Version migration tools and the logger they report through."""

from __future__ import annotations

import sys
from abc import ABC, abstractmethod
from typing import Any, Iterable, Optional, TextIO


class Logger:
    """Plain console logger with an optional debug level."""

    def __init__(
        self,
        debug_mode: bool = False,
        stdout: Optional[TextIO] = None,
        stderr: Optional[TextIO] = None,
    ) -> None:
        self.debug_mode = debug_mode
        self._stdout = stdout
        self._stderr = stderr

    @staticmethod
    def _emit(stream: TextIO, prefix: str, fmt: str, args: tuple) -> None:
        message = fmt % args if args else fmt
        if not message.endswith("\n"):
            message += "\n"
        stream.write(prefix + message)

    def debug(self, fmt: str, *args: Any) -> None:
        if self.debug_mode:
            self._emit(self._stdout or sys.stdout, "DEBUG: ", fmt, args)

    def info(self, fmt: str, *args: Any) -> None:
        self._emit(self._stdout or sys.stdout, "", fmt, args)

    def error(self, fmt: str, *args: Any) -> None:
        self._emit(self._stderr or sys.stderr, "ERROR: ", fmt, args)


class MigrationTool(ABC):
    """One step that moves data from an older version's layout to the current one."""

    @abstractmethod
    def is_migration_needed(self) -> bool: ...

    @abstractmethod
    def pre_migrate(self) -> None: ...

    @abstractmethod
    def migrate(self) -> None: ...

    @abstractmethod
    def post_migrate(self) -> None: ...


class DummyMigration(MigrationTool):
    """A migration that is never needed; it only records the steps it was asked to run."""

    def __init__(self) -> None:
        self.steps: list[str] = []

    def is_migration_needed(self) -> bool:
        return False

    def pre_migrate(self) -> None:
        self.steps.append("pre_migrate")

    def migrate(self) -> None:
        self.steps.append("migrate")

    def post_migrate(self) -> None:
        self.steps.append("post_migrate")


def select_migration_tool(tools: Iterable[MigrationTool]) -> Optional[MigrationTool]:
    """Return the first tool that reports a migration is needed."""
    return next((tool for tool in tools if tool.is_migration_needed()), None)


def run_migrations(tools: Iterable[MigrationTool], logger: Logger) -> bool:
    """Run the first needed migration; return whether one ran.

    Failures before or during migration propagate; a failed post-migration
    step is only logged.
    """
    tool = select_migration_tool(tools)
    if tool is None:
        logger.info("No migration to proceed.")
        return False
    tool.pre_migrate()
    tool.migrate()
    try:
        tool.post_migrate()
    except Exception as err:  # noqa: BLE001 - the migration itself already succeeded
        logger.error("Migration succeeded, but post-migration failed: %s", err)
    return True