import io

import pytest

from storagekit.migration import (
    DummyMigration,
    Logger,
    MigrationTool,
    run_migrations,
    select_migration_tool,
)


class _Recorder(MigrationTool):
    def __init__(self, needed=True, fail_at=None):
        self.needed = needed
        self.fail_at = fail_at
        self.calls = []

    def _step(self, name):
        self.calls.append(name)
        if self.fail_at == name:
            raise RuntimeError(f"{name} broke")

    def is_migration_needed(self):
        return self.needed

    def pre_migrate(self):
        self._step("pre")

    def migrate(self):
        self._step("migrate")

    def post_migrate(self):
        self._step("post")


def _logger(debug=False):
    out, err = io.StringIO(), io.StringIO()
    return Logger(debug_mode=debug, stdout=out, stderr=err), out, err


def test_debug_off_writes_nothing():
    logger, out, err = _logger()
    logger.debug("x %d", 1)
    assert out.getvalue() == ""
    assert err.getvalue() == ""


def test_debug_on():
    logger, out, _ = _logger(debug=True)
    logger.debug("x %d", 1)
    assert out.getvalue() == "DEBUG: x 1\n"


def test_info_and_error_streams():
    logger, out, err = _logger()
    logger.info("%s is running", "svc")
    logger.error("failed %s", "svc")
    assert out.getvalue() == "svc is running\n"
    assert err.getvalue() == "ERROR: failed svc\n"


def test_no_double_newline():
    logger, out, _ = _logger()
    logger.info("line\n")
    assert out.getvalue() == "line\n"


def test_dummy_is_never_selected():
    assert DummyMigration().is_migration_needed() is False
    assert select_migration_tool([DummyMigration()]) is None


def test_select_first_needed():
    skipped = _Recorder(needed=False)
    first = _Recorder()
    second = _Recorder()
    assert select_migration_tool([skipped, first, second]) is first


def test_run_nothing_to_do():
    logger, out, _ = _logger()
    assert run_migrations([DummyMigration()], logger) is False
    assert out.getvalue() == "No migration to proceed.\n"


def test_run_all_steps_in_order():
    logger, _, err = _logger()
    tool = _Recorder()
    assert run_migrations([tool], logger) is True
    assert tool.calls == ["pre", "migrate", "post"]
    assert err.getvalue() == ""


def test_migrate_failure_propagates():
    logger, _, _ = _logger()
    tool = _Recorder(fail_at="migrate")
    with pytest.raises(RuntimeError, match="migrate broke"):
        run_migrations([tool], logger)
    assert tool.calls == ["pre", "migrate"]


def test_pre_migrate_failure_propagates():
    logger, _, _ = _logger()
    tool = _Recorder(fail_at="pre")
    with pytest.raises(RuntimeError):
        run_migrations([tool], logger)
    assert tool.calls == ["pre"]


def test_post_migrate_failure_logged():
    logger, _, err = _logger()
    tool = _Recorder(fail_at="post")
    assert run_migrations([tool], logger) is True
    assert err.getvalue() == "ERROR: Migration succeeded, but post-migration failed: post broke\n"