"""Tests for delete, update checks and cleanup."""

from pathlib import Path

import pytest

from forkswap.core.archive import ForkStatus
from forkswap.core.errors import UnknownForkError
from forkswap.core.manager import ForkSwapManager
from tests.fakes.context import create_test_context
from tests.fakes.git import FakeGit
from tests.test_utils.env_helpers import SCRIPT_SOURCE_FORK, SimulatedDevice

FROG_URL = "https://github.com/frogpilot/openpilot.git"
STOCK_URL = "https://github.com/stock/openpilot.git"


# delete


def test_delete_removes_archive(tmp_path: Path) -> None:
    device = SimulatedDevice(tmp_path)
    device.make_live("stock")
    device.add_archived_fork("frogpilot", params={"Key": "v"})
    ctx = create_test_context(device.config)

    assert ForkSwapManager(ctx).delete("frogpilot") is True

    assert not device.archive.exists("frogpilot")
    assert "Successfully deleted the fork: frogpilot." in ctx.feedback.texts("success")


def test_delete_missing_fork(tmp_path: Path) -> None:
    device = SimulatedDevice(tmp_path)
    device.make_live("stock")
    ctx = create_test_context(device.config)

    assert ForkSwapManager(ctx).delete("frogpilot") is False
    assert ctx.feedback.texts("info") == ["The fork frogpilot does not exist."]


def test_delete_active_fork_entry_keeps_live_copy(tmp_path: Path) -> None:
    """Deleting the active fork's archive entry warns and leaves /data/openpilot alone."""
    device = SimulatedDevice(tmp_path)
    device.make_live("stock")
    device.add_archived_fork("stock", params={"Key": "v"}, with_working_copy=False)
    ctx = create_test_context(device.config)

    assert ForkSwapManager(ctx).delete("stock") is True

    assert not device.archive.exists("stock")
    assert device.live_fork_marker() == "stock"
    assert device.pointer() == "stock\n"
    assert "stock is the active fork" in ctx.feedback.texts("warning")[0]


# update checks


def test_update_available_when_upstream_moved(tmp_path: Path) -> None:
    device = SimulatedDevice(tmp_path)
    device.make_live("stock")
    device.add_archived_fork("frogpilot", origin=FROG_URL, head="c1")
    git = FakeGit(remote_commits={FROG_URL: "c2"})
    ctx = create_test_context(device.config, git=git)

    assert ForkSwapManager(ctx).check_fork_update("frogpilot") is True
    assert git.fetch_calls == [device.archive.working_copy("frogpilot")]


def test_no_update_when_up_to_date(tmp_path: Path) -> None:
    device = SimulatedDevice(tmp_path)
    device.make_live("stock")
    device.add_archived_fork("frogpilot", origin=FROG_URL, head="c1")
    ctx = create_test_context(device.config, git=FakeGit(remote_commits={FROG_URL: "c1"}))

    assert ForkSwapManager(ctx).check_fork_update("frogpilot") is False


def test_no_upstream_or_failed_fetch_means_no_update(tmp_path: Path) -> None:
    device = SimulatedDevice(tmp_path)
    device.make_live("stock", origin=STOCK_URL)
    device.add_archived_fork("frogpilot", origin=FROG_URL)
    ctx = create_test_context(device.config, git=FakeGit(failing_fetch_urls={FROG_URL}))
    manager = ForkSwapManager(ctx)

    assert manager.check_fork_update("frogpilot") is False
    assert manager.check_fork_update("stock") is False
    assert manager.check_fork_update("missing") is False


def test_unresolvable_head_means_no_update(tmp_path: Path) -> None:
    device = SimulatedDevice(tmp_path)
    device.make_live("stock")
    device.add_archived_fork("frogpilot", origin=FROG_URL, head="c1")
    (device.archive.working_copy("frogpilot") / ".git" / "HEAD_COMMIT").unlink()
    ctx = create_test_context(device.config, git=FakeGit(remote_commits={FROG_URL: "c2"}))

    assert ForkSwapManager(ctx).check_fork_update("frogpilot") is False


def test_active_fork_is_checked_in_live_directory(tmp_path: Path) -> None:
    device = SimulatedDevice(tmp_path)
    device.make_live("stock", origin=STOCK_URL, head="c1")
    git = FakeGit(remote_commits={STOCK_URL: "c9"})
    ctx = create_test_context(device.config, git=git)

    assert ForkSwapManager(ctx).check_fork_update("stock") is True
    assert git.fetch_calls == [device.config.openpilot_dir]


def test_fork_statuses(tmp_path: Path) -> None:
    device = SimulatedDevice(tmp_path)
    device.make_live("stock")
    device.add_archived_fork("frogpilot", origin=FROG_URL, head="c1", params={"K": "v"})
    device.add_archived_fork("stock", with_working_copy=False, params={"K": "v"})
    ctx = create_test_context(device.config, git=FakeGit(remote_commits={FROG_URL: "c2"}))

    statuses = ForkSwapManager(ctx).fork_statuses()

    assert statuses == [
        ForkStatus(
            name="frogpilot", has_working_copy=True, has_config_snapshot=True, update_available=True
        ),
        ForkStatus(
            name="stock", has_working_copy=False, has_config_snapshot=True, update_available=False
        ),
    ]


def test_fork_statuses_without_update_check_skips_fetch(tmp_path: Path) -> None:
    device = SimulatedDevice(tmp_path)
    device.make_live("stock")
    device.add_archived_fork("frogpilot", origin=FROG_URL)
    git = FakeGit(remote_commits={FROG_URL: "c2"})
    ctx = create_test_context(device.config, git=git)

    statuses = ForkSwapManager(ctx).fork_statuses(check_updates=False)

    assert [s.update_available for s in statuses] == [False]
    assert git.fetch_calls == []


def test_update_fork_pulls(tmp_path: Path) -> None:
    device = SimulatedDevice(tmp_path)
    device.make_live("stock")
    device.add_archived_fork("frogpilot", origin=FROG_URL, head="c1")
    git = FakeGit(remote_commits={FROG_URL: "c2"})
    ctx = create_test_context(device.config, git=git)
    manager = ForkSwapManager(ctx)

    assert manager.check_fork_update("frogpilot") is True
    manager.update_fork("frogpilot")

    assert git.get_head_commit(device.archive.working_copy("frogpilot")) == "c2"
    assert manager.check_fork_update("frogpilot") is False
    assert "Fork frogpilot has been updated." in ctx.feedback.texts("success")


def test_update_unknown_fork(tmp_path: Path) -> None:
    device = SimulatedDevice(tmp_path)
    device.make_live("stock")
    ctx = create_test_context(device.config)

    with pytest.raises(UnknownForkError):
        ForkSwapManager(ctx).update_fork("frogpilot")


# cleanup


def _interrupted_after_archiving(tmp_path: Path) -> SimulatedDevice:
    """Live copy archived as stock, params snapshot taken, target not yet moved in."""
    device = SimulatedDevice(tmp_path)
    device.make_live("stock", params={"Key": "stock-value"})
    device.add_archived_fork("frogpilot")
    archived = device.archive.working_copy("stock")
    archived.parent.mkdir(parents=True)
    device.config.openpilot_dir.rename(archived)
    (device.config.params_path / "Key").write_text("half-written")
    snapshot = device.archive.config_snapshot("stock")
    snapshot.mkdir(parents=True)
    (snapshot / "Key").write_text("stock-value")
    return device


def test_cleanup_restores_previous_fork(tmp_path: Path) -> None:
    device = _interrupted_after_archiving(tmp_path)
    device.config.current_fork_file.write_text("frogpilot\n")
    ctx = create_test_context(device.config)

    ForkSwapManager(ctx).cleanup("stock")

    assert device.live_fork_marker() == "stock"
    assert not device.archive.has_working_copy("stock")
    assert device.pointer() == "stock\n"
    assert device.live_params() == {"Key": "stock-value"}
    assert ctx.feedback.texts("info")[-1] == "Cleanup completed."


def test_cleanup_uses_journal_for_previous_fork(tmp_path: Path) -> None:
    device = _interrupted_after_archiving(tmp_path)
    ctx = create_test_context(device.config)
    ctx.journal.begin("switch", previous_fork="stock", target_fork="frogpilot")

    ForkSwapManager(ctx).cleanup()

    assert device.live_fork_marker() == "stock"
    assert ctx.journal.load() is None


def test_cleanup_leaves_intact_device_alone(tmp_path: Path) -> None:
    device = SimulatedDevice(tmp_path)
    device.make_live("frogpilot", params={"Key": "frog"})
    device.add_archived_fork("stock", params={"Key": "stock"})
    ctx = create_test_context(device.config)

    results = ForkSwapManager(ctx).cleanup("stock")

    assert results == []
    assert device.live_fork_marker() == "frogpilot"
    assert device.live_params() == {"Key": "frog"}
    assert device.archived_marker("stock") == "stock"


def test_cleanup_removes_unfinished_clone(tmp_path: Path) -> None:
    device = SimulatedDevice(tmp_path)
    device.make_live("stock")
    partial = device.archive.working_copy("sunnypilot")
    (partial / ".git").mkdir(parents=True)
    (partial / "half-written").write_text("x")
    ctx = create_test_context(device.config)
    ctx.journal.begin("clone", previous_fork="stock", target_fork="sunnypilot")

    results = ForkSwapManager(ctx).cleanup()

    assert [r.description for r in results] == ["remove unfinished clone of sunnypilot"]
    assert not device.archive.exists("sunnypilot")
    assert device.live_fork_marker() == "stock"
    assert device.pointer() == "stock\n"


def test_cleanup_keeps_snapshot_of_recloned_fork(tmp_path: Path) -> None:
    """Re-cloning an existing fork keeps its params snapshot when the clone is abandoned."""
    device = SimulatedDevice(tmp_path)
    device.make_live("stock")
    device.add_archived_fork("sunnypilot", params={"Key": "sunny"})
    ctx = create_test_context(device.config)
    ctx.journal.begin("clone", previous_fork="stock", target_fork="sunnypilot")

    ForkSwapManager(ctx).cleanup()

    assert not device.archive.has_working_copy("sunnypilot")
    assert device.snapshot_params("sunnypilot") == {"Key": "sunny"}


# manager script


def test_ensure_manager_script_noop_for_source_fork(tmp_path: Path) -> None:
    device = SimulatedDevice(tmp_path)
    device.make_live(SCRIPT_SOURCE_FORK, with_script=False)
    ctx = create_test_context(device.config)

    ForkSwapManager(ctx).ensure_manager_script(SCRIPT_SOURCE_FORK)

    assert not device.config.manager_script.exists()


def test_ensure_manager_script_requires_source(tmp_path: Path) -> None:
    device = SimulatedDevice(tmp_path)
    device.make_live("stock", with_script=False)
    ctx = create_test_context(device.config)

    with pytest.raises(FileNotFoundError, match="Manager script source not found"):
        ForkSwapManager(ctx).ensure_manager_script("stock")
