"""Tests for the non-interactive subcommands."""

from pathlib import Path

import pytest
from click.testing import CliRunner

from forkswap.cli.cli import cli
from forkswap.core.config import CONFIG_ENV_VAR
from forkswap.core.context import ForkSwapContext
from forkswap.core.manager import ForkSwapManager
from forkswap.core.user_feedback import InteractiveFeedback
from tests.fakes.context import create_test_context
from tests.fakes.git import FakeGit
from tests.fakes.system import FakeSystem
from tests.test_utils.env_helpers import SCRIPT_SOURCE_FORK, SimulatedDevice

FROG_URL = "https://github.com/frogpilot/openpilot.git"
STOCK_URL = "https://github.com/stock/openpilot.git"
SUNNY_URL = "https://github.com/sunnypilot/openpilot.git"
SCRIPT_URL = "https://github.com/james5294/openpilot.git"


def _device(tmp_path: Path) -> SimulatedDevice:
    device = SimulatedDevice(tmp_path)
    device.make_live("stock", origin=STOCK_URL)
    device.add_archived_fork("frogpilot", origin=FROG_URL)
    device.add_archived_fork(SCRIPT_SOURCE_FORK)
    return device


def _ctx(
    device: SimulatedDevice, *, git: FakeGit | None = None, system: FakeSystem | None = None
) -> ForkSwapContext:
    return create_test_context(
        device.config, git=git, system=system, feedback=InteractiveFeedback()
    )


# switch


def test_switch_with_yes(tmp_path: Path) -> None:
    device = _device(tmp_path)
    system = FakeSystem()
    runner = CliRunner()

    result = runner.invoke(cli, ["switch", "frogpilot", "-y"], obj=_ctx(device, system=system))

    assert result.exit_code == 0, result.output
    assert device.pointer() == "frogpilot\n"
    assert system.reboot_count == 1


def test_switch_asks_for_confirmation(tmp_path: Path) -> None:
    device = _device(tmp_path)
    runner = CliRunner()

    result = runner.invoke(cli, ["switch", "frogpilot"], obj=_ctx(device), input="n\n")

    assert result.exit_code == 0, result.output
    assert "Switching to frogpilot. Are you sure?" in result.output
    assert "Switch canceled." in result.output
    assert device.pointer() == "stock\n"


def test_switch_to_unknown_fork_fails(tmp_path: Path) -> None:
    device = _device(tmp_path)
    runner = CliRunner()

    result = runner.invoke(cli, ["switch", "nothere", "-y"], obj=_ctx(device))

    assert result.exit_code == 1
    assert "Error: " in result.output
    assert "The fork nothere has no archived working copy." in result.output
    assert device.live_fork_marker() == "stock"


# clone


def test_clone_with_branch(tmp_path: Path) -> None:
    device = _device(tmp_path)
    git = FakeGit()
    runner = CliRunner()

    result = runner.invoke(
        cli, ["clone", "sunnypilot", SUNNY_URL, "--branch", "dev", "-y"], obj=_ctx(device, git=git)
    )

    assert result.exit_code == 0, result.output
    assert git.clone_calls == [(SUNNY_URL, device.archive.working_copy("sunnypilot"), "dev", None)]
    assert device.pointer() == "sunnypilot\n"


def test_clone_over_existing_fork_asks_first(tmp_path: Path) -> None:
    device = _device(tmp_path)
    git = FakeGit()
    runner = CliRunner()

    result = runner.invoke(
        cli, ["clone", "frogpilot", SUNNY_URL], obj=_ctx(device, git=git), input="n\n"
    )

    assert result.exit_code == 0, result.output
    assert "Clone canceled." in result.output
    assert git.clone_calls == []
    assert device.archived_marker("frogpilot") == "frogpilot"


def test_clone_rejects_bad_url(tmp_path: Path) -> None:
    device = _device(tmp_path)
    runner = CliRunner()

    result = runner.invoke(
        cli, ["clone", "sunnypilot", "git@github.com:x/y.git", "-y"], obj=_ctx(device)
    )

    assert result.exit_code == 1
    assert "Invalid URL format" in result.output


class _InterruptedCloneGit(FakeGit):
    """Leaves a half-written checkout behind, as if Ctrl-C hit during git clone."""

    def clone(
        self,
        url: str,
        destination: Path,
        *,
        branch: str | None,
        depth: int | None = None,
        recurse_submodules: bool = True,
    ) -> None:
        (destination / ".git").mkdir(parents=True)
        raise KeyboardInterrupt


def test_interrupted_clone_is_removed(tmp_path: Path) -> None:
    device = _device(tmp_path)
    ctx = _ctx(device, git=_InterruptedCloneGit())
    runner = CliRunner()

    result = runner.invoke(cli, ["clone", "sunnypilot", SUNNY_URL, "-y"], obj=ctx)

    assert result.exit_code == 130
    assert "Unfinished clone of sunnypilot removed." in result.output
    assert not device.archive.exists("sunnypilot")
    assert "sunnypilot" not in [
        s.name for s in ForkSwapManager(ctx).fork_statuses(check_updates=False)
    ]
    assert device.pointer() == "stock\n"
    assert device.live_fork_marker() == "stock"
    assert not device.config.journal_file.exists()


# delete


def test_delete(tmp_path: Path) -> None:
    device = _device(tmp_path)
    runner = CliRunner()

    result = runner.invoke(cli, ["delete", "frogpilot"], obj=_ctx(device), input="y\n")

    assert result.exit_code == 0, result.output
    assert "This cannot be undone." in result.output
    assert not device.archive.exists("frogpilot")


def test_delete_missing_fork_exits_nonzero(tmp_path: Path) -> None:
    device = _device(tmp_path)
    runner = CliRunner()

    result = runner.invoke(cli, ["delete", "nothere", "-y"], obj=_ctx(device))

    assert result.exit_code == 1
    assert "The fork nothere does not exist." in result.output


@pytest.mark.parametrize("fork_name", ["nothere", "../etc"])
def test_delete_checks_fork_before_asking(tmp_path: Path, fork_name: str) -> None:
    device = _device(tmp_path)
    runner = CliRunner()

    result = runner.invoke(cli, ["delete", fork_name], obj=_ctx(device))

    assert result.exit_code == 1
    assert "Error: " in result.output
    assert "Are you sure" not in result.output


# list


def test_list_marks_active_fork(tmp_path: Path) -> None:
    device = _device(tmp_path)
    runner = CliRunner()

    result = runner.invoke(cli, ["list"], obj=_ctx(device))

    assert result.exit_code == 0, result.output
    assert result.output.splitlines() == ["  frogpilot", f"  {SCRIPT_SOURCE_FORK}", "* stock"]


def test_list_with_update_check(tmp_path: Path) -> None:
    device = _device(tmp_path)
    git = FakeGit(remote_commits={FROG_URL: "c2", STOCK_URL: "c9"})
    runner = CliRunner()

    result = runner.invoke(cli, ["list", "--check-updates"], obj=_ctx(device, git=git))

    assert result.exit_code == 0, result.output
    assert result.output.splitlines() == [
        "  frogpilot (update available)",
        f"  {SCRIPT_SOURCE_FORK}",
        "* stock (update available)",
    ]


def test_list_does_not_need_root(tmp_path: Path) -> None:
    device = _device(tmp_path)
    runner = CliRunner()

    result = runner.invoke(cli, ["list"], obj=_ctx(device, system=FakeSystem(is_root=False)))

    assert result.exit_code == 0, result.output


# update


def test_update_pulls_when_behind(tmp_path: Path) -> None:
    device = _device(tmp_path)
    git = FakeGit(remote_commits={FROG_URL: "c2"})
    runner = CliRunner()

    result = runner.invoke(cli, ["update", "frogpilot", "-y"], obj=_ctx(device, git=git))

    assert result.exit_code == 0, result.output
    assert git.pull_calls == [device.archive.working_copy("frogpilot")]
    assert "Fork frogpilot has been updated." in result.output


def test_update_when_current(tmp_path: Path) -> None:
    device = _device(tmp_path)
    git = FakeGit(remote_commits={FROG_URL: "c1"})
    runner = CliRunner()

    result = runner.invoke(cli, ["update", "frogpilot", "-y"], obj=_ctx(device, git=git))

    assert result.exit_code == 0, result.output
    assert "No updates available for frogpilot." in result.output
    assert git.pull_calls == []


def test_update_unknown_fork(tmp_path: Path) -> None:
    device = _device(tmp_path)
    runner = CliRunner()

    result = runner.invoke(cli, ["update", "nothere", "-y"], obj=_ctx(device))

    assert result.exit_code == 1
    assert "The fork nothere does not exist." in result.output


# self-update


def test_self_update_check_only(tmp_path: Path) -> None:
    device = _device(tmp_path)
    git = FakeGit(remote_files={SCRIPT_URL: {"scripts/fork_swap.py": "# v2\n"}})
    system = FakeSystem()
    runner = CliRunner()

    result = runner.invoke(
        cli, ["self-update", "--check"], obj=_ctx(device, git=git, system=system)
    )

    assert result.exit_code == 0, result.output
    assert "Update available for fork_swap.py." in result.output
    assert system.exec_calls == []


def test_self_update_installs(tmp_path: Path) -> None:
    device = _device(tmp_path)
    git = FakeGit(remote_files={SCRIPT_URL: {"scripts/fork_swap.py": "# v2\n"}})
    system = FakeSystem()
    runner = CliRunner()

    result = runner.invoke(cli, ["self-update"], obj=_ctx(device, git=git, system=system))

    assert result.exit_code == 0, result.output
    assert device.config.manager_script.read_text() == "# v2\n"
    assert len(system.exec_calls) == 1


# config


def test_config_show(tmp_path: Path) -> None:
    device = _device(tmp_path)
    runner = CliRunner()

    result = runner.invoke(cli, ["config", "show"], obj=_ctx(device))

    assert result.exit_code == 0, result.output
    assert f"forks_dir={device.config.forks_dir}" in result.output.splitlines()
    assert "use_sudo=true" in result.output.splitlines()


def test_config_init_refuses_to_overwrite(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    device = _device(tmp_path)
    config_path = tmp_path / "fork_swap.toml"
    monkeypatch.setenv(CONFIG_ENV_VAR, str(config_path))
    runner = CliRunner()

    first = runner.invoke(cli, ["config", "init"], obj=_ctx(device))
    second = runner.invoke(cli, ["config", "init"], obj=_ctx(device))
    forced = runner.invoke(cli, ["config", "init", "--force"], obj=_ctx(device))

    assert first.exit_code == 0, first.output
    assert config_path.is_file()
    assert second.exit_code == 1
    assert "already exists" in second.output
    assert forced.exit_code == 0, forced.output


def test_invalid_config_file_is_reported(tmp_path: Path) -> None:
    config_path = tmp_path / "fork_swap.toml"
    config_path.write_text("bogus = true\n")
    runner = CliRunner()

    result = runner.invoke(cli, ["--config", str(config_path), "config", "show"])

    assert result.exit_code == 1
    assert "Unknown key 'bogus'" in result.output


def test_config_init_writes_to_config_option(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    device = _device(tmp_path)
    env_path = tmp_path / "env.toml"
    chosen = tmp_path / "chosen.toml"
    monkeypatch.setenv(CONFIG_ENV_VAR, str(env_path))
    runner = CliRunner()

    result = runner.invoke(cli, ["--config", str(chosen), "config", "init"], obj=_ctx(device))

    assert result.exit_code == 0, result.output
    assert f"Wrote configuration to {chosen}" in result.output
    assert chosen.is_file()
    assert not env_path.exists()
