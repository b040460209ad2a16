"""Real device operations using os, shutil and subprocess."""

import os
import shutil
import stat
import sys
from pathlib import Path
from typing import NoReturn

from forkswap.core.subprocess import run_subprocess_with_context
from forkswap.core.system.abc import System


def format_bytes(num_bytes: int) -> str:
    """Format a byte count the way `df -h` does (K/M/G/T suffixes).

    Example:
        >>> format_bytes(1536)
        '1.5K'
    """
    value = float(num_bytes)
    for unit in ("B", "K", "M", "G"):
        if value < 1024:
            return f"{value:.0f}{unit}" if unit == "B" else f"{value:.1f}{unit}"
        value /= 1024
    return f"{value:.1f}T"


class RealSystem(System):
    """Production implementation.

    Privileged commands (chown, reboot) are prefixed with sudo when
    use_sudo is set, matching how the device image grants root.
    """

    def __init__(self, *, use_sudo: bool) -> None:
        self._use_sudo = use_sudo

    def _privileged(self, cmd: list[str]) -> list[str]:
        return ["sudo", *cmd] if self._use_sudo else cmd

    def is_root(self) -> bool:
        return os.geteuid() == 0

    def change_owner(self, path: Path, owner: str) -> None:
        run_subprocess_with_context(
            self._privileged(["chown", "-R", owner, str(path)]),
            operation_context=f"change owner of {path} to {owner}",
        )

    def make_executable(self, path: Path) -> None:
        mode = path.stat().st_mode
        path.chmod(mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)

    def available_disk_space(self, path: Path) -> str:
        return format_bytes(shutil.disk_usage(path).free)

    def reboot(self) -> None:
        run_subprocess_with_context(self._privileged(["reboot"]), operation_context="reboot")

    def install_package(self, source: Path) -> None:
        run_subprocess_with_context(
            [sys.executable, "-m", "pip", "install", "--upgrade", str(source)],
            operation_context=f"install fork-swap from {source}",
        )

    def exec_replace(self, argv: list[str]) -> NoReturn:
        os.execv(argv[0], argv)
