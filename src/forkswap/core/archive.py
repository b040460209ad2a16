"""Layout of the forks archive.

    <forks_root>/
      <name>/
        openpilot/   archived working copy (absent for the active fork)
        params/      config snapshot (optional)
"""

from dataclasses import dataclass
from pathlib import Path

WORKING_COPY_DIR = "openpilot"
CONFIG_SNAPSHOT_DIR = "params"


@dataclass(frozen=True)
class ForkStatus:
    """One row of the fork listing."""

    name: str
    has_working_copy: bool
    has_config_snapshot: bool
    update_available: bool


class ForkArchive:
    """Path arithmetic and queries over the forks root."""

    def __init__(self, forks_root: Path) -> None:
        self._root = forks_root

    @property
    def root(self) -> Path:
        return self._root

    def ensure_exists(self) -> bool:
        """Create the forks root if needed. Returns True if it was created."""
        if self._root.is_dir():
            return False
        self._root.mkdir(parents=True, exist_ok=True)
        return True

    def fork_dir(self, name: str) -> Path:
        return self._root / name

    def working_copy(self, name: str) -> Path:
        return self._root / name / WORKING_COPY_DIR

    def config_snapshot(self, name: str) -> Path:
        return self._root / name / CONFIG_SNAPSHOT_DIR

    def exists(self, name: str) -> bool:
        return self.fork_dir(name).is_dir()

    def has_working_copy(self, name: str) -> bool:
        return self.working_copy(name).is_dir()

    def has_config_snapshot(self, name: str) -> bool:
        return self.config_snapshot(name).is_dir()

    def list_forks(self) -> list[str]:
        """Names of all archive directories, sorted, excluding hidden dirs."""
        if not self._root.is_dir():
            return []
        return sorted(
            entry.name
            for entry in self._root.iterdir()
            if entry.is_dir() and not entry.name.startswith(".")
        )

    def prune(self, name: str) -> bool:
        """Remove a fork's directory if nothing is left in it. Returns True if removed."""
        fork_dir = self.fork_dir(name)
        if not fork_dir.is_dir() or any(fork_dir.iterdir()):
            return False
        fork_dir.rmdir()
        return True
