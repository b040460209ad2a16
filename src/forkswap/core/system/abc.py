"""Device-level operations interface.

This module defines the abstract interface for the OS operations the manager
depends on (privileges, ownership, reboot, package installation and process
replacement), following the ops pattern with ABC-based dependency injection
for testability.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import NoReturn


class System(ABC):
    """Abstract interface for OS operations on the device.

    Real implementations shell out to chown/reboot and use os/shutil.
    Fake implementations record calls without touching the device.
    """

    @abstractmethod
    def is_root(self) -> bool:
        """Whether the current process runs with root privileges."""
        ...

    @abstractmethod
    def change_owner(self, path: Path, owner: str) -> None:
        """Recursively change ownership of a path.

        Args:
            path: File or directory to chown
            owner: Owner spec in "user:group" form

        Raises:
            RuntimeError: If chown fails
        """
        ...

    @abstractmethod
    def make_executable(self, path: Path) -> None:
        """Add execute permission to a file.

        Raises:
            FileNotFoundError: If path does not exist
        """
        ...

    @abstractmethod
    def available_disk_space(self, path: Path) -> str:
        """Human-readable free space of the filesystem holding path (e.g. "12.3G")."""
        ...

    @abstractmethod
    def reboot(self) -> None:
        """Reboot the device.

        Raises:
            RuntimeError: If the reboot command fails
        """
        ...

    @abstractmethod
    def install_package(self, source: Path) -> None:
        """Install or upgrade the Python project at source into the running interpreter.

        Raises:
            RuntimeError: If the installer fails
        """
        ...

    @abstractmethod
    def exec_replace(self, argv: list[str]) -> NoReturn:
        """Replace the current process image with argv (no child process)."""
        ...
