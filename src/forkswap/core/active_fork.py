"""Persistent pointer to the active fork.

The active fork name lives in a one-line file (current_fork.txt). Every write
is verified by reading the file back, since a successful write() call alone
does not prove the pointer changed on the device's flash storage.
"""

import logging
from pathlib import Path

logger = logging.getLogger(__name__)


class ActiveForkStore:
    """Read/write access to the current fork pointer file."""

    def __init__(self, path: Path) -> None:
        self._path = path

    @property
    def path(self) -> Path:
        return self._path

    def ensure_exists(self) -> None:
        """Create an empty pointer file if none exists."""
        if self._path.exists():
            return
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.touch()
        logger.info("No active fork. Created file: %s", self._path)

    def get(self) -> str | None:
        """Return the active fork name, or None if the pointer is missing or empty."""
        if not self._path.is_file():
            return None
        lines = self._path.read_text(encoding="utf-8").splitlines()
        if not lines:
            return None
        name = lines[0].strip()
        return name or None

    def set(self, name: str) -> bool:
        """Write the pointer and verify it by reading it back.

        Returns:
            True if the file now names `name`, False on mismatch (logged as error)
        """
        logger.info("Attempting to update the current fork to: %s", name)

        write_error = ""
        try:
            self._path.write_text(f"{name}\n", encoding="utf-8")
        except OSError as e:
            write_error = str(e)

        stored = self.get()
        logger.info("Retrieved current fork value from file: %s", stored)

        if stored == name:
            logger.info("Current fork updated successfully to: %s", name)
            return True

        logger.error(
            "Mismatch detected. Expected fork: %s, but found: %s. Error during write (if any): %s",
            name,
            stored,
            write_error,
        )
        return False
