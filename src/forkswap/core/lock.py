"""Single-instance lock.

Two managers moving /data/openpilot at the same time would corrupt the fork
layout, so every session holds a PID lock file for its whole lifetime.
"""

import logging
import os
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from forkswap.core.errors import LockHeldError

logger = logging.getLogger(__name__)


def _read_pid(path: Path) -> int | None:
    try:
        return int(path.read_text(encoding="utf-8").strip())
    except (FileNotFoundError, ValueError):
        return None


def _pid_alive(pid: int) -> bool:
    try:
        os.kill(pid, 0)
    except ProcessLookupError:
        return False
    except PermissionError:
        # Exists, owned by another user
        return True
    return True


def acquire_lock(path: Path) -> None:
    """Take the lock, replacing a stale one left by a dead process.

    A lock already holding our own PID is kept: after a self-update the
    process image is replaced in place and keeps its PID.

    Raises:
        LockHeldError: If a live process holds the lock
    """
    pid = os.getpid()

    if path.exists():
        stored_pid = _read_pid(path)
        if stored_pid == pid:
            return
        if stored_pid is not None and _pid_alive(stored_pid):
            raise LockHeldError(
                f"Another instance of fork-swap is running (pid {stored_pid}, lock {path})."
            )
        logger.info("Removing stale lock file %s (pid %s)", path, stored_pid)
        path.unlink(missing_ok=True)

    path.parent.mkdir(parents=True, exist_ok=True)
    try:
        fd = os.open(path, os.O_CREAT | os.O_EXCL | os.O_WRONLY, 0o644)
    except FileExistsError:
        raise LockHeldError(f"Another instance of fork-swap is running (lock {path}).") from None

    with os.fdopen(fd, "w", encoding="utf-8") as f:
        f.write(f"{pid}\n")


def release_lock(path: Path) -> None:
    """Remove the lock if this process owns it."""
    if _read_pid(path) == os.getpid():
        path.unlink(missing_ok=True)


@contextmanager
def single_instance_lock(path: Path) -> Iterator[None]:
    """Hold the lock for the duration of the block, releasing it on every exit path."""
    acquire_lock(path)
    try:
        yield
    finally:
        release_lock(path)
