"""Directory moves and copies used by the swap steps."""

import shutil
from pathlib import Path


def move_directory(source: Path, destination: Path) -> None:
    """Move source to destination, refusing to merge into an existing path.

    Raises:
        FileNotFoundError: If source does not exist
        FileExistsError: If destination already exists
    """
    if not source.exists():
        raise FileNotFoundError(f"Nothing to move: {source} does not exist")
    if destination.exists():
        raise FileExistsError(f"Refusing to move {source}: {destination} already exists")
    destination.parent.mkdir(parents=True, exist_ok=True)
    shutil.move(str(source), str(destination))


def merge_directory(source: Path, destination: Path) -> None:
    """Recursively copy source into destination, overwriting files that exist in both.

    Files only present in destination are kept.
    """
    shutil.copytree(source, destination, dirs_exist_ok=True)


def replace_directory(source: Path, destination: Path) -> None:
    """Make destination an exact copy of source."""
    if destination.exists():
        shutil.rmtree(destination)
    shutil.copytree(source, destination)


def remove_directory(path: Path) -> None:
    shutil.rmtree(path)
