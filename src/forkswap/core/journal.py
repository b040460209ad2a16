"""Journal of an in-progress switch or clone.

The journal is a small JSON file written when a switch/clone starts, updated
after every step and removed when the sequence finishes. Finding it at
startup means the previous run died mid-operation, and tells cleanup which
fork was active before the operation began.

Example journal:
    {
      "operation": "switch",
      "previous_fork": "stock",
      "target_fork": "frogpilot",
      "started_at": "2024-05-01T12:00:00",
      "steps": [{"description": "back up params for stock", "success": true, "error": null}]
    }
"""

import json
import logging
import os
from dataclasses import asdict, dataclass, field
from datetime import datetime
from pathlib import Path

from forkswap.core.steps import StepResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class JournalEntry:
    operation: str
    previous_fork: str
    target_fork: str
    started_at: str
    steps: list[StepResult] = field(default_factory=list)


class SwapJournal:
    """JSON-file journal for a single in-progress operation."""

    def __init__(self, path: Path) -> None:
        self._path = path

    @property
    def path(self) -> Path:
        return self._path

    def begin(self, operation: str, *, previous_fork: str, target_fork: str) -> None:
        entry = JournalEntry(
            operation=operation,
            previous_fork=previous_fork,
            target_fork=target_fork,
            started_at=datetime.now().isoformat(timespec="seconds"),
        )
        self._write(entry)

    def record(self, result: StepResult) -> None:
        """Append a step result to the current entry (no-op if none is open)."""
        entry = self.load()
        if entry is None:
            return
        self._write(
            JournalEntry(
                operation=entry.operation,
                previous_fork=entry.previous_fork,
                target_fork=entry.target_fork,
                started_at=entry.started_at,
                steps=[*entry.steps, result],
            )
        )

    def load(self) -> JournalEntry | None:
        """Read the open entry, or None if there is none or it is unreadable."""
        if not self._path.is_file():
            return None

        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
            return JournalEntry(
                operation=str(data["operation"]),
                previous_fork=str(data["previous_fork"]),
                target_fork=str(data["target_fork"]),
                started_at=str(data["started_at"]),
                steps=[StepResult(**step) for step in data.get("steps", [])],
            )
        except (json.JSONDecodeError, KeyError, TypeError) as e:
            logger.warning("Ignoring unreadable journal %s: %s", self._path, e)
            return None

    def clear(self) -> None:
        self._path.unlink(missing_ok=True)

    def _write(self, entry: JournalEntry) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        staged = self._path.with_name(self._path.name + ".tmp")
        staged.write_text(json.dumps(asdict(entry), indent=2), encoding="utf-8")
        os.replace(staged, self._path)
