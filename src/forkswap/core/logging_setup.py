"""File logging with size-based rotation.

The log is a plain text file on the device. Once it reaches max_bytes, the
next record first moves it to a `.old` sibling (replacing any previous one)
and starts a fresh file with a rotation marker line.
"""

import logging
import os
from datetime import datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path

from forkswap.core.config import MAX_LOG_SIZE

LOGGER_NAME = "forkswap"
LOG_FORMAT = "%(asctime)s %(levelname)s %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _timestamp() -> str:
    return datetime.now().strftime("%a %b %d %H:%M:%S %Y")


class ForkSwapLogHandler(RotatingFileHandler):
    """RotatingFileHandler keeping a single `.old` backup.

    Unlike the stock handler, rollover triggers when the file size has already
    reached max_bytes (not when the next record would cross it), and the new
    file starts with a `Log rotated on <date>` line.
    """

    def __init__(self, filename: Path, max_bytes: int = MAX_LOG_SIZE) -> None:
        super().__init__(
            filename, mode="a", maxBytes=max_bytes, backupCount=1, encoding="utf-8", delay=True
        )

    @property
    def backup_path(self) -> Path:
        return Path(f"{self.baseFilename}.old")

    def shouldRollover(self, record: logging.LogRecord) -> bool:  # noqa: N802
        if self.maxBytes <= 0 or not os.path.exists(self.baseFilename):
            return False
        return os.path.getsize(self.baseFilename) >= self.maxBytes

    def doRollover(self) -> None:  # noqa: N802
        if self.stream:
            self.stream.close()
            self.stream = None  # type: ignore[assignment]

        os.replace(self.baseFilename, self.backup_path)

        self.stream = self._open()
        self.stream.write(f"Log rotated on {_timestamp()}\n")
        self.stream.flush()


def configure_logging(log_file: Path, max_bytes: int = MAX_LOG_SIZE) -> ForkSwapLogHandler:
    """Attach a rotating file handler to the package logger.

    Any handler installed by a previous call is closed and replaced, so the
    function is safe to call once per session.
    """
    logger = logging.getLogger(LOGGER_NAME)
    for existing in list(logger.handlers):
        if isinstance(existing, ForkSwapLogHandler):
            logger.removeHandler(existing)
            existing.close()

    log_file.parent.mkdir(parents=True, exist_ok=True)
    created = not log_file.exists()
    handler = ForkSwapLogHandler(log_file, max_bytes=max_bytes)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    logger.addHandler(handler)
    logger.setLevel(logging.INFO)

    if created:
        logger.info("Log file created at: %s", log_file)
    logger.info("----- Log Entry on %s -----", _timestamp())
    return handler
