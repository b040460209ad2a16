import logging
from collections.abc import Iterator

import pytest

from forkswap.core.logging_setup import LOGGER_NAME, ForkSwapLogHandler


@pytest.fixture(autouse=True)
def _detach_log_handlers() -> Iterator[None]:
    """Sessions attach a file handler to the package logger; drop it after each test."""
    yield
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        if isinstance(handler, ForkSwapLogHandler):
            logger.removeHandler(handler)
            handler.close()
