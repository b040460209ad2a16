"""CLI error handling utilities with styled output.

This module provides the Ensure class for asserting preconditions in CLI
commands with consistent, user-friendly error messages. All errors use a red
"Error:" prefix for visual consistency and exit with status 1.
"""

import logging
from typing import TypeVar

import click

from forkswap.cli.output import user_output
from forkswap.core.context import ForkSwapContext

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Ensure:
    """Helper class for asserting invariants with consistent error handling."""

    @staticmethod
    def invariant(condition: bool, error_message: str) -> None:
        """Ensure condition is true, otherwise output styled error and exit.

        Raises:
            SystemExit: If condition is false (with exit code 1)
        """
        if not condition:
            user_output(click.style("Error: ", fg="red") + error_message)
            raise SystemExit(1)

    @staticmethod
    def not_none(value: T | None, error_message: str) -> T:
        """Ensure value is not None, otherwise output styled error and exit.

        Provides type narrowing from `T | None` to `T`.

        Raises:
            SystemExit: If value is None (with exit code 1)
        """
        if value is None:
            user_output(click.style("Error: ", fg="red") + error_message)
            raise SystemExit(1)
        return value

    @staticmethod
    def running_as_root(ctx: ForkSwapContext) -> None:
        """Ensure the process has root privileges (moving /data/openpilot requires it).

        A refused run is also written to the log file.
        """
        if not ctx.system.is_root():
            logger.error("This script must be run as root")
            Ensure.invariant(False, "This script must be run as root")
