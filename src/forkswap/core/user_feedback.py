"""User-facing messages that are also written to the device log."""

import logging
from abc import ABC, abstractmethod

import click

from forkswap.cli.output import user_output

logger = logging.getLogger(__name__)


class UserFeedback(ABC):
    """Console feedback for the person at the device.

    Every message a user sees is also a log entry, so the log alone tells
    which steps of a switch succeeded or failed.

    Usage:
        ctx.feedback.info("Starting move operation...")
        ctx.feedback.success("Switched to frogpilot.")
        ctx.feedback.error("Error while moving openpilot directory.")
    """

    @abstractmethod
    def info(self, message: str) -> None:
        """Show informational message."""

    @abstractmethod
    def success(self, message: str) -> None:
        """Show success message."""

    @abstractmethod
    def warning(self, message: str) -> None:
        """Show warning message."""

    @abstractmethod
    def error(self, message: str) -> None:
        """Show error message."""


class InteractiveFeedback(UserFeedback):
    """Styled console output mirrored into the log."""

    def info(self, message: str) -> None:
        logger.info(message)
        user_output(message)

    def success(self, message: str) -> None:
        logger.info(message)
        user_output(click.style(message, fg="green"))

    def warning(self, message: str) -> None:
        logger.warning(message)
        user_output(click.style(message, fg="yellow"))

    def error(self, message: str) -> None:
        logger.error(message)
        user_output(click.style(message, fg="red"))
