"""Time operations abstraction for testing.

Retry loops sleep through this ABC so tests can run without actually
sleeping.
"""

from abc import ABC, abstractmethod


class Time(ABC):
    """Abstract time operations for dependency injection."""

    @abstractmethod
    def sleep(self, seconds: float) -> None:
        """Sleep for specified number of seconds."""
        ...
