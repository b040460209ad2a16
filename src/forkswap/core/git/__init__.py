"""Git interface and implementations."""

from forkswap.core.git.abc import Git
from forkswap.core.git.real import RealGit

__all__ = ["Git", "RealGit"]
