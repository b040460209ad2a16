"""Git operations interface used by the fork manager.

Architecture:
- Git: Abstract base class defining the interface
- RealGit: Production implementation using subprocess
- FakeGit (tests/fakes/git.py): In-memory implementation for tests
"""

from abc import ABC, abstractmethod
from pathlib import Path


class Git(ABC):
    """Abstract interface for git operations.

    All implementations (real and fake) must implement this interface.
    This interface contains ONLY runtime operations - no test setup methods.
    """

    @abstractmethod
    def clone(
        self,
        url: str,
        destination: Path,
        *,
        branch: str | None,
        depth: int | None = None,
        recurse_submodules: bool = True,
    ) -> None:
        """Clone a single branch of a repository.

        Args:
            url: Repository URL to clone
            destination: Directory to clone into (must not exist)
            branch: Branch to check out, or None for the remote default
            depth: Create a shallow clone with this many commits (None = full)
            recurse_submodules: Also clone submodules

        Raises:
            RuntimeError: If git clone fails
        """
        ...

    @abstractmethod
    def fetch(self, repo_dir: Path) -> None:
        """Fetch remote refs without merging.

        Raises:
            RuntimeError: If git fetch fails
        """
        ...

    @abstractmethod
    def get_head_commit(self, repo_dir: Path) -> str | None:
        """Get the commit SHA of HEAD, or None if it cannot be resolved."""
        ...

    @abstractmethod
    def get_upstream_commit(self, repo_dir: Path) -> str | None:
        """Get the commit SHA of the upstream tracking branch.

        Returns:
            Commit SHA of @{u}, or None if the branch has no upstream
        """
        ...

    @abstractmethod
    def pull(self, repo_dir: Path) -> None:
        """Fast-forward the checked-out branch to its upstream.

        Raises:
            RuntimeError: If git pull fails
        """
        ...
