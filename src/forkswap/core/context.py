"""Application context with dependency injection."""

from dataclasses import dataclass
from pathlib import Path

from forkswap.core.active_fork import ActiveForkStore
from forkswap.core.archive import ForkArchive
from forkswap.core.config import ForkSwapConfig, load_config
from forkswap.core.git.abc import Git
from forkswap.core.git.real import RealGit
from forkswap.core.journal import SwapJournal
from forkswap.core.system.abc import System
from forkswap.core.system.real import RealSystem
from forkswap.core.time.abc import Time
from forkswap.core.time.real import RealTime
from forkswap.core.user_feedback import InteractiveFeedback, UserFeedback


@dataclass(frozen=True)
class ForkSwapContext:
    """Immutable context holding all dependencies for fork-swap operations.

    Created at CLI entry point and threaded through the application.
    Frozen to prevent accidental modification at runtime. Tests build it
    with fakes (see tests/fakes/context.py) and pass it as click's obj.
    """

    git: Git
    system: System
    time: Time
    feedback: UserFeedback
    config: ForkSwapConfig

    @property
    def active_fork_store(self) -> ActiveForkStore:
        return ActiveForkStore(self.config.current_fork_file)

    @property
    def archive(self) -> ForkArchive:
        return ForkArchive(self.config.forks_dir)

    @property
    def journal(self) -> SwapJournal:
        return SwapJournal(self.config.journal_file)


def create_context(*, config_path: Path | None = None) -> ForkSwapContext:
    """Create production context with real implementations.

    Args:
        config_path: Optional config file; defaults to $FORK_SWAP_CONFIG or
            /data/fork_swap.toml

    Example:
        >>> ctx = create_context()
        >>> ctx.archive.list_forks()
        ['james5294', 'stock']
    """
    config = load_config(config_path)
    return ForkSwapContext(
        git=RealGit(),
        system=RealSystem(use_sudo=config.use_sudo),
        time=RealTime(),
        feedback=InteractiveFeedback(),
        config=config,
    )
