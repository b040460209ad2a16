"""Exception hierarchy for fork-swap operations.

Every error the manager raises on purpose derives from ForkSwapError so the
CLI layer can report it with a single handler. Failures of external commands
(git, chown, reboot) are raised as RuntimeError by the subprocess wrapper and
are not part of this hierarchy.
"""


class ForkSwapError(Exception):
    """Base class for fork-swap errors."""


class ValidationError(ForkSwapError):
    """User input (fork name, repository URL) failed validation.

    Raised before any state is mutated.
    """


class UnknownForkError(ForkSwapError):
    """The requested fork has no archive or no working copy to act on."""


class MissingActiveForkError(ForkSwapError):
    """The current fork pointer is empty when an operation requires it."""


class CloneFailedError(ForkSwapError):
    """Cloning a fork failed after exhausting the retry attempts."""


class LockHeldError(ForkSwapError):
    """Another fork-swap process holds the single-instance lock."""
