"""Session setup shared by the interactive menu and mutating subcommands.

A session starts file logging, checks privileges, prepares the device layout,
holds the single-instance lock, and turns interrupts and failures into a
cleanup pass before exiting.
"""

import logging
from collections.abc import Iterator
from contextlib import contextmanager

import click

from forkswap.cli.ensure import Ensure
from forkswap.core.context import ForkSwapContext
from forkswap.core.errors import CloneFailedError, ForkSwapError, LockHeldError
from forkswap.core.lock import single_instance_lock
from forkswap.core.logging_setup import configure_logging
from forkswap.core.manager import ForkSwapManager

logger = logging.getLogger(__name__)


def _prepare_layout(ctx: ForkSwapContext) -> None:
    if ctx.archive.ensure_exists():
        logger.info("Created directory: %s", ctx.archive.root)
    ctx.active_fork_store.ensure_exists()


@contextmanager
def fork_swap_session(ctx: ForkSwapContext) -> Iterator[ForkSwapManager]:
    """Yield a manager inside a privileged, locked, cleanup-guarded session.

    - Ctrl-C (or an aborted prompt) runs cleanup and exits with 130.
    - Running out of clone retry attempts runs cleanup and exits with 1.
    - Other ForkSwapErrors are reported and exit with 1.
    - Any unexpected exception runs cleanup and propagates.
    """
    configure_logging(ctx.config.log_file, ctx.config.max_log_size)
    Ensure.running_as_root(ctx)
    _prepare_layout(ctx)

    manager = ForkSwapManager(ctx)
    try:
        with single_instance_lock(ctx.config.lock_file):
            try:
                yield manager
            except (KeyboardInterrupt, click.Abort):
                ctx.feedback.error("Interrupted.")
                manager.cleanup()
                raise SystemExit(130) from None
            except CloneFailedError as e:
                ctx.feedback.error(str(e))
                manager.cleanup()
                raise SystemExit(1) from None
            except ForkSwapError as e:
                Ensure.invariant(False, str(e))
            except Exception:
                logger.exception("Unexpected error; running cleanup")
                manager.cleanup()
                raise
    except LockHeldError as e:
        Ensure.invariant(False, str(e))
