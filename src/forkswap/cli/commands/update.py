import click

from forkswap.cli.ensure import Ensure
from forkswap.cli.session import fork_swap_session
from forkswap.core.context import ForkSwapContext
from forkswap.core.validation import validate_fork_name


@click.command("update")
@click.argument("fork_name", metavar="FORK")
@click.option("-y", "--yes", is_flag=True, help="Do not ask for confirmation.")
@click.pass_obj
def update_cmd(ctx: ForkSwapContext, fork_name: str, yes: bool) -> None:
    """Pull upstream commits into FORK (live or archived)."""
    with fork_swap_session(ctx) as manager:
        validate_fork_name(fork_name)
        Ensure.invariant(
            manager.resolve_fork_dir(fork_name).is_dir(), f"The fork {fork_name} does not exist."
        )
        if not manager.check_fork_update(fork_name):
            ctx.feedback.info(f"No updates available for {fork_name}.")
            return
        if not yes and not click.confirm(
            f"Do you want to update the fork {fork_name}?", default=False
        ):
            ctx.feedback.info("Update canceled.")
            return
        try:
            manager.update_fork(fork_name)
        except RuntimeError as e:
            Ensure.invariant(False, f"Error while updating {fork_name}. {e}")
