import click

from forkswap.cli.ensure import Ensure
from forkswap.cli.session import fork_swap_session
from forkswap.core.context import ForkSwapContext
from forkswap.core.validation import validate_fork_name


@click.command("delete")
@click.argument("fork_name", metavar="FORK")
@click.option("-y", "--yes", is_flag=True, help="Do not ask for confirmation.")
@click.pass_obj
def delete_cmd(ctx: ForkSwapContext, fork_name: str, yes: bool) -> None:
    """Delete an archived FORK."""
    with fork_swap_session(ctx) as manager:
        validate_fork_name(fork_name)
        Ensure.invariant(ctx.archive.exists(fork_name), f"The fork {fork_name} does not exist.")
        if not yes and not click.confirm(
            f"Are you sure you want to delete {fork_name}? This cannot be undone.", default=False
        ):
            ctx.feedback.info("Delete canceled.")
            return
        if not manager.delete(fork_name):
            raise SystemExit(1)
