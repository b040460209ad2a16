import click

from forkswap.cli.session import fork_swap_session
from forkswap.core.context import ForkSwapContext


@click.command("switch")
@click.argument("fork_name", metavar="FORK")
@click.option("-y", "--yes", is_flag=True, help="Do not ask for confirmation.")
@click.pass_obj
def switch_cmd(ctx: ForkSwapContext, fork_name: str, yes: bool) -> None:
    """Make an archived FORK the live openpilot checkout and reboot."""
    with fork_swap_session(ctx) as manager:
        if not yes and not click.confirm(f"Switching to {fork_name}. Are you sure?", default=False):
            ctx.feedback.info("Switch canceled.")
            return
        manager.switch(fork_name)
