import click

from forkswap.cli.session import fork_swap_session
from forkswap.core.context import ForkSwapContext
from forkswap.core.self_update import apply_script_update, check_for_script_update


@click.command("self-update")
@click.option("--check", is_flag=True, help="Only report whether an update is available.")
@click.pass_obj
def self_update_cmd(ctx: ForkSwapContext, check: bool) -> None:
    """Install the upstream copy of the fork-swap script and restart it."""
    with fork_swap_session(ctx):
        if check:
            check_for_script_update(ctx)
            return
        apply_script_update(ctx)
