import click

from forkswap.cli.output import machine_output
from forkswap.core.context import ForkSwapContext
from forkswap.core.manager import ForkSwapManager


@click.command("list")
@click.option(
    "--check-updates",
    is_flag=True,
    help="Fetch each fork and mark the ones with upstream commits.",
)
@click.pass_obj
def list_cmd(ctx: ForkSwapContext, check_updates: bool) -> None:
    """List archived forks, one per line.

    The active fork is prefixed with '*'. With --check-updates, forks whose
    upstream has new commits are suffixed with '(update available)'.
    """
    manager = ForkSwapManager(ctx)
    active = manager.active_fork()

    names_seen: set[str] = set()
    for status in manager.fork_statuses(check_updates=check_updates):
        names_seen.add(status.name)
        marker = "*" if status.name == active else " "
        suffix = " (update available)" if status.update_available else ""
        machine_output(f"{marker} {status.name}{suffix}")

    # The active fork lives in the openpilot directory and may have no archive entry yet
    if active is not None and active not in names_seen:
        behind = check_updates and manager.check_fork_update(active)
        suffix = " (update available)" if behind else ""
        machine_output(f"* {active}{suffix}")
