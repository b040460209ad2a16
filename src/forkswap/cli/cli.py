from pathlib import Path

import click

from forkswap.cli.commands.clone import clone_cmd
from forkswap.cli.commands.config import CONFIG_PATH_META_KEY, config_group
from forkswap.cli.commands.delete import delete_cmd
from forkswap.cli.commands.list_cmd import list_cmd
from forkswap.cli.commands.self_update import self_update_cmd
from forkswap.cli.commands.switch import switch_cmd
from forkswap.cli.commands.update import update_cmd
from forkswap.cli.ensure import Ensure
from forkswap.cli.menu import run_interactive
from forkswap.core.context import create_context

CONTEXT_SETTINGS = dict(help_option_names=["-h", "--help"])  # terse help flags


@click.group(invoke_without_command=True, context_settings=CONTEXT_SETTINGS)
@click.version_option(package_name="fork-swap")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Config file (default: $FORK_SWAP_CONFIG or /data/fork_swap.toml).",
)
@click.pass_context
def cli(ctx: click.Context, config_path: Path | None) -> None:
    """Switch between openpilot forks on a comma device.

    Without a subcommand, starts the interactive menu.
    """
    ctx.meta[CONFIG_PATH_META_KEY] = config_path

    # Only create context if not already provided (e.g., by tests)
    if ctx.obj is None:
        try:
            ctx.obj = create_context(config_path=config_path)
        except ValueError as e:
            Ensure.invariant(False, str(e))

    if ctx.invoked_subcommand is None:
        run_interactive(ctx.obj)


cli.add_command(clone_cmd)
cli.add_command(config_group)
cli.add_command(delete_cmd)
cli.add_command(list_cmd)
cli.add_command(self_update_cmd)
cli.add_command(switch_cmd)
cli.add_command(update_cmd)


def main() -> None:
    """CLI entry point used by the `fork-swap` console script."""
    cli()
