from dataclasses import fields
from pathlib import Path

import click

from forkswap.cli.ensure import Ensure
from forkswap.cli.output import machine_output, user_output
from forkswap.core.config import default_config_path, save_config
from forkswap.core.context import ForkSwapContext

# click.Context.meta key holding the group-level --config path
CONFIG_PATH_META_KEY = "forkswap.config_path"


@click.group("config")
def config_group() -> None:
    """Inspect and create the fork-swap configuration file."""


@config_group.command("show")
@click.pass_obj
def config_show(ctx: ForkSwapContext) -> None:
    """Print the effective configuration as key=value lines."""
    for f in fields(ctx.config):
        value = getattr(ctx.config, f.name)
        if isinstance(value, bool):
            value = str(value).lower()
        machine_output(f"{f.name}={value}")


@config_group.command("init")
@click.option("--force", is_flag=True, help="Overwrite an existing config file.")
@click.pass_context
def config_init(click_ctx: click.Context, force: bool) -> None:
    """Write the effective configuration to the config file.

    The file is the one given with `fork-swap --config`, falling back to
    $FORK_SWAP_CONFIG or /data/fork_swap.toml.
    """
    ctx: ForkSwapContext = click_ctx.obj
    chosen: Path | None = click_ctx.meta.get(CONFIG_PATH_META_KEY)
    path = chosen if chosen is not None else default_config_path()
    Ensure.invariant(
        force or not path.exists(),
        f"Config file already exists at {path}; use --force to overwrite it.",
    )
    save_config(ctx.config, path)
    user_output(f"Wrote configuration to {path}")
