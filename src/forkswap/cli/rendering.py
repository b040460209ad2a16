"""Status screen shown at the top of the interactive menu."""

import click

from forkswap.cli.output import user_output
from forkswap.core.archive import ForkStatus
from forkswap.version import __version__

RULE = "=" * 58


def format_fork_line(status: ForkStatus) -> str:
    """One fork per line, annotated when upstream has new commits."""
    if status.update_available:
        return f"{status.name} - " + click.style("(update available)", fg="cyan")
    return status.name


def render_menu(*, script_update_available: bool) -> None:
    user_output("Please select an option:")
    user_output()
    user_output(
        "          1. " + click.style("Fork name ", fg="green") + "from above to switch to."
    )
    user_output(
        "          2. " + click.style("'Clone a new fork'", fg="magenta") + " to clone a new fork."
    )
    user_output(
        "          3. " + click.style("'Delete a fork'", fg="red") + " to delete an available fork."
    )
    user_output("          4. " + click.style("'Exit'", fg="red") + " to close the script.")
    user_output(
        "          "
        + click.style("'Update <fork name>'", fg="cyan")
        + " pulls updates for a fork marked (update available)."
    )
    if script_update_available:
        user_output(
            "          5. Type "
            + click.style("'Update script'", fg="green")
            + " to update fork-swap."
        )
    user_output(click.style(RULE, fg="yellow"))


def render_status_screen(
    *,
    active_fork: str,
    disk_space: str,
    forks: list[ForkStatus],
    script_update_available: bool,
) -> None:
    """Clear the terminal and draw the welcome screen, fork list and menu."""
    click.clear()
    user_output(click.style(RULE, fg="yellow"))
    user_output(click.style("                  **Fork Swap Utility**", fg="red"))
    user_output(f"                         v{__version__}")
    user_output(click.style(RULE, fg="yellow"))
    user_output("    This utility allows you to switch between different")
    user_output("              forks of the openpilot project.")
    if script_update_available:
        user_output(click.style("         *An update is available for fork-swap*", fg="red"))
    else:
        user_output(click.style("                *This script is up to date*", fg="green"))
    user_output()
    user_output(click.style("Current Active Fork: ", fg="cyan") + active_fork)
    user_output(
        click.style("Available Disk Space: ", fg="magenta") + click.style(disk_space, fg="yellow")
    )
    user_output()
    user_output(click.style("Available forks:", fg="green"))
    user_output()
    if forks:
        for status in forks:
            user_output(format_fork_line(status))
    else:
        user_output("(none)")
    user_output()
    render_menu(script_update_available=script_update_available)
