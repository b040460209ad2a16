"""Interactive read-eval loop.

Renders the status screen, reads one line per iteration and dispatches it:

    <fork name>         switch to an archived fork
    Clone a new fork    clone a fork from GitHub and switch to it
    Delete a fork       delete an archived fork
    Update <fork name>  pull upstream commits into a fork
    Update script       install the newer upstream fork-swap script
    Exit                quit

Switch and clone reboot the device, which ends the loop.
"""

import logging
from enum import Enum

import click

from forkswap.cli.ensure import Ensure
from forkswap.cli.rendering import render_status_screen
from forkswap.cli.session import fork_swap_session
from forkswap.core.context import ForkSwapContext
from forkswap.core.errors import ValidationError
from forkswap.core.manager import ForkSwapManager
from forkswap.core.self_update import apply_script_update, check_for_script_update
from forkswap.core.validation import is_valid_fork_name, validate_fork_name, validate_repo_url

logger = logging.getLogger(__name__)

UPDATE_PREFIX = "Update "


class MenuOutcome(Enum):
    CONTINUE = "continue"
    REFRESH = "refresh"
    EXIT = "exit"


def _ensure_active_fork(ctx: ForkSwapContext, manager: ForkSwapManager) -> None:
    """Ask for the active fork's name when the pointer file is empty."""
    if manager.active_fork() is not None:
        return

    ctx.feedback.info("Unknown active fork. Please provide the name:")
    name = click.prompt("Active fork name").strip()
    validate_fork_name(name)
    Ensure.invariant(
        ctx.active_fork_store.set(name),
        f"Could not record {name} in {ctx.active_fork_store.path}",
    )


def _offer_recovery(ctx: ForkSwapContext, manager: ForkSwapManager) -> None:
    """Offer a rollback if the previous run died in the middle of a switch or clone."""
    entry = ctx.journal.load()
    if entry is None:
        return

    ctx.feedback.warning(
        f"A previous {entry.operation} from {entry.previous_fork} to {entry.target_fork} "
        f"(started {entry.started_at}) did not finish."
    )
    for step in entry.steps:
        marker = "ok" if step.success else "FAILED"
        ctx.feedback.info(f"  [{marker}] {step.description}")

    if click.confirm("Roll back to the state before it started?", default=True):
        manager.cleanup(entry.previous_fork)
    else:
        ctx.journal.clear()
        ctx.feedback.info("Keeping the current state.")


def _render(ctx: ForkSwapContext, manager: ForkSwapManager, script_update_available: bool) -> None:
    active = manager.active_fork() or "unknown"
    logger.info("Current Active Fork: %s", active)
    render_status_screen(
        active_fork=active,
        disk_space=ctx.system.available_disk_space(ctx.archive.root),
        forks=manager.fork_statuses(),
        script_update_available=script_update_available,
    )


def _handle_switch(ctx: ForkSwapContext, manager: ForkSwapManager, name: str) -> MenuOutcome:
    if not click.confirm(f"Switching to {name}. Are you sure?", default=False):
        ctx.feedback.info("Switch canceled.")
        return MenuOutcome.CONTINUE

    manager.switch(name)
    return MenuOutcome.EXIT


def _handle_clone(ctx: ForkSwapContext, manager: ForkSwapManager) -> MenuOutcome:
    name = click.prompt("Enter a name for the new fork").strip()
    try:
        validate_fork_name(name)
    except ValidationError as e:
        ctx.feedback.error(str(e))
        return MenuOutcome.CONTINUE

    if ctx.archive.exists(name) and not click.confirm(
        "A fork with this name already exists. Are you sure you want to overwrite it?",
        default=False,
    ):
        ctx.feedback.info("Clone canceled.")
        return MenuOutcome.CONTINUE

    url = click.prompt("Enter the URL of the fork to clone").strip()
    try:
        validate_repo_url(url, ctx.config.git_host)
    except ValidationError as e:
        ctx.feedback.error(str(e))
        return MenuOutcome.CONTINUE

    branch = click.prompt(
        "Enter the branch name (leave empty for default branch)",
        default="",
        show_default=False,
    ).strip()

    try:
        manager.clone(name, url, branch or None)
    except ValidationError as e:
        ctx.feedback.error(str(e))
        return MenuOutcome.CONTINUE
    return MenuOutcome.EXIT


def _handle_delete(ctx: ForkSwapContext, manager: ForkSwapManager) -> MenuOutcome:
    name = click.prompt("Enter the name of the fork to delete").strip()
    try:
        validate_fork_name(name)
    except ValidationError as e:
        ctx.feedback.error(str(e))
        return MenuOutcome.CONTINUE

    if not ctx.archive.exists(name):
        ctx.feedback.info(f"The fork {name} does not exist.")
        return MenuOutcome.CONTINUE

    if not click.confirm(
        f"Are you sure you want to delete {name}? This cannot be undone.", default=False
    ):
        ctx.feedback.info("Delete canceled.")
        return MenuOutcome.CONTINUE

    if manager.delete(name):
        return MenuOutcome.REFRESH
    return MenuOutcome.CONTINUE


def _handle_fork_update(ctx: ForkSwapContext, manager: ForkSwapManager, name: str) -> MenuOutcome:
    if not is_valid_fork_name(name) or not manager.resolve_fork_dir(name).is_dir():
        ctx.feedback.info(f"The fork {name} does not exist.")
        return MenuOutcome.CONTINUE

    if not manager.check_fork_update(name):
        ctx.feedback.info(f"No updates available for {name}.")
        return MenuOutcome.CONTINUE

    if not click.confirm(f"Do you want to update the fork {name}?", default=False):
        ctx.feedback.info("Update canceled.")
        return MenuOutcome.CONTINUE

    try:
        manager.update_fork(name)
    except RuntimeError as e:
        ctx.feedback.error(f"Error while updating {name}. {e}")
        return MenuOutcome.CONTINUE
    return MenuOutcome.REFRESH


def _handle_script_update(ctx: ForkSwapContext, script_update_available: bool) -> MenuOutcome:
    if not script_update_available:
        ctx.feedback.info("fork-swap is already up to date.")
        return MenuOutcome.CONTINUE

    apply_script_update(ctx)
    return MenuOutcome.CONTINUE


def dispatch_choice(
    ctx: ForkSwapContext,
    manager: ForkSwapManager,
    choice: str,
    *,
    script_update_available: bool,
) -> MenuOutcome:
    """Route one line of user input to its handler."""
    if choice == "Exit":
        ctx.feedback.info("Exiting the script.")
        return MenuOutcome.EXIT
    if choice == "Clone a new fork":
        return _handle_clone(ctx, manager)
    if choice == "Delete a fork":
        return _handle_delete(ctx, manager)
    if choice == "Update script":
        return _handle_script_update(ctx, script_update_available)
    if choice.startswith(UPDATE_PREFIX):
        return _handle_fork_update(ctx, manager, choice.removeprefix(UPDATE_PREFIX).strip())
    if is_valid_fork_name(choice) and ctx.archive.has_working_copy(choice):
        return _handle_switch(ctx, manager, choice)

    ctx.feedback.error(
        "Invalid choice. Please type the name of one of the available forks "
        "or 'Clone a new fork'."
    )
    return MenuOutcome.CONTINUE


def run_interactive(ctx: ForkSwapContext) -> None:
    """Run the menu loop until the user exits or a switch/clone reboots the device."""
    with fork_swap_session(ctx) as manager:
        _ensure_active_fork(ctx, manager)
        _offer_recovery(ctx, manager)
        script_update_available = check_for_script_update(ctx)
        _render(ctx, manager, script_update_available)

        while True:
            choice = click.prompt("Your choice", default="", show_default=False).strip()
            outcome = dispatch_choice(
                ctx, manager, choice, script_update_available=script_update_available
            )
            if outcome is MenuOutcome.EXIT:
                return
            if outcome is MenuOutcome.REFRESH:
                _render(ctx, manager, script_update_available)
