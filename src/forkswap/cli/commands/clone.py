import click

from forkswap.cli.session import fork_swap_session
from forkswap.core.context import ForkSwapContext


@click.command("clone")
@click.argument("fork_name", metavar="NAME")
@click.argument("repo_url", metavar="URL")
@click.option("-b", "--branch", default=None, help="Branch to clone (default: remote HEAD).")
@click.option("-y", "--yes", is_flag=True, help="Do not ask before overwriting an archived fork.")
@click.pass_obj
def clone_cmd(
    ctx: ForkSwapContext, fork_name: str, repo_url: str, branch: str | None, yes: bool
) -> None:
    """Clone URL as a new fork called NAME, make it live and reboot.

    URL must look like https://github.com/<owner>/<repo>.git.
    """
    with fork_swap_session(ctx) as manager:
        if (
            ctx.archive.exists(fork_name)
            and not yes
            and not click.confirm(
                "A fork with this name already exists. Are you sure you want to overwrite it?",
                default=False,
            )
        ):
            ctx.feedback.info("Clone canceled.")
            return
        manager.clone(fork_name, repo_url, branch or None)
