"""Self-update of fork-swap.

The reference copy of fork-swap lives in a fixed upstream repository: the
launcher script at `script_relpath` and, when the repository root is the
fork-swap project itself, the `forkswap` package the launcher imports. A
check shallow-clones it into a temporary directory and compares both against
what is installed. Applying the update upgrades the package from that
checkout, swaps the launcher in with os.replace, and replaces the running
process with the launcher so the rest of the session runs the new code.
"""

import filecmp
import logging
import os
import shutil
import sys
import tempfile
import tomllib
from dataclasses import dataclass
from pathlib import Path

from forkswap.core.context import ForkSwapContext
from forkswap.version import __version__

logger = logging.getLogger(__name__)

PROJECT_NAME = "fork-swap"


@dataclass(frozen=True)
class PendingUpdate:
    """What installing the upstream checkout would change.

    Attributes:
        script: Upstream launcher, set when it differs from the installed one
        package_version: Upstream fork-swap version, set when it differs from
            the running one
    """

    script: Path | None
    package_version: str | None

    @property
    def is_empty(self) -> bool:
        return self.script is None and self.package_version is None


def _fetch_upstream(ctx: ForkSwapContext, workdir: Path) -> Path:
    """Shallow-clone the reference repository and return the checkout.

    Raises:
        RuntimeError: If the clone fails
    """
    config = ctx.config
    checkout = workdir / "upstream"
    ctx.git.clone(
        config.script_repo_url,
        checkout,
        branch=config.script_repo_branch,
        depth=1,
        recurse_submodules=False,
    )
    return checkout


def upstream_package_version(checkout: Path) -> str | None:
    """Version of the fork-swap project at the checkout root, if it is one.

    Example:
        A checkout whose pyproject.toml declares `name = "fork-swap"` and
        `version = "2.5.0"` yields "2.5.0"; any other project yields None.
    """
    pyproject = checkout / "pyproject.toml"
    if not pyproject.is_file():
        return None
    try:
        project = tomllib.loads(pyproject.read_text(encoding="utf-8")).get("project", {})
    except tomllib.TOMLDecodeError as e:
        logger.warning("Ignoring unreadable %s: %s", pyproject, e)
        return None
    if project.get("name") != PROJECT_NAME:
        return None
    version = project.get("version")
    return str(version) if version else None


def _is_same_script(installed: Path, candidate: Path) -> bool:
    return installed.is_file() and filecmp.cmp(installed, candidate, shallow=False)


def compare_with_upstream(ctx: ForkSwapContext, checkout: Path) -> PendingUpdate:
    candidate = checkout / ctx.config.script_relpath
    script = None
    if candidate.is_file() and not _is_same_script(ctx.config.manager_script, candidate):
        script = candidate

    version = upstream_package_version(checkout)
    return PendingUpdate(
        script=script,
        package_version=version if version is not None and version != __version__ else None,
    )


def check_for_script_update(ctx: ForkSwapContext) -> bool:
    """Whether the upstream launcher or package differs from the installed one.

    Network or git failures are reported and count as "no update".
    """
    installed = ctx.config.manager_script
    ctx.feedback.info(f"Checking for updates to {installed.name}...")

    with tempfile.TemporaryDirectory(prefix="fork_swap_update_") as tmp:
        try:
            checkout = _fetch_upstream(ctx, Path(tmp))
        except RuntimeError as e:
            logger.warning("Script update check failed: %s", e)
            ctx.feedback.warning("Could not check for script updates.")
            return False

        if not (checkout / ctx.config.script_relpath).is_file():
            logger.info("Upstream repository has no %s", ctx.config.script_relpath)
            return False

        pending = compare_with_upstream(ctx, checkout)

    if pending.is_empty:
        ctx.feedback.success(f"{installed.name} is up to date.")
        return False

    if pending.package_version is not None:
        logger.info("Upstream fork-swap %s (running %s)", pending.package_version, __version__)
    ctx.feedback.warning(f"Update available for {installed.name}.")
    return True


def install_script(candidate: Path, installed: Path) -> None:
    """Atomically replace `installed` with a copy of `candidate`.

    The copy is staged in the same directory so os.replace never crosses
    filesystems; the running interpreter keeps its already-open file.
    """
    installed.parent.mkdir(parents=True, exist_ok=True)
    staged = installed.with_name(f".{installed.name}.new")
    shutil.copy2(candidate, staged)
    staged.chmod(staged.stat().st_mode | 0o111)
    os.replace(staged, installed)


def apply_script_update(ctx: ForkSwapContext) -> bool:
    """Install the upstream package and launcher, then re-execute the launcher in place.

    The package is upgraded before the launcher is swapped, so a failed
    install leaves the old launcher and the old package working together.

    Returns:
        False if nothing was installed. On success the process is replaced and
        this function does not return.
    """
    installed = ctx.config.manager_script

    with tempfile.TemporaryDirectory(prefix="fork_swap_update_") as tmp:
        try:
            checkout = _fetch_upstream(ctx, Path(tmp))
        except RuntimeError as e:
            ctx.feedback.error(f"Error while updating the script. {e}")
            return False

        if not (checkout / ctx.config.script_relpath).is_file():
            ctx.feedback.error("Updated script not found in the repository.")
            return False

        pending = compare_with_upstream(ctx, checkout)
        if pending.is_empty:
            ctx.feedback.info(f"{installed.name} is already up to date.")
            return False

        if pending.package_version is not None:
            ctx.feedback.info(f"Installing fork-swap {pending.package_version}...")
            try:
                ctx.system.install_package(checkout)
            except RuntimeError as e:
                ctx.feedback.error(f"Error while updating the script. {e}")
                return False

        if pending.script is not None:
            try:
                install_script(pending.script, installed)
            except OSError as e:
                ctx.feedback.error(f"Error while updating the script. {e}")
                return False

    ctx.feedback.success(
        "Script updated successfully! Restarting the script to use the updated version..."
    )
    ctx.system.exec_replace([sys.executable, str(installed)])
