"""Production Git implementation using subprocess."""

import subprocess
from pathlib import Path

from forkswap.core.git.abc import Git
from forkswap.core.subprocess import run_subprocess_with_context


class RealGit(Git):
    """Production implementation using subprocess.

    All git operations execute actual git commands via subprocess.
    """

    def clone(
        self,
        url: str,
        destination: Path,
        *,
        branch: str | None,
        depth: int | None = None,
        recurse_submodules: bool = True,
    ) -> None:
        """Clone a single branch of a repository."""
        cmd = ["git", "clone", "--single-branch"]
        if branch:
            cmd.extend(["-b", branch])
        if depth is not None:
            cmd.extend(["--depth", str(depth)])
        if recurse_submodules:
            cmd.append("--recurse-submodules")
        cmd.extend([url, str(destination)])

        run_subprocess_with_context(cmd, operation_context=f"clone {url}")

    def fetch(self, repo_dir: Path) -> None:
        """Fetch remote refs without merging."""
        run_subprocess_with_context(
            ["git", "fetch"],
            operation_context=f"fetch updates in {repo_dir}",
            cwd=repo_dir,
        )

    def get_head_commit(self, repo_dir: Path) -> str | None:
        """Get the commit SHA of HEAD."""
        return self._rev_parse(repo_dir, "HEAD")

    def get_upstream_commit(self, repo_dir: Path) -> str | None:
        """Get the commit SHA of the upstream tracking branch."""
        return self._rev_parse(repo_dir, "@{u}")

    def pull(self, repo_dir: Path) -> None:
        """Fast-forward the checked-out branch to its upstream."""
        run_subprocess_with_context(
            ["git", "pull", "--ff-only"],
            operation_context=f"pull updates in {repo_dir}",
            cwd=repo_dir,
        )

    def _rev_parse(self, repo_dir: Path, ref: str) -> str | None:
        result = subprocess.run(
            ["git", "rev-parse", ref],
            cwd=repo_dir,
            capture_output=True,
            text=True,
            check=False,
        )
        if result.returncode != 0:
            return None
        return result.stdout.strip() or None
