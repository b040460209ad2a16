"""Subprocess execution with operation context in error messages.

External tools (git, chown, reboot) are invoked through
run_subprocess_with_context so that a failure carries the command, exit code
and captured output instead of a bare CalledProcessError.
"""

import subprocess
from collections.abc import Sequence
from pathlib import Path
from typing import Any


def _decode(stream: str | bytes | None) -> str:
    if stream is None:
        return ""
    if isinstance(stream, bytes):
        return stream.decode("utf-8", errors="replace").strip()
    return stream.strip()


def run_subprocess_with_context(
    cmd: Sequence[str],
    operation_context: str,
    cwd: Path | None = None,
    check: bool = True,
    **kwargs: Any,
) -> subprocess.CompletedProcess[str]:
    """Run a command, re-raising failures as RuntimeError with context.

    Args:
        cmd: Command and arguments to execute
        operation_context: Human-readable description, used as
            "Failed to {operation_context}" in the error message
        cwd: Working directory for the command
        check: Whether a non-zero exit code is an error (default: True)
        **kwargs: Additional arguments passed to subprocess.run()

    Returns:
        CompletedProcess with text stdout/stderr

    Raises:
        RuntimeError: If the command exits non-zero (when check=True) or the
            executable cannot be found
    """
    try:
        return subprocess.run(
            list(cmd),
            cwd=cwd,
            capture_output=True,
            text=True,
            encoding="utf-8",
            check=check,
            **kwargs,
        )
    except subprocess.CalledProcessError as e:
        cmd_str = " ".join(str(arg) for arg in cmd)
        error_msg = f"Failed to {operation_context}"
        error_msg += f"\nCommand: {cmd_str}"
        error_msg += f"\nExit code: {e.returncode}"

        stdout_text = _decode(e.stdout)
        if stdout_text:
            error_msg += f"\nstdout: {stdout_text}"

        stderr_text = _decode(e.stderr)
        if stderr_text:
            error_msg += f"\nstderr: {stderr_text}"

        raise RuntimeError(error_msg) from e
    except FileNotFoundError as e:
        cmd_str = " ".join(str(arg) for arg in cmd)
        raise RuntimeError(
            f"Command not found while trying to {operation_context}: {cmd[0]}"
            f"\nFull command: {cmd_str}"
        ) from e
