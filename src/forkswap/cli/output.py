"""Output utilities for CLI commands with clear intent.

- user_output: status messages, prompts context and errors (stderr)
- machine_output: data meant for pipes, e.g. `fork-swap list` (stdout)
"""

import click


def user_output(message: str = "", nl: bool = True) -> None:
    """Write a message for the person at the terminal (stderr)."""
    click.echo(message, err=True, nl=nl)


def machine_output(message: str = "", nl: bool = True) -> None:
    """Write data for consumption by scripts (stdout)."""
    click.echo(message, nl=nl)
