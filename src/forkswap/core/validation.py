"""Validation of user-supplied fork names and repository URLs."""

import re

from forkswap.core.errors import ValidationError

IDENTIFIER = r"[A-Za-z0-9_-]+"
FORK_NAME_PATTERN = re.compile(IDENTIFIER)


def repo_url_pattern(host: str) -> re.Pattern[str]:
    """Pattern for https://<host>/<owner>/<repo>.git."""
    return re.compile(rf"https://{re.escape(host)}/{IDENTIFIER}/{IDENTIFIER}\.git")


def is_valid_fork_name(name: str) -> bool:
    return FORK_NAME_PATTERN.fullmatch(name) is not None


def validate_fork_name(name: str) -> None:
    """Raise ValidationError unless name is a non-empty [A-Za-z0-9_-] identifier."""
    if not is_valid_fork_name(name):
        raise ValidationError(
            f"Invalid fork name {name!r}. Only alphanumeric characters, "
            "dashes, and underscores are allowed."
        )


def is_valid_repo_url(url: str, host: str = "github.com") -> bool:
    return repo_url_pattern(host).fullmatch(url) is not None


def validate_repo_url(url: str, host: str = "github.com") -> None:
    """Raise ValidationError unless url looks like https://<host>/<owner>/<repo>.git."""
    if not is_valid_repo_url(url, host):
        raise ValidationError(
            f"Invalid URL format {url!r}. Expected https://{host}/<owner>/<repo>.git"
        )
