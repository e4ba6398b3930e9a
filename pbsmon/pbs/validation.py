"""Validation utilities for PBS-related inputs."""

import getpass
import re
import shutil
from collections.abc import Mapping

SAFE_USERNAME_PATTERN = re.compile(r"^[A-Za-z0-9_.-]+$")


class ValidationError(Exception):
    """Raised when input validation fails."""


def validate_username(username: str) -> bool:
    """Validate that a username is safe to use in paths and CLI arguments.

    Args:
        username: The username to validate.

    Returns:
        True if the username is safe.

    Raises:
        ValidationError: If the username is empty or contains unsafe characters.
    """
    if not username:
        raise ValidationError("Username cannot be empty")
    if not SAFE_USERNAME_PATTERN.fullmatch(username):
        raise ValidationError(f"Unsafe characters detected in username: {username!r}")
    return True


def get_current_username() -> str:
    """Return a sanitized username suitable for CLI usage.

    Raises:
        ValidationError: If the username cannot be determined or is unsafe.
    """
    try:
        username = getpass.getuser()
    except (KeyError, OSError) as exc:
        raise ValidationError(f"Unable to determine the current username: {exc}") from exc
    validate_username(username)
    return username


def resolve_executable(executable: str, table: Mapping[str, str] | None = None) -> str:
    """Return the path to an executable.

    A configured path in ``table`` wins; otherwise PATH is searched.

    Args:
        executable: The name of the executable to find.
        table: Optional mapping of executable name to configured path.

    Returns:
        The path to the executable.

    Raises:
        FileNotFoundError: If the executable is not configured and not on PATH.
    """
    if table and executable in table:
        return table[executable]
    resolved = shutil.which(executable)
    if resolved is None:
        raise FileNotFoundError(f"Executable {executable!r} was not found on PATH")
    return resolved
