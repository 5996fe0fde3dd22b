# usermigrate Preflight
# Precondition checks run before anything is created

from __future__ import annotations

import pwd
from collections.abc import Callable
from pathlib import Path
from typing import Any

from usermigrate.errors import ConfigMissing, PreconditionError


def account_exists(user: str, lookup_account: Callable[[str], Any] = pwd.getpwnam) -> bool:
    """Check if a local account exists."""
    try:
        lookup_account(user)
    except KeyError:
        return False
    return True


def check_preconditions(
    source_user: str,
    dest_user: str,
    *,
    homes_root: Path,
    exclude_file: Path,
    lookup_account: Callable[[str], Any] = pwd.getpwnam,
) -> tuple[Path, Path]:
    """
    Validate run parameters and resolve home directories.

    Args:
        source_user: Account to migrate from.
        dest_user: Account to migrate to. Must already exist.
        homes_root: Parent directory of home directories.
        exclude_file: Exclusion pattern file.
        lookup_account: Account database lookup, raising KeyError if unknown.

    Returns:
        Tuple of (source_home, dest_home).

    Raises:
        PreconditionError: If any check fails.
    """
    if not source_user or not dest_user:
        raise PreconditionError("Source and destination usernames are required.")

    if source_user == dest_user:
        raise PreconditionError("Old and new usernames must be different.")

    if not exclude_file.is_file():
        raise ConfigMissing(exclude_file)

    source_home = homes_root / source_user
    dest_home = homes_root / dest_user

    if not source_home.is_dir():
        raise PreconditionError(f"Old home not found: {source_home}")

    if not account_exists(dest_user, lookup_account):
        raise PreconditionError(f"New user '{dest_user}' does not exist. Create it first.")

    if not dest_home.is_dir():
        raise PreconditionError(f"New home not found: {dest_home}")

    return source_home, dest_home
