# usermigrate Platform Utilities
# Platform-aware defaults for home directories and ownership

import grp
import os
import platform
import pwd
from pathlib import Path

from usermigrate.errors import PreconditionError

# Platform name mapping: system name -> usermigrate platform name
_PLATFORM_MAP: dict[str, str] = {
    "Darwin": "macos",
    "Linux": "linux",
}

# Parent directory of user home directories
_HOMES_ROOT: dict[str, str] = {
    "macos": "/Users",
    "linux": "/home",
}


def get_current_platform() -> str:
    """
    Get the current platform identifier.

    Returns:
        Platform string: "macos", "linux", or the lowercased system name.
    """
    system = platform.system()
    return _PLATFORM_MAP.get(system, system.lower())


def default_homes_root() -> Path:
    """Directory holding per-user home directories on this platform."""
    return Path(_HOMES_ROOT.get(get_current_platform(), "/home"))


def default_owner_group(user: str) -> str:
    """
    Group to assign to migrated files.

    macOS puts every regular account in ``staff``; elsewhere the user's
    primary group is used.

    Args:
        user: Target account name.

    Returns:
        Group name, or the numeric gid if the group has no name.

    Raises:
        PreconditionError: If the account is unknown.
    """
    if get_current_platform() == "macos":
        return "staff"
    try:
        gid = pwd.getpwnam(user).pw_gid
    except KeyError:
        raise PreconditionError(f"Account '{user}' has no passwd entry.") from None
    try:
        return grp.getgrgid(gid).gr_name
    except KeyError:
        # chown accepts a numeric group
        return str(gid)


def is_root() -> bool:
    """Check if the process already runs with administrative privilege."""
    return os.geteuid() == 0
