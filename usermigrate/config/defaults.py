# usermigrate Default Configuration
# Default configuration dict, YAML generator and default exclusion file

from typing import Any

import yaml

DEFAULT_CONFIG: dict[str, Any] = {
    "homes_root": None,
    "exclude_file": "exclude.txt",
    "log_dir": None,
    "backend": "rsync",
    "rsync": {
        "binary": None,
        "partial_dir": ".rsync-partial",
        "extra_args": [],
    },
    "ownership": {
        "group": None,
        "use_sudo": True,
        "chown": "chown",
        "sudo": "sudo",
    },
    "verify": {
        "enabled": True,
        "report_extraneous": False,
    },
    "output": {
        "verbose": False,
        "colored": True,
    },
}

_DEFAULT_EXCLUDES = """\
# usermigrate exclusion patterns
#
# One rsync-style pattern per line, matched inside each migrated folder
# (Desktop, Documents, Downloads, Pictures, Movies, Music).
# Blank lines and lines starting with # are ignored. First match wins.
#
#   name       matches that name at any depth
#   dir/       matches directories only
#   /top       anchored at the top of each folder
#   a/**/b     ** crosses directory levels

# Finder and system metadata
.DS_Store
.localized
._*
.Trash/
.Spotlight-V100/
.fseventsd/

# Temporary and cache files
*.tmp
*.swp
.cache/

# Application data dragged into a migrated folder
Library/
"""


def default_exclusions_text() -> str:
    """Commented default exclusion file, as written by `usermigrate excludes init`."""
    return _DEFAULT_EXCLUDES


def generate_default_config() -> str:
    """Generate default configuration as YAML string with comments."""
    header = """# usermigrate Configuration
#
# homes_root:   parent of home directories (default /Users on macOS, /home elsewhere)
# exclude_file: exclusion pattern file, relative to the working directory
# log_dir:      run logs and verify reports (default <source home>/migration_logs)
# backend:      rsync (external binary) or native (pure Python)
#
# Verification compares source and destination by checksum after the copy.
# Set verify.report_extraneous to also flag files that only exist in the
# destination.

"""
    return header + yaml.dump(DEFAULT_CONFIG, default_flow_style=False, sort_keys=False, allow_unicode=True)
