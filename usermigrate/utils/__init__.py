# usermigrate Utilities Module
# Helper functions for paths, pattern matching, hashing and platform defaults

from usermigrate.utils.hashing import file_hash, is_prefix_of, same_content
from usermigrate.utils.paths import ensure_dir, expand_path, glob_to_regex, matches_pattern
from usermigrate.utils.platform import (
    default_homes_root,
    default_owner_group,
    get_current_platform,
    is_root,
)

__all__ = [
    # Platform
    "get_current_platform",
    "default_homes_root",
    "default_owner_group",
    "is_root",
    # Paths
    "expand_path",
    "ensure_dir",
    "glob_to_regex",
    "matches_pattern",
    # Hashing
    "file_hash",
    "same_content",
    "is_prefix_of",
]
