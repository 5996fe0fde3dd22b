# usermigrate Path Utilities
# Directory helpers and rsync-style exclude pattern matching

import os
import re
from functools import lru_cache
from pathlib import Path


def expand_path(path: str | Path) -> Path:
    """
    Expand ~ and environment variables in path.

    Args:
        path: Path string or Path object.

    Returns:
        Expanded Path object.
    """
    path_str = str(path)
    # Expand ~ first, then environment variables
    path_str = os.path.expanduser(path_str)
    path_str = os.path.expandvars(path_str)
    return Path(path_str)


def ensure_dir(path: Path) -> Path:
    """
    Ensure directory exists, creating if necessary.

    Args:
        path: Directory path.

    Returns:
        The path that was ensured.
    """
    path.mkdir(parents=True, exist_ok=True)
    return path


@lru_cache(maxsize=256)
def glob_to_regex(pattern: str) -> re.Pattern[str]:
    """
    Translate an rsync-style wildcard pattern to a compiled regex.

    ``*`` stops at slashes, ``**`` crosses them, ``?`` is one non-slash
    character, ``[...]`` is a character class and backslash escapes the
    next character.

    Args:
        pattern: Wildcard pattern without trailing slash or leading anchor.

    Returns:
        Compiled regex matching the whole string.
    """
    out: list[str] = []
    i = 0
    n = len(pattern)

    while i < n:
        c = pattern[i]
        if c == "*":
            if pattern.startswith("**", i):
                out.append(".*")
                i += 2
                continue
            out.append("[^/]*")
        elif c == "?":
            out.append("[^/]")
        elif c == "[":
            j = i + 1
            if j < n and pattern[j] in "!^":
                j += 1
            if j < n and pattern[j] == "]":
                j += 1
            j = pattern.find("]", j)
            if j == -1:
                out.append(re.escape(c))
            else:
                body = pattern[i + 1 : j]
                if body[:1] in ("!", "^"):
                    body = "^" + body[1:]
                out.append("[" + body.replace("\\", "\\\\") + "]")
                i = j + 1
                continue
        elif c == "\\" and i + 1 < n:
            out.append(re.escape(pattern[i + 1]))
            i += 2
            continue
        else:
            out.append(re.escape(c))
        i += 1

    return re.compile("".join(out) + r"\Z")


def matches_pattern(rel_path: str, pattern: str, *, is_dir: bool = False) -> bool:
    """
    Check if a path matches an rsync-style exclude pattern.

    Supports:
    - trailing / to match directories only
    - leading / to anchor at the transfer root
    - patterns without / match the final path component
    - patterns with / or ** match trailing path components

    Args:
        rel_path: Path relative to the transfer root, using / separators.
        pattern: Exclude pattern.
        is_dir: Whether the path is a directory.

    Returns:
        True if path matches pattern.
    """
    if pattern.endswith("/"):
        if not is_dir:
            return False
        pattern = pattern.rstrip("/")

    anchored = pattern.startswith("/")
    if anchored:
        pattern = pattern.lstrip("/")

    if not pattern:
        return False

    regex = glob_to_regex(pattern)

    if anchored:
        return regex.match(rel_path) is not None

    if "/" in pattern or "**" in pattern:
        parts = rel_path.split("/")
        return any(regex.match("/".join(parts[k:])) for k in range(len(parts)))

    return regex.match(rel_path.rsplit("/", 1)[-1]) is not None
