# usermigrate Exclusion Set
# Load exclusion pattern files and match paths against them

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

from usermigrate.errors import ConfigMissing
from usermigrate.utils.paths import matches_pattern


@dataclass(frozen=True)
class ExclusionRule:
    """A single exclude pattern and the file line it came from."""

    pattern: str
    line: int = 0

    def matches(self, rel_path: str, *, is_dir: bool = False) -> bool:
        """Check if a path relative to the category root is excluded by this rule."""
        return matches_pattern(rel_path, self.pattern, is_dir=is_dir)

    def __str__(self) -> str:
        return self.pattern


def parse_exclusions(text: str) -> list[ExclusionRule]:
    """
    Parse exclusion file content.

    Lines are stripped; empty lines and lines starting with # are dropped.
    Patterns are kept in file order and are not validated.

    Args:
        text: File content.

    Returns:
        Ordered list of rules.
    """
    rules: list[ExclusionRule] = []
    for number, raw in enumerate(text.splitlines(), start=1):
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        rules.append(ExclusionRule(pattern=line, line=number))
    return rules


def load_exclusions(path: Path) -> list[ExclusionRule]:
    """
    Load an exclusion pattern file.

    Args:
        path: Pattern file.

    Returns:
        Ordered list of rules.

    Raises:
        ConfigMissing: If the file does not exist.
    """
    if not path.is_file():
        raise ConfigMissing(path)
    return parse_exclusions(path.read_text(encoding="utf-8"))


def first_match(rules: Sequence[ExclusionRule], rel_path: str, *, is_dir: bool = False) -> ExclusionRule | None:
    """
    Find the rule that excludes a path.

    Args:
        rules: Rules in file order.
        rel_path: Path relative to the category root, / separated.
        is_dir: Whether the path is a directory.

    Returns:
        The first matching rule, or None if the path is included.
    """
    for rule in rules:
        if rule.matches(rel_path, is_dir=is_dir):
            return rule
    return None
