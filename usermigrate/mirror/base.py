# usermigrate Mirror Interface
# Copy/compare capability injected into the migration engine

from __future__ import annotations

from collections.abc import Callable, Sequence
from pathlib import Path
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from usermigrate.migrate.excludes import ExclusionRule

# Receives one line of tool output at a time, as it is produced
Emit = Callable[[str], None]

# rsync exit code for "partial transfer due to error"
PARTIAL_TRANSFER = 23

# rsync exit code for "partial transfer due to vanished source files"
VANISHED_SOURCE = 24


class Mirror(Protocol):
    """
    Mirrors one directory tree onto another.

    Both operations take paths to the category folders themselves and
    report their output line by line through ``emit``. They return the
    process-style exit status: 0 on success.
    """

    name: str

    def describe(self) -> str:
        """Human-readable description for the run log."""
        ...

    def copy_tree(
        self,
        source: Path,
        destination: Path,
        rules: Sequence[ExclusionRule],
        *,
        dry_run: bool,
        emit: Emit,
    ) -> int:
        """Copy source into destination, preserving attributes and resuming partial files."""
        ...

    def compare_tree(
        self,
        source: Path,
        destination: Path,
        rules: Sequence[ExclusionRule],
        *,
        emit: Emit,
        report_extraneous: bool = False,
    ) -> int:
        """Emit an itemized, checksum-based list of differences without modifying anything."""
        ...
