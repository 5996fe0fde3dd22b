# usermigrate rsync Mirror
# Copy and compare directory trees with an external rsync binary

from __future__ import annotations

import os
import re
import shutil
import subprocess
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Optional

from usermigrate.errors import DependencyError
from usermigrate.mirror.base import Emit
from usermigrate.utils.platform import get_current_platform

if TYPE_CHECKING:
    from usermigrate.migrate.excludes import ExclusionRule

# /usr/bin/rsync on macOS is too old for some options; prefer Homebrew's
HOMEBREW_RSYNC = (
    Path("/opt/homebrew/bin/rsync"),
    Path("/usr/local/bin/rsync"),
)

REQUIRED_OPTIONS = ("--partial-dir", "--itemize-changes")

_VERSION_RE = re.compile(r"rsync\s+version\s+v?(\S+)")


def _is_executable(path: Path) -> bool:
    return path.is_file() and os.access(path, os.X_OK)


def find_rsync(configured: Optional[str] = None) -> Path:
    """
    Locate the rsync binary.

    Args:
        configured: Explicit path from configuration.

    Returns:
        Path to an executable rsync.

    Raises:
        DependencyError: If no usable rsync is found.
    """
    if configured:
        path = Path(configured)
        if not _is_executable(path):
            raise DependencyError(f"Configured rsync is not executable: {path}")
        return path

    if get_current_platform() == "macos":
        for candidate in HOMEBREW_RSYNC:
            if _is_executable(candidate):
                return candidate

    found = shutil.which("rsync")
    if found:
        return Path(found)

    raise DependencyError("rsync not found. Install it (macOS: brew install rsync) or set 'backend: native'.")


@dataclass
class RsyncCapabilities:
    """Optional features detected from ``rsync --help``."""

    version: Optional[str] = None
    info_progress: bool = False
    protect_args: bool = False


def exclude_args(rules: Sequence[ExclusionRule]) -> list[str]:
    """Build ``--exclude`` arguments, preserving rule order."""
    args: list[str] = []
    for rule in rules:
        args.extend(["--exclude", rule.pattern])
    return args


class RsyncMirror:
    """
    Mirror backed by an rsync executable.

    Copy runs in archive mode with hard links and resumable partial
    transfers; compare runs a checksum dry run with itemized output.
    """

    name = "rsync"

    def __init__(
        self,
        binary: Path,
        *,
        partial_dir: str = ".rsync-partial",
        extra_args: Sequence[str] = (),
    ):
        """
        Initialize rsync mirror.

        Args:
            binary: Path to rsync.
            partial_dir: Staging directory for interrupted transfers.
            extra_args: Additional arguments for the copy phase.
        """
        self.binary = binary
        self.partial_dir = partial_dir
        self.extra_args = list(extra_args)
        self._capabilities: RsyncCapabilities | None = None

    @classmethod
    def discover(cls, configured: Optional[str] = None, **kwargs) -> RsyncMirror:
        """Find rsync and confirm it is usable."""
        mirror = cls(find_rsync(configured), **kwargs)
        mirror.probe()
        return mirror

    def probe(self) -> RsyncCapabilities:
        """
        Run ``rsync --help`` and detect supported options.

        Returns:
            Detected capabilities.

        Raises:
            DependencyError: If rsync cannot run or lacks required options.
        """
        try:
            result = subprocess.run(
                [str(self.binary), "--help"],
                check=False,
                capture_output=True,
                text=True,
            )
        except OSError as e:
            raise DependencyError(f"Cannot run {self.binary}: {e}") from e

        help_text = (result.stdout or "") + (result.stderr or "")
        missing = [option for option in REQUIRED_OPTIONS if option not in help_text]
        if missing:
            raise DependencyError(f"{self.binary} does not support: {', '.join(missing)}")

        match = _VERSION_RE.search(help_text)
        self._capabilities = RsyncCapabilities(
            version=match.group(1) if match else None,
            info_progress="--info" in help_text,
            protect_args="--protect-args" in help_text,
        )
        return self._capabilities

    @property
    def capabilities(self) -> RsyncCapabilities:
        """Detected capabilities, probing on first use."""
        if self._capabilities is None:
            return self.probe()
        return self._capabilities

    def describe(self) -> str:
        """Binary path and version."""
        version = self.capabilities.version
        return f"{self.binary} (rsync {version})" if version else str(self.binary)

    def copy_args(
        self,
        source: Path,
        destination: Path,
        rules: Sequence[ExclusionRule],
        *,
        dry_run: bool = False,
    ) -> list[str]:
        """Command line for copying one category."""
        caps = self.capabilities
        args = [str(self.binary), "-aEH", "--stats"]
        args.append("--info=progress2" if caps.info_progress else "--progress")
        if caps.protect_args:
            args.append("--protect-args")
        args.extend(["--partial", f"--partial-dir={self.partial_dir}"])
        args.extend(self.extra_args)
        if dry_run:
            args.append("--dry-run")
        args.extend(exclude_args(rules))
        args.extend([f"{source}/", f"{destination}/"])
        return args

    def compare_args(
        self,
        source: Path,
        destination: Path,
        rules: Sequence[ExclusionRule],
        *,
        report_extraneous: bool = False,
    ) -> list[str]:
        """Command line for the checksum comparison of one category."""
        args = [str(self.binary), "-aEHcni", "--itemize-changes"]
        if report_extraneous:
            args.append("--delete")
        args.extend(exclude_args(rules))
        args.extend([f"{source}/", f"{destination}/"])
        return args

    def copy_tree(
        self,
        source: Path,
        destination: Path,
        rules: Sequence[ExclusionRule],
        *,
        dry_run: bool,
        emit: Emit,
    ) -> int:
        """Run the copy and stream its output."""
        return self._stream(self.copy_args(source, destination, rules, dry_run=dry_run), emit)

    def compare_tree(
        self,
        source: Path,
        destination: Path,
        rules: Sequence[ExclusionRule],
        *,
        emit: Emit,
        report_extraneous: bool = False,
    ) -> int:
        """Run the comparison and stream its itemized output."""
        args = self.compare_args(source, destination, rules, report_extraneous=report_extraneous)
        return self._stream(args, emit)

    def _stream(self, args: list[str], emit: Emit) -> int:
        """Run rsync, forwarding combined stdout/stderr line by line."""
        try:
            process = subprocess.Popen(
                args,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                errors="replace",
                bufsize=1,
            )
        except OSError as e:
            raise DependencyError(f"Cannot run {self.binary}: {e}") from e

        with process:
            if process.stdout is not None:
                for line in process.stdout:
                    emit(line.rstrip("\n"))
        return process.wait()
