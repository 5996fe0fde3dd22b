# usermigrate Ownership Normalizer
# Hands copied folders over to the destination account

from __future__ import annotations

import subprocess
from collections.abc import Callable
from pathlib import Path
from typing import TYPE_CHECKING

from rich.markup import escape

from usermigrate.errors import OwnershipError
from usermigrate.utils.platform import is_root

if TYPE_CHECKING:
    from usermigrate.logger import RunLog


class OwnershipNormalizer:
    """
    Recursively changes owner and group of copied destinations.

    Every target is attempted; failures are collected and raised together.
    Nothing is rolled back.
    """

    def __init__(
        self,
        user: str,
        group: str,
        *,
        use_sudo: bool = True,
        chown: str = "chown",
        sudo: str = "sudo",
        privileged: Callable[[], bool] = is_root,
    ):
        """
        Initialize normalizer.

        Args:
            user: Destination account name.
            group: Group to assign.
            use_sudo: Escalate with sudo when not already root.
            chown: chown executable.
            sudo: sudo executable.
            privileged: Returns True when the process already runs as root.
        """
        self.user = user
        self.group = group
        self.use_sudo = use_sudo
        self.chown = chown
        self.sudo = sudo
        self.privileged = privileged

    @property
    def owner(self) -> str:
        """``user:group`` argument for chown."""
        return f"{self.user}:{self.group}"

    def command(self, target: Path) -> list[str]:
        """Command line for one target."""
        cmd = [self.chown, "-R", self.owner, str(target)]
        if self.use_sudo and not self.privileged():
            cmd.insert(0, self.sudo)
        return cmd

    def normalize_one(self, target: Path, log: RunLog) -> bool:
        """
        Change ownership of one destination tree.

        Returns:
            True if chown succeeded.
        """
        cmd = self.command(target)
        try:
            result = subprocess.run(cmd, check=False, capture_output=True, text=True)
        except OSError as e:
            log.error(f"Cannot run {escape(cmd[0])}: {escape(str(e))}")
            return False

        for line in (result.stdout + result.stderr).splitlines():
            log.stream(line)

        if result.returncode != 0:
            log.error(f"chown {escape(self.owner)} {escape(str(target))} failed (exit {result.returncode})")
            return False
        log.success(f"Owner set to {escape(self.owner)}: {escape(str(target))}")
        return True

    def normalize(self, targets: list[Path], log: RunLog) -> list[Path]:
        """
        Change ownership of every target.

        Args:
            targets: Destination folders copied in this run.
            log: Run log.

        Returns:
            The targets that were normalized.

        Raises:
            OwnershipError: After all targets were attempted, if any failed.
        """
        if not targets:
            log.info("No copied folders; nothing to hand over")
            return []

        if self.use_sudo and not self.privileged():
            log.info("You may be prompted for your password (sudo).")

        failed: list[Path] = []
        done: list[Path] = []
        for target in targets:
            if self.normalize_one(target, log):
                done.append(target)
            else:
                failed.append(target)

        if failed:
            raise OwnershipError(failed, self.owner)
        return done
