# usermigrate Copy Executor
# Runs the copy phase one category at a time

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from rich.markup import escape

from usermigrate.errors import CopyError
from usermigrate.migrate.category import Category
from usermigrate.migrate.plan import SyncTask
from usermigrate.mirror.base import Mirror

if TYPE_CHECKING:
    from usermigrate.logger import RunLog


@dataclass
class CopyOutcome:
    """Result of copying one category."""

    category: Category
    executed: bool
    returncode: int
    destination: Path
    log_path: Path | None = None

    @property
    def success(self) -> bool:
        """Check if the copy exited cleanly."""
        return self.returncode == 0


@dataclass
class CopyExecutor:
    """
    Copies planned categories sequentially, in plan order.

    Stops at the first category whose copy exits non-zero; outcomes of
    the categories attempted so far stay available in ``outcomes``.
    """

    mirror: Mirror
    log: RunLog
    outcomes: list[CopyOutcome] = field(default_factory=list)

    def run_task(self, task: SyncTask) -> CopyOutcome:
        """
        Copy one category, streaming tool output to the run log.

        Args:
            task: Category copy task.

        Returns:
            CopyOutcome for the task.
        """
        self.log.info(f"--- Copy {task.name} ---")
        self.log.info(f"SRC: {escape(str(task.source))}/")
        self.log.info(f"DST: {escape(str(task.destination))}/")

        returncode = self.mirror.copy_tree(
            task.source,
            task.destination,
            task.rules,
            dry_run=task.dry_run,
            emit=self.log.stream,
        )

        outcome = CopyOutcome(
            category=task.category,
            executed=not task.dry_run,
            returncode=returncode,
            destination=task.destination,
            log_path=self.log.path,
        )
        self.outcomes.append(outcome)

        if outcome.success:
            verb = "Planned" if task.dry_run else "Copied"
            self.log.success(f"{verb} {task.name}")
        else:
            self.log.error(f"Copy of {task.name} exited with status {returncode}")
        return outcome

    def run(self, tasks: list[SyncTask]) -> list[CopyOutcome]:
        """
        Copy every task in order.

        Args:
            tasks: Planned tasks.

        Returns:
            Outcomes, one per task.

        Raises:
            CopyError: On the first non-zero exit; later tasks are not attempted.
        """
        for task in tasks:
            outcome = self.run_task(task)
            if not outcome.success:
                raise CopyError(task.name, outcome.returncode)
        return self.outcomes

    @property
    def copied_destinations(self) -> list[Path]:
        """Destinations that received a real, successful copy."""
        return [o.destination for o in self.outcomes if o.executed and o.success]
