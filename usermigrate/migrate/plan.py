# usermigrate Sync Plan
# Per-category copy tasks for the categories present at the source

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from rich.markup import escape

from usermigrate.errors import CopyError
from usermigrate.migrate.category import CATALOG, Category
from usermigrate.migrate.excludes import ExclusionRule
from usermigrate.utils.paths import ensure_dir

if TYPE_CHECKING:
    from usermigrate.logger import RunLog


@dataclass
class SyncTask:
    """Copy of one category folder from source home to destination home."""

    category: Category
    source: Path
    destination: Path
    rules: tuple[ExclusionRule, ...] = ()
    dry_run: bool = False

    @property
    def name(self) -> str:
        """Category name."""
        return self.category.value


@dataclass
class SyncPlan:
    """Ordered copy tasks plus the categories skipped as missing."""

    tasks: list[SyncTask] = field(default_factory=list)
    skipped: list[Category] = field(default_factory=list)

    @property
    def categories(self) -> list[Category]:
        """Planned categories in copy order."""
        return [task.category for task in self.tasks]

    @property
    def is_empty(self) -> bool:
        """Check if there is nothing to copy."""
        return not self.tasks


def build_plan(
    source_home: Path,
    dest_home: Path,
    rules: list[ExclusionRule],
    *,
    dry_run: bool = False,
    catalog: tuple[Category, ...] = CATALOG,
    log: RunLog | None = None,
) -> SyncPlan:
    """
    Plan the copy phase.

    One task per catalog entry whose folder exists under source_home.
    Destination folders are created for planned tasks, except in dry-run
    mode where the destination is left untouched.

    Args:
        source_home: Home directory of the source account.
        dest_home: Home directory of the destination account.
        rules: Exclusion rules applied to every task.
        dry_run: Plan a simulated copy.
        catalog: Categories to consider, in order.
        log: Optional run log for skip messages.

    Returns:
        SyncPlan with tasks and skipped categories.

    Raises:
        CopyError: If a destination folder cannot be created.
    """
    plan = SyncPlan()
    frozen_rules = tuple(rules)

    for category in catalog:
        source = category.path_in(source_home)
        destination = category.path_in(dest_home)

        if not source.is_dir():
            plan.skipped.append(category)
            if log is not None:
                log.info(f"SKIP: {escape(str(source))}/ (missing)")
            continue

        if not dry_run:
            try:
                ensure_dir(destination)
            except OSError as e:
                raise CopyError(category.value, None, f"cannot create {destination}: {e.strerror or e}") from e

        plan.tasks.append(
            SyncTask(
                category=category,
                source=source,
                destination=destination,
                rules=frozen_rules,
                dry_run=dry_run,
            )
        )

    return plan
