# usermigrate Verification
# Checksum comparison of source and destination after the copy

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, TextIO

from rich.markup import escape

from usermigrate.errors import VerifyFailed
from usermigrate.logger import timestamp
from usermigrate.migrate.category import CATALOG, Category
from usermigrate.migrate.excludes import ExclusionRule
from usermigrate.mirror.base import Mirror

if TYPE_CHECKING:
    from usermigrate.logger import RunLog

# Itemized lines that mean content was created, updated, deleted or changed
DIFFERENCE_RE = re.compile(r"^(>f|>d|<f|<d|\*deleting|cd|cD|cL|cS|c\.)")


def is_difference(line: str) -> bool:
    """Check if an itemized line reports a real difference."""
    return DIFFERENCE_RE.match(line) is not None


@dataclass
class VerifyOutcome:
    """Verification result for one category."""

    category: Category
    differences_found: bool
    report_path: Path | None = None
    differences: list[str] = field(default_factory=list)
    returncode: int = 0


@dataclass
class VerifyVerdict:
    """Aggregate of all category outcomes."""

    outcomes: list[VerifyOutcome] = field(default_factory=list)

    @property
    def differing(self) -> list[VerifyOutcome]:
        """Outcomes with differences."""
        return [o for o in self.outcomes if o.differences_found]

    @property
    def passed(self) -> bool:
        """True only if every verified category is clean."""
        return not self.differing

    def raise_for_status(self) -> None:
        """
        Raises:
            VerifyFailed: If any category differs.
        """
        if self.passed:
            return
        differing = self.differing
        raise VerifyFailed(
            [o.category.value for o in differing],
            [o.report_path for o in differing if o.report_path is not None],
        )


class Verifier:
    """
    Compares every source-present category with its destination.

    All categories are checked before a verdict is given, and every
    category's itemized report is kept on disk.
    """

    def __init__(self, mirror: Mirror, log: RunLog, report_dir: Path, *, report_extraneous: bool = False):
        self.mirror = mirror
        self.log = log
        self.report_dir = report_dir
        self.report_extraneous = report_extraneous

    def _create_report(self, category: Category) -> tuple[Path, TextIO]:
        """Open a new report file, never reusing an earlier run's name."""
        stem = f"verify_{category.value}_{timestamp()}"
        suffix = ""
        attempt = 1
        while True:
            path = self.report_dir / f"{stem}{suffix}.txt"
            try:
                return path, open(path, "x", encoding="utf-8")
            except FileExistsError:
                attempt += 1
                suffix = f"_{attempt}"

    def verify_category(
        self,
        category: Category,
        source_home: Path,
        dest_home: Path,
        rules: tuple[ExclusionRule, ...] | list[ExclusionRule],
    ) -> VerifyOutcome:
        """
        Run the comparison for one category.

        A non-zero exit of the comparison counts as a difference.

        Returns:
            VerifyOutcome with the report location.
        """
        self.log.info(f"--- Verify {category.value} ---")

        self.report_dir.mkdir(parents=True, exist_ok=True)
        report_path, report_file = self._create_report(category)
        differences: list[str] = []

        with report_file as report:

            def emit(line: str) -> None:
                self.log.stream(line)
                report.write(line.rstrip("\r\n") + "\n")
                if is_difference(line):
                    differences.append(line)

            returncode = self.mirror.compare_tree(
                category.path_in(source_home),
                category.path_in(dest_home),
                rules,
                emit=emit,
                report_extraneous=self.report_extraneous,
            )

        outcome = VerifyOutcome(
            category=category,
            differences_found=bool(differences) or returncode != 0,
            report_path=report_path,
            differences=differences,
            returncode=returncode,
        )

        if returncode != 0:
            self.log.error(f"VERIFY: compare of {category.value} exited with status {returncode}")
        if outcome.differences_found:
            self.log.warning(
                f"VERIFY: Differences detected in {category.value} (see {escape(str(report_path))})"
            )
        else:
            self.log.success(f"VERIFY: {category.value} matches")
        return outcome

    def verify(
        self,
        source_home: Path,
        dest_home: Path,
        rules: tuple[ExclusionRule, ...] | list[ExclusionRule],
        catalog: tuple[Category, ...] = CATALOG,
    ) -> VerifyVerdict:
        """
        Verify every category present at the source.

        Categories are checked regardless of whether this run copied them.

        Returns:
            VerifyVerdict over all checked categories.
        """
        verdict = VerifyVerdict()
        for category in catalog:
            if not category.is_present(source_home):
                continue
            verdict.outcomes.append(self.verify_category(category, source_home, dest_home, rules))
        return verdict
