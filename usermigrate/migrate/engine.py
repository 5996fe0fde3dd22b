# usermigrate Migration Engine
# Sequences preflight, copy, ownership and verification for one run

from __future__ import annotations

import pwd
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.markup import escape

from usermigrate.config.schema import MigrateConfig
from usermigrate.errors import CopyError, MigrationError, OwnershipError, VerifyFailed
from usermigrate.logger import RunLog
from usermigrate.migrate.category import CATALOG, Category
from usermigrate.migrate.excludes import ExclusionRule, load_exclusions
from usermigrate.migrate.executor import CopyExecutor, CopyOutcome
from usermigrate.migrate.ownership import OwnershipNormalizer
from usermigrate.migrate.plan import SyncPlan, build_plan
from usermigrate.migrate.preflight import check_preconditions
from usermigrate.migrate.verify import Verifier, VerifyVerdict
from usermigrate.mirror import Mirror, create_mirror
from usermigrate.utils.paths import expand_path
from usermigrate.utils.platform import default_homes_root, default_owner_group


@dataclass
class MigrationRequest:
    """Run parameters collected by the CLI."""

    source_user: str
    dest_user: str
    dry_run: bool = False
    verify: bool = True
    exclude_file: Path | None = None


@dataclass
class MigrationResult:
    """Result of a complete migration run."""

    source_home: Path
    dest_home: Path
    dry_run: bool = False
    log_path: Path | None = None
    plan: SyncPlan | None = None
    copy_outcomes: list[CopyOutcome] = field(default_factory=list)
    ownership_targets: list[Path] = field(default_factory=list)
    verdict: VerifyVerdict | None = None
    errors: list[MigrationError] = field(default_factory=list)

    @property
    def success(self) -> bool:
        """Check if the run finished without any recorded error."""
        return not self.errors

    @property
    def exit_code(self) -> int:
        """Process exit status: 0, or the code of the first recorded error."""
        return self.errors[0].exit_code if self.errors else 0


class MigrationEngine:
    """
    Main migration engine.

    Runs the phases strictly in sequence: copy every planned category,
    hand copied folders to the destination account, then verify every
    category present at the source.
    """

    def __init__(
        self,
        config: MigrateConfig,
        *,
        mirror: Mirror | None = None,
        normalizer: OwnershipNormalizer | None = None,
        console: Console | None = None,
        catalog: tuple[Category, ...] = CATALOG,
        lookup_account: Callable[[str], Any] = pwd.getpwnam,
    ):
        """
        Initialize migration engine.

        Args:
            config: Migration configuration.
            mirror: Copy/compare backend. Created from config when first needed if not provided.
            normalizer: Ownership normalizer. Created per run from config if not provided.
            console: Rich console for status output.
            catalog: Categories to migrate, in order.
            lookup_account: Account database lookup used by preflight.
        """
        self.config = config
        self.mirror = mirror
        self.normalizer = normalizer
        self.console = console or Console()
        self.catalog = catalog
        self.lookup_account = lookup_account

    @property
    def homes_root(self) -> Path:
        """Parent directory of home directories."""
        if self.config.homes_root:
            return Path(self.config.homes_root)
        return default_homes_root()

    def exclude_file(self, request: MigrationRequest) -> Path:
        """Exclusion file for a request."""
        return expand_path(request.exclude_file or self.config.exclude_file)

    def log_dir(self, source_home: Path) -> Path:
        """Directory for run logs and verify reports."""
        if self.config.log_dir:
            return Path(self.config.log_dir)
        return source_home / "migration_logs"

    def get_mirror(self) -> Mirror:
        """Mirror backend, resolving it from config on first use."""
        if self.mirror is None:
            self.mirror = create_mirror(self.config)
        return self.mirror

    def get_normalizer(self, dest_user: str) -> OwnershipNormalizer:
        """Ownership normalizer for the destination account."""
        if self.normalizer is not None:
            return self.normalizer
        ownership = self.config.ownership
        return OwnershipNormalizer(
            dest_user,
            ownership.group or default_owner_group(dest_user),
            use_sudo=ownership.use_sudo,
            chown=ownership.chown,
            sudo=ownership.sudo,
        )

    def run(self, request: MigrationRequest) -> MigrationResult:
        """
        Run a full migration.

        Args:
            request: Run parameters.

        Returns:
            MigrationResult. Copy, ownership, dependency and verify errors,
            and any OSError raised while a phase runs, are recorded in
            ``errors`` and written to the run log.

        Raises:
            PreconditionError: Before any state is created.
        """
        return self._execute(request, verify_only=False)

    def verify_only(self, request: MigrationRequest) -> MigrationResult:
        """
        Verify a previous migration without copying.

        Every category present at the source is compared.
        """
        return self._execute(request, verify_only=True)

    def _execute(self, request: MigrationRequest, *, verify_only: bool) -> MigrationResult:
        exclude_file = self.exclude_file(request)
        source_home, dest_home = check_preconditions(
            request.source_user,
            request.dest_user,
            homes_root=self.homes_root,
            exclude_file=exclude_file,
            lookup_account=self.lookup_account,
        )

        result = MigrationResult(source_home=source_home, dest_home=dest_home, dry_run=request.dry_run)
        log_dir = self.log_dir(source_home)

        with RunLog.open(
            log_dir,
            request.source_user,
            request.dest_user,
            console=self.console,
            verbose=self.config.output.verbose,
        ) as log:
            result.log_path = log.path
            title = "Verify-only run" if verify_only else "One-shot migration"
            log.section(f"{title} started: {datetime.now():%c}")
            log.info(f"From: {escape(str(source_home))}")
            log.info(f"To:   {escape(str(dest_home))}")
            log.info(f"Exclude file: {escape(str(exclude_file))}")
            log.info(f"Log:  {escape(str(log.path))}")

            try:
                rules = load_exclusions(exclude_file)
                log.info(f"Exclusion rules: {len(rules)}")
                mirror = self.get_mirror()
                log.info(f"Mirror: {escape(mirror.describe())}")

                if verify_only:
                    self._verify_phase(mirror, log, log_dir, source_home, dest_home, rules, result)
                else:
                    self._migrate(request, mirror, log, log_dir, source_home, dest_home, rules, result)
            except MigrationError as e:
                self._record(result, log, e)
            except OSError as e:
                self._record(result, log, MigrationError(f"I/O error: {e}"))

            log.section(f"Done: {datetime.now():%c}")
            if result.success:
                log.success("Completed successfully")
            else:
                log.error(f"Completed with {len(result.errors)} error(s)")
            log.info(f"Log file: {escape(str(log.path))}")

        return result

    def _migrate(
        self,
        request: MigrationRequest,
        mirror: Mirror,
        log: RunLog,
        log_dir: Path,
        source_home: Path,
        dest_home: Path,
        rules: list[ExclusionRule],
        result: MigrationResult,
    ) -> None:
        if request.dry_run:
            log.info("Mode: DRYRUN (no files will be copied)")
        if not request.verify:
            log.info("Mode: VERIFY disabled (checksum verification skipped)")

        log.section("Copy phase")
        plan = build_plan(
            source_home,
            dest_home,
            rules,
            dry_run=request.dry_run,
            catalog=self.catalog,
            log=log,
        )
        result.plan = plan

        executor = CopyExecutor(mirror, log)
        try:
            executor.run(plan.tasks)
        except CopyError as e:
            result.copy_outcomes = executor.outcomes
            self._record(result, log, e)
            return
        result.copy_outcomes = executor.outcomes

        if request.dry_run:
            return

        log.section("Ownership fix")
        targets = executor.copied_destinations
        result.ownership_targets = targets
        try:
            self.get_normalizer(request.dest_user).normalize(targets, log)
        except OwnershipError as e:
            self._record(result, log, e)

        if request.verify:
            self._verify_phase(mirror, log, log_dir, source_home, dest_home, rules, result)

    def _verify_phase(
        self,
        mirror: Mirror,
        log: RunLog,
        log_dir: Path,
        source_home: Path,
        dest_home: Path,
        rules: list[ExclusionRule],
        result: MigrationResult,
    ) -> None:
        log.section("Verify phase (checksum compare, dry-run)")
        log.info("This reads both sides and can take time.")

        verifier = Verifier(
            mirror,
            log,
            log_dir,
            report_extraneous=self.config.verify.report_extraneous,
        )
        verdict = verifier.verify(source_home, dest_home, rules, self.catalog)
        result.verdict = verdict

        try:
            verdict.raise_for_status()
        except VerifyFailed as e:
            self._record(result, log, e)
            return
        log.success("Verify phase completed: no differences detected.")

    def _record(self, result: MigrationResult, log: RunLog, error: MigrationError) -> None:
        """Keep an error on the result and write its cause to the run log."""
        result.errors.append(error)
        log.error(f"ERROR: {escape(error.message)}")
