# usermigrate Console Output
# Rich-based console output for user-friendly display

from pathlib import Path

from rich.console import Console as RichConsole
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from usermigrate.migrate.category import CATALOG, Category
from usermigrate.migrate.engine import MigrationResult


class Console:
    """
    Console output manager using Rich.

    Provides formatted output for migration runs.
    """

    def __init__(self, *, verbose: bool = False, colored: bool = True):
        """
        Initialize console.

        Args:
            verbose: Enable verbose output.
            colored: Enable colored output.
        """
        self.verbose = verbose
        self._console = RichConsole(no_color=not colored)

    @property
    def rich(self) -> RichConsole:
        """Underlying rich console, shared with the run log."""
        return self._console

    def print(self, *args, **kwargs) -> None:
        """Print to console."""
        self._console.print(*args, **kwargs)

    def print_error(self, message: str) -> None:
        """Print error message."""
        self._console.print(f"[red]Error:[/red] {escape(message)}")

    def print_warning(self, message: str) -> None:
        """Print warning message."""
        self._console.print(f"[yellow]Warning:[/yellow] {escape(message)}")

    def print_success(self, message: str) -> None:
        """Print success message."""
        self._console.print(f"[green]{escape(message)}[/green]")

    def print_info(self, message: str) -> None:
        """Print info message."""
        self._console.print(f"[blue]{escape(message)}[/blue]")

    def print_categories(self, home: Path | None = None, catalog: tuple[Category, ...] = CATALOG) -> None:
        """
        Print the category catalog.

        Args:
            home: Optional home directory to show presence for.
            catalog: Categories in migration order.
        """
        table = Table(show_header=True, header_style="bold")
        table.add_column("#", justify="right", style="dim")
        table.add_column("Category", style="cyan")
        if home is not None:
            table.add_column("Folder", style="dim")
            table.add_column("Status")

        for index, category in enumerate(catalog, start=1):
            if home is None:
                table.add_row(str(index), category.value)
                continue
            status = "[green]present[/green]" if category.is_present(home) else "[dim]missing (skipped)[/dim]"
            table.add_row(str(index), category.value, escape(str(category.path_in(home))), status)

        self._console.print(table)

    def print_result(self, result: MigrationResult, *, verify_only: bool = False) -> None:
        """
        Print run summary.

        Args:
            result: Migration result to display.
            verify_only: Whether this was a verify-only run (changes wording).
        """
        self._console.print()

        if not verify_only:
            self._print_copy_table(result)

        if result.verdict is not None and result.verdict.outcomes:
            self._print_verify_table(result)

        if verify_only:
            status_text = "Verification"
        elif result.dry_run:
            status_text = "Dry run"
        else:
            status_text = "Migration"

        lines: list[str] = []
        if result.success:
            lines.append(f"[green]{status_text} completed[/green]")
        else:
            lines.append(f"[red]{status_text} failed[/red]")

        if result.plan is not None:
            copied_verb = "planned" if result.dry_run else "copied"
            copied = sum(1 for o in result.copy_outcomes if o.success)
            lines.append(f"Categories: {copied} {copied_verb}, {len(result.plan.skipped)} skipped")
        if result.verdict is not None:
            lines.append(
                f"Verified: {len(result.verdict.outcomes)}, differing: {len(result.verdict.differing)}"
            )
        for error in result.errors:
            lines.append(f"[red]✗[/red] {escape(error.message)}")
        if result.log_path is not None:
            lines.append(f"[dim]Log: {escape(str(result.log_path))}[/dim]")

        self._console.print(
            Panel(
                "\n".join(lines),
                title="Summary",
                border_style="green" if result.success else "red",
            )
        )

    def _print_copy_table(self, result: MigrationResult) -> None:
        """Print per-category copy outcome."""
        if result.plan is None:
            return

        table = Table(title="Copy", show_header=True, header_style="bold")
        table.add_column("Category", style="cyan")
        table.add_column("Result")

        outcomes = {o.category: o for o in result.copy_outcomes}
        for task in result.plan.tasks:
            outcome = outcomes.get(task.category)
            if outcome is None:
                table.add_row(task.name, "[dim]not attempted[/dim]")
            elif outcome.success:
                label = "dry run" if not outcome.executed else "copied"
                table.add_row(task.name, f"[green]✓ {label}[/green]")
            else:
                table.add_row(task.name, f"[red]✗ exit {outcome.returncode}[/red]")
        for category in result.plan.skipped:
            table.add_row(category.value, "[dim]missing (skipped)[/dim]")

        self._console.print(table)

    def _print_verify_table(self, result: MigrationResult) -> None:
        """Print per-category verification outcome."""
        table = Table(title="Verify", show_header=True, header_style="bold")
        table.add_column("Category", style="cyan")
        table.add_column("Result")
        table.add_column("Report", style="dim")

        for outcome in result.verdict.outcomes:
            if outcome.differences_found:
                status = f"[red]✗ {len(outcome.differences)} differences[/red]"
            else:
                status = "[green]✓ clean[/green]"
            report = escape(str(outcome.report_path)) if outcome.report_path else ""
            table.add_row(outcome.category.value, status, report)

            if self.verbose and outcome.differences:
                for line in outcome.differences:
                    table.add_row("", f"[dim]{escape(line)}[/dim]", "")

        self._console.print(table)


def create_console(*, verbose: bool = False, colored: bool = True) -> Console:
    """
    Create a console instance.

    Args:
        verbose: Enable verbose output.
        colored: Enable colored output.

    Returns:
        Console instance.
    """
    return Console(verbose=verbose, colored=colored)
