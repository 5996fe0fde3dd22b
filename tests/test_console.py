# Tests for usermigrate.output.console
# Rich-based run summary

from pathlib import Path

from usermigrate.errors import CopyError
from usermigrate.migrate.category import Category
from usermigrate.migrate.engine import MigrationResult
from usermigrate.migrate.executor import CopyOutcome
from usermigrate.migrate.plan import SyncPlan, SyncTask
from usermigrate.migrate.verify import VerifyOutcome, VerifyVerdict
from usermigrate.output.console import Console, create_console

SRC = Path("/Users/alice")
DST = Path("/Users/alice2")


def recording_console(**kwargs) -> Console:
    console = Console(colored=False, **kwargs)
    console._console = type(console._console)(record=True, width=120, no_color=True)
    return console


def task(category: Category) -> SyncTask:
    return SyncTask(category, category.path_in(SRC), category.path_in(DST))


class TestMessages:
    """Tests for simple message helpers."""

    def test_markup_in_message_is_escaped(self):
        console = recording_console()
        console.print_error("bad [path]")
        assert "bad [path]" in console.rich.export_text()

    def test_create_console(self):
        assert create_console(verbose=True).verbose


class TestPrintResult:
    """Tests for print_result."""

    def test_successful_run(self):
        plan = SyncPlan(tasks=[task(Category.DESKTOP)], skipped=[Category.PICTURES])
        result = MigrationResult(
            SRC,
            DST,
            plan=plan,
            copy_outcomes=[CopyOutcome(Category.DESKTOP, True, 0, DST / "Desktop")],
            verdict=VerifyVerdict([VerifyOutcome(Category.DESKTOP, False)]),
        )
        console = recording_console()

        console.print_result(result)
        text = console.rich.export_text()

        assert "Migration completed" in text
        assert "copied" in text
        assert "missing (skipped)" in text
        assert "clean" in text
        assert "Categories: 1 copied, 1 skipped" in text

    def test_copy_failure(self):
        plan = SyncPlan(tasks=[task(Category.DESKTOP), task(Category.MUSIC)])
        result = MigrationResult(
            SRC,
            DST,
            plan=plan,
            copy_outcomes=[CopyOutcome(Category.DESKTOP, True, 23, DST / "Desktop")],
            errors=[CopyError("Desktop", 23)],
        )
        console = recording_console()

        console.print_result(result)
        text = console.rich.export_text()

        assert "Migration failed" in text
        assert "exit 23" in text
        assert "not attempted" in text

    def test_verbose_lists_differences(self):
        outcome = VerifyOutcome(Category.MUSIC, True, differences=[">f+++++++++ song.mp3"])
        result = MigrationResult(SRC, DST, verdict=VerifyVerdict([outcome]))
        console = recording_console(verbose=True)

        console.print_result(result, verify_only=True)
        text = console.rich.export_text()

        assert "Verification" in text
        assert "song.mp3" in text
