"""Per-run log file with rich console echo."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import TextIO

from rich.console import Console
from rich.text import Text

TIMESTAMP_FORMAT = "%Y-%m-%d_%H-%M-%S"


def timestamp(now: datetime | None = None) -> str:
    """Second-resolution timestamp safe for file names."""
    return (now or datetime.now()).strftime(TIMESTAMP_FORMAT)


def log_file_name(source_id: str, dest_id: str, now: datetime | None = None) -> str:
    """Name of the run log for a source/destination pair."""
    return f"migration_{source_id}_to_{dest_id}_{timestamp(now)}.log"


class RunLog:
    """Append-only run log.

    Status lines go to the rich console (with markup) and to the log file
    (plain text, timestamped). Raw copy tool output is written to the file
    verbatim and only echoed to the console in verbose mode.
    """

    def __init__(self, path: Path, handle: TextIO, console: Console | None = None, verbose: bool = False):
        """Initialize logger.

        Args:
            path: Log file path
            handle: Open text handle for path, in append mode
            console: Rich Console instance
            verbose: Echo raw tool output to the console
        """
        self.path = path
        self._handle = handle
        self.console = console or Console()
        self.verbose = verbose

    @classmethod
    def open(
        cls,
        log_dir: Path,
        source_id: str,
        dest_id: str,
        *,
        console: Console | None = None,
        verbose: bool = False,
        now: datetime | None = None,
    ) -> RunLog:
        """Create the log directory and open a new run log in it."""
        log_dir.mkdir(parents=True, exist_ok=True)
        path = log_dir / log_file_name(source_id, dest_id, now)
        handle = open(path, "a", encoding="utf-8")
        return cls(path, handle, console=console, verbose=verbose)

    def _write(self, line: str) -> None:
        self._handle.write(line + "\n")
        self._handle.flush()

    def _status(self, icon: str, message: str) -> None:
        if icon:
            self.console.print(f"{icon} {message}")
        else:
            self.console.print(message)
        plain = Text.from_markup(message).plain
        stamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
        self._write(f"[{stamp}] {plain}")

    def info(self, message: str) -> None:
        """Blue info message."""
        self._status("[blue]ℹ[/blue]", message)

    def success(self, message: str) -> None:
        """Green success message."""
        self._status("[green]✓[/green]", message)

    def warning(self, message: str) -> None:
        """Yellow warning message."""
        self._status("[yellow]⚠[/yellow]", message)

    def error(self, message: str) -> None:
        """Red error message."""
        self._status("[red]✗[/red]", message)

    def section(self, title: str) -> None:
        """Phase header, e.g. ``=== Copy phase ===``."""
        self._write("")
        self.console.print()
        self._status("", f"[bold]=== {title} ===[/bold]")

    def stream(self, line: str) -> None:
        """Raw output line from the copy, chown or compare tool."""
        line = line.rstrip("\r\n")
        self._write(line)
        if self.verbose:
            self.console.print(line, style="dim", markup=False, highlight=False)

    def close(self) -> None:
        """Close the file handle. The log file itself is kept."""
        if not self._handle.closed:
            self._handle.close()

    def __enter__(self) -> RunLog:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
